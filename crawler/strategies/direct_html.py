"""
Direct HTML scraping: fetch the page and read metadata + main text from the markup.
"""
from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup

from crawler.config_loader import ExtractionRules
from crawler.extractors.body import extract_body, strip_noise
from crawler.extractors.og_jsonld import parse_metadata
from crawler.infra.http import HttpFetcher
from crawler.schemas.models import ExtractedPage
from crawler.strategies.base import ExtractionStrategy


class DirectHtmlStrategy(ExtractionStrategy):
    name = "direct_html"

    def __init__(self, fetcher: HttpFetcher, rules: Optional[ExtractionRules] = None) -> None:
        self.fetcher = fetcher
        self.rules = rules or ExtractionRules()

    def extract(self, url: str) -> ExtractedPage:
        response = self.fetcher.fetch(url)
        return self.parse(url, response.text)

    def parse(self, url: str, html: str) -> ExtractedPage:
        soup = BeautifulSoup(html, "lxml")
        # metadata first: noise removal drops <header>, which can hold the <h1>
        meta = parse_metadata(soup, self.rules.title_selectors_for(url))
        strip_noise(soup)
        body = extract_body(soup, self.rules.body_selectors_for(url))
        return ExtractedPage(
            title=meta["title"],
            body=body,
            author=meta["author"],
            publish_date=meta["publish_date"],
        )
