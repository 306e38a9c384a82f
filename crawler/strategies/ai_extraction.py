"""
Last-resort extraction: ask an AI provider to read the page.
"""
from __future__ import annotations

from crawler.schemas.models import ExtractedPage
from crawler.strategies.base import ExtractionStrategy


class AiExtractionStrategy(ExtractionStrategy):
    name = "ai_extraction"

    def __init__(self, extractor) -> None:
        self.extractor = extractor

    def extract(self, url: str) -> ExtractedPage:
        return self.extractor.extract_page(url)
