"""
Reader-proxy extraction (r.jina.ai style plain-text snapshots).

Used first for sites that render client-side or block direct fetches
(WeChat, X/Twitter, Medium, Zhihu, ...), and as a fallback everywhere else.
"""
from __future__ import annotations

import re
from email.utils import parsedate_to_datetime
from typing import Dict, Optional

from crawler.config_loader import ExtractionRules
from crawler.extractors.og_jsonld import UNTITLED
from crawler.infra.http import HttpFetcher
from crawler.schemas.models import ExtractedPage
from crawler.strategies.base import ExtractionStrategy
from dailynews.errors import ExtractionError

_HEADER_RE = re.compile(r"^(Title|URL Source|Published Time|Author)\s*:\s*(.*)$", re.IGNORECASE)
_BODY_MARKER = "Markdown Content:"
_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\((?:[^()\s]+)(?:\s+\"[^\"]*\")?\)")


class ReaderProxyStrategy(ExtractionStrategy):
    name = "reader_proxy"

    def __init__(
        self,
        fetcher: HttpFetcher,
        base_url: str = "https://r.jina.ai",
        api_key: Optional[str] = None,
        rules: Optional[ExtractionRules] = None,
    ) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.rules = rules or ExtractionRules()

    def prefers(self, url: str) -> bool:
        return self.rules.prefers_reader_proxy(url)

    def extract(self, url: str) -> ExtractedPage:
        headers = {"Accept": "text/plain"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        response = self.fetcher.fetch(f"{self.base_url}/{url}", headers=headers)
        return parse_snapshot(response.text)


def parse_snapshot(text: str) -> ExtractedPage:
    """Split a reader snapshot into its ``Title:``/``Published Time:`` headers and markdown body."""
    if not text or not text.strip():
        raise ExtractionError("Reader proxy returned an empty snapshot")
    headers: Dict[str, str] = {}
    head, marker, body = text.partition(_BODY_MARKER)
    if not marker:
        # No header block: the whole response is the body.
        head, body = "", text
    for line in head.splitlines():
        match = _HEADER_RE.match(line.strip())
        if match:
            headers[match.group(1).lower()] = match.group(2).strip()

    body = _IMAGE_RE.sub("", body)
    body = _LINK_RE.sub(r"\1", body)
    return ExtractedPage(
        title=headers.get("title") or _first_heading(body) or UNTITLED,
        body=body,
        author=headers.get("author"),
        publish_date=_parse_published(headers.get("published time")),
    )


def _first_heading(body: str) -> Optional[str]:
    for line in body.splitlines():
        stripped = line.strip()
        if stripped.startswith("#"):
            return stripped.lstrip("#").strip() or None
    return None


def _parse_published(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    # Snapshots carry either ISO timestamps or RFC 2822 style dates.
    match = re.match(r"\d{4}-\d{2}-\d{2}", value)
    if match:
        return match.group(0)
    try:
        return parsedate_to_datetime(value).date().isoformat()
    except (TypeError, ValueError):
        return None
