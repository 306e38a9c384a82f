"""
Utilities for extracting page metadata from OpenGraph, platform markup and JSON-LD blocks.
"""
from __future__ import annotations

import json
from typing import Dict, Iterable, List, Optional, Union

from bs4 import BeautifulSoup

UNTITLED = "Untitled"

PLATFORM_TITLE_SELECTORS = (
    'meta[name="twitter:title"]',
    'meta[property="twitter:title"]',
    "#activity-name",
)
AUTHOR_META_SELECTORS = ('meta[name="author"]', 'meta[property="article:author"]')
AUTHOR_TEXT_SELECTORS = (".author", '[rel="author"]')
DATE_META_SELECTORS = ('meta[property="article:published_time"]', 'meta[name="publish_date"]')


def parse_metadata(
    html: Union[str, BeautifulSoup],
    title_selectors: Iterable[str] = (),
) -> Dict[str, Optional[str]]:
    """
    Return ``title``, ``author`` and ``publish_date`` (``YYYY-MM-DD``) for a page.

    ``title_selectors`` are site-specific selectors tried right after the
    platform markup; the title always resolves, falling back to ``"Untitled"``.
    """
    soup = html if isinstance(html, BeautifulSoup) else BeautifulSoup(html, "lxml")
    ld_blocks = _json_ld_articles(soup)

    title = (
        _meta_content(soup, ('meta[property="og:title"]',))
        or _first_text(soup, PLATFORM_TITLE_SELECTORS + tuple(title_selectors))
        or _title_tag(soup)
        or _first_text(soup, ("h1",))
        or UNTITLED
    )

    author = _meta_content(soup, AUTHOR_META_SELECTORS) or _ld_author(ld_blocks) or _first_text(soup, AUTHOR_TEXT_SELECTORS)

    published = _meta_content(soup, DATE_META_SELECTORS) or _ld_published(ld_blocks)
    if not published:
        time_tag = soup.select_one("time[datetime]")
        if time_tag is not None:
            published = (time_tag.get("datetime") or "").strip() or None

    return {
        "title": title,
        "author": author,
        "publish_date": _date_part(published),
    }


def _meta_content(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag is not None and tag.has_attr("content"):
            value = tag["content"].strip()
            if value:
                return value
    return None


def _first_text(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[str]:
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag is None:
            continue
        # twitter:title may be declared as a <meta> under either attribute.
        value = tag["content"] if tag.name == "meta" and tag.has_attr("content") else tag.get_text(" ", strip=True)
        value = value.strip()
        if value:
            return value
    return None


def _title_tag(soup: BeautifulSoup) -> Optional[str]:
    if soup.title and soup.title.string:
        value = soup.title.string.strip()
        return value or None
    return None


def _json_ld_articles(soup: BeautifulSoup) -> List[dict]:
    found: List[dict] = []
    for tag in soup.select('script[type="application/ld+json"]'):
        try:
            payload = json.loads(tag.string or "{}")
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict) and isinstance(payload.get("@graph"), list):
            payload = payload["@graph"]
        if isinstance(payload, list):
            candidates = [item for item in payload if isinstance(item, dict)]
        else:
            candidates = [payload] if isinstance(payload, dict) else []
        for candidate in candidates:
            if candidate.get("@type") in {"Article", "NewsArticle", "BlogPosting", "ReportageNewsArticle"}:
                found.append(candidate)
    return found


def _ld_author(blocks: List[dict]) -> Optional[str]:
    for candidate in blocks:
        author = candidate.get("author")
        if isinstance(author, list) and author:
            author = author[0]
        if isinstance(author, dict) and author.get("name"):
            return str(author["name"]).strip()
        if isinstance(author, str) and author.strip():
            return author.strip()
    return None


def _ld_published(blocks: List[dict]) -> Optional[str]:
    for candidate in blocks:
        published = candidate.get("datePublished")
        if isinstance(published, str) and published.strip():
            return published.strip()
    return None


def _date_part(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return value.split("T")[0].strip() or None
