"""
Main-text extraction from article HTML.
"""
from __future__ import annotations

from typing import Iterable, List

from bs4 import BeautifulSoup

NOISE_SELECTORS = (
    "script",
    "style",
    "noscript",
    "nav",
    "header",
    "footer",
    "aside",
    ".ad",
    ".advertisement",
    ".social-share",
)

# Most specific first: a generic ``main`` or ``.content`` wrapper often
# contains sidebars that a dedicated article container does not.
GENERIC_BODY_SELECTORS = (
    ".article-body",
    ".article-content",
    ".post-content",
    ".entry-content",
    ".post-body",
    "article",
    '[role="main"]',
    "main",
    ".content",
)

MIN_CONTAINER_CHARS = 100


def strip_noise(soup: BeautifulSoup) -> BeautifulSoup:
    for tag in soup.select(", ".join(NOISE_SELECTORS)):
        tag.decompose()
    return soup


def extract_body(soup: BeautifulSoup, site_selectors: Iterable[str] = ()) -> str:
    """
    Return the article text from the first matching container.

    Paragraph-level blocks are joined by blank lines. When the container yields
    fewer than ``MIN_CONTAINER_CHARS`` characters every ``<p>`` on the page is
    used instead.
    """
    content = ""
    for selector in tuple(site_selectors) + GENERIC_BODY_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        content = _block_text(element)
        if content:
            break

    if len(content) < MIN_CONTAINER_CHARS:
        paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
        fallback = "\n\n".join(text for text in paragraphs if text)
        if len(fallback) > len(content):
            content = fallback
    return content


def _block_text(element) -> str:
    blocks: List[str] = []
    for block in element.find_all(["p", "h2", "h3", "h4", "li", "blockquote", "pre"]):
        # nested blocks (``li > p``) are picked up through their innermost tag
        if block.find(["p", "li", "blockquote"]):
            continue
        text = block.get_text(" ", strip=True)
        if text:
            blocks.append(text)
    if blocks:
        return "\n\n".join(blocks)
    return element.get_text("\n", strip=True)
