"""
Capability protocols + registry for pluggable AI, search and speech providers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from crawler.pipelines.dedupe import dedupe_uris
from crawler.schemas.models import ExtractedPage
from dailynews.errors import ConfigError
from dailynews.models import GeneratedArticle, Language, SearchResult

HEADLINE_RE = re.compile(r"^[ \t#>*_]*Headline[ \t]*[:：][ \t]*(.+?)[ \t]*$", re.IGNORECASE | re.MULTILINE)


class SearchProvider(Protocol):
    name: str

    def search(self, query: str) -> List[SearchResult]:
        ...


class TextGenerator(Protocol):
    name: str
    requires_search: bool

    def generate(
        self,
        topic: str,
        language: Language,
        context: Optional[Sequence[SearchResult]] = None,
    ) -> GeneratedArticle:
        ...


class Summarizer(Protocol):
    def summarize(self, text: str) -> str:
        ...


class SpeechProvider(Protocol):
    name: str

    def synthesize(self, text: str) -> bytes:
        ...


class PageExtractor(Protocol):
    def extract_page(self, url: str) -> ExtractedPage:
        ...


def language_instruction(language: Language) -> str:
    if Language(language) is Language.ZH:
        return "Please write the article in Chinese (简体中文)."
    return "Please write the article in English."


def parse_generated_text(topic: str, text: str, sources: Iterable[Optional[str]] = ()) -> GeneratedArticle:
    """
    Split raw model output into headline + body.

    The first ``Headline: ...`` line (markdown decoration like ``##`` or ``**``
    tolerated) becomes the headline and is removed from the body. Without a
    marker the headline falls back to ``"<topic> - Daily Update"``.
    """
    text = text or ""
    match = HEADLINE_RE.search(text)
    if match:
        headline = match.group(1).strip().strip("*_").strip()
        end = match.end()
        if text[end:end + 1] == "\n":
            end += 1
        body = (text[: match.start()] + text[end:]).strip()
    else:
        headline = ""
        body = text.strip()
    if not headline:
        headline = f"{topic} - Daily Update"
    return GeneratedArticle(headline=headline, content=body, sources=dedupe_uris(sources))


@dataclass
class ProviderRegistry:
    """
    Maps configuration names to provider factories, one table per capability.

    Factories receive the settings object and return a ready adapter.
    """

    generators: Dict[str, Callable] = field(default_factory=dict)
    searchers: Dict[str, Callable] = field(default_factory=dict)
    speakers: Dict[str, Callable] = field(default_factory=dict)

    def register_generator(self, key: str, factory: Callable) -> None:
        _register(self.generators, key, factory)

    def register_search(self, key: str, factory: Callable) -> None:
        _register(self.searchers, key, factory)

    def register_speech(self, key: str, factory: Callable) -> None:
        _register(self.speakers, key, factory)

    def build_generator(self, key: str, settings) -> TextGenerator:
        return _build(self.generators, "generation", key, settings)

    def build_search(self, key: str, settings) -> SearchProvider:
        return _build(self.searchers, "search", key, settings)

    def build_speech(self, key: str, settings) -> SpeechProvider:
        return _build(self.speakers, "speech", key, settings)


def _register(table: Dict[str, Callable], key: str, factory: Callable) -> None:
    key = key.lower()
    if key in table:
        raise ValueError(f"Provider '{key}' already registered")
    table[key] = factory


def _build(table: Dict[str, Callable], capability: str, key: str, settings):
    factory = table.get((key or "").lower())
    if factory is None:
        known = ", ".join(sorted(table)) or "none"
        raise ConfigError(f"Unknown {capability} provider '{key}' (known: {known})")
    return factory(settings)
