"""
Wiring: build every collaborator once from settings and hand them out explicitly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from crawler.config_loader import load_extraction_rules
from crawler.infra.http import HttpFetcher
from crawler.pipelines.chain import ExtractionChain
from crawler.strategies import AiExtractionStrategy, DirectHtmlStrategy, ReaderProxyStrategy
from dailynews.adapters import default_registry
from dailynews.adapters.base import ProviderRegistry
from dailynews.adapters.gemini import GeminiAdapter
from dailynews.pipeline import ArticleGenerator
from dailynews.settings import Settings, load_settings
from dailynews.social import SocialService
from dailynews.speech import AudioStorage, SpeechGate
from dailynews.store import Store

logger = logging.getLogger(__name__)

DISABLED = {"", "none", "off"}


@dataclass
class Services:
    settings: Settings
    store: Store
    generator: object
    search: Optional[object]
    speech: SpeechGate
    audio: AudioStorage
    chain: ExtractionChain
    social: SocialService

    def article_generator(self) -> ArticleGenerator:
        return ArticleGenerator(
            store=self.store,
            generator=self.generator,
            search=self.search,
            languages=self.settings.languages,
            timeout_seconds=self.settings.generation_timeout,
            max_workers=self.settings.generation_workers,
        )


def build_chain(settings: Settings, extractor) -> ExtractionChain:
    rules = load_extraction_rules(settings.extraction_config)
    fetcher = HttpFetcher(timeout=settings.scrape_timeout)
    return ExtractionChain(
        [
            DirectHtmlStrategy(fetcher, rules),
            ReaderProxyStrategy(
                HttpFetcher(timeout=max(settings.scrape_timeout, 30), provider="reader_proxy"),
                base_url=settings.reader_proxy_base_url,
                api_key=settings.reader_proxy_api_key,
                rules=rules,
            ),
            AiExtractionStrategy(extractor),
        ]
    )


def build_services(
    settings: Optional[Settings] = None,
    registry: Optional[ProviderRegistry] = None,
    init_db: bool = True,
) -> Services:
    settings = settings or load_settings()
    registry = registry or default_registry()

    store = Store(settings.database_url)
    if init_db:
        store.init_schema()
        store.seed_default_topics(settings.default_topics)

    generator = registry.build_generator(settings.generation_provider, settings)
    search = None
    if settings.search_provider not in DISABLED:
        search = registry.build_search(settings.search_provider, settings)
    speech_provider = registry.build_speech(settings.speech_provider, settings)

    # Summaries and AI page extraction are Gemini-only.
    gemini = generator if isinstance(generator, GeminiAdapter) else GeminiAdapter(settings)

    audio = AudioStorage(settings.audio_dir)
    chain = build_chain(settings, gemini)
    services = Services(
        settings=settings,
        store=store,
        generator=generator,
        search=search,
        speech=SpeechGate(store, speech_provider, audio, serialize=settings.speech_serialize),
        audio=audio,
        chain=chain,
        social=SocialService(
            store,
            chain,
            summarizer=gemini,
            summary_input_limit=settings.summary_input_limit,
            serialize=settings.speech_serialize,
        ),
    )
    logger.info(
        "Services ready (generation=%s, search=%s, speech=%s, providers=%s)",
        settings.generation_provider,
        settings.search_provider,
        settings.speech_provider,
        settings.configured_providers(),
    )
    return services
