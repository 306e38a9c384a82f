"""
Daily article generation: one article per (active topic, language) per day.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from dailynews.errors import ConfigError, ConflictError, GenerationTimeout, NoActiveTopicsError
from dailynews.models import GeneratedArticle, GenerationRun, Language, PairResult, PairStatus, SearchResult, Topic

logger = logging.getLogger(__name__)


class ArticleGenerator:
    """
    Runs search -> generate -> insert for every active topic and language.

    Each pair is independent: a failure is recorded in the run result and the
    remaining pairs continue. Re-running on the same date only fills gaps.
    """

    def __init__(
        self,
        store,
        generator,
        search=None,
        languages: Sequence[Language] = (Language.EN, Language.ZH),
        timeout_seconds: float = 120,
        max_workers: int = 1,
    ) -> None:
        self.store = store
        self.generator = generator
        self.search = search
        self.languages = [Language(language) for language in languages]
        self.timeout_seconds = timeout_seconds
        self.max_workers = max(1, int(max_workers))

    def run(self, run_date: Optional[date] = None) -> GenerationRun:
        run_date = run_date or datetime.now(timezone.utc).date()
        topics = self.store.get_active_topics()
        if not topics:
            raise NoActiveTopicsError()

        pairs = [(topic, language) for topic in topics for language in self.languages]
        logger.info(
            "Generating articles for %s: %s topics x %s languages via %s",
            run_date,
            len(topics),
            len(self.languages),
            getattr(self.generator, "name", type(self.generator).__name__),
        )

        results: List[PairResult] = []
        if self.max_workers == 1:
            for topic, language in pairs:
                results.append(self._process_pair(run_date, topic, language))
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="pair") as executor:
                futures = [executor.submit(self._process_pair, run_date, topic, language) for topic, language in pairs]
                for future in as_completed(futures):
                    results.append(future.result())

        run = GenerationRun(date=run_date, results=results)
        logger.info(
            "Generation run %s finished: %s generated, %s skipped, %s failed",
            run_date,
            run.generated_count,
            run.skipped_count,
            run.failed_count,
        )
        return run

    def _process_pair(self, run_date: date, topic: Topic, language: Language) -> PairResult:
        try:
            return self._generate_pair(run_date, topic, language)
        except Exception as exc:
            logger.warning("Generation failed for %s (%s): %s", topic.name, language.value, exc)
            return PairResult(topic=topic.name, language=language.value, status=PairStatus.FAILED, error=str(exc))

    def _generate_pair(self, run_date: date, topic: Topic, language: Language) -> PairResult:
        if self.store.article_exists(run_date, topic.id, language.value):
            logger.info("Article already exists for %s (%s) on %s; skipping", topic.name, language.value, run_date)
            return PairResult(topic=topic.name, language=language.value, status=PairStatus.SKIPPED)

        context: Optional[List[SearchResult]] = None
        if getattr(self.generator, "requires_search", False):
            if self.search is None:
                raise ConfigError(f"Generation provider '{self.generator.name}' needs a search provider")
            context = self.search.search(topic.name)
            if not context:
                logger.info("No search results for %s (%s); skipping", topic.name, language.value)
                return PairResult(topic=topic.name, language=language.value, status=PairStatus.NO_RESULTS)

        article = self._generate_with_timeout(topic.name, language, context)

        try:
            article_id = self.store.insert_article(
                run_date,
                topic.id,
                language.value,
                article.headline,
                article.content,
                article.sources,
            )
        except ConflictError:
            # another run stored this pair while we were generating
            logger.info("Article for %s (%s) on %s was stored concurrently", topic.name, language.value, run_date)
            return PairResult(topic=topic.name, language=language.value, status=PairStatus.SKIPPED)

        logger.info("Generated %s (%s): %s", topic.name, language.value, article.headline)
        return PairResult(
            topic=topic.name,
            language=language.value,
            status=PairStatus.GENERATED,
            headline=article.headline,
            article_id=article_id,
        )

    def _generate_with_timeout(
        self, topic: str, language: Language, context: Optional[List[SearchResult]]
    ) -> GeneratedArticle:
        """
        Run the provider call under a wall-clock limit.

        On timeout the call is abandoned, not cancelled; its eventual result
        is discarded and nothing is persisted for the pair.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="generate")
        future = executor.submit(self.generator.generate, topic, language, context)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FuturesTimeoutError as exc:
            if future.done():
                raise
            raise GenerationTimeout(self.timeout_seconds) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
