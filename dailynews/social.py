"""
User-submitted links: extract, store once per URL, summarize on demand.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from dailynews.errors import ConfigError, ConflictError, NotFoundError, ValidationError
from dailynews.models import SubmitResult, SummaryResult
from dailynews.speech import KeyedLocks
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://.+\..+", re.IGNORECASE)


def validate_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")
    url = url.strip()
    if not URL_PATTERN.match(url):
        raise ValidationError("Invalid URL format")
    return url


def validate_interest_id(value: Any) -> int:
    if value is None or value == "":
        raise ValidationError("Interest category is required")
    if isinstance(value, bool):
        raise ValidationError("Interest category must be an integer id")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Interest category must be an integer id") from exc


class SocialService:
    def __init__(self, store, chain, summarizer=None, summary_input_limit: int = 5000, serialize: bool = False) -> None:
        self.store = store
        self.chain = chain
        self.summarizer = summarizer
        self.summary_input_limit = summary_input_limit
        self.serialize = serialize
        self._locks = KeyedLocks()

    def submit(self, url: Any, interest_id: Any) -> SubmitResult:
        url = validate_url(url)
        interest_id = validate_interest_id(interest_id)
        if self.store.get_interest(interest_id) is None:
            raise ValidationError(f"Interest category {interest_id} does not exist")

        existing = self.store.get_social_article_by_url(url)
        if existing is not None:
            logger.info("URL already stored as social article %s", existing.id)
            return SubmitResult(id=existing.id, title=existing.title, duplicate=True)

        logger.info("Extracting %s", redact_secrets(url))
        page = self.chain.extract(url)
        try:
            article_id = self.store.insert_social_article(
                interest_id=interest_id,
                source_url=url,
                title=page.title,
                content=page.body,
                scraped_at=datetime.now(timezone.utc).date(),
                author=page.author,
                publish_date=page.publish_date,
            )
        except ConflictError:
            stored = self.store.get_social_article_by_url(url)
            if stored is None:
                raise
            return SubmitResult(id=stored.id, title=stored.title, duplicate=True)
        logger.info("Stored social article %s via %s: %s", article_id, page.strategy, page.title)
        return SubmitResult(id=article_id, title=page.title)

    def summarize(self, article_id: int) -> SummaryResult:
        if self.serialize:
            with self._locks.lock_for(article_id):
                return self._summarize(article_id)
        return self._summarize(article_id)

    def _summarize(self, article_id: int) -> SummaryResult:
        article = self.store.get_social_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        if article.summary:
            return SummaryResult(article_id=article_id, summary=article.summary, cached=True)
        if self.summarizer is None:
            raise ConfigError("No summarization provider configured")

        summary = self.summarizer.summarize(article.content[: self.summary_input_limit])
        self.store.set_social_article_summary(article_id, summary)
        logger.info("Stored summary for social article %s", article_id)
        return SummaryResult(article_id=article_id, summary=summary, cached=False)
