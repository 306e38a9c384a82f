"""
Extraction strategy protocol shared by every fallback step.
"""
from __future__ import annotations

import abc
import logging
from dataclasses import dataclass
from typing import Optional

from crawler.extractors.clean import clean_content
from crawler.schemas.models import ExtractedPage
from dailynews.errors import ContentTooShort, ExtractionError
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

MIN_BODY_CHARS = 50


@dataclass
class AttemptResult:
    strategy: str
    page: Optional[ExtractedPage] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.page is not None

    @property
    def reason(self) -> str:
        return str(self.error) if self.error else ""


class ExtractionStrategy(abc.ABC):
    """
    One way of turning a URL into an ``ExtractedPage``.

    Subclasses implement ``extract``; callers use ``attempt``, which never
    raises and applies the shared cleanup and acceptance rules.
    """

    name: str = "base"
    min_body_chars: int = MIN_BODY_CHARS

    def prefers(self, url: str) -> bool:
        return False

    @abc.abstractmethod
    def extract(self, url: str) -> ExtractedPage:
        ...

    def attempt(self, url: str) -> AttemptResult:
        try:
            page = self.extract(url)
            body = clean_content(page.body)
            if len(body) < self.min_body_chars:
                raise ContentTooShort(len(body), self.min_body_chars)
            if not page.title:
                raise ExtractionError("No title found on the page")
            accepted = page.model_copy(update={"body": body, "strategy": self.name})
        except Exception as exc:
            logger.warning("Extraction strategy %s failed for %s: %s", self.name, redact_secrets(url), redact_secrets(str(exc)))
            return AttemptResult(strategy=self.name, error=exc)
        logger.info("Extraction strategy %s succeeded for %s (%s chars)", self.name, redact_secrets(url), len(body))
        return AttemptResult(strategy=self.name, page=accepted)
