"""
Cascading extraction: try each strategy in turn until one yields acceptable content.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from crawler.schemas.models import ExtractedPage
from crawler.strategies.base import AttemptResult, ExtractionStrategy
from dailynews.errors import ConfigError, ExtractionExhausted
from utils.security import redact_secrets

logger = logging.getLogger(__name__)


class ExtractionChain:
    """
    Runs strategies in declared order, except that strategies which ``prefer``
    the URL are moved to the front (keeping their relative order).
    """

    def __init__(self, strategies: Sequence[ExtractionStrategy]) -> None:
        self.strategies = list(strategies)

    def order_for(self, url: str) -> List[ExtractionStrategy]:
        preferred = [s for s in self.strategies if s.prefers(url)]
        rest = [s for s in self.strategies if not s.prefers(url)]
        return preferred + rest

    def extract(self, url: str) -> ExtractedPage:
        attempts: List[AttemptResult] = []
        for strategy in self.order_for(url):
            result = strategy.attempt(url)
            attempts.append(result)
            if result.ok:
                return result.page

        summary: List[Tuple[str, str]] = [(a.strategy, a.reason) for a in attempts]
        cause = _pick_cause(attempts)
        logger.warning(
            "All extraction strategies failed for %s: %s",
            redact_secrets(url),
            "; ".join(f"{name}: {reason}" for name, reason in summary),
        )
        raise ExtractionExhausted(url, summary, cause)


def _pick_cause(attempts: Sequence[AttemptResult]) -> Optional[BaseException]:
    """Last failure that is not a missing-credential error, else the last failure."""
    errors = [a.error for a in attempts if a.error is not None]
    for error in reversed(errors):
        if not isinstance(error, ConfigError):
            return error
    return errors[-1] if errors else None
