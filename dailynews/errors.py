"""
Error taxonomy shared by the generation and extraction pipelines.
"""
from __future__ import annotations

from typing import List, Optional, Tuple


class DailyNewsError(Exception):
    """Base class for every error raised on purpose by this project."""


class ConfigError(DailyNewsError):
    """A required credential or setting is missing. Not retryable."""


class NoActiveTopicsError(ConfigError):
    def __init__(self) -> None:
        super().__init__("No active topics found")


class ValidationError(DailyNewsError):
    """Request-level input is missing or malformed."""


class NotFoundError(DailyNewsError):
    pass


class ConflictError(DailyNewsError):
    """A natural-key uniqueness constraint rejected an insert."""


class ProviderError(DailyNewsError):
    """
    Transport or HTTP failure reported by a third-party provider.

    ``status`` carries the provider's HTTP status when one is known; 429 and
    5xx responses are flagged as retryable, everything else is not.
    """

    def __init__(self, message: str, *, provider: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status

    @property
    def retryable(self) -> bool:
        if self.status is None:
            return False
        return self.status == 429 or self.status >= 500


class GenerationTimeout(DailyNewsError, TimeoutError):
    def __init__(self, seconds: float) -> None:
        super().__init__(f"Article generation timeout after {seconds:g} seconds")
        self.seconds = seconds


class ExtractionError(DailyNewsError):
    """A single extraction strategy failed to produce usable content."""


class ContentTooShort(ExtractionError):
    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(f"Extracted content is too short ({length} < {minimum} characters)")
        self.length = length
        self.minimum = minimum


class ExtractionExhausted(DailyNewsError):
    """
    Every extraction strategy failed for a URL.

    ``attempts`` lists ``(strategy_name, reason)`` in the order tried and
    ``cause`` is the most informative underlying exception.
    """

    def __init__(self, url: str, attempts: List[Tuple[str, str]], cause: Optional[BaseException]) -> None:
        reason = str(cause) if cause else "no extraction strategies configured"
        super().__init__(f"Could not extract content from {url}: {reason}")
        self.url = url
        self.attempts = attempts
        self.cause = cause
