"""Utility functions for the Daily Info Center web app."""
from __future__ import annotations

import logging
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from dailynews.errors import ValidationError
from utils.security import redact_secrets

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("dailynews")


class RedactingFilter(logging.Filter):
    """Scrub credentials from formatted log messages before any handler sees them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg = redact_secrets(record.getMessage())
            record.args = None
        elif isinstance(record.msg, str):
            record.msg = redact_secrets(record.msg)
        return True


def configure_logging(log_dir: Union[str, Path] = "logs", level: Optional[str] = None) -> None:
    """Console + ``logs/dailynews.log``; safe to call more than once."""
    root = logging.getLogger()
    if getattr(root, "_dailynews_configured", False):
        return
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    redactor = RedactingFilter()
    handlers = [logging.FileHandler(log_path / "dailynews.log", encoding="utf-8"), logging.StreamHandler()]
    for handler in handlers:
        handler.addFilter(redactor)
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
    )
    root._dailynews_configured = True  # type: ignore[attr-defined]


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` path segment."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD") from exc


def parse_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def get_current_timestamp() -> str:
    """Get current UTC timestamp in ISO format.

    Returns:
        ISO formatted timestamp string.
    """
    return datetime.now(timezone.utc).isoformat()
