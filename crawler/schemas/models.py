"""
Pydantic models for extraction outputs.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class ExtractedPage(BaseModel):
    title: str
    body: str
    author: Optional[str] = None
    publish_date: Optional[date] = None
    strategy: Optional[str] = None

    @field_validator("title", mode="before")
    @classmethod
    def _trim_title(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @field_validator("author", mode="before")
    @classmethod
    def _blank_author(cls, value: Optional[str]) -> Optional[str]:
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("publish_date", mode="before")
    @classmethod
    def _date_part(cls, value):
        """Accept ISO timestamps and keep only the ``YYYY-MM-DD`` part; unparseable input becomes None."""
        if value is None or isinstance(value, date):
            return value.date() if isinstance(value, datetime) else value
        text = str(value).strip()
        if not text or text.lower() == "null":
            return None
        try:
            return date.fromisoformat(text.split("T")[0][:10])
        except ValueError:
            return None
