"""
Core data structures shared by the generation pipeline, the store and the API.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Language(str, Enum):
    EN = "en"
    ZH = "zh"


class PairStatus(str, Enum):
    GENERATED = "generated"
    SKIPPED = "skipped"
    NO_RESULTS = "no_results"
    FAILED = "failed"


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Topic:
    id: int
    name: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
        }


@dataclass
class SocialInterest(Topic):
    """Same shape and lifecycle as a topic, kept in its own namespace."""


@dataclass
class Article:
    id: int
    date: date
    topic_id: int
    language: str
    headline: str
    content: str
    sources: List[str] = field(default_factory=list)
    voice_file_path: Optional[str] = None
    created_at: Optional[datetime] = None
    topic_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "topic_id": self.topic_id,
            "topic_name": self.topic_name,
            "language": self.language,
            "headline": self.headline,
            "content": self.content,
            "sources": list(self.sources),
            "voice_file_path": self.voice_file_path,
            "created_at": _iso(self.created_at),
        }


@dataclass
class SocialArticle:
    id: int
    interest_id: int
    source_url: str
    title: str
    content: str
    scraped_at: date
    summary: Optional[str] = None
    author: Optional[str] = None
    publish_date: Optional[date] = None
    created_at: Optional[datetime] = None
    interest_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "interest_id": self.interest_id,
            "interest_name": self.interest_name,
            "source_url": self.source_url,
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "author": self.author,
            "publish_date": _iso(self.publish_date),
            "scraped_at": _iso(self.scraped_at),
            "created_at": _iso(self.created_at),
        }


@dataclass
class SearchResult:
    title: str
    snippet: str
    uri: str


@dataclass
class GeneratedArticle:
    headline: str
    content: str
    sources: List[str] = field(default_factory=list)


@dataclass
class PairResult:
    topic: str
    language: str
    status: PairStatus
    headline: Optional[str] = None
    article_id: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "topic": self.topic,
            "language": self.language,
            "status": self.status.value,
        }
        if self.headline is not None:
            payload["headline"] = self.headline
        if self.article_id is not None:
            payload["articleId"] = self.article_id
        if self.error is not None:
            payload["error"] = self.error
        return payload


@dataclass
class GenerationRun:
    date: date
    results: List[PairResult] = field(default_factory=list)

    def _count(self, status: PairStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def generated_count(self) -> int:
        return self._count(PairStatus.GENERATED)

    @property
    def failed_count(self) -> int:
        return self._count(PairStatus.FAILED)

    @property
    def skipped_count(self) -> int:
        return self._count(PairStatus.SKIPPED) + self._count(PairStatus.NO_RESULTS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "date": self.date.isoformat(),
            "generated": self.generated_count,
            "failed": self.failed_count,
            "skipped": self.skipped_count,
            "results": [result.to_dict() for result in self.results],
        }


@dataclass
class SpeechResult:
    article_id: int
    audio_url: str
    cached: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"audioUrl": self.audio_url, "cached": self.cached}


@dataclass
class SummaryResult:
    article_id: int
    summary: str
    cached: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "cached": self.cached}


@dataclass
class SubmitResult:
    id: int
    title: str
    duplicate: bool = False

    def to_dict(self) -> Dict[str, Any]:
        message = "This URL has already been added" if self.duplicate else "Article added successfully"
        return {"id": self.id, "title": self.title, "duplicate": self.duplicate, "message": message}
