"""
On-demand text-to-speech for stored articles, cached by ``voice_file_path``.
"""
from __future__ import annotations

import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Hashable, Union

from dailynews.errors import NotFoundError, ValidationError
from dailynews.models import SpeechResult

logger = logging.getLogger(__name__)

AUDIO_URL_PREFIX = "/api/articles/audio"


class KeyedLocks:
    """One lock per key, created lazily."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


class AudioStorage:
    def __init__(self, directory: Union[str, Path], url_prefix: str = AUDIO_URL_PREFIX) -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, filename: str, payload: bytes) -> Path:
        target = self._safe_path(filename)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".part")
        tmp.write_bytes(payload)
        os.replace(tmp, target)
        return target

    def resolve(self, filename: str) -> Path:
        path = self._safe_path(filename)
        if not path.is_file():
            raise NotFoundError(f"Audio file {filename} not found")
        return path

    def public_url(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def _safe_path(self, filename: str) -> Path:
        if not filename or "/" in filename or "\\" in filename or filename.startswith("."):
            raise ValidationError("Invalid audio file name")
        root = self.directory.resolve()
        path = (root / filename).resolve()
        if path.parent != root:
            raise ValidationError("Invalid audio file name")
        return path


class SpeechGate:
    """
    Synthesizes an article's body at most once per stored audio path.

    Without ``serialize`` two concurrent first requests may both synthesize;
    the later write wins and the earlier file is orphaned. ``serialize=True``
    takes a per-article lock around check-synthesize-store.
    """

    def __init__(
        self,
        store,
        speech,
        storage: AudioStorage,
        serialize: bool = False,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.speech = speech
        self.storage = storage
        self.serialize = serialize
        self.clock = clock
        self._locks = KeyedLocks()

    def synthesize(self, article_id: int) -> SpeechResult:
        if self.serialize:
            with self._locks.lock_for(article_id):
                return self._synthesize(article_id)
        return self._synthesize(article_id)

    def _synthesize(self, article_id: int) -> SpeechResult:
        article = self.store.get_article(article_id)
        if article is None:
            raise NotFoundError("Article not found")
        if article.voice_file_path:
            return SpeechResult(article_id=article_id, audio_url=article.voice_file_path, cached=True)

        audio = self.speech.synthesize(article.content)
        filename = f"article_{article_id}_{int(self.clock() * 1000)}.mp3"
        self.storage.save(filename, audio)
        audio_url = self.storage.public_url(filename)
        self.store.set_article_audio_path(article_id, audio_url)
        logger.info("Stored speech for article %s at %s", article_id, audio_url)
        return SpeechResult(article_id=article_id, audio_url=audio_url, cached=False)
