"""
Deduplication helpers for source links and extracted items.
"""
from __future__ import annotations

from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


def dedupe_by_key(items: Iterable[T], key_fn: Callable[[T], Hashable]) -> List[T]:
    seen = set()
    result: List[T] = []
    for item in items:
        key = key_fn(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def dedupe_uris(uris: Iterable[Optional[str]]) -> List[str]:
    """Drop blanks and repeats from a list of source links, keeping first-seen order."""
    cleaned = (uri.strip() for uri in uris if isinstance(uri, str) and uri.strip())
    return dedupe_by_key(cleaned, key_fn=lambda uri: uri)
