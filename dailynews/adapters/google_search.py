"""
Google Custom Search adapter (recent web results for a topic).
"""
from __future__ import annotations

import logging
from typing import List, Optional

from dailynews.errors import ConfigError
from dailynews.http_client import HttpClient
from dailynews.models import SearchResult

logger = logging.getLogger(__name__)

ENDPOINT = "https://www.googleapis.com/customsearch/v1"


class GoogleSearchAdapter:
    name = "google"

    def __init__(self, settings, http: Optional[HttpClient] = None, num: int = 10, date_restrict: str = "d7") -> None:
        self.settings = settings
        self.http = http or HttpClient(provider="google_search", timeout=20)
        self.num = num
        self.date_restrict = date_restrict

    def search(self, query: str) -> List[SearchResult]:
        api_key = self.settings.google_search_api_key
        engine_id = self.settings.google_search_engine_id
        if not api_key or not engine_id:
            raise ConfigError("Google Search API credentials not configured")

        payload = self.http.get_json(
            ENDPOINT,
            params={
                "key": api_key,
                "cx": engine_id,
                "q": query,
                "num": self.num,
                "dateRestrict": self.date_restrict,
                "sort": "date",
            },
        )
        items = payload.get("items") or []
        results = [
            SearchResult(
                title=item.get("title") or "",
                snippet=item.get("snippet") or "",
                uri=item.get("link") or "",
            )
            for item in items
            if isinstance(item, dict)
        ]
        logger.info("Google search for '%s' returned %s results", query, len(results))
        return results[: self.num]
