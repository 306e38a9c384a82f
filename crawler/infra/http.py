"""
Reusable HTTP fetching utilities with polite defaults (per-domain delay, retries).
"""
from __future__ import annotations

import logging
import random
import threading
import time
from typing import Dict, Optional
from urllib.parse import urlparse

import requests

from dailynews.errors import ProviderError
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

TRANSIENT_STATUSES = {429, 500, 502, 503, 504}


def describe_status(status: int) -> str:
    if status == 404:
        return "Page not found (404). Please check the URL."
    if status == 403:
        return "Access denied (403). The website may be blocking automated access."
    if status == 429:
        return "The website is rate limiting requests (429). Please try again later."
    if status >= 500:
        return "The website is currently experiencing issues. Please try again later."
    return f"The website returned HTTP {status}."


class HttpFetcher:
    """
    Thin wrapper over requests.Session supporting polite per-domain throttling.

    Only transient failures (timeouts, connection resets, 429 and 5xx) are
    retried; every failure surfaces as a ``ProviderError`` with a readable message.
    """

    def __init__(
        self,
        user_agent: str = BROWSER_USER_AGENT,
        min_delay: float = 1.0,
        max_retries: int = 2,
        timeout: int = 10,
        provider: str = "web",
    ) -> None:
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.8,zh-CN;q=0.6",
            }
        )
        self.min_delay = min_delay
        self.max_retries = max(1, max_retries)
        self.timeout = timeout
        self.provider = provider
        self._last_hit: Dict[str, float] = {}
        self._lock = threading.RLock()

    def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        last_error: Optional[ProviderError] = None
        for attempt in range(self.max_retries):
            if attempt:
                time.sleep(min(30, self.min_delay * (2 ** attempt)) + random.random())
            self._respect_delay(url)
            try:
                response = self.session.get(url, headers=headers, timeout=self.timeout)
            except requests.Timeout as exc:
                last_error = ProviderError(
                    "Request timed out. The website may be slow or unavailable.", provider=self.provider
                )
                last_error.__cause__ = exc
                logger.info("Timeout fetching %s (attempt %s)", redact_secrets(url), attempt + 1)
                continue
            except requests.ConnectionError as exc:
                if _is_dns_failure(exc):
                    raise ProviderError(
                        "Unable to reach the URL. Please check if the URL is correct.", provider=self.provider
                    ) from exc
                last_error = ProviderError(
                    "Connection failed. The website may be unavailable.", provider=self.provider
                )
                last_error.__cause__ = exc
                logger.info("Connection error fetching %s (attempt %s)", redact_secrets(url), attempt + 1)
                continue
            except requests.RequestException as exc:
                raise ProviderError(f"Failed to fetch the page: {exc.__class__.__name__}", provider=self.provider) from exc

            if response.status_code >= 400:
                error = ProviderError(describe_status(response.status_code), provider=self.provider, status=response.status_code)
                if response.status_code not in TRANSIENT_STATUSES:
                    raise error
                last_error = error
                logger.info("HTTP %s fetching %s (attempt %s)", response.status_code, redact_secrets(url), attempt + 1)
                continue
            return response

        if last_error is None:
            raise ProviderError(f"Failed to fetch the page after {self.max_retries} attempts", provider=self.provider)
        raise last_error

    def _respect_delay(self, url: str) -> None:
        if self.min_delay <= 0:
            return
        domain = self._extract_domain(url)
        with self._lock:
            last = self._last_hit.get(domain)
            now = time.time()
            if last and now - last < self.min_delay:
                time.sleep(self.min_delay - (now - last))
            self._last_hit[domain] = time.time()

    @staticmethod
    def _extract_domain(url: str) -> str:
        return urlparse(url).netloc or url


def _is_dns_failure(exc: Exception) -> bool:
    text = str(exc)
    return "Name or service not known" in text or "nodename nor servname" in text or "getaddrinfo failed" in text or "NameResolutionError" in text
