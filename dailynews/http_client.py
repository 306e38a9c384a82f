"""
HTTP helper with retries + polite headers reused by provider adapters.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from urllib3.util.retry import Retry

from dailynews.errors import ProviderError
from utils.security import redact_secrets

logger = logging.getLogger(__name__)


class HttpClient:
    """
    Thin wrapper over ``requests.Session``.

    Idempotent GETs are retried on 5xx and 429; POSTs are never retried here so
    callers see rate limiting and can decide for themselves.
    """

    def __init__(self, provider: str, timeout: int = 30, max_retries: int = 3, user_agent: str | None = None):
        self.provider = provider
        self.timeout = timeout
        self.session = requests.Session()
        retry = Retry(
            total=max_retries,
            backoff_factor=0.6,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False,
        )
        adapter = requests.adapters.HTTPAdapter(max_retries=retry)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)
        self.session.headers.update({"User-Agent": user_agent or "DailyInfoCenter/1.0"})

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Perform a request and return the response; raises ProviderError for non-2xx."""
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=timeout or self.timeout,
            )
        except requests.Timeout as exc:
            logger.error("%s %s timed out: %s", self.provider, method, redact_secrets(str(exc)))
            raise ProviderError(f"{self.provider} request timed out", provider=self.provider) from exc
        except requests.RequestException as exc:
            logger.error("%s %s exception %s", self.provider, method, redact_secrets(str(exc)))
            raise ProviderError(f"{self.provider} request failed: {exc.__class__.__name__}", provider=self.provider) from exc

        if resp.status_code >= 400:
            body = _safe_text(resp)
            logger.warning("%s %s failed %s %s", self.provider, method, resp.status_code, redact_secrets(body[:200]))
            raise ProviderError(
                f"{self.provider} returned HTTP {resp.status_code}",
                provider=self.provider,
                status=resp.status_code,
            )
        return resp

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        resp = self.request("GET", url, params=params)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProviderError(f"{self.provider} returned a non-JSON body", provider=self.provider) from exc


def _safe_text(resp: requests.Response) -> str:
    content_type = resp.headers.get("Content-Type", "")
    if "json" in content_type or content_type.startswith("text/"):
        return resp.text or ""
    return f"<{len(resp.content or b'')} bytes of {content_type or 'unknown'}>"
