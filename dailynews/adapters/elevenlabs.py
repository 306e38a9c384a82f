"""
ElevenLabs text-to-speech over its REST API.
"""
from __future__ import annotations

import logging
from typing import Optional

from dailynews.errors import ConfigError, ProviderError
from dailynews.http_client import HttpClient

logger = logging.getLogger(__name__)

ENDPOINT = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"


class ElevenLabsAdapter:
    name = "elevenlabs"

    def __init__(self, settings, http: Optional[HttpClient] = None) -> None:
        self.settings = settings
        # synthesis is billed per character: never retried automatically
        self.http = http or HttpClient(provider="elevenlabs", timeout=120, max_retries=0)

    def synthesize(self, text: str) -> bytes:
        api_key = self.settings.elevenlabs_api_key
        if not api_key:
            raise ConfigError("ElevenLabs API key not configured")
        try:
            resp = self.http.request(
                "POST",
                ENDPOINT.format(voice_id=self.settings.elevenlabs_voice_id),
                json={
                    "text": text,
                    "model_id": self.settings.elevenlabs_model_id,
                    "voice_settings": {"stability": 0.5, "similarity_boost": 0.5},
                },
                headers={
                    "Accept": "audio/mpeg",
                    "Content-Type": "application/json",
                    "xi-api-key": api_key,
                },
            )
        except ProviderError as exc:
            if exc.status == 401:
                raise ProviderError("ElevenLabs rejected the API key (invalid credentials)", provider=self.name, status=401) from exc
            if exc.status == 429:
                raise ProviderError("ElevenLabs rate limited the request", provider=self.name, status=429) from exc
            raise ProviderError(f"Failed to generate speech: {exc}", provider=self.name, status=exc.status) from exc

        if not resp.content:
            raise ProviderError("ElevenLabs returned empty audio", provider=self.name)
        logger.info("Synthesized %s characters into %s bytes of audio", len(text), len(resp.content))
        return resp.content
