"""
Provider adapters and the default registry.
"""
from __future__ import annotations

from dailynews.adapters.base import ProviderRegistry
from dailynews.adapters.claude import ClaudeAdapter
from dailynews.adapters.elevenlabs import ElevenLabsAdapter
from dailynews.adapters.gemini import GeminiAdapter
from dailynews.adapters.google_search import GoogleSearchAdapter


def default_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    registry.register_generator("gemini", GeminiAdapter)
    registry.register_generator("claude", ClaudeAdapter)
    registry.register_search("google", GoogleSearchAdapter)
    registry.register_speech("elevenlabs", ElevenLabsAdapter)
    return registry
