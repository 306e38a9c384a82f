"""
Claude adapter: writes the daily article from explicit search results.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import anthropic

from dailynews.adapters.base import language_instruction, parse_generated_text
from dailynews.errors import ConfigError, ProviderError
from dailynews.models import GeneratedArticle, Language, SearchResult
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

PROMPT = """You are a skilled journalist and analyst. I have gathered the latest search results about "{topic}". Please write a comprehensive, well-structured article that:

1. Summarizes the key information and developments
2. Identifies important trends and patterns
3. Provides meaningful analysis and insights
4. Maintains an objective, informative tone

{language_instruction}

Search Results:
{results}

Please write the article in a clear, engaging format suitable for voice narration. Include a compelling headline at the start in the format "Headline: [your headline here]". The article should be approximately 300-500 words."""


def format_results(results: Sequence[SearchResult]) -> str:
    return "\n".join(
        f"{index}. {result.title}\n   {result.snippet}\n   Source: {result.uri}\n"
        for index, result in enumerate(results, 1)
    )


class ClaudeAdapter:
    name = "claude"
    requires_search = True

    def __init__(self, settings, max_tokens: int = 2048) -> None:
        self.settings = settings
        self.max_tokens = max_tokens

    def generate(
        self,
        topic: str,
        language: Language,
        context: Optional[Sequence[SearchResult]] = None,
    ) -> GeneratedArticle:
        api_key = self.settings.anthropic_api_key
        if not api_key:
            raise ConfigError("Anthropic API key not configured")
        results = list(context or [])
        prompt = PROMPT.format(
            topic=topic,
            language_instruction=language_instruction(language),
            results=format_results(results),
        )
        client = anthropic.Anthropic(api_key=api_key, timeout=float(self.settings.generation_timeout))
        try:
            message = client.messages.create(
                model=self.settings.claude_model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIStatusError as exc:
            logger.warning("Claude API error %s: %s", exc.status_code, redact_secrets(str(exc)))
            raise ProviderError(f"Claude API error: {exc.status_code}", provider=self.name, status=exc.status_code) from exc
        except anthropic.APIError as exc:
            logger.warning("Claude request failed: %s", redact_secrets(str(exc)))
            raise ProviderError(f"Claude request failed: {exc.__class__.__name__}", provider=self.name) from exc

        text = "".join(getattr(block, "text", "") for block in message.content or [])
        if not text.strip():
            raise ProviderError("Claude returned an empty response", provider=self.name)
        return parse_generated_text(topic, text, (result.uri for result in results))
