"""
Gemini adapter: grounded article generation, summaries and AI page extraction.

Generation uses the Google Search grounding tool, so it needs no separate
search provider; the grounding chunk URIs become the article's sources.
"""
from __future__ import annotations

import json
import logging
import re
from typing import List, Optional, Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from crawler.schemas.models import ExtractedPage
from dailynews.adapters.base import language_instruction, parse_generated_text
from dailynews.errors import ConfigError, ExtractionError, ProviderError
from dailynews.models import GeneratedArticle, Language, SearchResult
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

GENERATION_PROMPT = """You are a skilled journalist and analyst. Research and write a comprehensive article about "{topic}" based on the latest information.

{language_instruction}

Please:
1. Search for the latest developments and news about {topic}
2. Summarize key information and recent developments
3. Identify important trends and patterns
4. Provide meaningful analysis and insights
5. Maintain an objective, informative tone

Format the article with:
- Start with "Headline: [compelling headline]"
- Then write a 300-500 word article suitable for voice narration
- Be informative and engaging

Write the article now:"""

SUMMARY_PROMPT = """Summarize the following article in 150-250 words. Focus on the key points, main ideas, and most important information. Write in a clear, concise style suitable for quick reading.

Article content:
{content}

Summary:"""

EXTRACTION_PROMPT = """Fetch and analyze the webpage at this URL: {url}

Please extract the following information in JSON format:
{{
  "title": "The article title or headline",
  "content": "The full main article text content (at least 200 words, preserve paragraph structure with \\n\\n between paragraphs)",
  "author": "The author name if available, otherwise null",
  "publishDate": "The publish date in YYYY-MM-DD format if available, otherwise null"
}}

Important:
- Extract the complete article text, not just a summary
- Preserve the natural paragraph structure
- If author or date are not found, use null
- Return ONLY the JSON object, no other text

JSON:"""


class GeminiAdapter:
    name = "gemini"
    requires_search = False

    def __init__(self, settings) -> None:
        self.settings = settings

    def generate(
        self,
        topic: str,
        language: Language,
        context: Optional[Sequence[SearchResult]] = None,
    ) -> GeneratedArticle:
        prompt = GENERATION_PROMPT.format(topic=topic, language_instruction=language_instruction(language))
        config = types.GenerateContentConfig(
            temperature=0.7,
            max_output_tokens=2048,
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        resp = self._call(prompt, config)
        return parse_generated_text(topic, _response_text(resp), grounding_uris(resp))

    def summarize(self, text: str) -> str:
        config = types.GenerateContentConfig(temperature=0.5, max_output_tokens=500)
        resp = self._call(SUMMARY_PROMPT.format(content=text), config)
        summary = _response_text(resp).strip()
        if not summary:
            raise ProviderError("Gemini returned an empty summary", provider=self.name)
        return summary

    def extract_page(self, url: str) -> ExtractedPage:
        config = types.GenerateContentConfig(temperature=0.1, max_output_tokens=4096)
        resp = self._call(EXTRACTION_PROMPT.format(url=url), config)
        return parse_extraction_json(_response_text(resp))

    def _call(self, prompt: str, config: types.GenerateContentConfig):
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise ConfigError("Gemini API key not configured")
        # the SDK timeout is in milliseconds; it bounds calls the pipeline has abandoned
        client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(self.settings.generation_timeout * 1000)),
        )
        try:
            return client.models.generate_content(
                model=self.settings.gemini_model,
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as exc:
            logger.warning("Gemini API error %s: %s", exc.code, redact_secrets(str(exc)))
            raise ProviderError(f"Gemini API error: {exc.code}", provider=self.name, status=exc.code) from exc
        except Exception as exc:
            logger.warning("Gemini call failed: %s", redact_secrets(str(exc)))
            raise ProviderError(f"Gemini request failed: {exc.__class__.__name__}", provider=self.name) from exc


def _response_text(resp) -> str:
    try:
        text = resp.text
    except (AttributeError, ValueError):
        text = None
    if not text:
        raise ProviderError("Invalid response from Gemini API", provider="gemini")
    return text


def grounding_uris(resp) -> List[str]:
    """Source URIs from the first candidate's grounding metadata (empty when absent)."""
    uris: List[str] = []
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return uris
    metadata = getattr(candidates[0], "grounding_metadata", None)
    for chunk in getattr(metadata, "grounding_chunks", None) or []:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri:
            uris.append(uri)
    return uris


def parse_extraction_json(text: str) -> ExtractedPage:
    cleaned = _CODE_FENCE_RE.sub("", text or "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ExtractionError("Failed to parse webpage content - the URL may be invalid or inaccessible") from exc
    if not isinstance(data, dict) or not data.get("title") or not data.get("content"):
        raise ExtractionError("Failed to extract title and content from webpage")
    return ExtractedPage(
        title=str(data["title"]),
        body=str(data["content"]),
        author=data.get("author") if isinstance(data.get("author"), str) else None,
        publish_date=data.get("publishDate"),
    )
