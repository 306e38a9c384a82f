"""
Centralised settings for the daily info center (env-first, code-light).

Every provider credential is independently optional: a missing key only fails
the calls that need that provider.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dailynews.models import Language
from utils.security import is_configured_key

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_TOPICS = ("Politics", "Macro Economy Data", "AI", "EV", "Stock Market")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///daily_info.db"
    generation_provider: str = "gemini"
    search_provider: str = "google"
    speech_provider: str = "elevenlabs"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-sonnet-4-5"
    google_search_api_key: Optional[str] = None
    google_search_engine_id: Optional[str] = None
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"
    elevenlabs_model_id: str = "eleven_monolingual_v1"
    languages: Tuple[Language, ...] = (Language.EN, Language.ZH)
    generation_timeout: int = 120
    generation_workers: int = 1
    audio_dir: Path = field(default_factory=lambda: PROJECT_ROOT / "audio")
    reader_proxy_base_url: str = "https://r.jina.ai"
    reader_proxy_api_key: Optional[str] = None
    extraction_config: Path = field(default_factory=lambda: PROJECT_ROOT / "config" / "extraction.yaml")
    scrape_timeout: int = 10
    summary_input_limit: int = 5000
    speech_serialize: bool = False
    schedule_hour_utc: int = 8
    default_topics: Tuple[str, ...] = DEFAULT_TOPICS

    def configured_providers(self) -> dict:
        return {
            "gemini": bool(self.gemini_api_key),
            "anthropic": bool(self.anthropic_api_key),
            "google_search": bool(self.google_search_api_key and self.google_search_engine_id),
            "elevenlabs": bool(self.elevenlabs_api_key),
            "reader_proxy_key": bool(self.reader_proxy_api_key),
        }


def _int_from_env(key: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value >= minimum else default
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _bool_from_env(key: str, default: bool = False) -> bool:
    raw = os.getenv(key)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _secret_from_env(*keys: str) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if is_configured_key(value or ""):
            return value.strip()
    return None


def _parse_languages(raw: Optional[str]) -> Tuple[Language, ...]:
    if not raw:
        return (Language.EN, Language.ZH)
    languages: List[Language] = []
    for token in raw.split(","):
        token = token.strip().lower()
        if not token:
            continue
        try:
            language = Language(token)
        except ValueError:
            logger.warning("Unknown language token '%s' in GENERATION_LANGUAGES; skipping.", token)
            continue
        if language not in languages:
            languages.append(language)
    return tuple(languages) or (Language.EN, Language.ZH)


def _parse_topics(raw: Optional[str]) -> Tuple[str, ...]:
    if raw is None:
        return DEFAULT_TOPICS
    return tuple(token.strip() for token in raw.split(",") if token.strip())


def _database_url() -> str:
    url = os.getenv("DATABASE_URL") or os.getenv("POSTGRES_URL")
    if not url:
        return f"sqlite:///{PROJECT_ROOT / 'daily_info.db'}"
    # Hosted Postgres providers still hand out the legacy scheme.
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


def load_settings() -> Settings:
    audio_dir_env = os.getenv("AUDIO_DIR")
    extraction_env = os.getenv("EXTRACTION_CONFIG")
    return Settings(
        database_url=_database_url(),
        generation_provider=os.getenv("GENERATION_PROVIDER", "gemini").strip().lower(),
        search_provider=os.getenv("SEARCH_PROVIDER", "google").strip().lower(),
        speech_provider=os.getenv("SPEECH_PROVIDER", "elevenlabs").strip().lower(),
        gemini_api_key=_secret_from_env("GEMINI_API_KEY"),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        anthropic_api_key=_secret_from_env("ANTHROPIC_API_KEY"),
        claude_model=os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5"),
        google_search_api_key=_secret_from_env("GOOGLE_SEARCH_API_KEY"),
        google_search_engine_id=_secret_from_env("GOOGLE_SEARCH_ENGINE_ID"),
        elevenlabs_api_key=_secret_from_env("ELEVENLABS_API_KEY"),
        elevenlabs_voice_id=os.getenv("ELEVENLABS_VOICE_ID", "21m00Tcm4TlvDq8ikWAM"),
        elevenlabs_model_id=os.getenv("ELEVENLABS_MODEL_ID", "eleven_monolingual_v1"),
        languages=_parse_languages(os.getenv("GENERATION_LANGUAGES")),
        generation_timeout=_int_from_env("GENERATION_TIMEOUT", 120),
        generation_workers=_int_from_env("GENERATION_WORKERS", 1),
        audio_dir=Path(audio_dir_env) if audio_dir_env else PROJECT_ROOT / "audio",
        reader_proxy_base_url=os.getenv("READER_PROXY_BASE_URL", "https://r.jina.ai").rstrip("/"),
        reader_proxy_api_key=_secret_from_env("READER_PROXY_API_KEY", "JINA_API_KEY"),
        extraction_config=Path(extraction_env) if extraction_env else PROJECT_ROOT / "config" / "extraction.yaml",
        scrape_timeout=_int_from_env("SCRAPE_TIMEOUT", 10),
        summary_input_limit=_int_from_env("SUMMARY_INPUT_LIMIT", 5000),
        speech_serialize=_bool_from_env("SPEECH_SERIALIZE"),
        schedule_hour_utc=_int_from_env("SCHEDULE_HOUR_UTC", 8, minimum=0) % 24,
        default_topics=_parse_topics(os.getenv("DEFAULT_TOPICS")),
    )
