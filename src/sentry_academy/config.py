"""
config.py — Central settings for Sentry Academy
================================================
All configuration is loaded from environment variables / .env file.
Copy .env.example → .env and fill in your values.

Live mode activates automatically when OPENAI_API_KEY contains a real
(non-placeholder) value and FORCE_MOCK_MODE is not set.  In mock mode the
generation pipeline is fully deterministic and never leaves the process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── OpenAI ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OpenAIConfig:
    api_key:           str
    model:             str
    max_tokens:        int
    temperature:       float
    requests_per_hour: int   # caller-side limit, rolling 60-minute window

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and not _is_placeholder(self.api_key)


# ─── Research engine ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ResearchConfig:
    cache_ttl_hours:    int     # research results are reused for this long
    rate_window_secs:   float   # per-domain sliding window
    max_results:        int     # cross-source ranking keeps the top N
    min_relevance:      float   # cross-source ranking threshold


# ─── Generation pipeline ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class GenerationConfig:
    delay_seconds:       float   # simulated background-job start delay
    estimated_duration:  int     # seconds, reported back to the caller
    quality_threshold:   float   # validator pass mark


# ─── Persistence ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StorageConfig:
    db_path: str

    @property
    def is_configured(self) -> bool:
        return bool(self.db_path) and not _is_placeholder(self.db_path)


# ─── App-level settings ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    force_mock_mode:  bool
    log_level:        str
    default_reviewer: str


# ─── Master settings object ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    openai:     OpenAIConfig
    research:   ResearchConfig
    generation: GenerationConfig
    storage:    StorageConfig
    app:        AppConfig

    @property
    def live_mode(self) -> bool:
        """True when the OpenAI key is real and FORCE_MOCK_MODE is false."""
        return self.openai.is_configured and not self.app.force_mock_mode

    def status_summary(self) -> dict[str, str]:
        """Return a dict of service → status badge for the demo console."""
        def badge(ok: bool) -> str:
            return "🟢 Live" if ok else "⚪ Not configured"

        return {
            "OpenAI":          badge(self.live_mode),
            "SQLite storage":  badge(self.storage.is_configured),
        }


_DEFAULT_DB_PATH = str(Path(__file__).resolve().parent.parent.parent / "sentry_academy.db")


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str   = lambda k, d="": os.getenv(k, d).strip()
    _int   = lambda k, d=0: int(os.getenv(k, str(d)) or d)
    _float = lambda k, d=0.0: float(os.getenv(k, str(d)) or d)
    _bool  = lambda k, d=False: os.getenv(k, str(d)).lower() in ("1", "true", "yes")

    return Settings(
        openai=OpenAIConfig(
            api_key           = _str("OPENAI_API_KEY"),
            model             = _str("OPENAI_MODEL", "gpt-4o-mini"),
            max_tokens        = _int("OPENAI_MAX_TOKENS", 4000),
            temperature       = _float("OPENAI_TEMPERATURE", 0.7),
            requests_per_hour = _int("OPENAI_REQUESTS_PER_HOUR", 50),
        ),
        research=ResearchConfig(
            cache_ttl_hours  = _int("RESEARCH_CACHE_TTL_HOURS", 24),
            rate_window_secs = _float("RESEARCH_RATE_WINDOW_SECONDS", 60.0),
            max_results      = _int("RESEARCH_MAX_RESULTS", 20),
            min_relevance    = _float("RESEARCH_MIN_RELEVANCE", 0.2),
        ),
        generation=GenerationConfig(
            delay_seconds      = _float("GENERATION_DELAY_SECONDS", 1.0),
            estimated_duration = _int("GENERATION_ESTIMATED_DURATION", 120),
            quality_threshold  = _float("GENERATION_QUALITY_THRESHOLD", 0.7),
        ),
        storage=StorageConfig(
            db_path = _str("ACADEMY_DB_PATH", _DEFAULT_DB_PATH),
        ),
        app=AppConfig(
            force_mock_mode  = _bool("FORCE_MOCK_MODE", False),
            log_level        = _str("LOG_LEVEL", "INFO"),
            default_reviewer = _str("DEFAULT_REVIEWER", "admin"),
        ),
    )
