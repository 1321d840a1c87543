"""
config.py — Single source of truth for all summarizer settings.

pydantic-settings reads .env at import time, every field is typed,
and every field has a default so importing never fails on a fresh checkout.

WHAT LIVES HERE:

  1. Provider settings:
       gemini_api_key   — used when a caller doesn't pass its own key
       gemini_model     — default model for summarization
       gemini_api_base  — generativelanguage REST root (v1beta)

  2. HTTP behaviour:
       user_agent              — sent on every outbound request
       title_timeout_seconds   — title lookup and model listing (10s)
       summary_timeout_seconds — page fetch and generateContent call (15s)

  3. Content bound:
       max_content_chars — sanitized page text is cut to this many chars
                           before it goes into the prompt

  4. Observability:
       log_level  — root logger level for setup_logging()
       trace_dir  — where per-run trace JSON goes; empty = don't write

USAGE:
  from config import settings
  print(settings.gemini_model)          # "models/gemini-2.5-flash-lite"
  print(settings.max_content_chars)     # 10000
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Gemini ────────────────────────────────────────────────────────────────
    gemini_api_key: str = Field(
        default="",
        description="Gemini API key — callers may also pass one per request",
    )
    gemini_model: str = Field(
        default="models/gemini-2.5-flash-lite",
        description="Model used for summaries when the caller doesn't pick one",
    )
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Root of the generativelanguage REST API",
    )

    # ── HTTP ──────────────────────────────────────────────────────────────────
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; clippy.ai/1.0)",
        description="User-Agent header on every outbound request",
    )
    title_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for title lookups and model listing",
    )
    summary_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout for the summary page fetch and the generateContent call",
    )

    # ── Content ───────────────────────────────────────────────────────────────
    # Counted in characters, not bytes or tokens.
    max_content_chars: int = Field(
        default=10_000,
        ge=1,
        description="Sanitized page text is cut to this many characters",
    )

    # ── Observability ─────────────────────────────────────────────────────────
    log_level: str = Field(
        default="INFO",
        description="Root log level used by setup_logging()",
    )
    trace_dir: str = Field(
        default="",
        description="Directory for per-run trace JSON — empty disables trace files",
    )


# Module-level singleton — import this everywhere, never instantiate Settings again.
settings = Settings()
