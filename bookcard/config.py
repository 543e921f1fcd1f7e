"""Centralised settings for Book Card Creator.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The pipeline never reads the module-level ``settings`` itself: the CLI passes
a ``Settings`` instance into :func:`bookcard.pipeline.create_card`, and
overrides are applied with :func:`dataclasses.replace`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Vault / output
    # ------------------------------------------------------------------
    vault_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("BOOKCARD_VAULT", Path.cwd()))
    )
    template_path: str = field(
        default_factory=lambda: os.environ.get("BOOKCARD_TEMPLATE", "")
    )
    output_folder: str = field(
        default_factory=lambda: os.environ.get("BOOKCARD_OUTPUT_FOLDER", "")
    )

    # ------------------------------------------------------------------
    # Summarization (Anthropic Messages API)
    # ------------------------------------------------------------------
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )
    summary_model: str = field(
        default_factory=lambda: os.environ.get("SUMMARY_MODEL", "claude-3-5-haiku-20241022")
    )
    anthropic_base_url: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_BASE_URL", "https://api.anthropic.com")
    )
    anthropic_version: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_VERSION", "2023-06-01")
    )
    summary_max_tokens: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_MAX_TOKENS", "1000"))
    )
    summary_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_MAX_CHARS", "10000"))
    )
    summary_timeout: float = field(
        default_factory=lambda: float(os.environ.get("SUMMARY_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Fetcher / proxy chain
    # ------------------------------------------------------------------
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "15.0"))
    )
    fetch_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_ATTEMPTS", "2"))
    )
    fetch_backoff_base: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_BACKOFF_BASE", "1.0"))
    )
    fetch_backoff_cap: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_BACKOFF_CAP", "8.0"))
    )


# Module-level singleton, used by the CLI only:
#   from bookcard.config import settings
settings = Settings()
