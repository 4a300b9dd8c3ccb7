# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for the analysis pipeline: backend order, retention,
history window, cache backend and logging. The hosting dashboard may pass
overrides through load_settings().
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from adpulse.core.errors import AnalysisPipelineError

DEFAULT_BACKENDS = (
    "gemini-2.5-flash,gemini-2.5-flash-lite,gemini-robotics-er-1.5-preview"
)
ONE_DAY_S = 86_400


class ConfigurationError(AnalysisPipelineError):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Text-generation backends ===
    # Ordered by preference; "provider:model" or bare Gemini model names.
    analysis_backends: str = DEFAULT_BACKENDS
    default_provider: str = "google"
    backend_timeout_s: float = 30.0
    fallback_backoff_s: float = 2.0
    backend_max_tokens: int = 2048
    backend_temperature: float = 0.4

    # Provider API keys
    google_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # === Analysis ===
    analysis_language: str = "Brazilian Portuguese"
    analysis_timezone: str = "UTC"
    comparison_window_days: int = 7
    benchmarks_file: Path | None = None

    # === Cache ===
    cache_backend: Literal["memory", "json", "redis", "http"] = "memory"
    cache_root: Path = Path("~/.adpulse/cache")
    cache_redis_url: str = ""
    cache_api_url: str = ""
    cache_api_timeout_s: float = 5.0
    # 24h in the minimal deployment, 30 days in the extended one.
    analysis_ttl_s: int = ONE_DAY_S
    history_window_days: int = 30

    # === Manual edits ===
    editor_token: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"

    # --- Validators ---

    @field_validator("analysis_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:  # noqa: N805
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"analysis_timezone is not a known zone: {v!r}") from e
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not self.backend_list:
            errors.append("ANALYSIS_BACKENDS must list at least one backend")

        if self.analysis_ttl_s <= 0:
            errors.append("ANALYSIS_TTL_S must be > 0")

        if self.history_window_days <= 0:
            errors.append("HISTORY_WINDOW_DAYS must be > 0")

        if self.fallback_backoff_s <= 0:
            errors.append("FALLBACK_BACKOFF_S must be > 0")

        if self.backend_timeout_s <= 0:
            errors.append("BACKEND_TIMEOUT_S must be > 0")

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if self.cache_backend == "http" and not self.cache_api_url:
            errors.append("CACHE_API_URL must be set when CACHE_BACKEND=http")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def backend_list(self) -> list[str]:
        """Parse comma-separated backend identifiers, preserving order."""
        return [b.strip() for b in self.analysis_backends.split(",") if b.strip()]

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.analysis_timezone)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
