"""
Flavr - Configuration and settings.

FlavrSettings holds credentials plus the pipeline policy constants
(confidence threshold, cache size, timeouts). Policy values are tunable
through the environment, not fixed invariants.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class FlavrSettings(BaseSettings):
    """
    Application settings.

    Loaded from environment variables and .env. Supabase is optional:
    without it the cache tier is skipped.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str

    # Supabase (optional - shared recipe store)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # LangSmith (optional)
    langchain_tracing_v2: bool = False
    langchain_api_key: str | None = None
    langchain_project: str = "flavr"

    # Application
    flavr_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # FLAVR_LOG_PROMPTS=1 - log generation prompts to local files (dev only)
    flavr_log_prompts: bool = False

    # Pipeline policy
    fingerprint_cache_size: int = 50
    template_confidence_threshold: float = 0.6
    generation_timeout_seconds: float = 35.0
    fallback_timeout_seconds: float = 60.0
    cache_lookup_limit: int = 5
    full_generation_reference_cost: float = 0.015  # USD per full generation
    elevated_skips_early_tiers: bool = True

    @property
    def is_development(self) -> bool:
        return self.flavr_env == "development"

    @property
    def is_production(self) -> bool:
        return self.flavr_env == "production"

    @property
    def has_store(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> FlavrSettings:
    """Get cached settings instance."""
    return FlavrSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: FlavrSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
