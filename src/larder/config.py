"""
Larder - Configuration and settings.

Settings are read from the environment (and an optional .env file).
Nothing here is loaded at import time; use `get_settings()` or the lazy
`settings` proxy.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI (optional: without a key the keyword interpreter is used alone)
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float = 0.1
    openai_max_tokens: int = 500

    # Supabase (optional: without it the CLI uses the in-memory store)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Application
    larder_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Dev user for the CLI
    dev_user_id: str = "00000000-0000-0000-0000-000000000002"

    # Conversation history kept per session
    conversation_cap: int = 50

    # Ask the model only when the keyword interpreter returns "unknown"
    use_model_fallback: bool = True

    @property
    def is_development(self) -> bool:
        return self.larder_env == "development"

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
