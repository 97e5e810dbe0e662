"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_PLACEHOLDER_VALUES = {"", "your-api-key", "your-project-url", "your-anon-key"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    default_language: str = "ar"
    fallback_language: str = "en"
    default_calorie_goal: int = 2000
    timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def is_auth_configured(settings: Settings) -> bool:
    """Return True when identity provider credentials look real."""
    values = (settings.supabase_url, settings.supabase_anon_key)
    return all(
        value is not None and value.strip() not in _PLACEHOLDER_VALUES
        for value in values
    )
