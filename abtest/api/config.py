"""API configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """API settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_title: str = "A/B Testing API"
    api_version: str = "0.1.0"
    api_description: str = "Experiment assignment, conversion tracking and results"


@lru_cache
def get_api_settings() -> APISettings:
    """Get cached API settings."""
    return APISettings()
