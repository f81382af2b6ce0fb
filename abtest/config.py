"""Project configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Document store collections
    experiments_collection: str = "experiments"
    assignments_collection: str = "assignments"
    conversions_collection: str = "conversions"

    # Results analysis
    min_sample_size: int = 30  # Users per variant before a winner can be declared
    confidence_threshold: float = 95.0  # Percent, strictly exceeded to declare a winner


settings = Settings()
