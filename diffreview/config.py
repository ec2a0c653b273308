"""Configuration for the diffreview pipeline."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    environment: str = Field(default="development")
    debug: bool = Field(default=True)

    # Batching
    max_batch_chars: int = Field(default=30_000)
    include_all: bool = Field(default=False)

    # Batch analysis
    review_concurrency: int = Field(default=3)
    batch_timeout_seconds: float = Field(default=300.0)


settings = Settings()
