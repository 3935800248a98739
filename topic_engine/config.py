"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TOPIC_ENGINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Topic Scoring Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"
    max_candidates: int = 5000

    # Scoring tables (YAML overrides for the built-in defaults)
    scoring_config_path: str | None = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Accept lower-case level names from the environment."""
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @field_validator("api_v1_prefix", mode="before")
    @classmethod
    def _normalize_route_prefix(cls, value: object) -> object:
        """Normalize route prefix values to `/segment` form."""
        if not isinstance(value, str):
            return value
        normalized = value.strip()
        if not normalized or normalized == "/":
            return ""
        return f"/{normalized.strip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
