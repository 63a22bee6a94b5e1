"""Application settings parsed from environment variables and defaults."""

import json
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = ["http://localhost:8081", "http://127.0.0.1:8081"]
DEFAULT_QUEUE_NAMES = ["default", "profiles", "embeddings", "maintenance"]


def _split_list(value: str | list[str] | None) -> list[str] | None:
    """Parse JSON arrays or comma separated strings into a cleaned list.

    Returns None when nothing usable was provided so callers can pick their default.
    """
    if isinstance(value, list):
        cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return cleaned or None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            cleaned = [str(item).strip() for item in parsed if str(item).strip()]
            return cleaned or None
        items = [item.strip() for item in stripped.split(",") if item.strip()]
        return items or None
    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Palate API"
    environment: str = "development"
    api_prefix: str = "/api"

    database_url: str
    test_database_url: Optional[str] = None

    access_token_expires_minutes: int = 60 * 24
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    log_level: str = "INFO"
    cors_origins: list[str] | str = Field(default_factory=lambda: DEFAULT_CORS_ORIGINS.copy())
    health_allowlist: list[str] | str = Field(default_factory=list)

    redis_url: str = "redis://redis:6379/0"
    worker_queue_names: list[str] | str = Field(default_factory=lambda: DEFAULT_QUEUE_NAMES.copy())

    openai_api_key: Optional[str] = None
    embedding_model: str = "text-embedding-3-small"
    embedding_dimension: int = 1536
    embedding_timeout_seconds: float = 15.0
    embedding_circuit_threshold: int = 3
    embedding_backfill_interval_seconds: int = 15 * 60
    embedding_backfill_batch_size: int = 50

    profile_liked_weight: float = 1.0
    profile_disliked_weight: float = -0.5

    recommendation_default_limit: int = 10
    recommendation_max_limit: int = 50
    recommendation_overfetch: int = 10

    recent_reviews_default_limit: int = 10
    feed_review_limit: int = 20
    feed_recommendation_count: int = 3
    delivery_fee: float = 0.0

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_cors_origins(cls, value: str | list[str] | None) -> list[str]:
        """Normalize CORS origins from JSON, CSV, or list inputs."""
        return _split_list(value) or DEFAULT_CORS_ORIGINS.copy()

    @field_validator("worker_queue_names", mode="before")
    @classmethod
    def _split_worker_queue_names(cls, value: str | list[str] | None) -> list[str]:
        """Normalize worker queue names from JSON, CSV, or list inputs."""
        return _split_list(value) or ["default"]

    @field_validator("health_allowlist", mode="before")
    @classmethod
    def _split_health_allowlist(cls, value: str | list[str] | None) -> list[str]:
        """Normalize health allowlist entries from JSON, CSV, or list inputs."""
        return _split_list(value) or []

    @model_validator(mode="after")
    def _validate_embedding_settings(self) -> "Settings":
        """Reject configurations that would make profile math meaningless."""
        if self.embedding_dimension <= 0:
            raise ValueError("EMBEDDING_DIMENSION must be positive")
        if self.embedding_timeout_seconds <= 0:
            raise ValueError("EMBEDDING_TIMEOUT_SECONDS must be positive")
        if self.recommendation_overfetch < 0:
            raise ValueError("RECOMMENDATION_OVERFETCH cannot be negative")
        if not 1 <= self.recommendation_default_limit <= self.recommendation_max_limit:
            raise ValueError("RECOMMENDATION_DEFAULT_LIMIT must be between 1 and RECOMMENDATION_MAX_LIMIT")
        return self

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings to avoid re-parsing environment variables."""
    return Settings()


settings = get_settings()
