"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.
Services and clients never read settings directly; the dependency
container turns these values into explicit config objects.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Application
    APP_NAME: str = "Ranking Feed API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Ranking
    DECAY_FACTOR: float = 0.01  # Per hour, exp(-k * hours)

    # Feed composition
    FEED_RANKING_CLUSTER: Optional[str] = None  # None = global ranking
    FEED_RANKING_LIMIT: int = 10
    FEED_MAX_ITEMS: int = 50

    # Collaborator services
    SCORE_SERVICE_URL: str = "http://score-service:3004"
    USER_SERVICE_URL: str = "http://user-service:3001"
    CONTENT_SERVICE_URL: str = "http://content-service:3002"
    RANKING_SERVICE_URL: Optional[str] = None  # Unset = in-process ranking

    # Timeouts (milliseconds) - one budget per dependency
    SCORE_SERVICE_TIMEOUT_MS: int = 5000
    USER_SERVICE_TIMEOUT_MS: int = 2000
    CONTENT_SERVICE_TIMEOUT_MS: int = 2000
    RANKING_SERVICE_TIMEOUT_MS: int = 2000

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
