"""
Worker configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from jobworker.constants import (
    DEFAULT_CONSUME_MIDDLEWARE_METHOD,
    DEFAULT_FAILURE_MIDDLEWARE_METHOD,
    DEFAULT_HANDLER_METHOD,
)


class Settings(BaseSettings):
    """Worker settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Handler resolution
    default_handler_method: str = DEFAULT_HANDLER_METHOD
    consume_middleware_method: str = DEFAULT_CONSUME_MIDDLEWARE_METHOD
    failure_middleware_method: str = DEFAULT_FAILURE_MIDDLEWARE_METHOD

    # Failure handling
    send_again_max_attempts: int = 3

    # Observability
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "jobworker"
    log_level: str = "INFO"
    log_format: str = "json"  # json or console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
