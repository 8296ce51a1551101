"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_namespace: str = "rsmq"
    redis_max_connections: int = 20

    # Queue defaults used when a queue is created without explicit options
    queue_default_vt: int = 30
    queue_default_delay: int = 0
    queue_default_maxsize: int = 65536

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Worker Configuration
    worker_id: str | None = None
    worker_queues: list[str] = Field(default_factory=list)
    worker_poll_interval_seconds: float = 1.0
    worker_batch_size: int = 10
    worker_heartbeat_interval_seconds: float = 10.0
    worker_max_receive_count: int = 5

    # Observability
    otel_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_service_name: str = "rsmq"
    log_level: str = "INFO"
    log_format: str = "json"  # json or console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
