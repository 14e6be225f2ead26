"""
Application configuration management using Pydantic Settings.
Supports environment variables and .env files for configuration.
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PostgresDsn, RedisDsn, model_validator
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Settings
    app_name: str = "Bulletin Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    test_env: str = "unit"

    # API Settings
    messages_path: str = "/messages"
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database Settings
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "bulletin_user"
    postgres_password: str = "bulletin_password"
    postgres_db: str = "bulletin"
    database_url: Optional[str] = Field(
        default=None,
        description="Full SQLAlchemy URL; assembled from the postgres_* settings when unset"
    )

    # Database Pool Settings
    db_pool_size: int = 20
    db_max_overflow: int = 40
    db_pool_timeout: int = 30

    # Redis Settings
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0
    redis_url: Optional[str] = None
    redis_pool_size: int = 10
    redis_pool_timeout: int = 5

    # Caching
    cache_enabled: bool = True
    message_cache_ttl: int = Field(default=300, description="Seconds a message view stays cached")

    # Rate Limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_period: int = 60

    # Paging / Streaming
    default_page: int = 0
    default_page_size: int = 10
    stream_media_type: str = "text/event-stream"

    # Observability
    metrics_enabled: bool = True
    tracing_enabled: bool = True
    otlp_endpoint: str = "otel-collector:4317"
    log_level: str = "INFO"
    log_format: str = "json"

    # CORS Settings
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @model_validator(mode="after")
    def assemble_connections(self) -> "Settings":
        if not self.database_url:
            self.database_url = str(PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.postgres_user,
                password=self.postgres_password,
                host=self.postgres_host,
                port=self.postgres_port,
                path=self.postgres_db,
            ))

        if not self.redis_url:
            self.redis_url = str(RedisDsn.build(
                scheme="redis",
                password=self.redis_password or None,
                host=self.redis_host,
                port=self.redis_port,
                path=str(self.redis_db),
            ))
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Export settings instance
settings = get_settings()
