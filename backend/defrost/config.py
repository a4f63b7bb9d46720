"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/defrost"
    auto_create_tables: bool = False

    # Proximity alerts
    alert_radius_meters: float = 8046.72  # 5 miles
    suppress_initial_snapshot: bool = True
    notifications_enabled: bool = True

    # Report feed
    feed_snapshot_limit: int = 100
    feed_poll_interval_seconds: int = 30

    # Location updates
    location_distance_filter_meters: float = 100.0

    # Optional push gateway for alerts
    notification_webhook_url: str | None = None
    notification_webhook_timeout: float = 10.0

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    rate_limit_per_minute: int = 30

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
