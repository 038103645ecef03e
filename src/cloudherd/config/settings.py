"""
Application settings using Pydantic.

Provides environment-based configuration loading with CLOUDHERD_ prefix.
All durations are in seconds.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLOUDHERD_",
        extra="ignore",
    )

    # AWS
    aws_region: str = "us-east-2"
    aws_profile: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None

    # Instance state polling
    state_poll_interval: float = Field(default=1.0, gt=0)
    state_timeout: float = 600.0

    # Stop with escalation
    stop_grace_timeout: float = 60.0
    forced_stop_timeout: float = 540.0

    # Soft reboot confirmation
    reboot_confirm_timeout: float = 5.0

    # Public address assignment
    address_poll_interval: float = Field(default=2.0, gt=0)
    address_timeout: float = 1200.0
    launch_settle_delay: float = 5.0

    # Images
    image_poll_interval: float = Field(default=5.0, gt=0)
    image_timeout: float = 900.0

    # DNS
    dns_ttl: int = 300
    dns_poll_interval: float = Field(default=5.0, gt=0)
    dns_sync_timeout: float = 1200.0

    # Load balancer target health
    target_health_poll_interval: float = Field(default=2.0, gt=0)
    target_health_timeout: float = 3600.0

    # Tag mutation retry policy
    tag_retry_attempts: int = Field(default=10, ge=1)
    tag_retry_delay: float = Field(default=1.0, ge=0)

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
