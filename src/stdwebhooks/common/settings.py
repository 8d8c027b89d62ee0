"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STDWEBHOOKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Verification
    webhook_secret: str | None = Field(
        default=None,
        description="Signing secret (whsec_-prefixed base64, or raw when webhook_secret_raw is set)",
    )
    webhook_secret_raw: bool = Field(
        default=False,
        description="Treat webhook_secret as raw key material instead of base64",
    )
    webhook_tolerance_seconds: int = Field(
        default=300,
        ge=0,
        description="Allowed clock skew (seconds) between sender and receiver",
    )
    webhook_paths: tuple[str, ...] = Field(
        default=("/webhooks",),
        description="Paths whose requests must carry a valid webhook signature",
    )

    # Receiver
    receiver_host: str = Field(
        default="0.0.0.0",
        description="Host for the receiver HTTP server",
    )
    receiver_port: int = Field(
        default=8090,
        description="Port for the receiver HTTP server",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of console output",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
