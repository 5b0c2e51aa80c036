"""
Configuration management using pydantic-settings.

Loads settings from environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

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

    # Storage
    database_path: Path = Field(
        default=Path("data") / "claims.db",
        description="SQLite database file for claims, directory data and notifications",
    )
    debug: bool = Field(default=False, description="Enable debug logging")

    # Email Configuration
    email_enabled: bool = Field(
        default=False,
        description="Send real emails over SMTP. When off, emails are only logged.",
    )
    email_sender: str = Field(
        default="claims@insurai.local",
        description="From address for outgoing claim emails",
    )
    smtp_host: str = Field(default="localhost", description="SMTP server host")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_username: Optional[str] = Field(default=None, description="SMTP login user")
    smtp_password: Optional[str] = Field(default=None, description="SMTP login password")
    smtp_use_tls: bool = Field(default=True, description="Issue STARTTLS before login")
    smtp_timeout: float = Field(default=10.0, description="SMTP socket timeout (seconds)")

    # Notification delivery
    notification_workers: int = Field(
        default=0,
        ge=0,
        description="Background notification threads. 0 sends inline on the request path.",
    )
    notification_queue_size: int = Field(
        default=50,
        ge=0,
        description="Notifications allowed to wait for a worker before new ones are dropped",
    )

    # Fraud heuristics
    fraud_coverage_ratio: float = Field(
        default=0.9,
        gt=0.0,
        le=1.0,
        description="Flag claims at or above this share of the policy coverage",
    )
    fraud_duplicate_window_days: int = Field(
        default=30,
        ge=0,
        description="Same policy + same amount within this many days counts as a duplicate",
    )
    fraud_frequency_window_days: int = Field(
        default=30,
        ge=0,
        description="Look-back window for the claim frequency rule",
    )
    fraud_frequency_limit: int = Field(
        default=3,
        ge=1,
        description="Prior claims inside the frequency window that trigger a flag",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to avoid re-reading environment on every call.
    """
    return Settings()


# Convenience access
settings = get_settings()
