"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Portal settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote API
    api_base_url: str = "https://asa-policy-backend.onrender.com"
    request_timeout_s: float = 5.0

    # Change detection
    poll_interval_seconds: float = 30.0
    notification_ttl_seconds: float = 5.0

    # Session
    token_file: Path = Path("~/.asa_portal/session.json")
    login_path: str = "/admin/login"

    # Forms
    suggestion_email_suffix: str = "@ualberta.ca"
    review_preview_chars: int = 200

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
