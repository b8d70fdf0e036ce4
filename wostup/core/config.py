"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Server
    port: int = 4000
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "startupapp"

    # Email (SMTP)
    platform_name: str = "Wostup"
    email_from: str = "no-reply@example.com"
    smtp_host: str = ""
    smtp_port: Optional[int] = None
    smtp_user: str = ""
    smtp_pass: str = ""
    mail_suppress_send: bool = False

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Email verification
    verification_token_ttl_hours: int = 24
    resend_rate_limit: int = 3
    resend_rate_window_seconds: int = 60
    rate_limit_backend: str = "memory"  # "memory" or "mongo"

    # Razorpay
    razorpay_key_id: str = ""
    razorpay_key_secret: str = "change-this-secret"
    currency: str = "USD"

    @property
    def smtp_configured(self) -> bool:
        """SMTP needs at least a host to deliver anything."""
        return bool(self.smtp_host)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
