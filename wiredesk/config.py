"""
Application configuration using pydantic-settings.

Loads configuration from environment variables with sensible defaults.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"

    # Sentry error tracking (disabled unless a DSN is set)
    sentry_dsn: Optional[str] = None
    sentry_traces_sample_rate: float = 0.1

    # Resend transactional email
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com/emails"
    wire_from_email: str = "Wire Requests <noreply@onix-cp.com>"
    wire_to_emails: List[str] = ["mk@onix-cp.com"]
    dispatch_timeout_seconds: float = 30.0

    # PDF layout
    pdf_measure_wrapped_text: bool = False

    # HTTP
    cors_origins: List[str] = ["*"]
    submit_rate_limit: str = "60/minute"

    @property
    def email_enabled(self) -> bool:
        """Whether an API key for the email provider is configured."""
        return bool(self.resend_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

# Clear cache on module load
get_settings.cache_clear()
