"""
Configuration management using Pydantic Settings.
Loads environment variables from .env file.
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ops_notifier.utils.sanitize import is_valid_email, is_valid_url


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Ops Notifier"
    app_version: str = "0.1.0"
    debug: bool = False
    port: int = 3001

    # NAVER WORKS credentials
    # Not validated here: a missing value surfaces as AuthError on the first token request
    naver_works_client_id: Optional[str] = None
    naver_works_client_secret: Optional[str] = None
    naver_works_service_account: Optional[str] = None
    naver_works_private_key: Optional[str] = None
    naver_works_bot_id: Optional[str] = None
    naver_works_scope: str = "bot user.read"

    # NAVER WORKS endpoints
    naver_works_auth_url: str = "https://auth.worksmobile.com/oauth2/v2.0/token"
    naver_works_api_url: str = "https://www.worksapis.com/v1.0"

    # Token lifetimes (seconds)
    token_expiry_buffer_seconds: int = 300
    assertion_lifetime_seconds: int = 3600

    # Notification targets
    notification_channel_id: Optional[str] = None
    notification_users: str = ""  # Comma-separated emails

    # Portal URL (for deep links in message buttons)
    app_base_url: str = "https://howpapaopration.netlify.app"

    # Supabase Configuration (optional, resolves user ids to display names)
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    # Inbound rate limit (fixed window, per client address)
    webhook_rate_limit: str = "60/minute"

    # CORS Settings (for Frontend)
    cors_origins: str = "http://localhost:5173"  # Vite default port

    @field_validator("app_base_url")
    @classmethod
    def validate_app_base_url(cls, value: str) -> str:
        if not is_valid_url(value):
            raise ValueError(f"APP_BASE_URL is not a valid URL: {value!r}")
        return value.rstrip("/")

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def notification_user_list(self) -> list[str]:
        """Parse comma-separated recipient emails, dropping malformed entries."""
        emails = []
        for raw in self.notification_users.split(","):
            email = raw.strip()
            if not email:
                continue
            if not is_valid_email(email):
                logger.warning(f"⚠️ Ignoring invalid notification recipient: {email!r}")
                continue
            emails.append(email)
        return emails

    @property
    def database_enabled(self) -> bool:
        """Check if Supabase is configured."""
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance.
    Call this function to get application settings.
    """
    return Settings()


# Global settings instance
settings = get_settings()
