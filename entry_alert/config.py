"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MLB Stats API (AFL = sportId 11)
    MLB_API_BASE_URL: str = "https://statsapi.mlb.com/api"
    MLB_SPORT_ID: int = 11
    MLB_SEASON: int = 2025
    DEFAULT_TEAM_NAME: str = "Glendale Desert Dogs"

    # Provider HTTP behaviour
    PROVIDER_TIMEOUT_SECONDS: float = 10.0
    PROVIDER_MAX_RETRIES: int = 2
    PROVIDER_RETRY_DELAY_SECONDS: float = 1.0

    # ═══════════════════════════════════════════════════════════════
    # Adaptive watcher
    # ═══════════════════════════════════════════════════════════════
    WATCH_POLL_FAST_SECONDS: float = 5.0    # game in progress
    WATCH_POLL_SLOW_SECONDS: float = 30.0   # scheduled/delayed/unknown, and after errors
    WATCH_POLL_FINAL_SECONDS: float = 60.0  # game over
    WATCH_FETCH_TIMEOUT_SECONDS: float = 20.0
    WATCH_NOTIFY_TIMEOUT_SECONDS: float = 20.0
    WATCH_DEFAULT_COOLDOWN_SECONDS: int = 300
    WATCH_DEFAULT_STOP_AFTER_ALERT: bool = True

    # Identifier resolver: days searched either side of the target date
    RESOLVER_SEARCH_DAYS: int = 3

    # Email Alerting (SMTP)
    SMTP_ENABLED: bool = False
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""  # App password for Gmail
    SMTP_FROM_EMAIL: str = ""

    # SMS Alerting (Twilio REST)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_FROM: str = ""
    TWILIO_API_BASE_URL: str = "https://api.twilio.com/2010-04-01"

    # API surface
    RATE_LIMIT_PER_MINUTE: str = "60/minute"
    METRICS_BEARER_TOKEN: str = ""  # Bearer token for /metrics (empty = open)
    CORS_ALLOW_ORIGINS: str = "*"
    STATIC_BUILD_DIR: str = "client/build"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
