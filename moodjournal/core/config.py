from functools import lru_cache
from typing import ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Required secrets (validated at startup)
    REQUIRED_SECRETS: ClassVar[list[str]] = [
        "supabase_url",
        "supabase_anon_key",
        "supabase_service_role_key",
    ]

    # Environment (development, staging, production)
    environment: str = "development"

    # App
    app_name: str = "Mood Journal API"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    entries_table: str = "mood_entries"
    profiles_table: str = "profiles"

    # Journal
    journal_timezone: str = "UTC"  # defines calendar-day boundaries
    achievement_notification_seconds: float = 3.0
    session_idle_seconds: float = 3600.0  # idle sessions are dropped from the registry
    questionnaire_answers_path: str = "~/.moodjournal/questionnaire.json"

    # Connectivity probe
    connectivity_probe_interval_seconds: float = 15.0
    connectivity_probe_timeout_seconds: float = 5.0

    # PostHog
    posthog_enabled: bool = False
    posthog_api_key: str = ""
    posthog_host: str = "https://us.i.posthog.com"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @model_validator(mode="after")
    def validate_required_secrets(self) -> "Settings":
        """Validate that all required secrets are set (non-empty)."""
        missing = []
        for secret_name in self.REQUIRED_SECRETS:
            value = getattr(self, secret_name, "")
            if not value or not value.strip():
                missing.append(secret_name.upper())

        if missing:
            raise ValueError(
                f"Missing required secrets: {', '.join(missing)}. "
                "Set these environment variables before starting the application."
            )

        return self

    @model_validator(mode="after")
    def validate_journal_timezone(self) -> "Settings":
        """Reject timezone names the zoneinfo database does not know."""
        try:
            ZoneInfo(self.journal_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown JOURNAL_TIMEZONE: '{self.journal_timezone}'")
        return self

    @model_validator(mode="after")
    def validate_cors_origins_in_production(self) -> "Settings":
        """Validate CORS origins are safe in production."""
        from urllib.parse import urlparse

        if self.environment != "production":
            return self

        unsafe_hostnames = {"localhost", "127.0.0.1", "0.0.0.0"}

        for origin in self.cors_origins:
            if origin == "*":
                raise ValueError(
                    "Wildcard (*) CORS origin is not allowed in production. "
                    "Specify exact origins instead."
                )

            hostname = urlparse(origin).hostname or ""
            if hostname in unsafe_hostnames:
                raise ValueError(
                    f"CORS origin '{origin}' uses hostname '{hostname}' which is not "
                    f"allowed in production. Use HTTPS production URLs instead."
                )

        return self

    @property
    def tz(self) -> ZoneInfo:
        """Timezone that defines calendar-day boundaries for entries."""
        return ZoneInfo(self.journal_timezone)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
