"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_reminders.services.clock import (
    DEFAULT_LEAD_MINUTES,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_UTC_OFFSET_MINUTES,
    DEFAULT_WINDOW_MINUTES,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_DEFAULT_VAPID_SUBJECT = "mailto:admin@example.com"


@dataclass(frozen=True)
class ReminderPolicy:
    """Reminder timing rules resolved once per invocation."""

    lead_minutes: int = DEFAULT_LEAD_MINUTES
    window_minutes: int = DEFAULT_WINDOW_MINUTES
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    cron_secret: str | None = None
    web_push_public_key: str | None = None
    web_push_private_key: str | None = None
    web_push_contact_email: str = _DEFAULT_VAPID_SUBJECT
    web_push_ttl_seconds: int = 3600
    reminder_lead_minutes: int = DEFAULT_LEAD_MINUTES
    reminder_window_minutes: int = DEFAULT_WINDOW_MINUTES
    reminder_lookback_days: int = DEFAULT_LOOKBACK_DAYS
    local_utc_offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
    new_diet_lookback_minutes: int = DEFAULT_WINDOW_MINUTES
    push_concurrency: int = 10
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def reminder_policy(self) -> ReminderPolicy:
        """Return the reminder timing rules configured for this deployment."""
        return ReminderPolicy(
            lead_minutes=self.reminder_lead_minutes,
            window_minutes=self.reminder_window_minutes,
            lookback_days=self.reminder_lookback_days,
            utc_offset_minutes=self.local_utc_offset_minutes,
        )


def normalize_vapid_subject(raw: str | None) -> str:
    """Return a VAPID subject with a ``mailto:`` or ``https://`` scheme."""
    if raw is None:
        return _DEFAULT_VAPID_SUBJECT
    cleaned = raw.strip()
    if not cleaned:
        return _DEFAULT_VAPID_SUBJECT
    if cleaned.startswith(("mailto:", "https://")):
        return cleaned
    return f"mailto:{cleaned}"
