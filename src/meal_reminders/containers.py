"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from meal_reminders.adapters.supabase_reminder_repository import (
    SupabaseReminderRepository,
)
from meal_reminders.adapters.web_push_client import PyWebPushSender
from meal_reminders.config import Settings
from meal_reminders.services.diet_notifications import NewDietNotificationService
from meal_reminders.services.dispatch import PushDispatcher
from meal_reminders.services.reminders import MealReminderService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    reminder_service: MealReminderService
    diet_notification_service: NewDietNotificationService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    repository = SupabaseReminderRepository(supabase_client)
    sender = PyWebPushSender.create(
        public_key=resolved_settings.web_push_public_key,
        private_key=resolved_settings.web_push_private_key,
        contact_email=resolved_settings.web_push_contact_email,
        ttl_seconds=resolved_settings.web_push_ttl_seconds,
    )
    dispatcher = PushDispatcher(
        sender=sender,
        endpoint_store=repository,
        concurrency=resolved_settings.push_concurrency,
    )
    reminder_service = MealReminderService(
        repository=repository,
        dispatcher=dispatcher,
        policy=resolved_settings.reminder_policy(),
    )
    diet_notification_service = NewDietNotificationService(
        repository=repository,
        dispatcher=dispatcher,
        lookback_minutes=resolved_settings.new_diet_lookback_minutes,
    )
    return AppContainer(
        settings=resolved_settings,
        reminder_service=reminder_service,
        diet_notification_service=diet_notification_service,
    )
