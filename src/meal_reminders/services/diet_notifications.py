"""Announcements for freshly written diets."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from meal_reminders.domain.reminders import NewDietNotice
from meal_reminders.services.clock import DEFAULT_WINDOW_MINUTES, utcnow
from meal_reminders.services.dispatch import DispatchResult, DueReminder, PushDispatcher
from meal_reminders.services.eligibility import (
    NewDietRepository,
    select_new_diet_recipients,
)
from meal_reminders.services.formatting import build_new_diet_message

_logger = logging.getLogger(__name__)


@dataclass
class NewDietNotificationService:
    """Notify clients about diets created since the previous trigger.

    Repository errors propagate so the caller can decide how to isolate them.
    """

    repository: NewDietRepository
    dispatcher: PushDispatcher
    lookback_minutes: int = DEFAULT_WINDOW_MINUTES
    clock: Callable[[], datetime] = utcnow

    async def compute_new_diet_notices(
        self, now: datetime | None = None
    ) -> list[DueReminder]:
        """Return notices for diets created within the lookback window."""
        until = now or self.clock()
        since = until - timedelta(minutes=self.lookback_minutes)
        candidates = await asyncio.to_thread(
            self.repository.list_new_diets, since, until
        )
        notices = []
        for candidate, account in select_new_diet_recipients(candidates):
            notice = NewDietNotice(
                user_id=account.id,
                client_id=candidate.client.id,
                client_name=candidate.client.name,
                client_surname=candidate.client.surname,
                diet_id=candidate.diet_id,
            )
            notices.append(
                DueReminder(
                    reminder=notice,
                    message=build_new_diet_message(notice),
                    endpoints=list(account.endpoints),
                )
            )
        _logger.info("Found %s new diets eligible for notification", len(notices))
        return notices

    async def send_new_diet_notifications(
        self, now: datetime | None = None
    ) -> DispatchResult:
        """Send a notice for every new diet and report the outcome."""
        notices = await self.compute_new_diet_notices(now)
        result = await self.dispatcher.dispatch(notices)
        _logger.info(
            "New diet notification job completed: %s sent, %s failed",
            result.sent,
            result.failed,
        )
        return result
