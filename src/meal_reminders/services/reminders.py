"""Meal reminder orchestration."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from meal_reminders.config import ReminderPolicy
from meal_reminders.domain.reminders import EligibleClient, MealReminder
from meal_reminders.services.clock import (
    local_cutoff,
    should_send_reminder,
    to_local_time,
    utcnow,
)
from meal_reminders.services.dispatch import DispatchResult, DueReminder, PushDispatcher
from meal_reminders.services.eligibility import (
    ReminderRepository,
    select_eligible_clients,
)
from meal_reminders.services.formatting import build_reminder_message

_logger = logging.getLogger(__name__)


@dataclass
class MealReminderService:
    """Compute and send the meal reminders that are due now."""

    repository: ReminderRepository
    dispatcher: PushDispatcher
    policy: ReminderPolicy = field(default_factory=ReminderPolicy)
    clock: Callable[[], datetime] = utcnow

    async def compute_due_reminders(
        self, now: datetime | None = None, user_id: int | None = None
    ) -> list[DueReminder]:
        """Return reminders whose firing window contains ``now``."""
        current = now or self.clock()
        cutoff = local_cutoff(
            current, self.policy.lookback_days, self.policy.utc_offset_minutes
        )
        try:
            candidates = await asyncio.to_thread(
                self.repository.list_reminder_candidates, cutoff, user_id
            )
        except Exception:
            _logger.exception("Failed to load meal reminder candidates")
            return []
        eligible = select_eligible_clients(candidates, cutoff)
        if user_id is not None:
            eligible = [entry for entry in eligible if entry.account.id == user_id]
        local_now = to_local_time(current, self.policy.utc_offset_minutes)
        due = []
        for entry in eligible:
            for reminder in self._due_meals(entry, local_now.total_minutes):
                due.append(
                    DueReminder(
                        reminder=reminder,
                        message=build_reminder_message(
                            reminder, self.policy.utc_offset_minutes
                        ),
                        endpoints=list(entry.account.endpoints),
                    )
                )
        return due

    async def send_due_reminders(self, now: datetime | None = None) -> DispatchResult:
        """Send every reminder due now and report the outcome."""
        due = await self.compute_due_reminders(now)
        result = await self.dispatcher.dispatch(due)
        _logger.info(
            "Meal reminder job completed: %s sent, %s failed, %s reminders found",
            result.sent,
            result.failed,
            len(result.reminders),
        )
        return result

    async def check_user_reminders(
        self, user_id: int, now: datetime | None = None
    ) -> DispatchResult:
        """Send the reminders due now for a single account."""
        due = await self.compute_due_reminders(now, user_id=user_id)
        return await self.dispatcher.dispatch(due)

    def _due_meals(
        self, entry: EligibleClient, now_minutes: int
    ) -> list[MealReminder]:
        reminders = []
        for meal in entry.meals:
            if not should_send_reminder(
                meal.time,
                now_minutes,
                lead_minutes=self.policy.lead_minutes,
                window_minutes=self.policy.window_minutes,
            ):
                continue
            reminders.append(
                MealReminder(
                    user_id=entry.account.id,
                    client_id=entry.client.id,
                    client_name=entry.client.name,
                    client_surname=entry.client.surname,
                    diet_id=entry.diet.id,
                    diet_date=entry.diet.plan_date,
                    meal=meal,
                )
            )
        return reminders
