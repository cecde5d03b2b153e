"""Selection of clients eligible for meal reminders."""

from datetime import datetime
from typing import Protocol

from meal_reminders.domain.reminders import (
    Account,
    ClientSnapshot,
    EligibleClient,
    NewDietCandidate,
)
from meal_reminders.services.clock import as_utc


class ReminderRepository(Protocol):
    """Read interface for reminder candidates."""

    def list_reminder_candidates(
        self, cutoff: datetime, user_id: int | None = None
    ) -> list[ClientSnapshot]:
        """Return linked clients whose latest diet is dated on or after cutoff."""


class NewDietRepository(Protocol):
    """Read interface for recently created diets."""

    def list_new_diets(
        self, since: datetime, until: datetime
    ) -> list[NewDietCandidate]:
        """Return diets created between since and until for linked clients."""


def select_eligible_clients(
    candidates: list[ClientSnapshot], cutoff: datetime
) -> list[EligibleClient]:
    """Filter candidates down to clients that should receive reminders.

    A client qualifies when its account exists, its latest diet is dated on or
    after ``cutoff``, meal reminders are not switched off (a missing preference
    counts as enabled) and at least one push endpoint is registered.
    """
    cutoff_utc = as_utc(cutoff)
    eligible = []
    for client in candidates:
        account = client.account
        if client.user_id is None or account is None:
            continue
        preference = account.preference
        if preference is not None and not preference.meal_reminders:
            continue
        if not account.endpoints:
            continue
        diet = client.latest_diet
        if diet is None or diet.plan_date is None:
            continue
        if as_utc(diet.plan_date) < cutoff_utc:
            continue
        eligible.append(
            EligibleClient(
                account=account,
                client=client,
                diet=diet,
                meals=list(diet.meals),
            )
        )
    return eligible


def select_new_diet_recipients(
    candidates: list[NewDietCandidate],
) -> list[tuple[NewDietCandidate, Account]]:
    """Keep new diets whose client account wants diet updates.

    The account must exist, diet updates must not be switched off (a missing
    preference counts as enabled) and at least one push endpoint must be
    registered.
    """
    recipients = []
    for candidate in candidates:
        account = candidate.client.account
        if candidate.client.user_id is None or account is None:
            continue
        preference = account.preference
        if preference is not None and not preference.diet_updates:
            continue
        if not account.endpoints:
            continue
        recipients.append((candidate, account))
    return recipients
