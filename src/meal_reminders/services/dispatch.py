"""Push notification fan-out for due reminders."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from meal_reminders.domain.reminders import (
    MealReminder,
    NewDietNotice,
    PushEndpoint,
    ReminderMessage,
)

_logger = logging.getLogger(__name__)

GONE_STATUS_CODES = frozenset({404, 410})


class PushDeliveryError(Exception):
    """Raised when the push service rejects a notification."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EndpointGoneError(PushDeliveryError):
    """Raised when the push service reports the endpoint no longer exists."""


class PushSender(Protocol):
    """Interface for delivering a notification to one endpoint."""

    def is_configured(self) -> bool:
        """Return True when credentials for the push service are present."""

    async def send(self, endpoint: PushEndpoint, message: ReminderMessage) -> None:
        """Deliver a message, raising PushDeliveryError on failure."""


class EndpointStore(Protocol):
    """Interface for pruning push endpoints."""

    def delete_endpoint(self, endpoint: str) -> None:
        """Delete a push subscription by its endpoint."""


@dataclass(frozen=True)
class DueReminder:
    """A rendered notice together with the endpoints to deliver it to."""

    reminder: MealReminder | NewDietNotice
    message: ReminderMessage
    endpoints: list[PushEndpoint]


@dataclass
class DispatchResult:
    """Aggregate outcome of a dispatch run."""

    sent: int = 0
    failed: int = 0
    pruned: list[str] = field(default_factory=list)
    reminders: list[MealReminder | NewDietNotice] = field(default_factory=list)


@dataclass
class PushDispatcher:
    """Send notices to every endpoint without failing fast.

    Gone endpoints count as failed sends and are deleted through the
    endpoint store once each.
    """

    sender: PushSender
    endpoint_store: EndpointStore
    concurrency: int = 10

    async def dispatch(self, deliveries: list[DueReminder]) -> DispatchResult:
        """Deliver every notice to every endpoint of its account."""
        reminders = [delivery.reminder for delivery in deliveries]
        if not self.sender.is_configured():
            _logger.warning(
                "Web push is not configured, skipping %s notifications",
                len(reminders),
            )
            return DispatchResult(sent=0, failed=len(reminders), reminders=reminders)

        semaphore = asyncio.Semaphore(max(self.concurrency, 1))
        attempts = [
            self._send_one(semaphore, delivery, endpoint)
            for delivery in deliveries
            for endpoint in delivery.endpoints
        ]
        outcomes = await asyncio.gather(*attempts)

        result = DispatchResult(reminders=reminders)
        gone: list[str] = []
        for delivered, gone_endpoint in outcomes:
            if delivered:
                result.sent += 1
                continue
            result.failed += 1
            if gone_endpoint is not None and gone_endpoint not in gone:
                gone.append(gone_endpoint)

        for endpoint in gone:
            if await self._prune(endpoint):
                result.pruned.append(endpoint)
        return result

    async def _send_one(
        self,
        semaphore: asyncio.Semaphore,
        delivery: DueReminder,
        endpoint: PushEndpoint,
    ) -> tuple[bool, str | None]:
        reminder = delivery.reminder
        async with semaphore:
            try:
                await self.sender.send(endpoint, delivery.message)
            except EndpointGoneError as exc:
                _logger.warning(
                    "Push endpoint gone for user %s (status=%s)",
                    reminder.user_id,
                    exc.status_code,
                )
                return False, endpoint.endpoint
            except Exception:
                _logger.exception(
                    "Failed to send %s to user %s",
                    reminder.describe(),
                    reminder.user_id,
                )
                return False, None
        _logger.info("Sent %s to user %s", reminder.describe(), reminder.user_id)
        return True, None

    async def _prune(self, endpoint: str) -> bool:
        try:
            await asyncio.to_thread(self.endpoint_store.delete_endpoint, endpoint)
        except Exception:
            _logger.exception("Failed to delete invalid push subscription")
            return False
        _logger.info("Deleted invalid push subscription: %s", endpoint)
        return True
