"""Web Push (VAPID) client adapter."""

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass

from pywebpush import WebPushException, webpush

from meal_reminders.config import normalize_vapid_subject
from meal_reminders.domain.reminders import PushEndpoint, ReminderMessage
from meal_reminders.services.dispatch import (
    GONE_STATUS_CODES,
    EndpointGoneError,
    PushDeliveryError,
    PushSender,
)

_logger = logging.getLogger(__name__)


@dataclass
class PyWebPushSender(PushSender):
    """Push sender implemented with pywebpush."""

    public_key: str | None
    private_key: str | None
    subject: str
    ttl_seconds: int = 3600
    send_func: Callable[..., object] = webpush

    @classmethod
    def create(
        cls,
        public_key: str | None,
        private_key: str | None,
        contact_email: str | None,
        ttl_seconds: int = 3600,
    ) -> "PyWebPushSender":
        """Create a sender with VAPID credentials from configuration."""
        sender = cls(
            public_key=public_key,
            private_key=private_key,
            subject=normalize_vapid_subject(contact_email),
            ttl_seconds=ttl_seconds,
        )
        if sender.is_configured():
            _logger.info(
                "Initializing VAPID credentials: subject=%s", sender.subject
            )
        else:
            _logger.warning(
                "Web push is not fully configured. Set WEB_PUSH_PUBLIC_KEY and "
                "WEB_PUSH_PRIVATE_KEY environment variables."
            )
        return sender

    def is_configured(self) -> bool:
        """Return True when both VAPID keys are set."""
        return bool(self.public_key and self.private_key)

    async def send(self, endpoint: PushEndpoint, message: ReminderMessage) -> None:
        """Deliver the message to a single push subscription."""
        if not self.is_configured():
            raise PushDeliveryError("Web push is not configured")
        try:
            await asyncio.to_thread(self._send_sync, endpoint, message)
        except WebPushException as exc:
            status_code = _status_code(exc)
            if status_code in GONE_STATUS_CODES or "expired" in str(exc):
                raise EndpointGoneError(str(exc), status_code) from exc
            raise PushDeliveryError(str(exc), status_code) from exc

    def _send_sync(self, endpoint: PushEndpoint, message: ReminderMessage) -> None:
        self.send_func(
            subscription_info={
                "endpoint": endpoint.endpoint,
                "keys": {"p256dh": endpoint.p256dh, "auth": endpoint.auth},
            },
            data=json.dumps(message.to_payload(), ensure_ascii=False),
            vapid_private_key=self.private_key,
            vapid_claims={"sub": self.subject},
            ttl=self.ttl_seconds,
        )


def _status_code(exc: WebPushException) -> int | None:
    response = getattr(exc, "response", None)
    if response is None:
        return None
    return getattr(response, "status_code", None)
