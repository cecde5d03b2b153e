"""Domain models for meal reminders."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class MenuItem:
    """One food entry within a meal."""

    quantity: str | None = None
    unit: str | None = None
    food_name: str | None = None


@dataclass(frozen=True)
class Meal:
    """A scheduled meal (ogun) of a diet."""

    id: int
    name: str
    time: str | None
    detail: str | None = None
    items: list[MenuItem] = field(default_factory=list)


@dataclass(frozen=True)
class Diet:
    """A client's diet plan with its meals."""

    id: int
    plan_date: datetime | None
    meals: list[Meal] = field(default_factory=list)


@dataclass(frozen=True)
class PushEndpoint:
    """Web push subscription registered by an account."""

    endpoint: str
    p256dh: str
    auth: str


@dataclass(frozen=True)
class NotificationPreference:
    """Notification preferences of an account."""

    meal_reminders: bool = True
    diet_updates: bool = True


@dataclass(frozen=True)
class Account:
    """User account linked to a client."""

    id: int
    preference: NotificationPreference | None = None
    endpoints: list[PushEndpoint] = field(default_factory=list)


@dataclass(frozen=True)
class ClientSnapshot:
    """Client row with its latest diet and linked account, as read for reminders."""

    id: int
    name: str
    surname: str
    user_id: int | None
    account: Account | None
    latest_diet: Diet | None


@dataclass(frozen=True)
class EligibleClient:
    """Client that should receive reminders for its latest diet."""

    account: Account
    client: ClientSnapshot
    diet: Diet
    meals: list[Meal]


@dataclass(frozen=True)
class MealReminder:
    """A meal reminder that is due now."""

    user_id: int
    client_id: int
    client_name: str
    client_surname: str
    diet_id: int
    diet_date: datetime | None
    meal: Meal

    def describe(self) -> str:
        return f"meal reminder for {self.meal.name}"


@dataclass(frozen=True)
class ReminderMessage:
    """Rendered notification payload."""

    title: str
    body: str
    url: str
    data: dict[str, object]
    tag: str | None = None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON payload delivered to the push service."""
        payload: dict[str, object] = {
            "title": self.title,
            "body": self.body,
            "url": self.url,
            "data": self.data,
        }
        if self.tag is not None:
            payload["tag"] = self.tag
            payload["requireInteraction"] = False
        return payload


@dataclass(frozen=True)
class LocalTime:
    """Time of day in the business timezone."""

    hours: int
    minutes: int
    total_minutes: int


@dataclass(frozen=True)
class NewDietCandidate:
    """Diet created recently, with the client it was written for."""

    diet_id: int
    created_at: datetime | None
    client: ClientSnapshot


@dataclass(frozen=True)
class NewDietNotice:
    """Announcement of a freshly written diet to the client's account."""

    user_id: int
    client_id: int
    client_name: str
    client_surname: str
    diet_id: int

    def describe(self) -> str:
        return f"new diet {self.diet_id}"
