"""Pydantic response models for reminder endpoints."""

from datetime import datetime

from pydantic import BaseModel

from meal_reminders.services.dispatch import DispatchResult, DueReminder


class ReminderRunResponse(BaseModel):
    """Outcome of a reminder trigger."""

    success: bool = True
    message: str
    sent: int
    failed: int
    pruned: int
    reminders_count: int

    @classmethod
    def from_result(cls, result: DispatchResult) -> "ReminderRunResponse":
        """Build the response from a dispatch result."""
        return cls(
            message=f"Sent {result.sent} reminders, {result.failed} failed",
            sent=result.sent,
            failed=result.failed,
            pruned=len(result.pruned),
            reminders_count=len(result.reminders),
        )


class DueReminderView(BaseModel):
    """A due reminder as shown to operators."""

    user_id: int
    client_id: int
    diet_id: int
    diet_date: datetime | None
    ogun_id: int
    ogun_name: str
    ogun_time: str | None
    title: str
    body: str
    endpoints: int

    @classmethod
    def from_due(cls, due: DueReminder) -> "DueReminderView":
        """Flatten a due reminder for JSON output."""
        reminder = due.reminder
        return cls(
            user_id=reminder.user_id,
            client_id=reminder.client_id,
            diet_id=reminder.diet_id,
            diet_date=reminder.diet_date,
            ogun_id=reminder.meal.id,
            ogun_name=reminder.meal.name,
            ogun_time=reminder.meal.time,
            title=due.message.title,
            body=due.message.body,
            endpoints=len(due.endpoints),
        )
