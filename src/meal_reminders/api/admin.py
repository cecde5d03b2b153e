"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from meal_reminders.api.reminder_models import DueReminderView, ReminderRunResponse

if TYPE_CHECKING:
    from meal_reminders.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/reminders/due", dependencies=[Depends(require_admin)])
async def due_reminders(request: Request) -> dict[str, object]:
    """List the reminders due now without sending them."""
    container: AppContainer = request.app.state.container
    due = await container.reminder_service.compute_due_reminders()
    return {
        "reminders": [
            DueReminderView.from_due(entry).model_dump(mode="json") for entry in due
        ]
    }


@router.post(
    "/users/{user_id}/meal-reminders", dependencies=[Depends(require_admin)]
)
async def check_user_reminders(user_id: int, request: Request) -> ReminderRunResponse:
    """Send the reminders due now for one account."""
    container: AppContainer = request.app.state.container
    result = await container.reminder_service.check_user_reminders(user_id)
    return ReminderRunResponse.from_result(result)
