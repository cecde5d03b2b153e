"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Header, HTTPException, Request, status

from meal_reminders.api.admin import router as admin_router
from meal_reminders.api.reminder_models import ReminderRunResponse
from meal_reminders.app_logging import configure_logging
from meal_reminders.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.api_route("/cron/meal-reminders", methods=["GET", "POST"])
    async def meal_reminders_cron(
        request: Request,
        secret: str | None = None,
        authorization: str | None = Header(default=None),
    ) -> ReminderRunResponse:
        """Send the meal reminders due now, then announce new diets."""
        state_container: AppContainer = request.app.state.container
        if not _is_cron_authorized(
            state_container.settings.cron_secret, authorization, secret
        ):
            logger.warning("Unauthorized meal reminder cron job attempt")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)

        logger.info("Starting meal reminder job")
        result = await state_container.reminder_service.send_due_reminders()

        logger.info("Starting new diet notification job")
        service = state_container.diet_notification_service
        try:
            await service.send_new_diet_notifications()
        except Exception:
            logger.exception("New diet notification job failed")
        return ReminderRunResponse.from_result(result)

    return app


def _is_cron_authorized(
    cron_secret: str | None, authorization: str | None, secret: str | None
) -> bool:
    """Return true when no secret is configured or the caller presents it."""
    if not cron_secret:
        return True
    return authorization == f"Bearer {cron_secret}" or secret == cron_secret
