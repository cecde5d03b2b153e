"""ASGI entrypoint for the meal reminder API."""

from meal_reminders.api.app import create_app
from meal_reminders.containers import build_container

app = create_app(build_container())
