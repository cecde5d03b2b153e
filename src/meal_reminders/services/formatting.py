"""Turkish reminder message rendering."""

from datetime import datetime

from meal_reminders.domain.reminders import (
    MealReminder,
    MenuItem,
    NewDietNotice,
    ReminderMessage,
)
from meal_reminders.services.clock import DEFAULT_UTC_OFFSET_MINUTES, to_local_date

TURKISH_MONTHS = (
    "Ocak",
    "Şubat",
    "Mart",
    "Nisan",
    "Mayıs",
    "Haziran",
    "Temmuz",
    "Ağustos",
    "Eylül",
    "Ekim",
    "Kasım",
    "Aralık",
)
MISSING_DATE_TEXT = "Tarih Belirtilmemiş"
EMPTY_MENU_TEXT = "Menü belirtilmemiş"
TITLE_SUFFIX = "zamanı yaklaşıyor!"
MEAL_FALLBACK_NAME = "Öğün"
CLIENT_FALLBACK_NAME = "Danışanımız"
NEW_DIET_TITLE = "Yeni diyet programınız hazır! 🎉"
NEW_DIET_BODY = "Diyetisyeniniz size yeni bir beslenme programı hazırladı."


def format_turkish_date(
    value: datetime | None, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> str:
    """Format a plan date like "15 Ocak 2024" in local time."""
    if value is None:
        return MISSING_DATE_TEXT
    day = to_local_date(value, offset_minutes)
    return f"{day.day} {TURKISH_MONTHS[day.month - 1]} {day.year}"


def format_menu_item(item: MenuItem) -> str:
    """Join quantity, unit and food name, skipping absent parts."""
    parts = [_clean(item.quantity), _clean(item.unit), _clean(item.food_name)]
    return " ".join(part for part in parts if part)


def format_menu_items(items: list[MenuItem]) -> str:
    """Format menu items as "2 adet Yumurta, 2 dilim Ekmek"."""
    fragments = [format_menu_item(item) for item in items]
    fragments = [fragment for fragment in fragments if fragment]
    if not fragments:
        return EMPTY_MENU_TEXT
    return ", ".join(fragments)


def format_reminder_body(
    reminder: MealReminder, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> str:
    """Render the notification body for a due meal."""
    full_name = " ".join(
        part
        for part in (_clean(reminder.client_name), _clean(reminder.client_surname))
        if part
    )
    body = (
        f"Sayın {full_name or CLIENT_FALLBACK_NAME}, "
        f"{format_turkish_date(reminder.diet_date, offset_minutes)} tarihinde "
        f"yazılan diyetinize ilişkin {_meal_name(reminder)} menünüz: "
        f"{format_menu_items(reminder.meal.items)}"
    )
    detail = _clean(reminder.meal.detail)
    if detail:
        body += f". {detail}"
    return body


def build_reminder_message(
    reminder: MealReminder, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> ReminderMessage:
    """Build the push payload for a due meal."""
    return ReminderMessage(
        title=f"{_meal_name(reminder)} {TITLE_SUFFIX}",
        body=format_reminder_body(reminder, offset_minutes),
        url=f"/client/diets/{reminder.diet_id}",
        data={
            "type": "meal_reminder",
            "dietId": reminder.diet_id,
            "ogunId": reminder.meal.id,
        },
    )


def build_new_diet_message(notice: NewDietNotice) -> ReminderMessage:
    """Build the push payload announcing a new diet."""
    return ReminderMessage(
        title=NEW_DIET_TITLE,
        body=NEW_DIET_BODY,
        url=f"/client/diets/{notice.diet_id}",
        data={"type": "new_diet", "dietId": notice.diet_id},
        tag=f"new-diet-{notice.diet_id}",
    )


def _meal_name(reminder: MealReminder) -> str:
    return _clean(reminder.meal.name) or MEAL_FALLBACK_NAME


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
