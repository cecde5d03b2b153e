"""Fixed-offset local time and reminder firing windows.

Business hours are evaluated in Turkey time (UTC+3). Everything here is
computed from UTC plus a constant offset so the result never depends on the
host timezone.
"""

from datetime import UTC, date, datetime, timedelta

from meal_reminders.domain.reminders import LocalTime

MINUTES_PER_DAY = 24 * 60
DEFAULT_UTC_OFFSET_MINUTES = 180
DEFAULT_LEAD_MINUTES = 30
DEFAULT_WINDOW_MINUTES = 15
DEFAULT_LOOKBACK_DAYS = 14

_MAX_HOUR = 23
_MAX_MINUTE = 59


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def as_utc(instant: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=UTC)
    return instant.astimezone(UTC)


def to_local_datetime(
    instant: datetime, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> datetime:
    """Shift an instant into naive local wall-clock time."""
    return as_utc(instant).replace(tzinfo=None) + timedelta(minutes=offset_minutes)


def to_local_time(
    instant: datetime, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> LocalTime:
    """Return hours, minutes and minutes since local midnight for an instant."""
    utc = as_utc(instant)
    total = (utc.hour * 60 + utc.minute + offset_minutes) % MINUTES_PER_DAY
    return LocalTime(hours=total // 60, minutes=total % 60, total_minutes=total)


def to_local_date(
    instant: datetime, offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES
) -> date:
    """Return the local calendar date of an instant."""
    return to_local_datetime(instant, offset_minutes).date()


def local_cutoff(
    now: datetime,
    days: int = DEFAULT_LOOKBACK_DAYS,
    offset_minutes: int = DEFAULT_UTC_OFFSET_MINUTES,
) -> datetime:
    """Return local midnight ``days`` days before ``now`` as a UTC instant."""
    local = to_local_datetime(now, offset_minutes) - timedelta(days=days)
    local_midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return (local_midnight - timedelta(minutes=offset_minutes)).replace(tzinfo=UTC)


def parse_time_of_day(value: str | None) -> int | None:
    """Parse ``HH:MM`` (optionally ``HH:MM:SS``) into minutes since midnight.

    Returns None for anything malformed or out of range.
    """
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) not in {2, 3}:
        return None
    hour_raw, minute_raw = parts[0].strip(), parts[1].strip()
    if not (hour_raw.isdigit() and minute_raw.isdigit()):
        return None
    hour, minute = int(hour_raw), int(minute_raw)
    if hour > _MAX_HOUR or minute > _MAX_MINUTE:
        return None
    return hour * 60 + minute


def should_send_reminder(
    meal_time: str | None,
    now_minutes: int,
    lead_minutes: int = DEFAULT_LEAD_MINUTES,
    window_minutes: int = DEFAULT_WINDOW_MINUTES,
) -> bool:
    """Return True when ``now_minutes`` falls in the meal's firing window.

    The window opens ``lead_minutes`` before the meal and stays open for
    ``window_minutes`` (end exclusive), wrapping past midnight when needed.

    Example: meal at 08:00 fires for 07:30 <= now < 07:45.
    """
    meal_minutes = parse_time_of_day(meal_time)
    if meal_minutes is None:
        return False

    start = meal_minutes - lead_minutes
    if start < 0:
        start += MINUTES_PER_DAY
    end = start + window_minutes

    if end > MINUTES_PER_DAY:
        return now_minutes >= start or now_minutes < end - MINUTES_PER_DAY
    return start <= now_minutes < end
