"""Tests for local time conversion and reminder windows."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from meal_reminders.services.clock import (
    MINUTES_PER_DAY,
    local_cutoff,
    parse_time_of_day,
    should_send_reminder,
    to_local_time,
)


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def test_to_local_time_adds_fixed_offset() -> None:
    local = to_local_time(datetime(2026, 10, 19, 4, 35, tzinfo=UTC))

    assert (local.hours, local.minutes) == (7, 35)
    assert local.total_minutes == 455


def test_to_local_time_wraps_past_midnight() -> None:
    local = to_local_time(datetime(2026, 10, 19, 22, 10, tzinfo=UTC))

    assert (local.hours, local.minutes) == (1, 10)
    assert local.total_minutes == 70


def test_to_local_time_ignores_source_timezone() -> None:
    berlin = timezone(timedelta(hours=2))
    instant = datetime(2026, 10, 19, 6, 35, tzinfo=berlin)

    assert to_local_time(instant).total_minutes == _minutes("07:35")


def test_to_local_time_treats_naive_as_utc() -> None:
    assert to_local_time(datetime(2026, 10, 19, 4, 35)).total_minutes == _minutes(
        "07:35"
    )


def test_local_cutoff_is_local_midnight_in_utc() -> None:
    cutoff = local_cutoff(datetime(2026, 10, 19, 7, 0, tzinfo=UTC), days=14)

    assert cutoff == datetime(2026, 10, 4, 21, 0, tzinfo=UTC)


def test_local_cutoff_uses_local_date_after_utc_evening() -> None:
    # 22:30 UTC on the 18th is already the 19th in local time.
    cutoff = local_cutoff(datetime(2026, 10, 18, 22, 30, tzinfo=UTC), days=14)

    assert cutoff == datetime(2026, 10, 4, 21, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("08:00", 480),
        ("00:00", 0),
        ("23:59", 1439),
        (" 7:05 ", 425),
        ("12:30:00", 750),
    ],
)
def test_parse_time_of_day_valid(value: str, expected: int) -> None:
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "",
        None,
        "abc",
        "8",
        "24:00",
        "12:60",
        "-1:30",
        "ab:cd",
        "12:",
        ":30",
        "1:2:3:4",
    ],
)
def test_parse_time_of_day_invalid(value: str | None) -> None:
    assert parse_time_of_day(value) is None


def test_should_send_reminder_scenario_morning() -> None:
    assert should_send_reminder("08:00", _minutes("07:30"))
    assert should_send_reminder("08:00", _minutes("07:35"))
    assert should_send_reminder("08:00", _minutes("07:44"))
    assert not should_send_reminder("08:00", _minutes("07:29"))
    assert not should_send_reminder("08:00", _minutes("07:45"))
    assert not should_send_reminder("08:00", _minutes("07:46"))


def test_should_send_reminder_wraps_midnight() -> None:
    # Meal at 00:20 fires from 23:50 until (excluding) 00:05.
    assert not should_send_reminder("00:20", _minutes("23:49"))
    assert should_send_reminder("00:20", _minutes("23:50"))
    assert should_send_reminder("00:20", _minutes("00:00"))
    assert should_send_reminder("00:20", _minutes("00:04"))
    assert not should_send_reminder("00:20", _minutes("00:05"))


def test_should_send_reminder_window_ending_at_midnight() -> None:
    assert should_send_reminder("00:15", _minutes("23:45"))
    assert should_send_reminder("00:15", _minutes("23:59"))
    assert not should_send_reminder("00:15", _minutes("00:00"))


def test_should_send_reminder_is_deterministic() -> None:
    results = {should_send_reminder("12:00", _minutes("11:40")) for _ in range(5)}

    assert results == {True}


@pytest.mark.parametrize(
    "meal_time", ["00:00", "00:10", "00:20", "00:45", "08:00", "23:59"]
)
def test_window_is_one_contiguous_stretch(meal_time: str) -> None:
    due = [
        minute
        for minute in range(MINUTES_PER_DAY)
        if should_send_reminder(meal_time, minute)
    ]

    assert len(due) == 15
    # Exactly one rising edge when walking the day as a circle.
    edges = sum(
        1
        for minute in range(MINUTES_PER_DAY)
        if should_send_reminder(meal_time, minute)
        and not should_send_reminder(meal_time, (minute - 1) % MINUTES_PER_DAY)
    )
    assert edges == 1


def test_every_valid_time_fires_fifteen_minutes() -> None:
    for meal_minutes in range(0, MINUTES_PER_DAY, 7):
        meal_time = f"{meal_minutes // 60:02d}:{meal_minutes % 60:02d}"
        due = sum(
            1
            for minute in range(MINUTES_PER_DAY)
            if should_send_reminder(meal_time, minute)
        )
        assert due == 15, meal_time


@pytest.mark.parametrize("meal_time", ["", "lunch", "24:00", "10:60", "99:99"])
def test_malformed_times_never_fire(meal_time: str) -> None:
    assert not any(
        should_send_reminder(meal_time, minute) for minute in range(MINUTES_PER_DAY)
    )
