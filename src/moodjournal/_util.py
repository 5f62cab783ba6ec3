"""Shared low-level date helpers used by the store, analytics and cli."""

from __future__ import annotations

from datetime import date, datetime

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def now_local() -> datetime:
    return datetime.now().astimezone()


def day_key(value: date | datetime) -> date:
    """
    Calendar day of a date or datetime, ignoring time-of-day.
    Aware datetimes are moved to the local timezone first.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"expected date or datetime, got {type(value).__name__}")


def fmt_day_label(d: date) -> str:
    # "Jan 01"
    return d.strftime("%b %d")


def weekday_name(d: date) -> str:
    return WEEKDAY_NAMES[d.weekday()]
