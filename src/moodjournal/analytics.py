"""
Pure mood statistics over an entry snapshot and a closed date range.

Nothing here mutates its input or raises on empty/degenerate input;
empty data gives sentinel values ("N/A", None, 0, []).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from ._util import WEEKDAY_NAMES, day_key, fmt_day_label
from .models import MOOD_LEVELS, MoodEntry

NO_DATA = "N/A"

WINDOWS = ("7", "30", "90", "all")


@dataclass(frozen=True)
class DailyPoint:
    x: str
    y: int
    date: date


@dataclass(frozen=True)
class WeekdayPoint:
    x: str
    y: float
    count: int
    day_index: int  # Monday=0


@dataclass(frozen=True)
class MoodSummary:
    start: date
    end: date
    entry_count: int
    average: str
    distribution: dict[int, int]
    most_frequent: Optional[int]
    tracked_percentage: int
    daily: list[DailyPoint]
    weekday: list[WeekdayPoint]


def _round_half_up(value: float, places: int) -> Decimal:
    # matches JS Number.toFixed on the exact binary value
    q = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(q, rounding=ROUND_HALF_UP)


# -------------------------
# Lookup helpers
# -------------------------

def find_by_day(entries: Iterable[MoodEntry], day: date | datetime) -> MoodEntry | None:
    key = day_key(day)
    for e in entries:
        if e.day == key:
            return e
    return None


def sorted_by_date(entries: Iterable[MoodEntry], newest_first: bool = True) -> list[MoodEntry]:
    return sorted(entries, key=lambda e: e.day, reverse=newest_first)


# -------------------------
# Ranges
# -------------------------

def filter_by_range(
    entries: Iterable[MoodEntry],
    start: date | datetime,
    end: date | datetime,
) -> list[MoodEntry]:
    """Entries whose day lies in [start, end], both ends included."""
    lo, hi = day_key(start), day_key(end)
    return [e for e in entries if lo <= e.day <= hi]


def days_in_range(start: date | datetime, end: date | datetime) -> list[date]:
    lo, hi = day_key(start), day_key(end)
    n = (hi - lo).days + 1
    return [lo + timedelta(days=i) for i in range(max(0, n))]


def window_range(
    window: str,
    today: date | datetime,
    entries: Iterable[MoodEntry] = (),
) -> tuple[date, date]:
    """
    Closed range for a named window ending today.
    "7"/"30"/"90" reach back that many days before today;
    "all" starts at the earliest entry.
    """
    end = day_key(today)
    if window == "all":
        days = [e.day for e in entries]
        start = min(days) if days else end
        return min(start, end), end
    if window not in WINDOWS:
        raise ValueError(f"unknown window {window!r}; expected one of {WINDOWS}")
    return end - timedelta(days=int(window)), end


# -------------------------
# Aggregates
# -------------------------

def average_mood(entries: Sequence[MoodEntry]) -> str:
    if not entries:
        return NO_DATA
    total = sum(e.mood for e in entries)
    return str(_round_half_up(total / len(entries), 1))


def mood_distribution(entries: Iterable[MoodEntry]) -> dict[int, int]:
    dist = {level: 0 for level in MOOD_LEVELS}
    for e in entries:
        dist[e.mood] += 1
    return dist


def most_frequent_mood(entries: Sequence[MoodEntry]) -> int | None:
    """Most common mood level; ties go to the better (higher) mood."""
    if not entries:
        return None
    dist = mood_distribution(entries)
    return max(MOOD_LEVELS, key=lambda level: (dist[level], level))


def days_tracked_percentage(entries: Sequence[MoodEntry], days: Sequence[date]) -> int:
    if not entries or not days:
        return 0
    return int(_round_half_up(100 * len(entries) / len(days), 0))


# -------------------------
# Series
# -------------------------

def daily_series(entries: Iterable[MoodEntry], days: Sequence[date]) -> list[DailyPoint]:
    """One point per tracked day, ascending. Untracked days are left out."""
    by_day = {e.day: e for e in entries}
    points: list[DailyPoint] = []
    for d in sorted(days):
        e = by_day.get(d)
        if e is None:
            continue
        points.append(DailyPoint(x=fmt_day_label(d), y=e.mood, date=d))
    return points


def weekday_series(entries: Iterable[MoodEntry]) -> list[WeekdayPoint]:
    """Mean mood per weekday, Monday first; weekdays with no entries are omitted."""
    totals = [0] * 7
    counts = [0] * 7
    for e in entries:
        idx = e.day.weekday()
        totals[idx] += e.mood
        counts[idx] += 1

    points: list[WeekdayPoint] = []
    for idx, name in enumerate(WEEKDAY_NAMES):
        if not counts[idx]:
            continue
        avg = float(_round_half_up(totals[idx] / counts[idx], 2))
        points.append(WeekdayPoint(x=name, y=avg, count=counts[idx], day_index=idx))
    return points


def summarize(
    entries: Iterable[MoodEntry],
    start: date | datetime,
    end: date | datetime,
) -> MoodSummary:
    """Every statistic for one range, computed from a single filtered pass."""
    lo, hi = day_key(start), day_key(end)
    in_range = filter_by_range(entries, lo, hi)
    days = days_in_range(lo, hi)
    return MoodSummary(
        start=lo,
        end=hi,
        entry_count=len(in_range),
        average=average_mood(in_range),
        distribution=mood_distribution(in_range),
        most_frequent=most_frequent_mood(in_range),
        tracked_percentage=days_tracked_percentage(in_range, days),
        daily=daily_series(in_range, days),
        weekday=weekday_series(in_range),
    )
