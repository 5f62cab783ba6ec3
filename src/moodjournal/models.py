"""Mood entry value type and its persisted record form."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ._util import day_key
from .errors import ValidationError
from .timeparse import parse_day

MOOD_LEVELS = (1, 2, 3, 4, 5)

MOOD_LABELS = {
    1: "Very Bad",
    2: "Bad",
    3: "Neutral",
    4: "Good",
    5: "Very Good",
}

MAX_NOTES_LENGTH = 500


def validate_mood(mood: Any) -> int:
    # bool is an int subclass; True is not a mood
    if isinstance(mood, bool) or not isinstance(mood, int):
        raise ValidationError(f"mood must be an integer 1-5, got {mood!r}")
    if mood not in MOOD_LEVELS:
        raise ValidationError(f"mood must be between 1 and 5, got {mood}")
    return mood


def validate_notes(notes: Any) -> str:
    if notes is None:
        return ""
    if not isinstance(notes, str):
        raise ValidationError(f"notes must be text, got {type(notes).__name__}")
    if len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(
            f"notes exceed {MAX_NOTES_LENGTH} characters ({len(notes)})"
        )
    return notes


@dataclass(frozen=True)
class MoodEntry:
    """One mood rating for one calendar day."""

    date: date
    mood: int
    notes: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.date, (date, datetime)):
            raise ValidationError(f"date must be a date, got {self.date!r}")
        object.__setattr__(self, "date", day_key(self.date))
        object.__setattr__(self, "mood", validate_mood(self.mood))
        object.__setattr__(self, "notes", validate_notes(self.notes))

    @property
    def day(self) -> date:
        return self.date

    @property
    def label(self) -> str:
        return MOOD_LABELS[self.mood]

    @property
    def has_notes(self) -> bool:
        return bool(self.notes.strip())

    def to_record(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "mood": self.mood,
            "notes": self.notes,
        }

    @classmethod
    def from_record(cls, record: Any, truncate_notes: bool = False) -> "MoodEntry":
        """
        Build an entry from a persisted record.

        Dates may be ISO strings or the locale strings older saves used;
        relative forms like "yesterday" are refused.
        Moods stored as integral floats or digit strings are accepted.
        Raises ValidationError for anything unusable.
        """
        if not isinstance(record, dict):
            raise ValidationError(f"record must be an object, got {type(record).__name__}")

        raw_date = record.get("date")
        if not isinstance(raw_date, str) or not raw_date.strip():
            raise ValidationError(f"record has no date: {record!r}")
        try:
            d = parse_day(raw_date, relative=False)
        except (ValueError, OverflowError) as e:
            raise ValidationError(str(e)) from e

        mood = _coerce_mood(record.get("mood"))

        notes = record.get("notes")
        if notes is None:
            notes = ""
        if not isinstance(notes, str):
            raise ValidationError(f"record notes must be text: {record!r}")
        if truncate_notes:
            notes = notes[:MAX_NOTES_LENGTH]

        return cls(date=d, mood=mood, notes=notes)


def _coerce_mood(value: Any) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        # isdigit() also accepts characters like "²" that int() refuses
        try:
            value = int(value.strip())
        except ValueError as e:
            raise ValidationError(f"mood must be an integer 1-5, got {value!r}") from e
    return validate_mood(value)
