"""Tests for the MoodEntry value type."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from moodjournal.errors import ValidationError
from moodjournal.models import MAX_NOTES_LENGTH, MOOD_LABELS, MoodEntry

# ---- construction ----


def test_entry_defaults_to_empty_notes():
    e = MoodEntry(date=date(2024, 1, 1), mood=3)
    assert e.notes == ""
    assert not e.has_notes


def test_none_notes_equal_empty_notes():
    assert MoodEntry(date(2024, 1, 1), 3, None) == MoodEntry(date(2024, 1, 1), 3, "")


def test_datetime_is_normalized_to_day():
    e = MoodEntry(date=datetime(2024, 1, 1, 21, 30), mood=4)
    assert e.date == date(2024, 1, 1)
    assert type(e.date) is date


def test_same_day_different_times_are_equal():
    a = MoodEntry(datetime(2024, 1, 1, 8, 0), 4)
    b = MoodEntry(datetime(2024, 1, 1, 22, 0), 4)
    assert a == b


@pytest.mark.parametrize("mood", [0, 6, -1, True, 3.0, "3", None])
def test_invalid_mood_rejected(mood):
    with pytest.raises(ValidationError):
        MoodEntry(date(2024, 1, 1), mood)


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        MoodEntry(date(2024, 1, 1), 9)


def test_notes_at_limit_accepted():
    e = MoodEntry(date(2024, 1, 1), 3, "x" * MAX_NOTES_LENGTH)
    assert len(e.notes) == 500


def test_notes_over_limit_rejected():
    with pytest.raises(ValidationError):
        MoodEntry(date(2024, 1, 1), 3, "x" * (MAX_NOTES_LENGTH + 1))


def test_non_text_notes_rejected():
    with pytest.raises(ValidationError):
        MoodEntry(date(2024, 1, 1), 3, 42)


def test_bad_date_rejected():
    with pytest.raises(ValidationError):
        MoodEntry("2024-01-01", 3)


def test_entry_is_immutable():
    e = MoodEntry(date(2024, 1, 1), 3)
    with pytest.raises(AttributeError):
        e.mood = 5


def test_label():
    assert MoodEntry(date(2024, 1, 1), 5).label == "Very Good"
    assert MOOD_LABELS[1] == "Very Bad"


# ---- records ----


def test_to_record():
    e = MoodEntry(date(2024, 1, 2), 5, "great")
    assert e.to_record() == {"date": "2024-01-02", "mood": 5, "notes": "great"}


def test_from_record_iso_date():
    e = MoodEntry.from_record({"date": "2024-01-02", "mood": 5, "notes": "great"})
    assert e == MoodEntry(date(2024, 1, 2), 5, "great")


def test_from_record_naive_timestamp():
    e = MoodEntry.from_record({"date": "2024-01-02T18:45:00", "mood": 2})
    assert e.date == date(2024, 1, 2)
    assert e.notes == ""


def test_from_record_locale_date():
    e = MoodEntry.from_record({"date": "Tue Jan 02 2024", "mood": 4, "notes": ""})
    assert e.date == date(2024, 1, 2)


def test_from_record_integral_float_mood():
    e = MoodEntry.from_record({"date": "2024-01-02", "mood": 4.0})
    assert e.mood == 4


def test_from_record_null_notes():
    e = MoodEntry.from_record({"date": "2024-01-02", "mood": 4, "notes": None})
    assert e.notes == ""


@pytest.mark.parametrize(
    "record",
    [
        {"mood": 3},
        {"date": "", "mood": 3},
        {"date": "someday", "mood": 3},
        {"date": 20240101, "mood": 3},
        {"date": "2024-01-02", "mood": 7},
        {"date": "2024-01-02", "mood": 2.5},
        {"date": "2024-01-02"},
        {"date": "2024-01-02", "mood": 3, "notes": ["x"]},
        {"date": "2024-01-02", "mood": "²"},
        {"date": "yesterday", "mood": 3},
        {"date": "2 days ago", "mood": 3},
        {"date": "99999999 days ago", "mood": 3},
        {"date": "0001-01-01T00:00:00+14:00", "mood": 3},
        "2024-01-02",
        None,
    ],
)
def test_from_record_malformed(record):
    with pytest.raises(ValidationError):
        MoodEntry.from_record(record)


def test_from_record_long_notes_rejected_by_default():
    with pytest.raises(ValidationError):
        MoodEntry.from_record({"date": "2024-01-02", "mood": 3, "notes": "y" * 600})


def test_from_record_long_notes_truncated_on_request():
    e = MoodEntry.from_record(
        {"date": "2024-01-02", "mood": 3, "notes": "y" * 600}, truncate_notes=True
    )
    assert e.notes == "y" * MAX_NOTES_LENGTH


def test_from_record_digit_string_mood():
    e = MoodEntry.from_record({"date": "2024-01-02", "mood": " 4 "})
    assert e.mood == 4
