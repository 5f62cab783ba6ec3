from __future__ import annotations


class MoodJournalError(Exception):
    """Base class for mood journal errors."""


class ValidationError(MoodJournalError, ValueError):
    """A mood entry field is out of range or malformed."""


class PersistenceError(MoodJournalError):
    """The key-value store could not be read or written."""
