"""Day-keyed mood entry repository with persistence and single-level undo."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Iterable, Literal, Optional

import structlog

from ._util import day_key, now_local
from .errors import PersistenceError, ValidationError
from .models import MAX_NOTES_LENGTH, MoodEntry
from .storage import KeyValueStore

logger = structlog.get_logger()

DEFAULT_KEY = "moodEntries"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of add_or_update; carries what is needed to undo it."""

    kind: Literal["created", "updated"]
    entry: MoodEntry
    previous: Optional[MoodEntry] = None
    persisted: bool = True

    @property
    def created(self) -> bool:
        return self.kind == "created"


class EntryStore:
    """
    Owns the mood entry collection. At most one entry per calendar day.

    Every mutation rewrites the whole collection to the key-value store.
    A failed write is logged; the in-memory collection stays authoritative.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = DEFAULT_KEY,
        clock: Callable[[], datetime] = now_local,
    ):
        self.kv = kv
        self.key = key
        self.clock = clock
        self._entries: list[MoodEntry] = []
        # outcome of the most recent save()
        self.persisted = True

    # -------------------------
    # Snapshot
    # -------------------------

    @property
    def entries(self) -> tuple[MoodEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def today(self) -> date:
        return day_key(self.clock())

    def find(self, day: date | datetime) -> MoodEntry | None:
        idx = self._index_of(day_key(day))
        return self._entries[idx] if idx is not None else None

    def today_entry(self) -> MoodEntry | None:
        return self.find(self.today())

    def _index_of(self, day: date) -> int | None:
        for i, e in enumerate(self._entries):
            if e.day == day:
                return i
        return None

    # -------------------------
    # Persistence
    # -------------------------

    def load(self) -> tuple[MoodEntry, ...]:
        """
        Rehydrate from the key-value store. Never raises:
        unreadable or malformed data yields an empty collection,
        and bad records are skipped one at a time.
        """
        self._entries = []

        try:
            raw = self.kv.get(self.key)
        except PersistenceError as e:
            logger.warning("mood_entries_load_failed", key=self.key, error=str(e))
            return self.entries
        except Exception:
            logger.exception("mood_entries_load_failed", key=self.key)
            return self.entries

        if raw is not None and not isinstance(raw, str):
            logger.warning(
                "mood_entries_corrupt",
                key=self.key,
                error=f"expected text, got {type(raw).__name__}",
            )
            return self.entries

        if raw is None or not raw.strip():
            return self.entries

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("mood_entries_corrupt", key=self.key, error=str(e))
            return self.entries

        if not isinstance(records, list):
            logger.warning(
                "mood_entries_corrupt",
                key=self.key,
                error=f"expected a list, got {type(records).__name__}",
            )
            return self.entries

        for i, record in enumerate(records):
            try:
                entry = MoodEntry.from_record(record, truncate_notes=True)
            except ValidationError as e:
                logger.warning("mood_record_skipped", index=i, error=str(e))
                continue

            if isinstance(record.get("notes"), str) and len(record["notes"]) > MAX_NOTES_LENGTH:
                logger.warning("mood_record_notes_truncated", index=i, day=entry.day.isoformat())

            idx = self._index_of(entry.day)
            if idx is not None:
                # later record wins
                logger.warning("mood_record_duplicate_day", index=i, day=entry.day.isoformat())
                self._entries[idx] = entry
            else:
                self._entries.append(entry)

        logger.debug("mood_entries_loaded", key=self.key, count=len(self._entries))
        return self.entries

    def save(self) -> bool:
        """Write the collection out. Never raises; returns whether it stuck."""
        payload = json.dumps([e.to_record() for e in self._entries], ensure_ascii=False)
        try:
            self.kv.set(self.key, payload)
        except PersistenceError as e:
            logger.error("mood_entries_save_failed", key=self.key, error=str(e))
            self.persisted = False
        except Exception:
            logger.exception("mood_entries_save_failed", key=self.key)
            self.persisted = False
        else:
            self.persisted = True
        return self.persisted

    # -------------------------
    # Mutations
    # -------------------------

    def add_or_update(self, entry: MoodEntry) -> MutationResult:
        """Create the entry for its day, or replace the one already there."""
        if not isinstance(entry, MoodEntry):
            raise ValidationError(f"expected MoodEntry, got {type(entry).__name__}")

        idx = self._index_of(entry.day)
        if idx is not None:
            previous = self._entries[idx]
            self._entries[idx] = entry
            kind = "updated"
        else:
            self._entries.append(entry)
            previous = None
            kind = "created"

        result = MutationResult(kind=kind, entry=entry, previous=previous, persisted=self.save())
        logger.info("mood_entry_saved", day=entry.day.isoformat(), mood=entry.mood, kind=result.kind)
        return result

    def delete(self, day: date | datetime) -> MoodEntry | None:
        """Remove the entry for a day. Returns it for undo, or None if absent."""
        idx = self._index_of(day_key(day))
        if idx is None:
            return None

        removed = self._entries.pop(idx)
        self.save()
        logger.info("mood_entry_deleted", day=removed.day.isoformat())
        return removed

    def restore(self, entry: MoodEntry) -> bool:
        """
        Put back a deleted or overwritten entry, but only into an empty day.
        A newer entry for that day is never clobbered.
        """
        if self._index_of(entry.day) is not None:
            logger.info("mood_entry_restore_skipped", day=entry.day.isoformat())
            return False

        self._entries.append(entry)
        self.save()
        logger.info("mood_entry_restored", day=entry.day.isoformat())
        return True

    def revert(self, result: MutationResult) -> bool:
        """
        Undo an add_or_update, provided the day still holds what it wrote.
        Returns False if the entry was changed or removed since.
        """
        idx = self._index_of(result.entry.day)
        if idx is None or self._entries[idx] != result.entry:
            logger.info("mood_entry_revert_skipped", day=result.entry.day.isoformat())
            return False

        if result.previous is None:
            self._entries.pop(idx)
        else:
            self._entries[idx] = result.previous

        self.save()
        logger.info("mood_entry_reverted", day=result.entry.day.isoformat(), kind=result.kind)
        return True

    def replace_all(self, entries: Iterable[MoodEntry]) -> None:
        """Swap in a whole new collection. Same-day duplicates: last one wins."""
        fresh: list[MoodEntry] = []
        seen: dict[date, int] = {}
        for e in entries:
            if not isinstance(e, MoodEntry):
                raise ValidationError(f"expected MoodEntry, got {type(e).__name__}")
            if e.day in seen:
                fresh[seen[e.day]] = e
            else:
                seen[e.day] = len(fresh)
                fresh.append(e)

        self._entries = fresh
        self.save()
        logger.info("mood_entries_replaced", count=len(fresh))
