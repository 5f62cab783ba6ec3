from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Any, Protocol

import structlog

from .errors import PersistenceError

logger = structlog.get_logger()


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_json(path: Path) -> dict[str, Any]:
    """
    Safe load:
    - creates parent dirs
    - if missing/empty -> writes {}
    - if corrupt (bad UTF-8, bad JSON, or not an object) -> backs up
      the raw bytes then resets to {}
    Always returns a dict.
    """
    path = Path(path)
    _ensure_parent(path)

    if not path.exists():
        # create a minimal valid file
        save_json(path, {})
        return {}

    raw = path.read_bytes()
    try:
        txt = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        return _quarantine(path, raw, "not utf-8")

    if not txt:
        save_json(path, {})
        return {}

    try:
        data = json.loads(txt)
    except json.JSONDecodeError:
        return _quarantine(path, raw, "invalid json")

    if not isinstance(data, dict):
        # lists and scalars are not key-value files
        return _quarantine(path, raw, f"top level is {type(data).__name__}")
    return data


def _quarantine(path: Path, raw: bytes, reason: str) -> dict[str, Any]:
    # corruption guard: backup then reset
    backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
    backup.write_bytes(raw)
    logger.warning("data_file_corrupt", path=str(path), backup=str(backup), reason=reason)
    save_json(path, {})
    return {}


def save_json(path: Path, data: Any) -> None:
    """
    Atomic-ish save:
    - write to temp file in same directory
    - flush + fsync
    - os.replace to target
    - chmod 0600 best-effort
    """
    path = Path(path)
    _ensure_parent(path)

    tmp = path.with_name(path.name + ".tmp")

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    ) + "\n"

    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())

    os.replace(tmp, path)

    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


class KeyValueStore(Protocol):
    """Synchronous string-keyed persistence boundary."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """In-process key-value store, for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """
    Key-value store backed by one JSON object file ({key: string}).
    Each set() rewrites the whole file atomically via save_json.
    OS-level and decoding failures surface as PersistenceError.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        try:
            data = load_json(self.path)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not read {self.path}: {e}") from e
        value = data.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            # tolerate hand-edited files that inline the value
            return json.dumps(value)
        return value

    def set(self, key: str, value: str) -> None:
        try:
            data = load_json(self.path)
            data[key] = value
            save_json(self.path, data)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"could not write {self.path}: {e}") from e
