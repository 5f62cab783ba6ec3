from __future__ import annotations

import os
import re
from pathlib import Path

ENV_VAR = "MOODJOURNAL_DATA"

_PROFILE_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9_-]{0,63}")


def default_data_path(profile: str | None = None) -> Path:
    base = Path.home() / ".config" / "moodjournal"
    if not profile:
        return base / "data.json"
    if not _PROFILE_RE.fullmatch(profile):
        # profile names become file names under the config dir
        raise ValueError(
            f"Bad profile name {profile!r}: use letters, digits, '-' or '_' (max 64)"
        )
    return base / f"{profile}.json"


def resolve_data_path(data_arg: str | None, profile: str | None) -> Path:
    """--data beats $MOODJOURNAL_DATA beats the per-profile default."""
    if data_arg:
        return Path(data_arg).expanduser().resolve()
    env = os.environ.get(ENV_VAR)
    if env:
        return Path(env).expanduser().resolve()
    return default_data_path(profile).expanduser().resolve()


def data_path_reason(data_arg: str | None, profile: str | None) -> str:
    """Human explanation of which rule resolve_data_path applied."""
    if data_arg:
        return "because you passed --data"
    if os.environ.get(ENV_VAR):
        return f"because {ENV_VAR} is set"
    if profile:
        return f"because you used --profile {profile!r}"
    return "default XDG config location"
