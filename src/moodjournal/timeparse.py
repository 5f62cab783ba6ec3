from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from ._util import day_key, now_local


def parse_day(
    value: str | None,
    today: date | None = None,
    relative: bool = True,
) -> date:
    """
    Parse a calendar day from persisted or user-typed text.
    Accepts:
      - None / blank -> today
      - ISO date: "2024-01-01"
      - ISO datetime, naive or with offset: "2024-01-01T05:00:00.000Z"
        (aware values land on the local calendar day)
      - JS Date strings: "Mon Jan 01 2024", "Mon Jan 01 2024 00:00:00 GMT+0100 (CET)"
      - US locale: "1/1/2024", "01/01/2024"
      - keywords: "today", "yesterday"
      - relative: "3 days ago", "1 day ago"
    With relative=False the keyword and relative forms are refused,
    so stored dates cannot drift with the clock.
    Raises ValueError when nothing matches or the day is out of range.
    """
    if today is None:
        today = now_local().date()

    if value is None or not str(value).strip():
        return today

    raw = str(value).strip()
    s = raw.lower()

    # --- 1) ISO date / datetime ---
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass

    try:
        iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
        dt = datetime.fromisoformat(iso)
    except ValueError:
        dt = None
    if dt is not None:
        try:
            return day_key(dt)
        except OverflowError as e:
            raise ValueError(f"Day out of range: {value!r}") from e

    # --- 2) Keywords ---
    if not relative and (s in ("today", "yesterday") or s.endswith("ago")):
        raise ValueError(f"Relative day {value!r} is not allowed here")
    if s == "today":
        return today
    if s == "yesterday":
        return today - timedelta(days=1)

    # --- 3) Relative like "3 days ago" ---
    m = re.fullmatch(r"(\d+)\s*(day|days)\s*ago", s)
    if m:
        try:
            return today - timedelta(days=int(m.group(1)))
        except OverflowError as e:
            raise ValueError(f"Day out of range: {value!r}") from e

    # --- 4) JS Date.toDateString() / Date.toString() ---
    # The trailing time and zone name carry no extra day information.
    m = re.match(r"[a-z]{3}\s+([a-z]{3}\s+\d{1,2}\s+\d{4})\b", s)
    if m:
        try:
            return datetime.strptime(m.group(1), "%b %d %Y").date()
        except ValueError:
            pass

    # --- 5) Locale formats ---
    d_formats = [
        "%m/%d/%Y",
        "%Y/%m/%d",
        "%b %d %Y",
        "%B %d, %Y",
    ]
    for fmt in d_formats:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    raise ValueError(
        f"Could not parse day {value!r}. Try ISO like '2024-01-01', "
        f"'yesterday', or '3 days ago'."
    )
