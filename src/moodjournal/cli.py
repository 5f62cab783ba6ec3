from __future__ import annotations

import argparse
import stat
from datetime import date

from ._util import now_local
from .analytics import (
    WINDOWS,
    MoodSummary,
    find_by_day,
    sorted_by_date,
    summarize,
    window_range,
)
from .errors import ValidationError
from .logging_config import setup_logging
from .models import MOOD_LABELS, MOOD_LEVELS, MoodEntry
from .paths import data_path_reason, resolve_data_path
from .safety import assert_safe_data_path
from .storage import JsonFileKeyValueStore, load_json, save_json
from .store import EntryStore
from .timeparse import parse_day


# -------------------------
# Helpers
# -------------------------

def _today() -> date:
    return now_local().date()


def _parse_day(value: str | None) -> date:
    try:
        return parse_day(value, _today())
    except ValueError as e:
        raise SystemExit(str(e)) from e


def _open_store(args: argparse.Namespace) -> EntryStore:
    store = EntryStore(JsonFileKeyValueStore(args.data_path))
    store.load()
    return store


def _exit_if_unsaved(store: EntryStore, args: argparse.Namespace) -> None:
    if not store.persisted:
        raise SystemExit(f"⚠️ Not saved: could not write {args.data_path}")


def _sparkline(values: list[float], vmin: float = 1.0, vmax: float = 5.0) -> str:
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    span = max(1e-9, vmax - vmin)
    out = []
    for v in values:
        x = (v - vmin) / span
        idx = int(round(x * (len(blocks) - 1)))
        idx = max(0, min(len(blocks) - 1, idx))
        out.append(blocks[idx])
    return "".join(out)


def _fmt_line(entry: MoodEntry) -> str:
    line = f"{entry.day.isoformat()} — {entry.mood}/5 {entry.label}"
    if entry.has_notes:
        line += f" ({entry.notes})"
    return line


def _print_entry_block(entry: MoodEntry) -> None:
    print("```")
    print("📒 Mood Journal")
    print(f"- 📅 Date: {entry.day.isoformat()} ({entry.day.strftime('%A')})")
    print(f"- 🙂 Mood (1–5): {entry.mood} {entry.label}")
    if entry.has_notes:
        print(f"- 📝 Notes: {entry.notes}")
    print("```")


def _print_summary(summary: MoodSummary, label: str) -> None:
    print(f"=== Mood Stats ({label}) ===")
    print(f"- range: {summary.start.isoformat()} … {summary.end.isoformat()}")
    if not summary.entry_count:
        print("No entries in selected range.")
        return

    print(f"- entries: {summary.entry_count}")
    print(f"- average: {summary.average}/5")
    if summary.most_frequent is not None:
        print(f"- most frequent: {summary.most_frequent} {MOOD_LABELS[summary.most_frequent]}")
    print(f"- {summary.tracked_percentage}% of days tracked")

    print("\n[Daily]")
    print(f"- sparkline: {_sparkline([float(p.y) for p in summary.daily])}")
    for p in summary.daily:
        print(f"- {p.x}: {p.y}/5")

    print("\n[By weekday]")
    for w in summary.weekday:
        print(f"- {w.x}: {w.y:.2f}/5 ({w.count} entries)")

    print("\n[Distribution]")
    for level in MOOD_LEVELS:
        n = summary.distribution[level]
        bar = "▇" * min(n, 30)
        print(f"{level}: {n:>3} {bar}")


# -------------------------
# Entry commands
# -------------------------

def cmd_add(args: argparse.Namespace) -> None:
    day = _parse_day(args.day)
    try:
        entry = MoodEntry(date=day, mood=args.mood, notes=args.notes or "")
    except ValidationError as e:
        raise SystemExit(str(e)) from e

    store = _open_store(args)
    result = store.add_or_update(entry)

    if args.format == "block":
        _print_entry_block(entry)
    elif result.previous is not None:
        print(f"✏️ Updated {day.isoformat()}: {result.previous.mood}/5 → {entry.mood}/5")
    else:
        print(f"🙂 Logged mood {entry.mood}/5 for {day.isoformat()}")

    _exit_if_unsaved(store, args)


def cmd_show(args: argparse.Namespace) -> None:
    day = _parse_day(args.day)
    store = _open_store(args)
    entry = find_by_day(store.entries, day)
    if entry is None:
        print(f"No mood entry for {day.isoformat()}.")
        return
    _print_entry_block(entry)


def cmd_list(args: argparse.Namespace) -> None:
    store = _open_store(args)
    if not len(store):
        print("No mood entries yet.")
        return

    newest = sorted_by_date(store.entries)[: args.limit]

    if args.format == "block":
        for e in newest:
            _print_entry_block(e)
        return

    print("=== Mood Journal (newest first) ===")
    for e in newest:
        print(_fmt_line(e))


def cmd_delete(args: argparse.Namespace) -> None:
    day = _parse_day(args.day)
    store = _open_store(args)
    removed = store.delete(day)
    if removed is None:
        print(f"No mood entry for {day.isoformat()}.")
        return
    print(f"🗑️ Deleted {_fmt_line(removed)}")
    _exit_if_unsaved(store, args)


def cmd_stats(args: argparse.Namespace) -> None:
    store = _open_store(args)
    entries = store.entries

    if args.start or args.end:
        start = _parse_day(args.start) if args.start else None
        end = _parse_day(args.end) if args.end else _today()
        if start is None:
            start, _ = window_range(args.window, end, entries)
        if start > end:
            raise SystemExit("--start must not be after --end")
        label = "custom"
    else:
        start, end = window_range(args.window, _today(), entries)
        label = "all time" if args.window == "all" else f"last {args.window} days"

    _print_summary(summarize(entries, start, end), label)


# -------------------------
# Core commands
# -------------------------

def cmd_init(args: argparse.Namespace) -> None:
    data = load_json(args.data_path)
    save_json(args.data_path, data)
    print(f"✅ Initialized data file: {args.data_path}")


def cmd_where(args: argparse.Namespace) -> None:
    reason = data_path_reason(args.data_arg, args.profile)

    print(args.data_path)
    print(f"↳ using {reason}")


def cmd_doctor(args: argparse.Namespace) -> None:
    print("=== Mood Journal Doctor ===")

    assert_safe_data_path(args.data_path, args.allow_repo_data_path)
    print("✅ Data path safety guard: OK")

    store = _open_store(args)
    print(f"✅ Entries readable: {len(store)}")
    today = store.today_entry()
    print(f"📅 Today: {today.mood}/5 {today.label}" if today else "📅 Today: not logged yet")

    try:
        mode = args.data_path.stat().st_mode
        perms = stat.S_IMODE(mode)
        print(f"🔐 File permissions: {oct(perms)} (target 0o600)")
    except FileNotFoundError:
        print("⚠️ Data file missing (run `mj init`)")

    print("=== Done ===")


def main(argv=None) -> None:
    p = argparse.ArgumentParser(prog="mj", description="Daily mood journal")
    p.add_argument("--data", default=None, help="Path to data JSON (overrides env/default)")
    p.add_argument("--profile", default=None, help="Profile name (e.g. dev/test)")
    p.add_argument("--allow-repo-data-path", action="store_true", help="Override safety guard (not recommended)")
    p.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ERROR")
    p.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines on stderr")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("init", help="Initialize data store safely").set_defaults(func=cmd_init)
    sub.add_parser("where", help="Show which data file is active and why").set_defaults(func=cmd_where)
    sub.add_parser("doctor", help="Run safety + health checks").set_defaults(func=cmd_doctor)

    add = sub.add_parser("add", help="Log (or replace) the mood for a day")
    add.add_argument("--mood", type=int, required=True, help="Mood 1–5 (1 = very bad, 5 = very good)")
    add.add_argument("--day", default=None, help="ISO, 'yesterday', or '3 days ago' (default today)")
    add.add_argument("--notes", default=None, help="Optional note, up to 500 characters")
    add.add_argument("--format", choices=["line", "block"], default="line")
    add.set_defaults(func=cmd_add)

    show = sub.add_parser("show", help="Show the entry for one day")
    show.add_argument("--day", default=None)
    show.set_defaults(func=cmd_show)

    lst = sub.add_parser("list", help="List entries, newest first")
    lst.add_argument("--limit", type=int, default=50)
    lst.add_argument("--format", choices=["line", "block"], default="line")
    lst.set_defaults(func=cmd_list)

    delete = sub.add_parser("delete", help="Delete the entry for one day")
    delete.add_argument("--day", required=True)
    delete.set_defaults(func=cmd_delete)

    stats = sub.add_parser("stats", help="Average, distribution and trends")
    stats.add_argument("--window", choices=list(WINDOWS), default="30",
                       help="Time window: 7, 30, 90, or all (default 30)")
    stats.add_argument("--start", default=None, help="Custom range start (overrides --window)")
    stats.add_argument("--end", default=None, help="Custom range end (default today)")
    stats.set_defaults(func=cmd_stats)

    args = p.parse_args(argv)
    setup_logging(json_mode=args.log_json, level=args.log_level)

    args.data_arg = args.data
    try:
        args.data_path = resolve_data_path(args.data, args.profile)
    except ValueError as e:
        raise SystemExit(str(e)) from e

    assert_safe_data_path(args.data_path, args.allow_repo_data_path)
    args.func(args)


if __name__ == "__main__":
    main()
