"""Tests for the mj command line front end."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from moodjournal.cli import _sparkline, main
from moodjournal.paths import data_path_reason, default_data_path, resolve_data_path


@pytest.fixture()
def data_path(tmp_path: Path) -> Path:
    return tmp_path / "journal.json"


def _run(data_path: Path, *argv: str) -> None:
    main(["--data", str(data_path), "--allow-repo-data-path", *argv])


def _records(data_path: Path) -> list[dict]:
    return json.loads(json.loads(data_path.read_text(encoding="utf-8"))["moodEntries"])


# ---- _sparkline ----


def test_sparkline_empty():
    assert _sparkline([]) == ""


def test_sparkline_length_matches_input():
    assert len(_sparkline([1.0, 3.0, 5.0])) == 3


def test_sparkline_extremes():
    result = _sparkline([1.0, 5.0])
    assert result[0] == "▁"
    assert result[1] == "█"


# ---- paths ----


def test_default_data_path_profile():
    assert default_data_path("dev").name == "dev.json"
    assert default_data_path().name == "data.json"


def test_resolve_prefers_explicit_arg(monkeypatch, tmp_path):
    monkeypatch.setenv("MOODJOURNAL_DATA", str(tmp_path / "env.json"))
    assert resolve_data_path(str(tmp_path / "arg.json"), None).name == "arg.json"


def test_resolve_uses_env(monkeypatch, tmp_path):
    monkeypatch.setenv("MOODJOURNAL_DATA", str(tmp_path / "env.json"))
    assert resolve_data_path(None, "dev").name == "env.json"


def test_data_path_reason_order(monkeypatch):
    monkeypatch.delenv("MOODJOURNAL_DATA", raising=False)
    assert data_path_reason(None, None) == "default XDG config location"
    assert "--profile" in data_path_reason(None, "dev")
    monkeypatch.setenv("MOODJOURNAL_DATA", "/tmp/x.json")
    assert "MOODJOURNAL_DATA" in data_path_reason(None, "dev")
    assert "--data" in data_path_reason("a.json", "dev")


# ---- add / show / list / delete ----


def test_add_creates_entry(data_path, capsys):
    _run(data_path, "add", "--mood", "4", "--day", "2024-01-01", "--notes", "walk")
    out = capsys.readouterr().out
    assert "Logged mood 4/5 for 2024-01-01" in out
    assert _records(data_path) == [{"date": "2024-01-01", "mood": 4, "notes": "walk"}]


def test_add_same_day_reports_update(data_path, capsys):
    _run(data_path, "add", "--mood", "3", "--day", "2024-01-01")
    _run(data_path, "add", "--mood", "5", "--day", "2024-01-01")
    out = capsys.readouterr().out
    assert "Updated 2024-01-01: 3/5 → 5/5" in out
    assert len(_records(data_path)) == 1


def test_add_invalid_mood_exits(data_path):
    with pytest.raises(SystemExit):
        _run(data_path, "add", "--mood", "9", "--day", "2024-01-01")


def test_add_long_notes_exits(data_path):
    with pytest.raises(SystemExit):
        _run(data_path, "add", "--mood", "3", "--notes", "x" * 501)


def test_add_bad_day_exits(data_path):
    with pytest.raises(SystemExit):
        _run(data_path, "add", "--mood", "3", "--day", "someday")


def test_show_entry_block(data_path, capsys):
    _run(data_path, "add", "--mood", "2", "--day", "2024-01-01", "--notes", "rough")
    capsys.readouterr()
    _run(data_path, "show", "--day", "2024-01-01")
    out = capsys.readouterr().out
    assert "2024-01-01 (Monday)" in out
    assert "2 Bad" in out
    assert "rough" in out


def test_show_missing_day(data_path, capsys):
    _run(data_path, "show", "--day", "2024-01-01")
    assert "No mood entry for 2024-01-01." in capsys.readouterr().out


def test_list_newest_first(data_path, capsys):
    _run(data_path, "add", "--mood", "2", "--day", "2024-01-01")
    _run(data_path, "add", "--mood", "5", "--day", "2024-01-03")
    capsys.readouterr()
    _run(data_path, "list")
    lines = capsys.readouterr().out.splitlines()
    assert lines[1].startswith("2024-01-03")
    assert lines[2].startswith("2024-01-01")


def test_list_empty(data_path, capsys):
    _run(data_path, "list")
    assert "No mood entries yet." in capsys.readouterr().out


def test_delete(data_path, capsys):
    _run(data_path, "add", "--mood", "2", "--day", "2024-01-01")
    _run(data_path, "delete", "--day", "2024-01-01")
    assert "Deleted 2024-01-01" in capsys.readouterr().out
    assert _records(data_path) == []


def test_delete_missing(data_path, capsys):
    _run(data_path, "delete", "--day", "2024-01-01")
    assert "No mood entry for 2024-01-01." in capsys.readouterr().out


# ---- stats ----


def test_stats_custom_range(data_path, capsys):
    _run(data_path, "add", "--mood", "4", "--day", "2024-01-01")
    _run(data_path, "add", "--mood", "5", "--day", "2024-01-02")
    capsys.readouterr()
    _run(data_path, "stats", "--start", "2024-01-01", "--end", "2024-01-02")
    out = capsys.readouterr().out
    assert "- average: 4.5/5" in out
    assert "- most frequent: 5 Very Good" in out
    assert "100% of days tracked" in out
    assert "- Monday: 4.00/5 (1 entries)" in out


def test_stats_empty_range(data_path, capsys):
    _run(data_path, "stats", "--window", "7")
    assert "No entries in selected range." in capsys.readouterr().out


def test_stats_inverted_range_exits(data_path):
    with pytest.raises(SystemExit):
        _run(data_path, "stats", "--start", "2024-01-05", "--end", "2024-01-01")


def test_stats_all_window(data_path, capsys):
    today = date.today().isoformat()
    _run(data_path, "add", "--mood", "3", "--day", today)
    capsys.readouterr()
    _run(data_path, "stats", "--window", "all")
    out = capsys.readouterr().out
    assert "all time" in out
    assert "- average: 3.0/5" in out


# ---- core commands ----


def test_init_creates_file(data_path, capsys):
    _run(data_path, "init")
    assert data_path.exists()
    assert "Initialized" in capsys.readouterr().out


def test_where_reports_data_flag(data_path, capsys):
    _run(data_path, "where")
    out = capsys.readouterr().out
    assert str(data_path) in out
    assert "--data" in out


def test_doctor(data_path, capsys):
    _run(data_path, "init")
    _run(data_path, "doctor")
    out = capsys.readouterr().out
    assert "Entries readable: 0" in out
    assert "0o600" in out


def test_refuses_data_inside_git_repo(tmp_path):
    (tmp_path / ".git").mkdir()
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(tmp_path / "journal.json"), "list"])
    assert exc.value.code == 2


# ---- failure paths ----


def test_add_reports_unsaved_write(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        _run(blocker / "journal.json", "add", "--mood", "3", "--day", "2024-01-01")
    assert "Not saved" in str(exc.value.code)


def test_bad_profile_name_exits(monkeypatch):
    monkeypatch.delenv("MOODJOURNAL_DATA", raising=False)
    with pytest.raises(SystemExit) as exc:
        main(["--profile", "../escape", "where"])
    assert "Bad profile name" in str(exc.value.code)


def test_refuses_directory_as_data_path(tmp_path):
    with pytest.raises(SystemExit) as exc:
        _run(tmp_path, "list")
    assert exc.value.code == 2


def test_undecodable_data_file_still_lists(data_path, capsys):
    data_path.write_bytes(b'{"moodEntries": "\xff\xfe"}')
    _run(data_path, "list")
    assert "No mood entries yet." in capsys.readouterr().out
