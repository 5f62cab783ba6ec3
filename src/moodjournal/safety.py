from __future__ import annotations

import sys
from pathlib import Path


def find_git_root(start: Path) -> Path | None:
    cur = start
    for _ in range(200):
        if (cur / ".git").exists():
            return cur
        if cur.parent == cur:
            return None
        cur = cur.parent
    return None


def data_path_problems(data_path: Path, allow_repo_data_path: bool) -> list[str]:
    """Reasons the journal file must not live at data_path; empty when fine."""
    problems: list[str] = []
    if data_path.is_dir():
        problems.append(f"data_path is a directory, not a JSON file: {data_path}")
    git_root = find_git_root(data_path.parent)
    if git_root and not allow_repo_data_path:
        problems.append(f"data_path {data_path} is inside the git repo at {git_root}")
    return problems


def assert_safe_data_path(data_path: Path, allow_repo_data_path: bool) -> None:
    problems = data_path_problems(data_path, allow_repo_data_path)
    if not problems:
        return
    print("🚫 Refusing to use this mood journal location.", file=sys.stderr)
    for p in problems:
        print(f"   {p}", file=sys.stderr)
    print(
        "   Fix: use ~/.config/moodjournal/*.json, pass --data, "
        "or --allow-repo-data-path for the git check",
        file=sys.stderr,
    )
    raise SystemExit(2)
