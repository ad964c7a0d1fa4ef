"""Git repository status for the directory being browsed.

Runs ``git`` as a subprocess and folds porcelain status records into one
status tag per direct child of the directory. Changes nested deeper tag the
child directory that contains them.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

from .file_model.types import (
    GIT_ADDED,
    GIT_DELETED,
    GIT_MODIFIED,
    GIT_RENAMED,
    GIT_STAGED,
    GIT_UNTRACKED,
    Entry,
    GitInfo,
)

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 2.0


def _run_git(cwd: Path, args: list[str], timeout_seconds: float) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git %s failed in %s: %s", args[0], cwd, exc)
        return None


def _resolve_repo_root(directory: Path, timeout_seconds: float) -> Path | None:
    proc = _run_git(directory, ["rev-parse", "--show-toplevel"], timeout_seconds)
    if proc is None or proc.returncode != 0:
        return None
    top = proc.stdout.strip()
    if not top:
        return None
    return Path(top).resolve()


def _current_branch(repo_root: Path, timeout_seconds: float) -> str | None:
    # symbolic-ref also works on an unborn branch; detached HEAD falls back to a short hash.
    proc = _run_git(repo_root, ["symbolic-ref", "--short", "-q", "HEAD"], timeout_seconds)
    if proc is not None and proc.returncode == 0 and proc.stdout.strip():
        return proc.stdout.strip()
    proc = _run_git(repo_root, ["rev-parse", "--short", "HEAD"], timeout_seconds)
    if proc is not None and proc.returncode == 0 and proc.stdout.strip():
        return proc.stdout.strip()
    return None


def iter_porcelain_records(output: str) -> list[tuple[str, str]]:
    """Parse ``git status --porcelain=v1 -z`` output into ``(XY, path)`` pairs."""
    records: list[tuple[str, str]] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        records.append((status, token[3:]))

        # Renamed/copied records carry the source path as an extra token.
        if "R" in status or "C" in status:
            index += 1

    return records


def status_tag(status: str) -> str:
    """Map a porcelain ``XY`` code to a single status tag."""
    if status == "??":
        return GIT_UNTRACKED
    if "R" in status:
        return GIT_RENAMED
    if "D" in status:
        return GIT_DELETED
    if status[0] == "A":
        return GIT_ADDED
    if status[1] == " ":
        return GIT_STAGED
    return GIT_MODIFIED


def fold_status_records(
    directory: Path,
    repo_root: Path,
    records: Iterable[tuple[str, str]],
) -> dict[str, str]:
    """Reduce repo-relative records to tags keyed by ``directory`` child names."""
    status_by_name: dict[str, str] = {}
    for status, rel_path in records:
        if not rel_path or status == "!!":
            continue
        target = repo_root / rel_path.rstrip("/")
        try:
            relative = target.relative_to(directory)
        except ValueError:
            continue
        parts = relative.parts
        if not parts:
            continue
        if len(parts) == 1:
            status_by_name[parts[0]] = status_tag(status)
        else:
            status_by_name.setdefault(parts[0], GIT_MODIFIED)
    return status_by_name


def collect_git_info(directory: Path, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> GitInfo:
    """Query git for ``directory``; non-repositories and git failures yield ``is_repo=False``."""
    try:
        directory = Path(directory).resolve()
    except OSError:
        return GitInfo.not_a_repository()
    repo_root = _resolve_repo_root(directory, timeout_seconds)
    if repo_root is None:
        return GitInfo.not_a_repository()

    status_proc = _run_git(
        repo_root,
        ["status", "--porcelain=v1", "-z", "--untracked-files=normal"],
        timeout_seconds,
    )
    if status_proc is None or status_proc.returncode != 0:
        return GitInfo.not_a_repository()

    records = [record for record in iter_porcelain_records(status_proc.stdout) if record[0] != "!!"]
    return GitInfo(
        is_repo=True,
        branch=_current_branch(repo_root, timeout_seconds),
        status_by_name=fold_status_records(directory, repo_root, records),
        is_clean=not records,
    )


def tag_entries(entries: Iterable[Entry], git_info: GitInfo | None) -> tuple[Entry, ...]:
    """Return ``entries`` with ``git_status`` set from ``git_info``."""
    if git_info is None or not git_info.is_repo:
        return tuple(entry.with_git_status(None) for entry in entries)
    return tuple(entry.with_git_status(git_info.status_for(entry.name)) for entry in entries)


__all__ = [
    "collect_git_info",
    "fold_status_records",
    "iter_porcelain_records",
    "status_tag",
    "tag_entries",
]
