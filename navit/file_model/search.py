"""Recursive name search used by deep-search mode."""

from __future__ import annotations

import os
from pathlib import Path

from .fs import build_entry, is_hidden_name
from .types import Entry

DEEP_SEARCH_MAX_RESULTS = 500


def find_entries_by_name(
    root: Path,
    query: str,
    show_hidden: bool,
    max_results: int = DEEP_SEARCH_MAX_RESULTS,
) -> tuple[list[Entry], bool]:
    """Walk ``root`` collecting entries whose name contains ``query``.

    Matching is a case-insensitive substring test. Hidden directories are not
    descended into unless ``show_hidden`` is set, and symlinked directories are
    never followed. Returns ``(matches, truncated)``; ``truncated`` is set only
    when a match beyond ``max_results`` exists.
    """
    needle = query.lower()
    if not needle:
        return [], False

    matches: list[Entry] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        if not show_hidden:
            dirnames[:] = [name for name in dirnames if not is_hidden_name(name)]
        dirnames.sort(key=str.lower)
        directory = Path(dirpath)
        for name in sorted(dirnames + filenames, key=str.lower):
            if not show_hidden and is_hidden_name(name):
                continue
            if needle not in name.lower():
                continue
            if len(matches) >= max_results:
                return matches, True
            matches.append(build_entry(directory, name))
    return matches, False


__all__ = ["DEEP_SEARCH_MAX_RESULTS", "find_entries_by_name"]
