"""Filesystem-facing domain model: entries, listings, previews, mutations.

This package contains non-UI primitives only. Listing and preview helpers
return immutable snapshots; mutation helpers raise ``OSError`` on failure.
"""

from __future__ import annotations

from .fs import (
    DEFAULT_PREVIEW_MAX_BYTES,
    copy_path,
    create_file,
    delete_path,
    entry_sort_key,
    list_directory,
    make_directory,
    move_path,
    parent_directory,
    path_exists,
    read_preview,
    rename_path,
    resolve_user_path,
)
from .search import find_entries_by_name
from .types import (
    GIT_ADDED,
    GIT_DELETED,
    GIT_MODIFIED,
    GIT_RENAMED,
    GIT_STAGED,
    GIT_UNTRACKED,
    KIND_DIRECTORY,
    KIND_FILE,
    KIND_SYMLINK,
    Entry,
    GitInfo,
    PreviewPayload,
)

__all__ = [
    "DEFAULT_PREVIEW_MAX_BYTES",
    "Entry",
    "GitInfo",
    "PreviewPayload",
    "KIND_DIRECTORY",
    "KIND_FILE",
    "KIND_SYMLINK",
    "GIT_ADDED",
    "GIT_DELETED",
    "GIT_MODIFIED",
    "GIT_RENAMED",
    "GIT_STAGED",
    "GIT_UNTRACKED",
    "copy_path",
    "create_file",
    "delete_path",
    "entry_sort_key",
    "find_entries_by_name",
    "list_directory",
    "make_directory",
    "move_path",
    "parent_directory",
    "path_exists",
    "read_preview",
    "rename_path",
    "resolve_user_path",
]
