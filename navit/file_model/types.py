"""Domain datatypes for directory listings and file previews."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

KIND_DIRECTORY = "directory"
KIND_FILE = "file"
KIND_SYMLINK = "symlink"

GIT_MODIFIED = "modified"
GIT_ADDED = "added"
GIT_DELETED = "deleted"
GIT_RENAMED = "renamed"
GIT_UNTRACKED = "untracked"
GIT_STAGED = "staged"


@dataclass(frozen=True)
class Entry:
    """One listed file-or-directory record.

    Entries are immutable snapshots produced by a directory read. A refresh
    replaces the whole listing instead of mutating entries in place.
    ``is_dir`` is also true for symbolic links that point at directories so
    they can be opened like directories.
    """

    name: str
    path: Path
    kind: str
    is_dir: bool
    hidden: bool
    size: int | None = None
    modified: datetime | None = None
    created: datetime | None = None
    permissions: str | None = None
    extension: str | None = None
    git_status: str | None = None

    @property
    def is_symlink(self) -> bool:
        return self.kind == KIND_SYMLINK

    def with_git_status(self, git_status: str | None) -> Entry:
        """Return a copy tagged with ``git_status`` (or self when unchanged)."""
        if git_status == self.git_status:
            return self
        return replace(self, git_status=git_status)


@dataclass(frozen=True)
class PreviewPayload:
    """Result of reading the head of a file for preview."""

    content: str
    is_binary: bool
    truncated: bool


@dataclass(frozen=True)
class GitInfo:
    """Repository status for one directory.

    ``status_by_name`` maps names of direct children of the directory to a
    status tag. A non-repository is represented by ``is_repo=False``.
    """

    is_repo: bool
    branch: str | None = None
    status_by_name: dict[str, str] | None = None
    is_clean: bool = True

    @classmethod
    def not_a_repository(cls) -> GitInfo:
        return cls(is_repo=False)

    def status_for(self, name: str) -> str | None:
        if not self.is_repo or not self.status_by_name:
            return None
        return self.status_by_name.get(name)


__all__ = [
    "KIND_DIRECTORY",
    "KIND_FILE",
    "KIND_SYMLINK",
    "GIT_MODIFIED",
    "GIT_ADDED",
    "GIT_DELETED",
    "GIT_RENAMED",
    "GIT_UNTRACKED",
    "GIT_STAGED",
    "Entry",
    "PreviewPayload",
    "GitInfo",
]
