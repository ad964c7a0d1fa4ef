"""Immutable session snapshots.

Every committed transition produces a new ``SessionState``; nothing mutates a
snapshot in place, so a renderer may read the latest one at any time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..file_model.types import Entry, GitInfo

MODE_NORMAL = "normal"
MODE_SEARCH = "search"
MODE_DEEP_SEARCH = "deepSearch"
MODE_COMMAND = "command"
MODE_CONFIRM = "confirm"
MODE_TEXT_INPUT = "textInput"
MODE_HELP = "help"
MODE_BOOKMARKS = "bookmarks"

MODES: tuple[str, ...] = (
    MODE_NORMAL,
    MODE_SEARCH,
    MODE_DEEP_SEARCH,
    MODE_COMMAND,
    MODE_CONFIRM,
    MODE_TEXT_INPUT,
    MODE_HELP,
    MODE_BOOKMARKS,
)

CLIPBOARD_COPY = "copy"
CLIPBOARD_CUT = "cut"

DEFAULT_VIEWPORT_ROWS = 20


@dataclass(frozen=True)
class Clipboard:
    """Pending copy/cut: the entries as they were captured, never re-resolved."""

    operation: str
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class PendingConfirm:
    """A yes/no question awaiting an answer in confirm mode."""

    action: str
    message: str
    paths: tuple[Path, ...] = ()


@dataclass(frozen=True)
class PendingInput:
    """A text prompt awaiting submission in text-input mode."""

    action: str
    prompt: str
    target: Path | None = None


@dataclass(frozen=True)
class PreviewState:
    path: Path | None = None
    content: str = ""
    is_binary: bool = False
    truncated: bool = False
    scroll: int = 0
    error: str | None = None


@dataclass(frozen=True)
class DeepSearchState:
    query: str = ""
    request_id: int = 0
    loading: bool = False
    results: tuple[Entry, ...] = ()
    truncated: bool = False
    selected_index: int = 0


@dataclass(frozen=True)
class SessionState:
    current_path: Path
    target_path: Path
    directory_request_id: int = 0
    loading: bool = False
    entries: tuple[Entry, ...] = ()
    filtered_entries: tuple[Entry, ...] = ()
    search_query: str = ""
    selected_index: int = 0
    scroll_offset: int = 0
    viewport_rows: int = DEFAULT_VIEWPORT_ROWS
    selected_files: frozenset[Path] = frozenset()
    clipboard: Clipboard | None = None
    mode: str = MODE_NORMAL
    input_value: str = ""
    pending_confirm: PendingConfirm | None = None
    pending_input: PendingInput | None = None
    git_info: GitInfo | None = None
    git_request_id: int = 0
    preview: PreviewState = field(default_factory=PreviewState)
    deep_search: DeepSearchState = field(default_factory=DeepSearchState)
    bookmark_index: int = 0
    busy: bool = False
    busy_label: str = ""
    message: str | None = None
    error: str | None = None
    quit_requested: bool = False

    @classmethod
    def initial(cls, path: Path, viewport_rows: int = DEFAULT_VIEWPORT_ROWS) -> SessionState:
        return cls(current_path=path, target_path=path, viewport_rows=max(1, viewport_rows))

    @property
    def selected_entry(self) -> Entry | None:
        if 0 <= self.selected_index < len(self.filtered_entries):
            return self.filtered_entries[self.selected_index]
        return None

    def selection_in_listing(self) -> tuple[Entry, ...]:
        """Entries of the current listing whose paths are in ``selected_files``."""
        if not self.selected_files:
            return ()
        return tuple(entry for entry in self.entries if entry.path in self.selected_files)


__all__ = [
    "MODES",
    "MODE_NORMAL",
    "MODE_SEARCH",
    "MODE_DEEP_SEARCH",
    "MODE_COMMAND",
    "MODE_CONFIRM",
    "MODE_TEXT_INPUT",
    "MODE_HELP",
    "MODE_BOOKMARKS",
    "CLIPBOARD_COPY",
    "CLIPBOARD_CUT",
    "DEFAULT_VIEWPORT_ROWS",
    "Clipboard",
    "DeepSearchState",
    "PendingConfirm",
    "PendingInput",
    "PreviewState",
    "SessionState",
]
