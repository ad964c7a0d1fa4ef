"""Named events consumed by ``SessionMachine.apply``.

Background results carry the tag (path plus request id) they were issued
with; the machine compares that tag with the snapshot before committing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..file_model.types import Entry, GitInfo, PreviewPayload
from .state import Clipboard


class Event:
    """Marker base class for session events."""

    __slots__ = ()


# Directory and git requests.


@dataclass(frozen=True)
class DirectoryRequested(Event):
    path: Path
    request_id: int


@dataclass(frozen=True)
class DirectoryLoaded(Event):
    path: Path
    request_id: int
    entries: tuple[Entry, ...]
    refresh: bool = False
    preferred_path: Path | None = None


@dataclass(frozen=True)
class DirectoryLoadFailed(Event):
    path: Path
    request_id: int
    message: str


@dataclass(frozen=True)
class GitInfoRequested(Event):
    path: Path
    request_id: int


@dataclass(frozen=True)
class GitInfoLoaded(Event):
    path: Path
    request_id: int
    info: GitInfo


# Preview.


@dataclass(frozen=True)
class PreviewRequested(Event):
    path: Path | None


@dataclass(frozen=True)
class PreviewLoaded(Event):
    path: Path
    payload: PreviewPayload


@dataclass(frozen=True)
class PreviewFailed(Event):
    path: Path
    message: str


@dataclass(frozen=True)
class PreviewScrolled(Event):
    delta: int


# List view.


@dataclass(frozen=True)
class SearchQueryChanged(Event):
    query: str


@dataclass(frozen=True)
class SelectionMoved(Event):
    delta: int


@dataclass(frozen=True)
class PageMoved(Event):
    direction: int


@dataclass(frozen=True)
class CursorPlaced(Event):
    path: Path


@dataclass(frozen=True)
class ViewportResized(Event):
    rows: int


@dataclass(frozen=True)
class SelectionToggled(Event):
    path: Path


@dataclass(frozen=True)
class AllSelected(Event):
    pass


@dataclass(frozen=True)
class SelectionCleared(Event):
    pass


@dataclass(frozen=True)
class ClipboardSet(Event):
    clipboard: Clipboard | None


@dataclass(frozen=True)
class FileOperationStarted(Event):
    label: str


@dataclass(frozen=True)
class FileOperationFinished(Event):
    message: str | None = None
    error: str | None = None
    consumed_clipboard: Clipboard | None = None
    refresh: bool = True


# Mode transitions.


@dataclass(frozen=True)
class SearchEntered(Event):
    pass


@dataclass(frozen=True)
class DeepSearchEntered(Event):
    pass


@dataclass(frozen=True)
class CommandEntered(Event):
    pass


@dataclass(frozen=True)
class HelpEntered(Event):
    pass


@dataclass(frozen=True)
class BookmarksEntered(Event):
    pass


@dataclass(frozen=True)
class ConfirmRequested(Event):
    action: str
    message: str
    paths: tuple[Path, ...] = ()


@dataclass(frozen=True)
class InputRequested(Event):
    action: str
    prompt: str
    initial: str = ""
    target: Path | None = None


@dataclass(frozen=True)
class InputChanged(Event):
    value: str


@dataclass(frozen=True)
class ConfirmSubmitted(Event):
    confirmed: bool


@dataclass(frozen=True)
class InputSubmitted(Event):
    value: str


@dataclass(frozen=True)
class Cancelled(Event):
    pass


@dataclass(frozen=True)
class ReturnedToNormal(Event):
    pass


@dataclass(frozen=True)
class DeepSearchRequested(Event):
    query: str
    request_id: int


@dataclass(frozen=True)
class DeepSearchLoaded(Event):
    root: Path
    query: str
    request_id: int
    results: tuple[Entry, ...]
    truncated: bool = False


@dataclass(frozen=True)
class DeepSearchMoved(Event):
    delta: int


@dataclass(frozen=True)
class BookmarkCursorMoved(Event):
    delta: int
    count: int


# Messages.


@dataclass(frozen=True)
class MessageSet(Event):
    text: str


@dataclass(frozen=True)
class ErrorSet(Event):
    text: str


@dataclass(frozen=True)
class MessagesDismissed(Event):
    pass


@dataclass(frozen=True)
class QuitRequested(Event):
    pass
