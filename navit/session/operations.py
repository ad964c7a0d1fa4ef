"""Clipboard, paste, delete, rename, and create on top of the session.

Every operation resolves its targets with one rule: the multi-selection
restricted to the current listing, else the entry under the cursor, else
nothing. Batch operations continue past per-file failures and report an
aggregate result.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import NavitError, TargetExistsError, UsageError, describe_os_error
from ..file_model import fs
from ..file_model.types import Entry
from ..runtime.background import BackgroundJob
from . import events as ev
from .controller import SessionController
from .state import CLIPBOARD_COPY, CLIPBOARD_CUT, Clipboard, SessionState

logger = logging.getLogger(__name__)


def _plural(count: int, noun: str = "item") -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


@dataclass
class OperationResult:
    """Aggregate outcome of a batch file operation."""

    verb: str
    succeeded: list[Path] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        if self.ok:
            return f"{self.verb} {_plural(len(self.succeeded))}"
        first_reason = self.failures[0][1]
        extra = len(self.failures) - 1
        tail = f" (+{extra} more)" if extra > 0 else ""
        return (
            f"{self.verb} {len(self.succeeded)} of {_plural(self.attempted)}; "
            f"{len(self.failures)} failed: {first_reason}{tail}"
        )

    def to_event(self, consumed_clipboard: Clipboard | None = None) -> ev.FileOperationFinished:
        if self.ok:
            return ev.FileOperationFinished(message=self.summary(), consumed_clipboard=consumed_clipboard)
        return ev.FileOperationFinished(error=self.summary(), consumed_clipboard=consumed_clipboard)


def target_entries(state: SessionState) -> tuple[Entry, ...]:
    """Resolve the entries an operation acts on."""
    selected = state.selection_in_listing()
    if selected:
        return selected
    cursor = state.selected_entry
    return (cursor,) if cursor is not None else ()


def paste_entries(clipboard: Clipboard, destination: Path) -> OperationResult:
    """Copy or move each captured entry into ``destination``, one at a time."""
    cut = clipboard.operation == CLIPBOARD_CUT
    transfer: Callable[[Path, Path], None] = fs.move_path if cut else fs.copy_path
    result = OperationResult(verb="Moved" if cut else "Pasted")
    for entry in clipboard.entries:
        dest = destination / entry.name
        try:
            if fs.path_exists(dest):
                raise TargetExistsError(dest)
            transfer(entry.path, dest)
        except (OSError, NavitError) as exc:
            reason = describe_os_error(exc)
            logger.warning("paste of %s failed: %s", entry.path, reason)
            result.failures.append((entry.path, reason))
            continue
        result.succeeded.append(dest)
    logger.info("paste into %s: %d ok, %d failed", destination, len(result.succeeded), len(result.failures))
    return result


def delete_paths(paths: Iterable[Path]) -> OperationResult:
    """Delete every path in turn; a failure does not stop the remainder."""
    result = OperationResult(verb="Deleted")
    for path in paths:
        try:
            fs.delete_path(path)
        except OSError as exc:
            reason = describe_os_error(exc)
            logger.warning("delete of %s failed: %s", path, reason)
            result.failures.append((path, reason))
            continue
        result.succeeded.append(path)
    logger.info("delete: %d ok, %d failed", len(result.succeeded), len(result.failures))
    return result


def validate_name(name: str) -> str:
    """Return ``name`` stripped, or raise ``UsageError`` when unusable."""
    stripped = name.strip()
    if not stripped:
        raise UsageError("Name cannot be empty")
    if stripped in {".", ".."}:
        raise UsageError(f"Invalid name: {stripped}")
    return stripped


class FileOperationOrchestrator:
    """Runs file operations for the session behind ``controller``."""

    def __init__(self, controller: SessionController) -> None:
        self.controller = controller

    @property
    def state(self) -> SessionState:
        return self.controller.state

    def _snapshot(self, operation: str) -> int:
        targets = target_entries(self.state)
        if not targets:
            return 0
        self.controller.dispatch(ev.ClipboardSet(Clipboard(operation=operation, entries=targets)))
        return len(targets)

    def copy(self) -> int:
        """Capture the target set for copying; the selection is left alone."""
        count = self._snapshot(CLIPBOARD_COPY)
        if count:
            self.controller.dispatch(ev.MessageSet(f"Copied {_plural(count)} to clipboard"))
        return count

    def cut(self) -> int:
        """Capture the target set for moving; sources stay until paste."""
        count = self._snapshot(CLIPBOARD_CUT)
        if count:
            self.controller.dispatch(ev.MessageSet(f"Cut {_plural(count)} to clipboard"))
        return count

    def paste(self) -> bool:
        """Start pasting the clipboard into the current directory.

        The clipboard is cleared once the attempt finishes, whatever the
        per-file outcomes were.
        """
        clipboard = self.state.clipboard
        if clipboard is None or not clipboard.entries:
            self.controller.dispatch(ev.MessageSet("Clipboard is empty"))
            return False
        destination = self.state.current_path
        self.controller.run_background(
            BackgroundJob(
                label=f"paste:{destination}",
                run=lambda: paste_entries(clipboard, destination).to_event(consumed_clipboard=clipboard),
                on_error=lambda exc: ev.FileOperationFinished(
                    error=describe_os_error(exc, "Paste failed"),
                    consumed_clipboard=clipboard,
                ),
            ),
            busy_label="Pasting",
        )
        return True

    def request_delete(self) -> bool:
        """Delete the target set, asking first when confirmation is configured."""
        targets = target_entries(self.state)
        if not targets:
            return False
        paths = tuple(entry.path for entry in targets)
        if self.controller.config.confirm_delete:
            if len(targets) == 1:
                question = f"Delete {targets[0].name}?"
            else:
                question = f"Delete {_plural(len(targets))}?"
            self.controller.dispatch(ev.ConfirmRequested(action="delete", message=question, paths=paths))
            return True
        self.delete(paths)
        return True

    def delete(self, paths: tuple[Path, ...]) -> None:
        if not paths:
            return
        self.controller.run_background(
            BackgroundJob(
                label=f"delete:{len(paths)}",
                run=lambda: delete_paths(paths).to_event(),
                on_error=lambda exc: ev.FileOperationFinished(error=describe_os_error(exc, "Delete failed")),
            ),
            busy_label="Deleting",
        )

    def rename_target(self) -> Entry:
        """The one entry a rename acts on; several or no targets is a usage error."""
        targets = target_entries(self.state)
        if not targets:
            raise UsageError("No file selected")
        if len(targets) > 1:
            raise UsageError("Rename needs exactly one target")
        return targets[0]

    def rename(self, new_name: str, source: Path | None = None) -> str:
        """Rename ``source`` within its directory.

        Without ``source`` the single target entry is renamed.
        """
        if source is None:
            source = self.rename_target().path
        name = validate_name(new_name)
        dest = fs.resolve_user_path(name, source.parent)
        if fs.path_exists(dest):
            raise TargetExistsError(dest)
        fs.rename_path(source, dest)
        logger.info("renamed %s -> %s", source, dest)
        self.controller.refresh(preferred_path=dest)
        return f"Renamed to: {dest.name}"

    def _create(self, name: str, create: Callable[[Path], None], noun: str) -> str:
        cleaned = validate_name(name)
        dest = fs.resolve_user_path(cleaned, self.state.current_path)
        if fs.path_exists(dest):
            raise TargetExistsError(dest)
        create(dest)
        logger.info("created %s %s", noun, dest)
        preferred = dest if dest.parent == self.state.current_path else None
        self.controller.refresh(preferred_path=preferred)
        return f"Created {noun}: {cleaned}"

    def create_file(self, name: str) -> str:
        return self._create(name, fs.create_file, "file")

    def create_directory(self, name: str) -> str:
        return self._create(name, fs.make_directory, "directory")


__all__ = [
    "FileOperationOrchestrator",
    "OperationResult",
    "delete_paths",
    "paste_entries",
    "target_entries",
    "validate_name",
]
