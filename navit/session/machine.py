"""Pure session reducer: ``SessionMachine.apply(state, event) -> state``.

The machine owns the modal rules, list-view arithmetic, and the staleness
checks for background results. It performs no I/O; the controller issues
requests and feeds their tagged results back through ``apply``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path

from ..file_model.types import Entry
from ..git_status import tag_entries
from . import events as ev
from .state import (
    MODE_BOOKMARKS,
    MODE_COMMAND,
    MODE_CONFIRM,
    MODE_DEEP_SEARCH,
    MODE_HELP,
    MODE_NORMAL,
    MODE_SEARCH,
    MODE_TEXT_INPUT,
    DeepSearchState,
    PendingConfirm,
    PendingInput,
    PreviewState,
    SessionState,
)

logger = logging.getLogger(__name__)


def clamp_index(index: int, count: int) -> int:
    """Clamp ``index`` into ``[0, count - 1]``, or 0 for an empty list."""
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))


def scroll_to_include(index: int, scroll: int, rows: int, count: int) -> int:
    """Return the smallest scroll change that keeps ``index`` visible."""
    rows = max(1, rows)
    if index < scroll:
        scroll = index
    elif index >= scroll + rows:
        scroll = index - rows + 1
    return max(0, min(scroll, max(0, count - rows)))


def filter_entries(entries: Iterable[Entry], query: str) -> tuple[Entry, ...]:
    """Case-insensitive substring filter on entry names."""
    entries = tuple(entries)
    if not query:
        return entries
    needle = query.lower()
    return tuple(entry for entry in entries if needle in entry.name.lower())


def _index_of(entries: tuple[Entry, ...], path: Path | None) -> int | None:
    if path is None:
        return None
    for idx, entry in enumerate(entries):
        if entry.path == path:
            return idx
    return None


def _with_cursor(state: SessionState, index: int) -> SessionState:
    count = len(state.filtered_entries)
    index = clamp_index(index, count)
    scroll = scroll_to_include(index, state.scroll_offset, state.viewport_rows, count)
    return replace(state, selected_index=index, scroll_offset=scroll)


class SessionMachine:
    """Finite-state machine over ``SessionState`` snapshots."""

    def __init__(self) -> None:
        self._handlers: dict[type, Callable[[SessionState, ev.Event], SessionState]] = {
            ev.DirectoryRequested: self._directory_requested,
            ev.DirectoryLoaded: self._directory_loaded,
            ev.DirectoryLoadFailed: self._directory_load_failed,
            ev.GitInfoRequested: self._git_requested,
            ev.GitInfoLoaded: self._git_loaded,
            ev.PreviewRequested: self._preview_requested,
            ev.PreviewLoaded: self._preview_loaded,
            ev.PreviewFailed: self._preview_failed,
            ev.PreviewScrolled: self._preview_scrolled,
            ev.SearchQueryChanged: self._search_query_changed,
            ev.SelectionMoved: self._selection_moved,
            ev.PageMoved: self._page_moved,
            ev.CursorPlaced: self._cursor_placed,
            ev.ViewportResized: self._viewport_resized,
            ev.SelectionToggled: self._selection_toggled,
            ev.AllSelected: self._all_selected,
            ev.SelectionCleared: self._selection_cleared,
            ev.ClipboardSet: self._clipboard_set,
            ev.FileOperationStarted: self._file_operation_started,
            ev.FileOperationFinished: self._file_operation_finished,
            ev.SearchEntered: self._search_entered,
            ev.DeepSearchEntered: self._deep_search_entered,
            ev.CommandEntered: self._command_entered,
            ev.HelpEntered: self._help_entered,
            ev.BookmarksEntered: self._bookmarks_entered,
            ev.ConfirmRequested: self._confirm_requested,
            ev.InputRequested: self._input_requested,
            ev.InputChanged: self._input_changed,
            ev.ConfirmSubmitted: self._confirm_submitted,
            ev.InputSubmitted: self._input_submitted,
            ev.Cancelled: self._cancelled,
            ev.ReturnedToNormal: self._returned_to_normal,
            ev.DeepSearchRequested: self._deep_search_requested,
            ev.DeepSearchLoaded: self._deep_search_loaded,
            ev.DeepSearchMoved: self._deep_search_moved,
            ev.BookmarkCursorMoved: self._bookmark_cursor_moved,
            ev.MessageSet: self._message_set,
            ev.ErrorSet: self._error_set,
            ev.MessagesDismissed: self._messages_dismissed,
            ev.QuitRequested: self._quit_requested,
        }

    def apply(self, state: SessionState, event: ev.Event) -> SessionState:
        """Return the snapshot that results from ``event``; never mutates ``state``."""
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"unsupported session event: {type(event).__name__}")
        return handler(state, event)

    # Directory and git results.

    def _directory_requested(self, state: SessionState, event: ev.DirectoryRequested) -> SessionState:
        return replace(
            state,
            target_path=event.path,
            directory_request_id=event.request_id,
            loading=True,
        )

    def _directory_loaded(self, state: SessionState, event: ev.DirectoryLoaded) -> SessionState:
        if event.request_id != state.directory_request_id or event.path != state.target_path:
            logger.debug("discarding stale listing for %s (request %d)", event.path, event.request_id)
            return state

        same_directory = event.path == state.current_path
        git_info = state.git_info if same_directory else None
        entries = tag_entries(event.entries, git_info)

        selected_files = state.selected_files
        preferred = event.preferred_path
        if event.refresh:
            present = {entry.path for entry in entries}
            selected_files = frozenset(path for path in selected_files if path in present)
            if preferred is None and state.selected_entry is not None:
                preferred = state.selected_entry.path

        index = _index_of(entries, preferred) or 0
        next_state = replace(
            state,
            current_path=event.path,
            loading=False,
            entries=entries,
            filtered_entries=entries,
            search_query="",
            input_value="" if state.mode == MODE_SEARCH else state.input_value,
            selected_files=selected_files,
            selected_index=0,
            scroll_offset=0,
            git_info=git_info,
            error=state.error if event.refresh else None,
        )
        return _with_cursor(next_state, index)

    def _directory_load_failed(self, state: SessionState, event: ev.DirectoryLoadFailed) -> SessionState:
        if event.request_id != state.directory_request_id:
            logger.debug("discarding stale load failure for %s", event.path)
            return state
        return replace(
            state,
            target_path=state.current_path,
            loading=False,
            error=event.message,
            message=None,
        )

    def _git_requested(self, state: SessionState, event: ev.GitInfoRequested) -> SessionState:
        return replace(state, git_request_id=event.request_id)

    def _git_loaded(self, state: SessionState, event: ev.GitInfoLoaded) -> SessionState:
        if event.request_id != state.git_request_id or event.path != state.current_path:
            logger.debug("discarding stale git status for %s", event.path)
            return state
        entries = tag_entries(state.entries, event.info)
        return replace(
            state,
            git_info=event.info,
            entries=entries,
            filtered_entries=filter_entries(entries, state.search_query),
        )

    # Preview.

    def _preview_requested(self, state: SessionState, event: ev.PreviewRequested) -> SessionState:
        return replace(state, preview=PreviewState(path=event.path))

    def _preview_loaded(self, state: SessionState, event: ev.PreviewLoaded) -> SessionState:
        selected = state.selected_entry
        if selected is None or selected.path != event.path:
            logger.debug("discarding stale preview for %s", event.path)
            return state
        payload = event.payload
        return replace(
            state,
            preview=PreviewState(
                path=event.path,
                content=payload.content,
                is_binary=payload.is_binary,
                truncated=payload.truncated,
            ),
        )

    def _preview_failed(self, state: SessionState, event: ev.PreviewFailed) -> SessionState:
        selected = state.selected_entry
        if selected is None or selected.path != event.path:
            return state
        return replace(state, preview=PreviewState(path=event.path, error=event.message))

    def _preview_scrolled(self, state: SessionState, event: ev.PreviewScrolled) -> SessionState:
        line_count = state.preview.content.count("\n") + 1 if state.preview.content else 0
        scroll = max(0, min(state.preview.scroll + event.delta, max(0, line_count - 1)))
        return replace(state, preview=replace(state.preview, scroll=scroll))

    # List view.

    def _search_query_changed(self, state: SessionState, event: ev.SearchQueryChanged) -> SessionState:
        return replace(
            state,
            search_query=event.query,
            filtered_entries=filter_entries(state.entries, event.query),
            input_value=event.query if state.mode == MODE_SEARCH else state.input_value,
            selected_index=0,
            scroll_offset=0,
        )

    def _selection_moved(self, state: SessionState, event: ev.SelectionMoved) -> SessionState:
        return _with_cursor(state, state.selected_index + event.delta)

    def _page_moved(self, state: SessionState, event: ev.PageMoved) -> SessionState:
        step = max(1, state.viewport_rows)
        direction = 1 if event.direction > 0 else -1
        return _with_cursor(state, state.selected_index + direction * step)

    def _cursor_placed(self, state: SessionState, event: ev.CursorPlaced) -> SessionState:
        index = _index_of(state.filtered_entries, event.path)
        if index is None:
            return state
        return _with_cursor(state, index)

    def _viewport_resized(self, state: SessionState, event: ev.ViewportResized) -> SessionState:
        resized = replace(state, viewport_rows=max(1, event.rows))
        return _with_cursor(resized, resized.selected_index)

    def _selection_toggled(self, state: SessionState, event: ev.SelectionToggled) -> SessionState:
        return replace(state, selected_files=state.selected_files ^ {event.path})

    def _all_selected(self, state: SessionState, _event: ev.AllSelected) -> SessionState:
        paths = {entry.path for entry in state.filtered_entries}
        return replace(state, selected_files=state.selected_files | paths)

    def _selection_cleared(self, state: SessionState, _event: ev.SelectionCleared) -> SessionState:
        return replace(state, selected_files=frozenset())

    def _clipboard_set(self, state: SessionState, event: ev.ClipboardSet) -> SessionState:
        return replace(state, clipboard=event.clipboard)

    def _file_operation_started(self, state: SessionState, event: ev.FileOperationStarted) -> SessionState:
        return replace(state, busy=True, busy_label=event.label)

    def _file_operation_finished(self, state: SessionState, event: ev.FileOperationFinished) -> SessionState:
        clipboard = state.clipboard
        if event.consumed_clipboard is not None and clipboard is event.consumed_clipboard:
            clipboard = None
        return replace(
            state,
            busy=False,
            busy_label="",
            clipboard=clipboard,
            message=event.message,
            error=event.error,
        )

    # Mode transitions.

    @staticmethod
    def _enter(state: SessionState, mode: str, **changes) -> SessionState:
        if state.mode != MODE_NORMAL:
            return state
        return replace(state, mode=mode, **changes)

    def _search_entered(self, state: SessionState, _event: ev.SearchEntered) -> SessionState:
        return self._enter(state, MODE_SEARCH, input_value=state.search_query)

    def _deep_search_entered(self, state: SessionState, _event: ev.DeepSearchEntered) -> SessionState:
        return self._enter(
            state,
            MODE_DEEP_SEARCH,
            input_value="",
            deep_search=DeepSearchState(request_id=state.deep_search.request_id),
        )

    def _command_entered(self, state: SessionState, _event: ev.CommandEntered) -> SessionState:
        return self._enter(state, MODE_COMMAND, input_value="")

    def _help_entered(self, state: SessionState, _event: ev.HelpEntered) -> SessionState:
        return self._enter(state, MODE_HELP)

    def _bookmarks_entered(self, state: SessionState, _event: ev.BookmarksEntered) -> SessionState:
        return self._enter(state, MODE_BOOKMARKS, bookmark_index=0)

    def _confirm_requested(self, state: SessionState, event: ev.ConfirmRequested) -> SessionState:
        return self._enter(
            state,
            MODE_CONFIRM,
            pending_confirm=PendingConfirm(action=event.action, message=event.message, paths=event.paths),
        )

    def _input_requested(self, state: SessionState, event: ev.InputRequested) -> SessionState:
        return self._enter(
            state,
            MODE_TEXT_INPUT,
            input_value=event.initial,
            pending_input=PendingInput(action=event.action, prompt=event.prompt, target=event.target),
        )

    def _input_changed(self, state: SessionState, event: ev.InputChanged) -> SessionState:
        if state.mode == MODE_SEARCH:
            return self._search_query_changed(state, ev.SearchQueryChanged(event.value))
        if state.mode in {MODE_COMMAND, MODE_TEXT_INPUT, MODE_DEEP_SEARCH}:
            return replace(state, input_value=event.value)
        return state

    def _confirm_submitted(self, state: SessionState, _event: ev.ConfirmSubmitted) -> SessionState:
        if state.mode != MODE_CONFIRM:
            return state
        return replace(state, mode=MODE_NORMAL, pending_confirm=None)

    def _input_submitted(self, state: SessionState, _event: ev.InputSubmitted) -> SessionState:
        if state.mode != MODE_TEXT_INPUT:
            return state
        return replace(state, mode=MODE_NORMAL, pending_input=None, input_value="")

    def _cancelled(self, state: SessionState, _event: ev.Cancelled) -> SessionState:
        if state.mode == MODE_NORMAL:
            return state
        if state.mode == MODE_SEARCH:
            cleared = self._search_query_changed(state, ev.SearchQueryChanged(""))
            return replace(cleared, mode=MODE_NORMAL, input_value="")
        if state.mode == MODE_DEEP_SEARCH:
            return replace(
                state,
                mode=MODE_NORMAL,
                input_value="",
                deep_search=DeepSearchState(request_id=state.deep_search.request_id),
            )
        return replace(
            state,
            mode=MODE_NORMAL,
            input_value="",
            pending_confirm=None,
            pending_input=None,
        )

    def _returned_to_normal(self, state: SessionState, _event: ev.ReturnedToNormal) -> SessionState:
        if state.mode == MODE_NORMAL:
            return state
        deep_search = state.deep_search
        if state.mode == MODE_DEEP_SEARCH:
            deep_search = DeepSearchState(request_id=deep_search.request_id)
        return replace(
            state,
            mode=MODE_NORMAL,
            input_value="",
            pending_confirm=None,
            pending_input=None,
            deep_search=deep_search,
        )

    def _deep_search_requested(self, state: SessionState, event: ev.DeepSearchRequested) -> SessionState:
        if state.mode != MODE_DEEP_SEARCH:
            return state
        return replace(
            state,
            input_value=event.query,
            deep_search=DeepSearchState(
                query=event.query,
                request_id=event.request_id,
                loading=bool(event.query),
            ),
        )

    def _deep_search_loaded(self, state: SessionState, event: ev.DeepSearchLoaded) -> SessionState:
        current = state.deep_search
        if (
            state.mode != MODE_DEEP_SEARCH
            or event.request_id != current.request_id
            or event.root != state.current_path
            or event.query != current.query
        ):
            logger.debug("discarding stale deep-search results for %r", event.query)
            return state
        return replace(
            state,
            deep_search=replace(
                current,
                loading=False,
                results=event.results,
                truncated=event.truncated,
                selected_index=0,
            ),
        )

    def _deep_search_moved(self, state: SessionState, event: ev.DeepSearchMoved) -> SessionState:
        current = state.deep_search
        index = clamp_index(current.selected_index + event.delta, len(current.results))
        return replace(state, deep_search=replace(current, selected_index=index))

    def _bookmark_cursor_moved(self, state: SessionState, event: ev.BookmarkCursorMoved) -> SessionState:
        return replace(state, bookmark_index=clamp_index(state.bookmark_index + event.delta, event.count))

    # Messages.

    def _message_set(self, state: SessionState, event: ev.MessageSet) -> SessionState:
        return replace(state, message=event.text, error=None)

    def _error_set(self, state: SessionState, event: ev.ErrorSet) -> SessionState:
        return replace(state, error=event.text, message=None)

    def _messages_dismissed(self, state: SessionState, _event: ev.MessagesDismissed) -> SessionState:
        if state.message is None and state.error is None:
            return state
        return replace(state, message=None, error=None)

    def _quit_requested(self, state: SessionState, _event: ev.QuitRequested) -> SessionState:
        return replace(state, quit_requested=True)


__all__ = [
    "SessionMachine",
    "clamp_index",
    "filter_entries",
    "scroll_to_include",
]
