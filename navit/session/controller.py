"""Directory session coordinator.

Owns the current ``SessionState`` snapshot, issues tagged background requests
(directory listings, git status, previews, deep search), and commits their
results through ``SessionMachine.apply``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from ..errors import describe_os_error
from ..file_model.fs import list_directory
from ..file_model.search import find_entries_by_name
from ..git_status import collect_git_info
from ..runtime.background import BackgroundJob, Scheduler
from ..runtime.config import NavitConfig
from . import events as ev
from .machine import SessionMachine
from .preview import PreviewLoader
from .state import DEFAULT_VIEWPORT_ROWS, SessionState

logger = logging.getLogger(__name__)


class SessionController:
    """Single-threaded coordinator around the pure session machine."""

    def __init__(
        self,
        start_path: Path,
        config: NavitConfig,
        scheduler: Scheduler,
        *,
        viewport_rows: int = DEFAULT_VIEWPORT_ROWS,
        git_enabled: bool = True,
    ) -> None:
        self.config = config
        self.scheduler = scheduler
        self.machine = SessionMachine()
        self.show_hidden = config.show_hidden
        self.git_enabled = git_enabled
        self._state = SessionState.initial(Path(start_path), viewport_rows)
        self._next_request_id = 0
        self._navigation_preferred: Path | None = None
        self.preview_loader = PreviewLoader(scheduler, self._commit, lambda: self.config.preview_max_bytes)

    @property
    def state(self) -> SessionState:
        return self._state

    def _allocate_request_id(self) -> int:
        self._next_request_id += 1
        return self._next_request_id

    def _commit(self, event: ev.Event) -> SessionState:
        self._state = self.machine.apply(self._state, event)
        return self._state

    def dispatch(self, event: ev.Event) -> SessionState:
        """Apply ``event`` and keep the preview in step with the cursor."""
        self._commit(event)
        self._sync_preview()
        return self._state

    def _sync_preview(self, force: bool = False) -> None:
        selected = self._state.selected_entry
        target = selected.path if selected is not None else None
        if not force and self._state.preview.path == target:
            return
        self.preview_loader.load_preview(selected)

    def update_config(self, config: NavitConfig) -> None:
        """Swap configuration; a changed hidden-file flag reloads the listing."""
        hidden_changed = config.show_hidden != self.show_hidden
        self.config = config
        self.show_hidden = config.show_hidden
        if hidden_changed:
            self.refresh()

    # Directory loading.

    def _request_directory(self, path: Path, *, refresh: bool, preferred_path: Path | None) -> int:
        request_id = self._allocate_request_id()
        show_hidden = self.show_hidden
        self._commit(ev.DirectoryRequested(path, request_id))

        def run() -> ev.Event:
            entries = tuple(list_directory(path, show_hidden))
            return ev.DirectoryLoaded(
                path,
                request_id,
                entries,
                refresh=refresh,
                preferred_path=preferred_path,
            )

        self.scheduler.submit(
            BackgroundJob(
                label=f"list:{path}",
                run=run,
                on_error=lambda exc: ev.DirectoryLoadFailed(path, request_id, describe_os_error(exc)),
            )
        )
        return request_id

    def navigate(self, path: Path, preferred_path: Path | None = None) -> int:
        """Request a listing of ``path``; only the newest request is ever committed."""
        path = Path(path)
        logger.debug("navigate requested: %s", path)
        self._navigation_preferred = preferred_path
        return self._request_directory(path, refresh=False, preferred_path=preferred_path)

    def refresh(self, preferred_path: Path | None = None) -> int:
        """Reload the current directory keeping cursor and surviving selection.

        While a navigation to another directory is still loading, its target
        is listed again instead, so the pending navigation is never superseded
        by a listing of the directory being left.
        """
        state = self._state
        if state.loading and state.target_path != state.current_path:
            logger.debug("refresh redirected to pending navigation: %s", state.target_path)
            return self._request_directory(
                state.target_path,
                refresh=False,
                preferred_path=self._navigation_preferred,
            )
        return self._request_directory(state.current_path, refresh=True, preferred_path=preferred_path)

    def toggle_hidden(self) -> bool:
        self.show_hidden = not self.show_hidden
        self.config = replace(self.config, show_hidden=self.show_hidden)
        self.refresh()
        return self.show_hidden

    def _request_git_info(self, path: Path) -> None:
        if not self.git_enabled:
            return
        request_id = self._allocate_request_id()
        self._commit(ev.GitInfoRequested(path, request_id))
        self.scheduler.submit(
            BackgroundJob(
                label=f"git:{path}",
                run=lambda: ev.GitInfoLoaded(path, request_id, collect_git_info(path)),
            )
        )

    def pump(self) -> bool:
        """Apply every completed background result; return whether state changed."""
        changed = False
        for event in self.scheduler.drain():
            before = self._state
            self._commit(event)
            if self._state is before:
                continue
            changed = True
            if isinstance(event, ev.DirectoryLoaded):
                logger.info("listed %s (%d entries)", event.path, len(event.entries))
                self._request_git_info(event.path)
                self._sync_preview(force=True)
            elif isinstance(event, ev.FileOperationFinished) and event.refresh:
                self.refresh()
            else:
                self._sync_preview()
        return changed

    # List view.

    def set_search_query(self, query: str) -> SessionState:
        return self.dispatch(ev.SearchQueryChanged(query))

    def move_selection(self, delta: int) -> SessionState:
        return self.dispatch(ev.SelectionMoved(delta))

    def page_move(self, direction: int) -> SessionState:
        return self.dispatch(ev.PageMoved(direction))

    def place_cursor(self, path: Path) -> SessionState:
        return self.dispatch(ev.CursorPlaced(path))

    def resize_viewport(self, rows: int) -> SessionState:
        return self.dispatch(ev.ViewportResized(rows))

    def toggle_selection(self, path: Path | None = None) -> SessionState:
        """Toggle ``path`` (default: the entry under the cursor) in the selection."""
        if path is None:
            selected = self._state.selected_entry
            if selected is None:
                return self._state
            path = selected.path
        return self.dispatch(ev.SelectionToggled(path))

    def select_all(self) -> SessionState:
        return self.dispatch(ev.AllSelected())

    def clear_selection(self) -> SessionState:
        return self.dispatch(ev.SelectionCleared())

    def scroll_preview(self, delta: int) -> SessionState:
        return self.dispatch(ev.PreviewScrolled(delta))

    # Deep search.

    def set_deep_search_query(self, query: str) -> int:
        """Start a recursive name search under the current directory."""
        request_id = self._allocate_request_id()
        self.dispatch(ev.DeepSearchRequested(query, request_id))
        if not query:
            return request_id
        root = self._state.current_path
        show_hidden = self.show_hidden

        def run() -> ev.Event:
            results, truncated = find_entries_by_name(root, query, show_hidden)
            return ev.DeepSearchLoaded(root, query, request_id, tuple(results), truncated)

        self.scheduler.submit(BackgroundJob(label=f"deep-search:{query}", run=run))
        return request_id

    # Background work started on behalf of actions.

    def run_background(self, job: BackgroundJob, busy_label: str | None = None) -> None:
        """Submit ``job``; with ``busy_label`` the session shows a busy indicator."""
        if busy_label is not None:
            self.dispatch(ev.FileOperationStarted(busy_label))
        self.scheduler.submit(job)


__all__ = ["SessionController"]
