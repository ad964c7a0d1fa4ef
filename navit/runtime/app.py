"""Interactive application: key routing, normal-mode actions, and startup.

``NavitApp`` holds the session controller and turns key events into session
operations. Normal mode goes through the configurable resolver; every other
mode uses its fixed key table. Action failures land in the error slot and
never escape the key loop.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path

from ..commands.registry import (
    CommandContext,
    CommandResult,
    add_bookmark,
    complete_command_line,
    execute_command,
    remove_bookmark,
)
from ..errors import NavitError, describe_os_error
from ..file_model.fs import parent_directory, resolve_user_path
from ..input.bindings import KeyBindingResolver
from ..input.keys import KeyEvent
from ..input.modes import (
    BookmarkKeyCallbacks,
    ConfirmKeyCallbacks,
    DeepSearchKeyCallbacks,
    HelpKeyCallbacks,
    PromptKeyCallbacks,
    SearchKeyCallbacks,
    handle_bookmarks_key,
    handle_confirm_key,
    handle_deep_search_key,
    handle_help_key,
    handle_prompt_key,
    handle_search_key,
)
from ..render.screen import RenderContext, body_rows, render_screen
from ..session import events as ev
from ..session.controller import SessionController
from ..session.operations import FileOperationOrchestrator
from ..session.state import (
    MODE_BOOKMARKS,
    MODE_COMMAND,
    MODE_CONFIRM,
    MODE_DEEP_SEARCH,
    MODE_HELP,
    MODE_NORMAL,
    MODE_SEARCH,
    MODE_TEXT_INPUT,
    SessionState,
)
from . import config as config_store
from . import platform
from .background import Scheduler, ThreadedScheduler
from .config import NavitConfig

logger = logging.getLogger(__name__)

PREVIEW_SCROLL_STEP = 3
INPUT_NEW_FILE = "newFile"
INPUT_NEW_FOLDER = "newFolder"
INPUT_RENAME = "rename"
INPUT_BOOKMARK = "bookmark"
CONFIRM_DELETE = "delete"


class NavitApp:
    """Key-to-action glue around one ``SessionController``."""

    def __init__(
        self,
        start_path: Path,
        config: NavitConfig,
        *,
        scheduler: Scheduler | None = None,
        open_path: Callable[[Path], str | None] = platform.open_with_default,
        copy_text: Callable[[str], str | None] = platform.copy_to_clipboard,
        persist: bool = True,
        git_enabled: bool = True,
        style: str | None = None,
        no_color: bool = False,
    ) -> None:
        self.controller = SessionController(
            start_path,
            config,
            scheduler or ThreadedScheduler(),
            git_enabled=git_enabled,
        )
        self.resolver = KeyBindingResolver(config.keybindings)
        self.operations = FileOperationOrchestrator(self.controller)
        self.command_context = CommandContext(
            controller=self.controller,
            operations=self.operations,
            resolver=self.resolver,
            open_path=open_path,
            copy_text=copy_text,
            persist=persist,
        )
        self.persist = persist
        self.style_override = style
        self.no_color = no_color
        self._actions: dict[str, Callable[[], None]] = {
            "up": lambda: self.controller.move_selection(-1),
            "down": lambda: self.controller.move_selection(1),
            "parent": self.go_parent,
            "open": self.open_selected,
            "openExternal": self.open_external,
            "search": lambda: self.dispatch(ev.SearchEntered()),
            "deepSearch": lambda: self.dispatch(ev.DeepSearchEntered()),
            "command": lambda: self.dispatch(ev.CommandEntered()),
            "help": lambda: self.dispatch(ev.HelpEntered()),
            "toggleHidden": self.toggle_hidden,
            "copy": self.operations.copy,
            "cut": self.operations.cut,
            "paste": self.operations.paste,
            "delete": self.operations.request_delete,
            "select": self.toggle_selection,
            "selectAll": self.controller.select_all,
            "clearSelection": self.clear_selection,
            "quit": lambda: self.dispatch(ev.QuitRequested()),
            "refresh": self.controller.refresh,
            "copyPath": self.copy_path,
            "bookmark": self.prompt_bookmark,
            "goToBookmark": lambda: self.dispatch(ev.BookmarksEntered()),
            "newFile": lambda: self.dispatch(ev.InputRequested(INPUT_NEW_FILE, "New file:")),
            "newFolder": lambda: self.dispatch(ev.InputRequested(INPUT_NEW_FOLDER, "New folder:")),
            "rename": self.prompt_rename,
            "home": lambda: self.controller.navigate(Path.home()),
            "pageUp": lambda: self.controller.page_move(-1),
            "pageDown": lambda: self.controller.page_move(1),
            "previewUp": lambda: self.controller.scroll_preview(-PREVIEW_SCROLL_STEP),
            "previewDown": lambda: self.controller.scroll_preview(PREVIEW_SCROLL_STEP),
        }

    @property
    def state(self) -> SessionState:
        return self.controller.state

    @property
    def config(self) -> NavitConfig:
        return self.controller.config

    def dispatch(self, event: ev.Event) -> SessionState:
        return self.controller.dispatch(event)

    def start(self, preferred_path: Path | None = None) -> None:
        """Issue the initial directory load."""
        self.controller.navigate(self.state.current_path, preferred_path=preferred_path)
        if self.resolver.conflicts:
            self.dispatch(ev.MessageSet(f"Keybinding conflict: {self.resolver.conflicts[0].describe()}"))

    def pump(self) -> bool:
        return self.controller.pump()

    def resize(self, columns: int, lines: int) -> None:
        rows = body_rows(lines)
        if rows != self.state.viewport_rows:
            self.controller.resize_viewport(rows)

    def render(self, columns: int, lines: int) -> list[str]:
        context = RenderContext(
            width=columns,
            height=lines,
            resolver=self.resolver,
            style=self.style_override or self.config.style,
            no_color=self.no_color,
            show_hidden=self.controller.show_hidden,
            bookmarks=self.bookmark_items(),
        )
        return render_screen(self.state, context)

    def bookmark_items(self) -> tuple[tuple[str, str], ...]:
        return tuple(self.config.bookmarks.items())

    # Error boundary.

    def run_action(self, action: Callable[[], object]) -> None:
        """Run ``action``; validation and I/O failures go to the error slot."""
        try:
            action()
        except (OSError, NavitError) as exc:
            message = describe_os_error(exc)
            logger.info("action failed: %s", message)
            self.dispatch(ev.ErrorSet(message))

    def report(self, result: CommandResult) -> None:
        if result.error:
            self.dispatch(ev.ErrorSet(result.error))
        elif result.message:
            self.dispatch(ev.MessageSet(result.message))

    # Key routing.

    def handle_key(self, event: KeyEvent) -> None:
        mode = self.state.mode
        if mode == MODE_NORMAL:
            self.handle_normal_key(event)
        elif mode == MODE_CONFIRM:
            handle_confirm_key(event, ConfirmKeyCallbacks(answer=self.answer_confirm))
        elif mode == MODE_TEXT_INPUT:
            handle_prompt_key(
                event,
                self.state.input_value,
                PromptKeyCallbacks(
                    set_value=lambda value: self.dispatch(ev.InputChanged(value)),
                    submit=self.submit_input,
                    cancel=lambda: self.dispatch(ev.Cancelled()),
                ),
            )
        elif mode == MODE_COMMAND:
            handle_prompt_key(
                event,
                self.state.input_value,
                PromptKeyCallbacks(
                    set_value=lambda value: self.dispatch(ev.InputChanged(value)),
                    submit=self.submit_command,
                    cancel=lambda: self.dispatch(ev.Cancelled()),
                    complete=complete_command_line,
                ),
            )
        elif mode == MODE_SEARCH:
            handle_search_key(
                event,
                self.state.input_value,
                SearchKeyCallbacks(
                    set_query=lambda query: self.dispatch(ev.InputChanged(query)),
                    accept=lambda: self.dispatch(ev.ReturnedToNormal()),
                    cancel=lambda: self.dispatch(ev.Cancelled()),
                    move=self.controller.move_selection,
                ),
            )
        elif mode == MODE_DEEP_SEARCH:
            handle_deep_search_key(
                event,
                self.state.input_value,
                DeepSearchKeyCallbacks(
                    set_query=self.controller.set_deep_search_query,
                    activate=self.activate_deep_search_result,
                    cancel=lambda: self.dispatch(ev.Cancelled()),
                    move=lambda delta: self.dispatch(ev.DeepSearchMoved(delta)),
                ),
            )
        elif mode == MODE_HELP:
            handle_help_key(event, HelpKeyCallbacks(close=lambda: self.dispatch(ev.ReturnedToNormal())))
        elif mode == MODE_BOOKMARKS:
            handle_bookmarks_key(
                event,
                BookmarkKeyCallbacks(
                    move=lambda delta: self.dispatch(ev.BookmarkCursorMoved(delta, len(self.bookmark_items()))),
                    activate=self.activate_bookmark,
                    remove=self.remove_highlighted_bookmark,
                    close=lambda: self.dispatch(ev.ReturnedToNormal()),
                ),
            )

    def handle_normal_key(self, event: KeyEvent) -> None:
        self.dispatch(ev.MessagesDismissed())
        action = self.resolver.resolve(event)
        if action is None:
            return
        handler = self._actions.get(action)
        if handler is None:
            logger.debug("no handler for action %s", action)
            return
        self.run_action(handler)

    # Normal-mode actions.

    def go_parent(self) -> None:
        current = self.state.current_path
        parent = parent_directory(current)
        if parent is not None:
            self.controller.navigate(parent, preferred_path=current)

    def open_selected(self) -> None:
        entry = self.state.selected_entry
        if entry is None:
            return
        if entry.is_dir:
            self.controller.navigate(entry.path)
            return
        self.open_external()

    def open_external(self) -> None:
        entry = self.state.selected_entry
        if entry is None:
            return
        error = self.command_context.open_path(entry.path)
        if error:
            self.dispatch(ev.ErrorSet(error))
        else:
            self.dispatch(ev.MessageSet(f"Opened: {entry.name}"))

    def toggle_hidden(self) -> None:
        shown = self.controller.toggle_hidden()
        if self.persist:
            config_store.save_show_hidden(shown)
        self.dispatch(ev.MessageSet(f"Hidden files: {'shown' if shown else 'hidden'}"))

    def toggle_selection(self) -> None:
        self.controller.toggle_selection()

    def clear_selection(self) -> None:
        if self.state.selected_files:
            self.controller.clear_selection()
        elif self.state.search_query:
            self.controller.set_search_query("")

    def copy_path(self) -> None:
        entry = self.state.selected_entry
        target = entry.path if entry is not None else self.state.current_path
        error = self.command_context.copy_text(str(target))
        if error:
            self.dispatch(ev.ErrorSet(error))
        else:
            self.dispatch(ev.MessageSet(f"Copied path: {platform.display_path(target)}"))

    def prompt_bookmark(self) -> None:
        initial = self.state.current_path.name or "root"
        self.dispatch(ev.InputRequested(INPUT_BOOKMARK, "Bookmark name:", initial=initial))

    def prompt_rename(self) -> None:
        if not self.state.filtered_entries:
            return

        def prompt() -> None:
            entry = self.operations.rename_target()
            self.dispatch(ev.InputRequested(INPUT_RENAME, "Rename to:", initial=entry.name, target=entry.path))

        self.run_action(prompt)

    # Modal submissions.

    def answer_confirm(self, confirmed: bool) -> None:
        pending = self.state.pending_confirm
        self.dispatch(ev.ConfirmSubmitted(confirmed))
        if pending is None or not confirmed:
            return
        if pending.action == CONFIRM_DELETE:
            self.run_action(lambda: self.operations.delete(pending.paths))

    def submit_input(self, value: str) -> None:
        pending = self.state.pending_input
        self.dispatch(ev.InputSubmitted(value))
        if pending is None:
            return
        if pending.action == INPUT_NEW_FILE:
            self.run_action(lambda: self.dispatch(ev.MessageSet(self.operations.create_file(value))))
        elif pending.action == INPUT_NEW_FOLDER:
            self.run_action(lambda: self.dispatch(ev.MessageSet(self.operations.create_directory(value))))
        elif pending.action == INPUT_RENAME:
            self.run_action(lambda: self.dispatch(ev.MessageSet(self.operations.rename(value, source=pending.target))))
        elif pending.action == INPUT_BOOKMARK:
            self.run_action(lambda: self.report(add_bookmark(self.command_context, value)))

    def submit_command(self, line: str) -> None:
        self.dispatch(ev.ReturnedToNormal())
        self.report(execute_command(line, self.command_context))

    def activate_deep_search_result(self) -> None:
        search = self.state.deep_search
        if not search.results:
            return
        entry = search.results[search.selected_index]
        self.dispatch(ev.ReturnedToNormal())
        parent = entry.path.parent
        self.controller.navigate(parent, preferred_path=entry.path)

    def activate_bookmark(self) -> None:
        items = self.bookmark_items()
        if not items:
            self.dispatch(ev.ReturnedToNormal())
            return
        name, raw_path = items[min(self.state.bookmark_index, len(items) - 1)]
        self.dispatch(ev.ReturnedToNormal())
        target = resolve_user_path(raw_path, self.state.current_path)
        if not target.is_dir():
            self.dispatch(ev.ErrorSet(f"Bookmark {name} is not a directory: {target}"))
            return
        self.controller.navigate(target)

    def remove_highlighted_bookmark(self) -> None:
        items = self.bookmark_items()
        if not items:
            return
        name, _path = items[min(self.state.bookmark_index, len(items) - 1)]
        self.run_action(lambda: self.report(remove_bookmark(self.command_context, name)))
        self.dispatch(ev.BookmarkCursorMoved(0, len(self.bookmark_items())))


def write_cwd_file(cwd_file: Path, directory: Path) -> None:
    """Record the final directory for a shell wrapper to ``cd`` into."""
    try:
        Path(cwd_file).write_text(str(directory), encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write cwd file %s: %s", cwd_file, exc)


def run_app(
    start_path: Path,
    config: NavitConfig,
    *,
    style: str | None = None,
    no_color: bool = False,
    cwd_file: Path | None = None,
    preferred_path: Path | None = None,
) -> Path:
    """Run the interactive session until quit and return the final directory."""
    from .loop import RuntimeLoopCallbacks, run_main_loop
    from .terminal import TerminalController

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    app = NavitApp(start_path, config, style=style, no_color=no_color)
    columns, lines = terminal.size()
    app.resize(columns, lines)
    app.start(preferred_path)
    logger.info("session started in %s", start_path)

    run_main_loop(
        terminal,
        stdin_fd,
        RuntimeLoopCallbacks(
            handle_key=app.handle_key,
            pump=app.pump,
            resize=app.resize,
            render=app.render,
            should_quit=lambda: app.state.quit_requested,
            snapshot=lambda: app.state,
        ),
    )

    final_directory = app.state.current_path
    logger.info("session ended in %s", final_directory)
    if cwd_file is not None and app.config.exit_to_cwd:
        write_cwd_file(cwd_file, final_directory)
    return final_directory


__all__ = ["NavitApp", "run_app", "write_cwd_file"]
