"""Command-line interpreter for ``:`` commands.

A fixed registry of named commands with aliases. ``execute_command`` never
raises: unknown input, usage mistakes, I/O failures, and handler faults all
come back as an error ``CommandResult``.
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

from pygments.styles import get_all_styles

from ..errors import NavitError, NotADirectoryTarget, UsageError, describe_os_error
from ..file_model.fs import resolve_user_path
from ..input.bindings import DEFAULT_KEYBINDINGS, KeyBindingResolver
from ..input.keys import parse_combo
from ..runtime import config as config_store
from ..runtime import platform
from ..runtime.background import BackgroundJob
from ..session import events as ev
from ..session.controller import SessionController
from ..session.operations import FileOperationOrchestrator

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"true", "on", "yes", "1"}
_FALSE_WORDS = {"false", "off", "no", "0"}
_RAW_ARGUMENT_COMMANDS = {"shell", "sh", "!", "terminal", "term"}


@dataclass(frozen=True)
class CommandResult:
    success: bool
    message: str | None = None
    error: str | None = None


@dataclass
class CommandContext:
    """Everything a command handler may act on."""

    controller: SessionController
    operations: FileOperationOrchestrator
    resolver: KeyBindingResolver
    open_path: Callable[[Path], str | None] = platform.open_with_default
    copy_text: Callable[[str], str | None] = platform.copy_to_clipboard
    persist: bool = True


CommandAction = Callable[[list[str], CommandContext], CommandResult]


@dataclass(frozen=True)
class Command:
    name: str
    aliases: tuple[str, ...]
    description: str
    action: CommandAction = field(compare=False)

    def matches(self, token: str) -> bool:
        return token == self.name or token in self.aliases


def ok(message: str | None = None) -> CommandResult:
    return CommandResult(success=True, message=message)


def fail(error: str) -> CommandResult:
    return CommandResult(success=False, error=error)


def _joined(args: Sequence[str]) -> str:
    return " ".join(args).strip()


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise UsageError(f"Expected on/off, got: {value or '(empty)'}")


def _selected_entry(context: CommandContext):
    entry = context.controller.state.selected_entry
    if entry is None:
        raise UsageError("No file selected")
    return entry


# Handlers.


def _quit(_args: list[str], context: CommandContext) -> CommandResult:
    context.controller.dispatch(ev.QuitRequested())
    return ok()


def _cd(args: list[str], context: CommandContext) -> CommandResult:
    text = _joined(args)
    if not text:
        raise UsageError("Usage: :cd <path>")
    state = context.controller.state
    resolved = resolve_user_path(text, state.current_path)
    if not resolved.exists():
        return fail(f"Path not found: {resolved}")
    if not resolved.is_dir():
        raise NotADirectoryTarget(resolved)
    context.controller.navigate(resolved)
    return ok(f"Changed to {resolved}")


def _mkdir(args: list[str], context: CommandContext) -> CommandResult:
    name = _joined(args)
    if not name:
        raise UsageError("Usage: :mkdir <name>")
    return ok(context.operations.create_directory(name))


def _touch(args: list[str], context: CommandContext) -> CommandResult:
    name = _joined(args)
    if not name:
        raise UsageError("Usage: :touch <name>")
    return ok(context.operations.create_file(name))


def _rename(args: list[str], context: CommandContext) -> CommandResult:
    name = _joined(args)
    if not name:
        raise UsageError("Usage: :rename <new-name>")
    return ok(context.operations.rename(name))


def _update_config(context: CommandContext, **changes) -> None:
    controller = context.controller
    controller.update_config(replace(controller.config, **changes))


def _store_bookmarks(context: CommandContext, bookmarks: dict[str, str]) -> None:
    _update_config(context, bookmarks=bookmarks)
    if context.persist:
        config_store.save_bookmarks(bookmarks)


def add_bookmark(context: CommandContext, name: str) -> CommandResult:
    """Bookmark the current directory under ``name``, replacing any previous one."""
    name = name.strip()
    if not name:
        raise UsageError("Usage: :bookmark add <name>")
    bookmarks = dict(context.controller.config.bookmarks)
    bookmarks[name] = str(context.controller.state.current_path)
    _store_bookmarks(context, bookmarks)
    return ok(f"Added bookmark: {name}")


def remove_bookmark(context: CommandContext, name: str) -> CommandResult:
    name = name.strip()
    if not name:
        raise UsageError("Usage: :bookmark remove <name>")
    bookmarks = dict(context.controller.config.bookmarks)
    if name not in bookmarks:
        return fail(f"Bookmark not found: {name}")
    del bookmarks[name]
    _store_bookmarks(context, bookmarks)
    return ok(f"Removed bookmark: {name}")


def _bookmark(args: list[str], context: CommandContext) -> CommandResult:
    subcommand = args[0].lower() if args else ""
    name = _joined(args[1:])

    if subcommand == "add":
        return add_bookmark(context, name)

    if subcommand in {"remove", "delete", "rm"}:
        return remove_bookmark(context, name)

    if subcommand == "list":
        bookmarks = context.controller.config.bookmarks
        if not bookmarks:
            return ok("No bookmarks saved")
        listing = ", ".join(f"{key}: {platform.display_path(Path(value))}" for key, value in bookmarks.items())
        return ok(f"Bookmarks: {listing}")

    raise UsageError("Usage: :bookmark <add|remove|list> [name]")


def _set_keys(action: str, combos: list[str], context: CommandContext) -> CommandResult:
    if action not in DEFAULT_KEYBINDINGS:
        return fail(f"Unknown action: {action}")
    if not combos:
        raise UsageError(f"Usage: :set keys.{action} <combo> [combo...]")
    invalid = [combo for combo in combos if parse_combo(combo) is None]
    if invalid:
        return fail(f"Invalid key combination: {invalid[0]}")
    keybindings = dict(context.controller.config.keybindings)
    keybindings[action] = tuple(combos)
    context.resolver.update(keybindings)
    _update_config(context, keybindings=context.resolver.bindings)
    if context.persist:
        config_store.save_keybindings(context.resolver.bindings)
    message = f"{action} bound to {context.resolver.display_keys(action) or '(nothing)'}"
    if context.resolver.conflicts:
        message += f" (warning: {context.resolver.conflicts[0].describe()})"
    return ok(message)


def _set(args: list[str], context: CommandContext) -> CommandResult:
    if not args:
        raise UsageError("Usage: :set <key> <value>")
    key, values = args[0], args[1:]
    value = _joined(values)

    if key.startswith("keys."):
        return _set_keys(key[len("keys."):], values, context)

    if key == "hidden":
        show_hidden = _parse_bool(value)
        _update_config(context, show_hidden=show_hidden)
        if context.persist:
            config_store.save_show_hidden(show_hidden)
        return ok(f"Hidden files: {'shown' if show_hidden else 'hidden'}")

    if key == "confirmDelete":
        confirm = _parse_bool(value)
        _update_config(context, confirm_delete=confirm)
        if context.persist:
            config_store.save_confirm_delete(confirm)
        return ok(f"Confirm delete: {'on' if confirm else 'off'}")

    if key == "exitToCwd":
        exit_to_cwd = _parse_bool(value)
        _update_config(context, exit_to_cwd=exit_to_cwd)
        if context.persist:
            config_store.save_exit_to_cwd(exit_to_cwd)
        return ok(f"Exit to cwd: {'on' if exit_to_cwd else 'off'}")

    if key == "style":
        if value not in set(get_all_styles()):
            return fail(f"Unknown style: {value or '(empty)'}")
        _update_config(context, style=value)
        if context.persist:
            config_store.save_style(value)
        return ok(f"Style set to: {value}")

    if key == "previewMaxBytes":
        try:
            max_bytes = int(value)
        except ValueError:
            raise UsageError("Usage: :set previewMaxBytes <bytes>") from None
        if max_bytes <= 0:
            raise UsageError("previewMaxBytes must be positive")
        _update_config(context, preview_max_bytes=max_bytes)
        if context.persist:
            config_store.save_preview_max_bytes(max_bytes)
        return ok(f"Preview limit set to {max_bytes} bytes")

    return fail(f"Unknown setting: {key}")


def _open(_args: list[str], context: CommandContext) -> CommandResult:
    entry = _selected_entry(context)
    error = context.open_path(entry.path)
    if error:
        return fail(error)
    return ok(f"Opened: {entry.name}")


def _yank(_args: list[str], context: CommandContext) -> CommandResult:
    entry = _selected_entry(context)
    error = context.copy_text(str(entry.path))
    if error:
        return fail(error)
    return ok("Path copied to clipboard")


def _refresh(_args: list[str], context: CommandContext) -> CommandResult:
    context.controller.refresh()
    return ok("Directory refreshed")


def _home(_args: list[str], context: CommandContext) -> CommandResult:
    context.controller.navigate(Path.home())
    return ok()


def _help(_args: list[str], context: CommandContext) -> CommandResult:
    context.controller.dispatch(ev.HelpEntered())
    return ok()


def _shell(args: list[str], context: CommandContext) -> CommandResult:
    command = _joined(args)
    if not command:
        raise UsageError("Usage: :shell <command>")
    cwd = context.controller.state.current_path

    def run() -> ev.Event:
        result = platform.run_shell_command(command, cwd)
        if result.returncode != 0:
            return ev.FileOperationFinished(error=result.describe(command))
        return ev.FileOperationFinished(message=result.describe(command))

    context.controller.run_background(
        BackgroundJob(
            label=f"shell:{command}",
            run=run,
            on_error=lambda exc: ev.FileOperationFinished(error=f"{command}: {describe_os_error(exc, 'failed')}"),
        ),
        busy_label=f"Running {command}",
    )
    return ok(f"Running: {command}")


COMMANDS: tuple[Command, ...] = (
    Command("quit", ("q", "exit"), "Exit navit", _quit),
    Command("cd", ("goto", "go"), "Change directory", _cd),
    Command("mkdir", ("md", "newdir"), "Create new directory", _mkdir),
    Command("touch", ("new", "newfile", "create"), "Create new file", _touch),
    Command("rename", ("mv", "ren"), "Rename selected file", _rename),
    Command("bookmark", ("bm",), "Manage bookmarks (add|remove|list)", _bookmark),
    Command("set", ("config",), "Change configuration", _set),
    Command("open", ("o", "run"), "Open file with system app", _open),
    Command("yank", ("copy-path", "cp"), "Copy path to clipboard", _yank),
    Command("refresh", ("reload", "r"), "Refresh directory", _refresh),
    Command("home", ("~",), "Go to home directory", _home),
    Command("help", ("h", "?"), "Show help", _help),
    Command("shell", ("!", "sh", "terminal", "term"), "Run a shell command in this directory", _shell),
)


def tokenize(line: str) -> list[str]:
    """Split a command line shell-style; unbalanced quotes fall back to whitespace."""
    try:
        return shlex.split(line)
    except ValueError:
        return line.split()


def find_command(token: str) -> Command | None:
    lowered = token.lower()
    for command in COMMANDS:
        if command.matches(lowered):
            return command
    return None


def execute_command(line: str, context: CommandContext) -> CommandResult:
    """Parse and run one command line."""
    stripped = line.strip()
    if not stripped:
        return fail("No command entered")
    # "!ls" is shorthand for "! ls".
    if stripped.startswith("!") and len(stripped) > 1 and not stripped[1].isspace():
        stripped = "! " + stripped[1:]

    parts = stripped.split(maxsplit=1)
    if parts[0].lower() in _RAW_ARGUMENT_COMMANDS:
        # Shell commands keep their own quoting.
        tokens = parts
    else:
        tokens = tokenize(stripped)
    if not tokens:
        return fail("No command entered")

    command = find_command(tokens[0])
    if command is None:
        return fail(f"Unknown command: {tokens[0].lower()}")

    try:
        result = command.action(tokens[1:], context)
    except NavitError as exc:
        return fail(str(exc))
    except OSError as exc:
        logger.warning("command %s failed: %s", command.name, exc)
        return fail(describe_os_error(exc, "Command failed"))
    except Exception as exc:
        logger.exception("command %s raised", command.name)
        return fail(str(exc) or "Command failed")
    logger.info("command %s -> %s", command.name, "ok" if result.success else result.error)
    return result


def command_suggestions(prefix: str) -> list[str]:
    """Command names whose name or an alias starts with ``prefix``."""
    needle = prefix.strip().lower()
    if not needle:
        return [command.name for command in COMMANDS]
    return [
        command.name
        for command in COMMANDS
        if command.name.startswith(needle) or any(alias.startswith(needle) for alias in command.aliases)
    ]


def complete_command_line(line: str) -> str | None:
    """Tab-complete the command word when exactly one command matches."""
    if " " in line.strip():
        return None
    suggestions = command_suggestions(line)
    if len(suggestions) != 1:
        return None
    return suggestions[0] + " "


def all_commands() -> list[tuple[str, str]]:
    """``(name, description)`` for every command, in registry order."""
    return [(command.name, command.description) for command in COMMANDS]


__all__ = [
    "COMMANDS",
    "Command",
    "CommandContext",
    "CommandResult",
    "add_bookmark",
    "all_commands",
    "command_suggestions",
    "complete_command_line",
    "execute_command",
    "find_command",
    "remove_bookmark",
    "tokenize",
]
