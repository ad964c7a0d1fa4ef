"""Help screen content built from the live keybinding table and command list."""

from __future__ import annotations

from ..commands.registry import COMMANDS
from ..input.bindings import ACTION_ORDER, KeyBindingResolver

ACTION_LABELS: dict[str, str] = {
    "up": "move up",
    "down": "move down",
    "parent": "parent directory",
    "open": "open directory / preview file",
    "openExternal": "open with system app",
    "search": "filter this directory",
    "deepSearch": "find by name below here",
    "command": "command line",
    "help": "this help",
    "toggleHidden": "show/hide hidden files",
    "copy": "copy to clipboard",
    "cut": "cut to clipboard",
    "paste": "paste clipboard here",
    "delete": "delete",
    "select": "toggle selection",
    "selectAll": "select all",
    "clearSelection": "clear selection",
    "quit": "quit",
    "refresh": "reload directory",
    "copyPath": "copy path to OS clipboard",
    "bookmark": "bookmark this directory",
    "goToBookmark": "bookmarks",
    "newFile": "new file",
    "newFolder": "new folder",
    "rename": "rename",
    "home": "home directory",
    "pageUp": "page up",
    "pageDown": "page down",
    "previewUp": "scroll preview up",
    "previewDown": "scroll preview down",
}

_HEADING = "\033[1;38;5;81m{}\033[0m"
_KEY = "\033[38;5;229m{:<18}\033[0m {}"


def help_lines(resolver: KeyBindingResolver) -> list[str]:
    """Keys section followed by the command reference."""
    lines = [_HEADING.format("Keys"), ""]
    for action in ACTION_ORDER:
        keys = resolver.display_keys(action) or "(unbound)"
        lines.append("  " + _KEY.format(keys, ACTION_LABELS.get(action, action)))
    lines.extend(["", _HEADING.format("Commands"), ""])
    for command in COMMANDS:
        names = ":" + command.name
        if command.aliases:
            names += " (" + ", ".join(command.aliases) + ")"
        lines.append("  " + _KEY.format(names, command.description))
    lines.extend(["", "\033[2;38;5;250mPress ? / Esc / q to close\033[0m"])
    return lines


__all__ = ["ACTION_LABELS", "help_lines"]
