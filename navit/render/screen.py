"""Frame rendering: a pure function from session snapshot to screen rows.

Layout is one header row, a two-pane body (listing and preview), a status
row, and a prompt row. Modal modes replace the body or the prompt.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from ..file_model.types import (
    GIT_ADDED,
    GIT_DELETED,
    GIT_MODIFIED,
    GIT_RENAMED,
    GIT_STAGED,
    GIT_UNTRACKED,
    Entry,
)
from ..input.bindings import KeyBindingResolver
from ..runtime.platform import display_path
from ..session.state import (
    CLIPBOARD_CUT,
    MODE_BOOKMARKS,
    MODE_COMMAND,
    MODE_CONFIRM,
    MODE_DEEP_SEARCH,
    MODE_HELP,
    MODE_SEARCH,
    MODE_TEXT_INPUT,
    SessionState,
)
from .ansi import fit_ansi_line
from .help import help_lines
from .highlight import highlight_lines

CHROME_ROWS = 3
MIN_LIST_WIDTH = 20
LIST_WIDTH_RATIO = 0.4

_REVERSE = "\033[7m"
_RESET = "\033[0m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_BLUE = "\033[34m"
_CYAN = "\033[36m"

_GIT_MARKS = {
    GIT_MODIFIED: ("M", _YELLOW),
    GIT_ADDED: ("A", _GREEN),
    GIT_DELETED: ("D", _RED),
    GIT_RENAMED: ("R", _CYAN),
    GIT_UNTRACKED: ("?", _DIM),
    GIT_STAGED: ("S", _GREEN),
}


@dataclass(frozen=True)
class RenderContext:
    """Display settings that are not part of the session snapshot."""

    width: int
    height: int
    resolver: KeyBindingResolver
    style: str = "monokai"
    no_color: bool = False
    show_hidden: bool = False
    bookmarks: tuple[tuple[str, str], ...] = ()


def body_rows(height: int) -> int:
    """Rows available to the listing for a terminal ``height``."""
    return max(1, height - CHROME_ROWS)


def list_width(width: int) -> int:
    if width < MIN_LIST_WIDTH * 2:
        return max(1, width // 2)
    return max(MIN_LIST_WIDTH, int(width * LIST_WIDTH_RATIO))


def format_size(size: int | None) -> str:
    if size is None:
        return ""
    if size < 1024:
        return f"{size}B"
    value = size / 1024
    for unit in ("K", "M"):
        if value < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}G"


@lru_cache(maxsize=8)
def _cached_preview_lines(content: str, path: Path, style: str, no_color: bool) -> tuple[str, ...]:
    return tuple(highlight_lines(content, path, style, no_color))


def _paint(text: str, code: str, no_color: bool) -> str:
    if no_color or not code:
        return text
    return f"{code}{text}{_RESET}"


def _entry_row(entry: Entry, *, cursor: bool, marked: bool, width: int, no_color: bool) -> str:
    mark = "*" if marked else " "
    git_char, git_color = _GIT_MARKS.get(entry.git_status or "", (" ", ""))
    suffix = "/" if entry.is_dir else ""
    if entry.is_symlink:
        suffix += "@"
    name = entry.name + suffix
    size = "" if entry.is_dir else format_size(entry.size)
    name_width = max(1, width - 3 - len(size) - 1)
    if len(name) > name_width:
        name = name[: max(1, name_width - 1)] + "~"
    plain = f"{mark}{git_char} {name:<{name_width}} {size}"
    if cursor:
        return _REVERSE + fit_ansi_line(plain, width) + _RESET
    if no_color:
        return fit_ansi_line(plain, width)
    name_color = _BLUE + _BOLD if entry.is_dir else (_DIM if entry.hidden else "")
    painted = (
        _paint(mark, _YELLOW, False)
        + _paint(git_char, git_color, False)
        + " "
        + _paint(f"{name:<{name_width}}", name_color, False)
        + " "
        + _paint(size, _DIM, False)
    )
    return fit_ansi_line(painted, width)


def _listing_rows(state: SessionState, rows: int, width: int, no_color: bool) -> list[str]:
    entries = state.filtered_entries
    if not entries:
        if state.loading:
            note = "loading..."
        elif state.search_query:
            note = "no matches"
        else:
            note = "(empty)"
        return [fit_ansi_line(_paint(f"  {note}", _DIM, no_color), width)] + [" " * width] * (rows - 1)
    out: list[str] = []
    for offset in range(rows):
        idx = state.scroll_offset + offset
        if idx >= len(entries):
            out.append(" " * width)
            continue
        entry = entries[idx]
        out.append(
            _entry_row(
                entry,
                cursor=idx == state.selected_index,
                marked=entry.path in state.selected_files,
                width=width,
                no_color=no_color,
            )
        )
    return out


def _deep_search_rows(state: SessionState, rows: int, width: int, no_color: bool) -> list[str]:
    search = state.deep_search
    if not search.results:
        if search.loading:
            note = "searching..."
        elif search.query:
            note = "no matches"
        else:
            note = "type to search below " + display_path(state.current_path)
        return [fit_ansi_line(_paint(f"  {note}", _DIM, no_color), width)] + [" " * width] * (rows - 1)
    start = max(0, search.selected_index - rows + 1)
    out: list[str] = []
    for idx in range(start, start + rows):
        if idx >= len(search.results):
            out.append(" " * width)
            continue
        entry = search.results[idx]
        try:
            label = str(entry.path.relative_to(state.current_path))
        except ValueError:
            label = str(entry.path)
        if entry.is_dir:
            label += "/"
        text = fit_ansi_line(f"  {label}", width)
        out.append(_REVERSE + text + _RESET if idx == search.selected_index and not no_color else text)
    return out


def _preview_rows(state: SessionState, rows: int, width: int, ctx: RenderContext) -> list[str]:
    preview = state.preview
    selected = state.selected_entry
    if preview.error:
        lines = [_paint(preview.error, _RED, ctx.no_color)]
    elif selected is None:
        lines = []
    elif selected.is_dir:
        lines = [_paint(f"{selected.name}/", _BLUE + _BOLD, ctx.no_color)]
        if selected.permissions:
            lines.append(_paint(selected.permissions, _DIM, ctx.no_color))
    elif preview.path != selected.path:
        lines = [_paint("loading...", _DIM, ctx.no_color)]
    elif preview.is_binary:
        lines = [_paint(f"[binary file, {format_size(selected.size)}]", _DIM, ctx.no_color)]
    else:
        source = _cached_preview_lines(preview.content, selected.path, ctx.style, ctx.no_color)
        lines = list(source[preview.scroll:])
        if preview.truncated and len(lines) < rows:
            lines.append(_paint("[truncated]", _DIM, ctx.no_color))
    lines = lines[:rows]
    out = [fit_ansi_line(line, width) for line in lines]
    out.extend(" " * width for _ in range(rows - len(out)))
    return out


def _full_width_rows(lines: list[str], rows: int, width: int) -> list[str]:
    out = [fit_ansi_line(line, width) for line in lines[:rows]]
    out.extend(" " * width for _ in range(rows - len(out)))
    return out


def _bookmark_lines(state: SessionState, ctx: RenderContext) -> list[str]:
    if not ctx.bookmarks:
        return ["  no bookmarks (press b in normal mode to add one)"]
    lines = []
    for idx, (name, path) in enumerate(ctx.bookmarks):
        text = f"  {name:<16} {display_path(Path(path))}"
        if idx == state.bookmark_index:
            text = text if ctx.no_color else _REVERSE + text + _RESET
        lines.append(text)
    return lines


def _header(state: SessionState, ctx: RenderContext) -> str:
    parts = [_paint(" navit ", _BOLD + _CYAN, ctx.no_color), display_path(state.current_path)]
    info = state.git_info
    if info is not None and info.is_repo:
        dirty = "" if info.is_clean else "*"
        parts.append(_paint(f"[{info.branch or '?'}{dirty}]", _GREEN if info.is_clean else _YELLOW, ctx.no_color))
    if ctx.show_hidden:
        parts.append(_paint("hidden", _DIM, ctx.no_color))
    if state.loading and state.target_path != state.current_path:
        parts.append(_paint(f"-> {display_path(state.target_path)}", _DIM, ctx.no_color))
    return fit_ansi_line(" ".join(parts), ctx.width)


def _status(state: SessionState, ctx: RenderContext) -> str:
    if state.error:
        return fit_ansi_line(_paint(state.error, _RED, ctx.no_color), ctx.width)
    if state.busy:
        return fit_ansi_line(_paint(f"{state.busy_label}...", _YELLOW, ctx.no_color), ctx.width)
    if state.message:
        return fit_ansi_line(_paint(state.message, _GREEN, ctx.no_color), ctx.width)
    total = len(state.filtered_entries)
    position = f"{state.selected_index + 1}/{total}" if total else "0/0"
    parts = [position]
    if state.search_query:
        parts.append(f"filter: {state.search_query}")
    if state.selected_files:
        parts.append(f"{len(state.selected_files)} selected")
    if state.clipboard is not None:
        verb = "cut" if state.clipboard.operation == CLIPBOARD_CUT else "copy"
        parts.append(f"clipboard: {verb} {len(state.clipboard.entries)}")
    selected = state.selected_entry
    if selected is not None and selected.permissions:
        parts.append(selected.permissions)
        if selected.modified is not None:
            parts.append(selected.modified.strftime("%Y-%m-%d %H:%M"))
    return fit_ansi_line(_paint("  ".join(parts), _DIM, ctx.no_color), ctx.width)


def _prompt(state: SessionState, ctx: RenderContext) -> str:
    mode = state.mode
    if mode == MODE_SEARCH:
        text = f"/{state.input_value}_"
    elif mode == MODE_COMMAND:
        text = f":{state.input_value}_"
    elif mode == MODE_DEEP_SEARCH:
        suffix = " (first 500)" if state.deep_search.truncated else ""
        text = f"find: {state.input_value}_{suffix}"
    elif mode == MODE_TEXT_INPUT and state.pending_input is not None:
        text = f"{state.pending_input.prompt} {state.input_value}_"
    elif mode == MODE_CONFIRM and state.pending_confirm is not None:
        text = f"{state.pending_confirm.message} [y/n]"
    else:
        hint = ctx.resolver.display_key("help")
        text = _paint(f"{hint} help" if hint else "", _DIM, ctx.no_color)
    return fit_ansi_line(text, ctx.width)


def render_screen(state: SessionState, ctx: RenderContext) -> list[str]:
    """Return exactly ``ctx.height`` rows, each exactly ``ctx.width`` columns wide."""
    width = max(1, ctx.width)
    rows = body_rows(ctx.height)
    out = [_header(state, ctx)]

    if state.mode == MODE_HELP:
        out.extend(_full_width_rows(help_lines(ctx.resolver), rows, width))
    elif state.mode == MODE_BOOKMARKS:
        out.extend(_full_width_rows(_bookmark_lines(state, ctx), rows, width))
    else:
        left = list_width(width)
        right = max(0, width - left - 1)
        if state.mode == MODE_DEEP_SEARCH:
            listing = _deep_search_rows(state, rows, left, ctx.no_color)
        else:
            listing = _listing_rows(state, rows, left, ctx.no_color)
        preview = _preview_rows(state, rows, right, ctx)
        separator = _paint("│", _DIM, ctx.no_color)
        out.extend(f"{listing[i]}{separator}{preview[i]}" for i in range(rows))

    out.append(_status(state, ctx))
    out.append(_prompt(state, ctx))
    return out[: max(CHROME_ROWS, ctx.height)]


__all__ = [
    "CHROME_ROWS",
    "RenderContext",
    "body_rows",
    "format_size",
    "list_width",
    "render_screen",
]
