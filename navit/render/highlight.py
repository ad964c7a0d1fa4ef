"""Preview text sanitization and Pygments syntax highlighting."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..runtime.config import DEFAULT_STYLE

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes so previews cannot move the cursor or ring the bell."""
    if _CONTROL_RE.search(source) is None:
        return source
    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
        elif code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
        else:
            out.append(ch)
    return "".join(out)


@lru_cache(maxsize=16)
def _formatter_for_style(style: str) -> Terminal256Formatter:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.warning("unknown Pygments style %r; using %s", style, DEFAULT_STYLE)
        style = DEFAULT_STYLE
    return Terminal256Formatter(style=style)


def _lexer_for(path: Path, source: str):
    try:
        return get_lexer_for_filename(path.name, source, stripnl=False)
    except ClassNotFound:
        return TextLexer(stripnl=False)


def highlight_lines(source: str, path: Path, style: str = DEFAULT_STYLE, no_color: bool = False) -> list[str]:
    """Split ``source`` into display lines, colored for ``path``'s language."""
    text = sanitize_terminal_text(source.replace("\r\n", "\n"))
    if not text:
        return []
    plain = text.split("\n")
    if text.endswith("\n"):
        plain.pop()
    if no_color:
        return plain
    rendered = highlight(text, _lexer_for(path, text), _formatter_for_style(style)).split("\n")
    # Pygments may add a trailing newline; keep one rendered row per source line.
    rendered = rendered[: len(plain)]
    rendered.extend(plain[len(rendered):])
    return rendered


__all__ = ["highlight_lines", "sanitize_terminal_text"]
