"""Key events and key-combination strings.

A physical key press and a configured combination share one representation,
``KeyEvent``, so matching is a plain equality test on
``(key, ctrl, meta, shift)``.
"""

from __future__ import annotations

from dataclasses import dataclass

_KEY_ALIASES = {
    " ": "space",
    "enter": "return",
    "esc": "escape",
    "del": "delete",
    "bs": "backspace",
    "pgup": "pageup",
    "pgdn": "pagedown",
    "pgdown": "pagedown",
    "arrowup": "up",
    "arrowdown": "down",
    "arrowleft": "left",
    "arrowright": "right",
}
_CTRL_MODIFIERS = {"ctrl", "control"}
_META_MODIFIERS = {"meta", "alt", "option", "cmd", "command", "win"}
_SHIFT_MODIFIERS = {"shift"}
_DISPLAY_NAMES = {
    "return": "Enter",
    "escape": "Esc",
    "backspace": "Bksp",
    "delete": "Del",
    "space": "Space",
    "tab": "Tab",
    "up": "Up",
    "down": "Down",
    "left": "Left",
    "right": "Right",
    "pageup": "PgUp",
    "pagedown": "PgDn",
    "home": "Home",
    "end": "End",
}


@dataclass(frozen=True)
class KeyEvent:
    """One key press, or one configured key combination."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def is_printable(self) -> bool:
        """True for plain text input (no ctrl/meta, one visible character or space)."""
        if self.ctrl or self.meta:
            return False
        return self.key == "space" or len(self.key) == 1

    @property
    def text(self) -> str:
        """Character this key inserts into a text buffer ('' when not printable)."""
        if not self.is_printable:
            return ""
        if self.key == "space":
            return " "
        if self.shift and self.key.isalpha():
            return self.key.upper()
        return self.key


def normalize_key_name(name: str) -> str:
    """Normalize one key token (``"Enter"`` -> ``"return"``)."""
    if name == " ":
        return "space"
    lowered = name.lower()
    return _KEY_ALIASES.get(lowered, lowered)


def key_for_char(ch: str) -> KeyEvent:
    """Build the event produced by typing ``ch`` on a terminal."""
    if ch == " ":
        return KeyEvent("space")
    if len(ch) == 1 and ch.isalpha() and ch.isupper():
        return KeyEvent(ch.lower(), shift=True)
    return KeyEvent(ch)


def parse_combo(text: str) -> KeyEvent | None:
    """Parse a combination such as ``"ctrl+c"``, ``"shift+n"``, or ``"N"``.

    Returns ``None`` for strings without a base key or with several base keys.
    """
    if not isinstance(text, str) or text == "":
        return None
    if text in {"+", " "}:
        return KeyEvent(normalize_key_name(text))

    raw_parts = text.split("+")
    if text.endswith("++"):
        raw_parts = raw_parts[:-2] + ["+"]

    ctrl = meta = shift = False
    base: str | None = None
    for part in raw_parts:
        lowered = part.strip().lower()
        if lowered in _CTRL_MODIFIERS:
            ctrl = True
        elif lowered in _META_MODIFIERS:
            meta = True
        elif lowered in _SHIFT_MODIFIERS:
            shift = True
        elif part == "" or (part.strip() == "" and part != " "):
            return None
        elif base is not None:
            return None
        else:
            base = part if part == " " else part.strip()
    if base is None:
        return None

    if len(base) == 1 and base.isalpha() and base.isupper():
        shift = True
    return KeyEvent(normalize_key_name(base), ctrl=ctrl, meta=meta, shift=shift)


def format_combo(combo: KeyEvent) -> str:
    """Render a combination for help and status text (``"Ctrl+C"``)."""
    prefix = ""
    if combo.ctrl:
        prefix += "Ctrl+"
    if combo.meta:
        prefix += "Meta+"
    if combo.shift:
        prefix += "Shift+"
    name = _DISPLAY_NAMES.get(combo.key)
    if name is None:
        name = combo.key.upper() if len(combo.key) == 1 else combo.key
    return prefix + name


__all__ = [
    "KeyEvent",
    "format_combo",
    "key_for_char",
    "normalize_key_name",
    "parse_combo",
]
