"""Keybinding resolver: physical key events to logical action names.

The table maps each action to an ordered tuple of combination strings. When a
combination is bound to several actions the action declared first in
``ACTION_ORDER`` wins; such overlaps are reported by ``find_binding_conflicts``
so configuration loading can warn about them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .keys import KeyEvent, format_combo, parse_combo

logger = logging.getLogger(__name__)

DEFAULT_KEYBINDINGS: dict[str, tuple[str, ...]] = {
    "up": ("k", "up"),
    "down": ("j", "down"),
    "parent": ("h", "backspace", "left"),
    "open": ("l", "return", "right"),
    "openExternal": ("o",),
    "search": ("/",),
    "deepSearch": ("ctrl+f",),
    "command": (":",),
    "help": ("?",),
    "toggleHidden": (".", "ctrl+h"),
    "copy": ("ctrl+c",),
    "cut": ("ctrl+x",),
    "paste": ("ctrl+v",),
    "delete": ("delete", "ctrl+d"),
    "select": ("space",),
    "selectAll": ("ctrl+a",),
    "clearSelection": ("escape",),
    "quit": ("q", "ctrl+q"),
    "refresh": ("ctrl+r",),
    "copyPath": ("y",),
    "bookmark": ("b",),
    "goToBookmark": ("g",),
    "newFile": ("n",),
    "newFolder": ("shift+n",),
    "rename": ("shift+r",),
    "home": ("~",),
    "pageUp": ("pageup",),
    "pageDown": ("pagedown",),
    "previewUp": ("shift+k",),
    "previewDown": ("shift+j",),
}

ACTION_ORDER: tuple[str, ...] = tuple(DEFAULT_KEYBINDINGS)


@dataclass(frozen=True)
class BindingConflict:
    """One combination bound to more than one action."""

    combo: KeyEvent
    winner: str
    shadowed: str

    def describe(self) -> str:
        return f"{format_combo(self.combo)} is bound to {self.winner} and {self.shadowed}; using {self.winner}"


def _valid_combos(raw: object) -> tuple[str, ...] | None:
    """Return parseable combos from ``raw`` or ``None`` when ``raw`` is unusable."""
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, Sequence):
        return None
    combos = tuple(item for item in raw if isinstance(item, str) and parse_combo(item) is not None)
    if raw and not combos:
        return None
    return combos


def normalize_keybindings(raw: Mapping[str, object] | None) -> dict[str, tuple[str, ...]]:
    """Merge a user table over the defaults, action by action.

    Unknown actions are dropped. An action whose value is missing, of the wrong
    type, or contains no parseable combination keeps its default. An explicit
    empty list unbinds the action.
    """
    merged = dict(DEFAULT_KEYBINDINGS)
    if not isinstance(raw, Mapping):
        return merged
    for action, value in raw.items():
        if action not in DEFAULT_KEYBINDINGS:
            logger.warning("ignoring keybinding for unknown action %r", action)
            continue
        combos = _valid_combos(value)
        if combos is None:
            logger.warning("invalid keybinding for %s: %r; using default", action, value)
            continue
        merged[action] = combos
    return merged


def _build_lookup(
    bindings: Mapping[str, Sequence[str]],
) -> tuple[dict[KeyEvent, str], list[BindingConflict]]:
    lookup: dict[KeyEvent, str] = {}
    conflicts: list[BindingConflict] = []
    for action in ACTION_ORDER:
        for combo_text in bindings.get(action, ()):
            combo = parse_combo(combo_text)
            if combo is None:
                continue
            winner = lookup.setdefault(combo, action)
            if winner != action:
                conflicts.append(BindingConflict(combo=combo, winner=winner, shadowed=action))
    return lookup, conflicts


def find_binding_conflicts(bindings: Mapping[str, Sequence[str]]) -> list[BindingConflict]:
    """Return every combination that more than one action claims."""
    _lookup, conflicts = _build_lookup(normalize_keybindings(bindings))
    return conflicts


class KeyBindingResolver:
    """Stateless lookup from key events to action names."""

    def __init__(self, bindings: Mapping[str, object] | None = None) -> None:
        self._bindings: dict[str, tuple[str, ...]] = {}
        self._lookup: dict[KeyEvent, str] = {}
        self.conflicts: list[BindingConflict] = []
        self.update(bindings)

    @property
    def bindings(self) -> dict[str, tuple[str, ...]]:
        return dict(self._bindings)

    def update(self, bindings: Mapping[str, object] | None) -> None:
        """Replace the binding table; missing actions fall back to defaults."""
        self._bindings = normalize_keybindings(bindings)
        self._lookup, self.conflicts = _build_lookup(self._bindings)
        for conflict in self.conflicts:
            logger.warning("keybinding conflict: %s", conflict.describe())

    def resolve(self, event: KeyEvent) -> str | None:
        """Return the action bound to ``event`` or ``None``."""
        return self._lookup.get(event)

    def combos_for(self, action: str) -> tuple[KeyEvent, ...]:
        parsed = (parse_combo(text) for text in self._bindings.get(action, ()))
        return tuple(combo for combo in parsed if combo is not None)

    def display_key(self, action: str) -> str:
        """Display string for the first combination bound to ``action``."""
        combos = self.combos_for(action)
        return format_combo(combos[0]) if combos else ""

    def display_keys(self, action: str) -> str:
        return "/".join(format_combo(combo) for combo in self.combos_for(action))


__all__ = [
    "ACTION_ORDER",
    "DEFAULT_KEYBINDINGS",
    "BindingConflict",
    "KeyBindingResolver",
    "find_binding_conflicts",
    "normalize_keybindings",
]
