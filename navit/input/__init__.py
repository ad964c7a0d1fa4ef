"""Input-layer public API: key events, decoding, bindings, and mode handlers.

Low-level terminal decoding (``read_key``) is separate from the configurable
normal-mode resolver and the fixed modal key tables.
"""

from .bindings import (
    ACTION_ORDER,
    DEFAULT_KEYBINDINGS,
    BindingConflict,
    KeyBindingResolver,
    find_binding_conflicts,
    normalize_keybindings,
)
from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import KeyEvent, format_combo, key_for_char, parse_combo
from .reader import ESC_SEQUENCE_TIMEOUT_MS, read_key

__all__ = [
    "ACTION_ORDER",
    "DEFAULT_KEYBINDINGS",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "BindingConflict",
    "KeyBindingResolver",
    "KeyComboBinding",
    "KeyComboRegistry",
    "KeyEvent",
    "find_binding_conflicts",
    "format_combo",
    "key_for_char",
    "normalize_keybindings",
    "parse_combo",
    "read_key",
]
