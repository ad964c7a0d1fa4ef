"""Reusable key-combo registry primitives for mode-local key handling."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .keys import KeyEvent, parse_combo


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more combination strings to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Small exact-match key-dispatch table.

    Later registrations overwrite earlier ones for the same combination; this
    registry holds fixed, code-defined tables, not user configuration.
    """

    def __init__(self) -> None:
        self._handlers: dict[KeyEvent, Callable[[], bool | None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            parsed = parse_combo(combo)
            if parsed is None:
                raise ValueError(f"invalid key combination: {combo!r}")
            self._handlers[parsed] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def handles(self, event: KeyEvent) -> bool:
        return event in self._handlers

    def dispatch(self, event: KeyEvent) -> bool | None:
        """Invoke bound handler for ``event`` and return its handled result."""
        handler = self._handlers.get(event)
        if handler is None:
            return None
        return handler()


__all__ = ["KeyComboBinding", "KeyComboRegistry"]
