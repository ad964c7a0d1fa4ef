"""Key handling for every modal mode other than normal navigation.

Normal mode goes through the configurable ``KeyBindingResolver``; the modal
modes below use fixed tables. Each handler returns ``True`` when it consumed
the key.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import KeyEvent


def edit_line(value: str, event: KeyEvent) -> str | None:
    """Apply a line-editing key to ``value``.

    Returns the edited text, or ``None`` when ``event`` is not an editing key.
    """
    if event.key == "backspace" and not (event.ctrl or event.meta):
        return value[:-1]
    if event.ctrl and event.key == "u":
        return ""
    if event.ctrl and event.key == "w":
        trimmed = value.rstrip()
        cut = trimmed.rfind(" ")
        return trimmed[: cut + 1] if cut >= 0 else ""
    if event.is_printable:
        return value + event.text
    return None


@dataclass(frozen=True)
class ConfirmKeyCallbacks:
    answer: Callable[[bool], None]


def handle_confirm_key(event: KeyEvent, callbacks: ConfirmKeyCallbacks) -> bool:
    """Only ``y``, ``n`` and ``escape`` are meaningful; other keys are swallowed."""
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("y", "shift+y"), lambda: callbacks.answer(True)),
        KeyComboBinding(("n", "shift+n", "escape"), lambda: callbacks.answer(False)),
    )
    registry.dispatch(event)
    return True


@dataclass(frozen=True)
class PromptKeyCallbacks:
    """Operations for single-line prompts (command line and text input)."""

    set_value: Callable[[str], None]
    submit: Callable[[str], None]
    cancel: Callable[[], None]
    complete: Callable[[str], str | None] | None = None


def handle_prompt_key(event: KeyEvent, value: str, callbacks: PromptKeyCallbacks) -> bool:
    """Edit, submit, cancel, or tab-complete the prompt line."""
    if event.key == "tab" and not event.ctrl:
        if callbacks.complete is not None:
            completed = callbacks.complete(value)
            if completed is not None and completed != value:
                callbacks.set_value(completed)
        return True
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("escape", "ctrl+c"), callbacks.cancel),
        KeyComboBinding(("return",), lambda: callbacks.submit(value)),
    )
    if registry.handles(event):
        registry.dispatch(event)
        return True
    edited = edit_line(value, event)
    if edited is not None:
        callbacks.set_value(edited)
    return True


@dataclass(frozen=True)
class SearchKeyCallbacks:
    """Operations for the live filter prompt."""

    set_query: Callable[[str], None]
    accept: Callable[[], None]
    cancel: Callable[[], None]
    move: Callable[[int], None]


def handle_search_key(event: KeyEvent, query: str, callbacks: SearchKeyCallbacks) -> bool:
    """Filter-as-you-type; enter keeps the filter, escape clears it."""
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("escape",), callbacks.cancel),
        KeyComboBinding(("return",), callbacks.accept),
        KeyComboBinding(("up", "ctrl+p", "ctrl+k"), lambda: callbacks.move(-1)),
        KeyComboBinding(("down", "ctrl+n", "ctrl+j"), lambda: callbacks.move(1)),
    )
    if registry.handles(event):
        registry.dispatch(event)
        return True
    edited = edit_line(query, event)
    if edited is not None and edited != query:
        callbacks.set_query(edited)
    return True


@dataclass(frozen=True)
class DeepSearchKeyCallbacks:
    set_query: Callable[[str], None]
    activate: Callable[[], None]
    cancel: Callable[[], None]
    move: Callable[[int], None]


def handle_deep_search_key(event: KeyEvent, query: str, callbacks: DeepSearchKeyCallbacks) -> bool:
    """Edit the recursive query; enter jumps to the highlighted result."""
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("escape", "ctrl+c"), callbacks.cancel),
        KeyComboBinding(("return",), callbacks.activate),
        KeyComboBinding(("up", "ctrl+p", "ctrl+k"), lambda: callbacks.move(-1)),
        KeyComboBinding(("down", "ctrl+n", "ctrl+j"), lambda: callbacks.move(1)),
    )
    if registry.handles(event):
        registry.dispatch(event)
        return True
    edited = edit_line(query, event)
    if edited is not None and edited != query:
        callbacks.set_query(edited)
    return True


@dataclass(frozen=True)
class HelpKeyCallbacks:
    close: Callable[[], None]


def handle_help_key(event: KeyEvent, callbacks: HelpKeyCallbacks) -> bool:
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("escape", "q", "?", "return"), callbacks.close),
    )
    registry.dispatch(event)
    return True


@dataclass(frozen=True)
class BookmarkKeyCallbacks:
    move: Callable[[int], None]
    activate: Callable[[], None]
    remove: Callable[[], None]
    close: Callable[[], None]


def handle_bookmarks_key(event: KeyEvent, callbacks: BookmarkKeyCallbacks) -> bool:
    """Navigate the bookmark list; ``d`` removes the highlighted bookmark."""
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("up", "k"), lambda: callbacks.move(-1)),
        KeyComboBinding(("down", "j"), lambda: callbacks.move(1)),
        KeyComboBinding(("return", "l", "right"), callbacks.activate),
        KeyComboBinding(("d", "delete"), callbacks.remove),
        KeyComboBinding(("escape", "q", "b"), callbacks.close),
    )
    registry.dispatch(event)
    return True


__all__ = [
    "BookmarkKeyCallbacks",
    "ConfirmKeyCallbacks",
    "DeepSearchKeyCallbacks",
    "HelpKeyCallbacks",
    "PromptKeyCallbacks",
    "SearchKeyCallbacks",
    "edit_line",
    "handle_bookmarks_key",
    "handle_confirm_key",
    "handle_deep_search_key",
    "handle_help_key",
    "handle_prompt_key",
    "handle_search_key",
]
