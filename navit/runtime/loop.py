"""Main interactive event loop for the terminal UI.

Each iteration tracks terminal size, applies finished background results,
redraws when the snapshot changed, and dispatches at most one key.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from ..input.keys import KeyEvent
from .terminal import TerminalController

KEY_POLL_TIMEOUT_MS = 50


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    handle_key: Callable[[KeyEvent], None]
    pump: Callable[[], bool]
    resize: Callable[[int, int], None]
    render: Callable[[int, int], list[str]]
    should_quit: Callable[[], bool]
    snapshot: Callable[[], object]


def run_main_loop(
    terminal: TerminalController,
    stdin_fd: int,
    callbacks: RuntimeLoopCallbacks,
    poll_timeout_ms: int = KEY_POLL_TIMEOUT_MS,
) -> None:
    """Run until a quit is requested; redraw only when the snapshot changes."""
    last_snapshot: object = None
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while True:
            columns, lines = terminal.size()
            callbacks.resize(columns, lines)
            callbacks.pump()
            if callbacks.should_quit():
                return

            snapshot = callbacks.snapshot()
            if snapshot is not last_snapshot or (columns, lines) != last_size:
                terminal.write_frame(callbacks.render(columns, lines))
                last_snapshot = snapshot
                last_size = (columns, lines)

            key = read_key(stdin_fd, timeout_ms=poll_timeout_ms)
            if key is not None:
                callbacks.handle_key(key)
            if callbacks.should_quit():
                return


__all__ = ["KEY_POLL_TIMEOUT_MS", "RuntimeLoopCallbacks", "run_main_loop"]
