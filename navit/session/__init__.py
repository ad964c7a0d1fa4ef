"""Directory session core: snapshots, events, the reducer, and its coordinator.

``SessionMachine`` is pure; ``SessionController`` issues background requests
and commits their tagged results; ``FileOperationOrchestrator`` runs file
operations against the current snapshot.
"""

from __future__ import annotations

from .controller import SessionController
from .machine import SessionMachine
from .operations import FileOperationOrchestrator, OperationResult
from .preview import PreviewLoader
from .state import SessionState

__all__ = [
    "FileOperationOrchestrator",
    "OperationResult",
    "PreviewLoader",
    "SessionController",
    "SessionMachine",
    "SessionState",
]
