"""Background job runners that deliver session events to the key loop.

Jobs never touch session state. Each returns one event (or ``None``) that the
loop drains and applies through the session machine, where stale results are
discarded on arrival.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..session.events import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundJob:
    """One unit of background work and the event to post when it raises."""

    label: str
    run: Callable[[], Event | None]
    on_error: Callable[[Exception], Event | None] | None = None


def execute_job(job: BackgroundJob) -> Event | None:
    """Run ``job`` and convert unexpected exceptions into its failure event."""
    logger.debug("background job started: %s", job.label)
    try:
        result = job.run()
    except Exception as exc:
        if job.on_error is None:
            logger.exception("background job failed: %s", job.label)
            return None
        logger.debug("background job %s raised %s", job.label, exc)
        return job.on_error(exc)
    logger.debug("background job finished: %s", job.label)
    return result


class Scheduler(Protocol):
    def submit(self, job: BackgroundJob) -> None: ...

    def drain(self) -> list[Event]: ...


class ThreadedScheduler:
    """Runs every job on its own daemon thread; overlapping jobs are allowed."""

    def __init__(self, thread_name_prefix: str = "navit-job") -> None:
        self._thread_name_prefix = thread_name_prefix
        self._results: Queue[Event] = Queue()
        self._lock = threading.Lock()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def _worker(self, job: BackgroundJob) -> None:
        try:
            event = execute_job(job)
            if event is not None:
                self._results.put(event)
        finally:
            with self._lock:
                self._in_flight -= 1

    def submit(self, job: BackgroundJob) -> None:
        with self._lock:
            self._in_flight += 1
        worker = threading.Thread(
            target=self._worker,
            args=(job,),
            name=f"{self._thread_name_prefix}-{job.label}",
            daemon=True,
        )
        worker.start()

    def drain(self) -> list[Event]:
        """Drain all completed job results without blocking."""
        out: list[Event] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


class ManualScheduler:
    """Holds submitted jobs until told to run them, in any order.

    Used where completion order must be controlled explicitly.
    """

    def __init__(self) -> None:
        self.pending: list[BackgroundJob] = []
        self._results: list[Event] = []

    def submit(self, job: BackgroundJob) -> None:
        self.pending.append(job)

    def labels(self) -> list[str]:
        return [job.label for job in self.pending]

    def run(self, index: int = 0) -> Event | None:
        """Run the pending job at ``index`` and queue its result for ``drain``."""
        job = self.pending.pop(index)
        event = execute_job(job)
        if event is not None:
            self._results.append(event)
        return event

    def run_all(self) -> None:
        """Run pending jobs first-in-first-out, including ones submitted meanwhile."""
        while self.pending:
            self.run(0)

    def drain(self) -> list[Event]:
        out, self._results = self._results, []
        return out


__all__ = [
    "BackgroundJob",
    "ManualScheduler",
    "Scheduler",
    "ThreadedScheduler",
    "execute_job",
]
