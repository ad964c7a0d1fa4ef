"""Tests for background job execution and the two schedulers."""

from __future__ import annotations

import threading
import time
import unittest

from navit.runtime.background import BackgroundJob, ManualScheduler, ThreadedScheduler, execute_job
from navit.session.events import ErrorSet, MessageSet


def _boom() -> None:
    raise RuntimeError("boom")


class ExecuteJobTests(unittest.TestCase):
    def test_result_is_returned(self) -> None:
        event = execute_job(BackgroundJob("ok", lambda: MessageSet("done")))
        self.assertEqual(event, MessageSet("done"))

    def test_failure_converted_by_on_error(self) -> None:
        job = BackgroundJob("bad", _boom, on_error=lambda exc: ErrorSet(str(exc)))
        self.assertEqual(execute_job(job), ErrorSet("boom"))

    def test_failure_without_handler_is_logged(self) -> None:
        with self.assertLogs("navit.runtime.background", level="ERROR") as logs:
            self.assertIsNone(execute_job(BackgroundJob("bad", _boom)))
        self.assertIn("bad", logs.output[0])


class ManualSchedulerTests(unittest.TestCase):
    def test_runs_in_requested_order(self) -> None:
        scheduler = ManualScheduler()
        scheduler.submit(BackgroundJob("first", lambda: MessageSet("1")))
        scheduler.submit(BackgroundJob("second", lambda: MessageSet("2")))

        self.assertEqual(scheduler.labels(), ["first", "second"])
        scheduler.run(1)
        scheduler.run(0)

        self.assertEqual(scheduler.drain(), [MessageSet("2"), MessageSet("1")])
        self.assertEqual(scheduler.drain(), [])

    def test_run_all_includes_jobs_submitted_meanwhile(self) -> None:
        scheduler = ManualScheduler()

        def chained() -> MessageSet:
            scheduler.submit(BackgroundJob("child", lambda: MessageSet("child")))
            return MessageSet("parent")

        scheduler.submit(BackgroundJob("parent", chained))
        scheduler.run_all()

        self.assertEqual(scheduler.drain(), [MessageSet("parent"), MessageSet("child")])
        self.assertEqual(scheduler.pending, [])

    def test_jobs_returning_none_post_nothing(self) -> None:
        scheduler = ManualScheduler()
        scheduler.submit(BackgroundJob("quiet", lambda: None))
        scheduler.run_all()
        self.assertEqual(scheduler.drain(), [])


class ThreadedSchedulerTests(unittest.TestCase):
    def _drain_until(self, scheduler: ThreadedScheduler, count: int, timeout: float = 5.0) -> list:
        deadline = time.monotonic() + timeout
        events: list = []
        while len(events) < count and time.monotonic() < deadline:
            events.extend(scheduler.drain())
            time.sleep(0.01)
        return events

    def test_overlapping_jobs_complete_out_of_order(self) -> None:
        scheduler = ThreadedScheduler()
        release = threading.Event()

        def slow() -> MessageSet:
            release.wait(5.0)
            return MessageSet("slow")

        scheduler.submit(BackgroundJob("slow", slow))
        scheduler.submit(BackgroundJob("fast", lambda: MessageSet("fast")))

        first = self._drain_until(scheduler, 1)
        release.set()
        rest = self._drain_until(scheduler, 1)

        self.assertEqual(first, [MessageSet("fast")])
        self.assertEqual(rest, [MessageSet("slow")])
        deadline = time.monotonic() + 5.0
        while scheduler.in_flight and time.monotonic() < deadline:
            time.sleep(0.01)
        self.assertEqual(scheduler.in_flight, 0)

    def test_failures_become_events(self) -> None:
        scheduler = ThreadedScheduler()
        scheduler.submit(BackgroundJob("bad", _boom, on_error=lambda exc: ErrorSet(f"failed: {exc}")))

        self.assertEqual(self._drain_until(scheduler, 1), [ErrorSet("failed: boom")])


if __name__ == "__main__":
    unittest.main()
