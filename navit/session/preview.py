"""Preview loading tagged by the selected entry's path."""

from __future__ import annotations

from collections.abc import Callable

from ..errors import describe_os_error
from ..file_model.fs import read_preview
from ..file_model.types import Entry, PreviewPayload
from ..runtime.background import BackgroundJob, Scheduler
from .events import Event, PreviewFailed, PreviewLoaded, PreviewRequested

EMPTY_PREVIEW = PreviewPayload(content="", is_binary=False, truncated=False)


class PreviewLoader:
    """Issues preview reads; the machine drops results for a deselected path."""

    def __init__(
        self,
        scheduler: Scheduler,
        commit: Callable[[Event], object],
        max_bytes: Callable[[], int],
    ) -> None:
        self._scheduler = scheduler
        self._commit = commit
        self._max_bytes = max_bytes

    def load_preview(self, entry: Entry | None) -> None:
        if entry is None:
            self._commit(PreviewRequested(None))
            return
        path = entry.path
        self._commit(PreviewRequested(path))
        if entry.is_dir:
            self._commit(PreviewLoaded(path, EMPTY_PREVIEW))
            return

        max_bytes = self._max_bytes()
        self._scheduler.submit(
            BackgroundJob(
                label=f"preview:{entry.name}",
                run=lambda: PreviewLoaded(path, read_preview(path, max_bytes)),
                on_error=lambda exc: PreviewFailed(path, describe_os_error(exc, "Cannot preview")),
            )
        )


__all__ = ["EMPTY_PREVIEW", "PreviewLoader"]
