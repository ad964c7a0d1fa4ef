"""Runtime wiring: config, logging, background jobs, terminal, and the app loop.

``run_app`` is imported lazily so that importing config or logging helpers
does not pull in the terminal layer.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the interactive entrypoint."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


__all__ = ["run_app"]
