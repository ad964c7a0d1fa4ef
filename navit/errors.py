"""Error taxonomy shared by the session core.

I/O failures stay plain ``OSError`` subclasses raised by filesystem primitives.
Validation failures use the ``NavitError`` hierarchy below.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path


class NavitError(Exception):
    """Base class for user-facing validation failures."""


class UsageError(NavitError):
    """A command or action received a missing or malformed argument."""


class TargetExistsError(NavitError):
    """A create/rename/paste destination is already occupied."""

    def __init__(self, target: Path) -> None:
        self.target = target
        super().__init__(f"Target exists: {target.name}")


class NotADirectoryTarget(NavitError):
    """A navigation target resolved to something other than a directory."""

    def __init__(self, target: Path) -> None:
        self.target = target
        super().__init__(f"Not a directory: {target}")


_ERRNO_LABELS = {
    errno.ENOENT: "No such file or directory",
    errno.EACCES: "Permission denied",
    errno.EPERM: "Operation not permitted",
    errno.ENOTDIR: "Not a directory",
    errno.EISDIR: "Is a directory",
    errno.EEXIST: "File exists",
    errno.ENOTEMPTY: "Directory not empty",
    errno.EXDEV: "Cross-device move",
}


def describe_os_error(exc: BaseException, fallback: str = "Operation failed") -> str:
    """Return a short human-readable description of ``exc``.

    ``OSError`` values are rendered as ``"<reason>: <path>"`` using the basename
    of the failing path when present.
    """
    if isinstance(exc, OSError):
        reason = _ERRNO_LABELS.get(exc.errno or -1) or exc.strerror or fallback
        if exc.filename:
            return f"{reason}: {os.path.basename(os.fspath(exc.filename)) or exc.filename}"
        return reason
    text = str(exc).strip()
    return text or fallback


__all__ = [
    "NavitError",
    "UsageError",
    "TargetExistsError",
    "NotADirectoryTarget",
    "describe_os_error",
]
