"""Platform helpers: system opener, OS clipboard, and shell commands.

Launch helpers return an error message string instead of raising so callers
can place it straight into the session's error slot.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

SHELL_TIMEOUT_SECONDS = 120.0
_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
    ("clip",),
)


def opener_command(target: Path) -> list[str] | None:
    """Return the argv that opens ``target`` with the desktop default, if any."""
    if sys.platform == "darwin":
        return ["open", str(target)]
    if os.name == "nt":
        return None
    opener = shutil.which("xdg-open")
    if opener is None:
        return None
    return [opener, str(target)]


def open_with_default(target: Path) -> str | None:
    """Open ``target`` in the system default application, detached."""
    if os.name == "nt":
        try:
            os.startfile(str(target))  # type: ignore[attr-defined]
        except OSError as exc:
            return f"Failed to open {target.name}: {exc}"
        return None
    cmd = opener_command(target)
    if cmd is None:
        return "Cannot open: no system opener found."
    try:
        subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as exc:
        logger.warning("opener %s failed: %s", cmd[0], exc)
        return f"Failed to open {target.name}: {exc}"
    return None


def clipboard_command() -> tuple[str, ...] | None:
    """First installed clipboard writer, preferring the platform's native one."""
    for cmd in _CLIPBOARD_COMMANDS:
        if shutil.which(cmd[0]) is not None:
            return cmd
    return None


def copy_to_clipboard(text: str) -> str | None:
    cmd = clipboard_command()
    if cmd is None:
        return "Cannot copy: no clipboard tool found."
    try:
        subprocess.run(list(cmd), input=text, text=True, check=True, timeout=5.0, capture_output=True)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("clipboard copy via %s failed: %s", cmd[0], exc)
        return f"Failed to copy to clipboard: {exc}"
    return None


@dataclass(frozen=True)
class ShellResult:
    returncode: int
    output: str

    @property
    def first_line(self) -> str:
        for line in self.output.splitlines():
            if line.strip():
                return line.strip()
        return ""

    def describe(self, command: str) -> str:
        line = self.first_line
        if self.returncode != 0:
            status = f"exit {self.returncode}"
            return f"{command}: {status}: {line}" if line else f"{command}: {status}"
        return line or f"{command}: done"


def run_shell_command(command: str, cwd: Path, timeout_seconds: float = SHELL_TIMEOUT_SECONDS) -> ShellResult:
    """Run ``command`` through the user's shell in ``cwd`` and capture output.

    Raises ``OSError`` or ``subprocess.TimeoutExpired`` when the command cannot
    be run to completion.
    """
    logger.info("running shell command in %s: %s", cwd, command)
    completed = subprocess.run(
        command,
        shell=True,
        cwd=str(cwd),
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout_seconds,
        check=False,
    )
    output = completed.stdout if completed.stdout.strip() else completed.stderr
    return ShellResult(returncode=completed.returncode, output=output)


def display_path(path: Path) -> str:
    """Abbreviate the home directory prefix as ``~``."""
    home = str(Path.home())
    text = str(path)
    if text == home:
        return "~"
    if text.startswith(home + os.sep):
        return "~" + text[len(home):]
    return text


__all__ = [
    "ShellResult",
    "clipboard_command",
    "copy_to_clipboard",
    "display_path",
    "open_with_default",
    "opener_command",
    "run_shell_command",
]
