"""Command-line front door for navit.

Parses CLI options, resolves the start directory, loads configuration, and
sets up logging before handing over to the interactive runtime.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .runtime import run_app
from .runtime.config import load_navit_config
from .runtime.logs import LEVEL_NAMES, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="navit",
        description="Browse directories in the terminal with a file preview pane.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Start directory (or a file to select). Defaults to cwd.")
    parser.add_argument("--style", default=None, help="Pygments style name for previews (overrides config).")
    parser.add_argument("--no-color", action="store_true", help="Disable syntax colors in the preview.")
    parser.add_argument("-a", "--all", action="store_true", help="Show hidden files.")
    parser.add_argument(
        "--cwd-file",
        metavar="PATH",
        default=None,
        help="On quit, write the final directory to PATH (requires exit_to_cwd in config).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        type=str.upper,
        choices=LEVEL_NAMES,
        help="Log level for the log file (default: WARNING).",
    )
    parser.add_argument("--log-file", metavar="PATH", default=None, help="Write logs to PATH instead of the user log dir.")
    return parser


def resolve_start(path_arg: str | None, default_path: Path) -> tuple[Path, Path | None]:
    """Return ``(directory, preferred_entry)`` for the positional path argument."""
    path = Path(path_arg).expanduser() if path_arg else default_path
    path = path.absolute()
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")
    if path.is_dir():
        return path, None
    return path.parent, path


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch navit.

    ``argv`` and ``default_path`` are primarily for tests; when omitted the
    process arguments and current working directory are used.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    directory, preferred = resolve_start(args.path, default_path or Path.cwd())
    config = load_navit_config(directory)
    if args.all:
        config = replace(config, show_hidden=True)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("navit needs an interactive terminal.")

    run_app(
        directory,
        config,
        style=args.style,
        no_color=args.no_color,
        cwd_file=Path(args.cwd_file) if args.cwd_file else None,
        preferred_path=preferred,
    )


if __name__ == "__main__":
    main()
