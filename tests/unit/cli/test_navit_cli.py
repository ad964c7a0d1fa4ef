"""Tests for CLI parsing and startup wiring."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from navit import cli
from navit.runtime.config import NavitConfig


class BuildParserTests(unittest.TestCase):
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        self.assertIsNone(args.path)
        self.assertFalse(args.all)
        self.assertFalse(args.no_color)
        self.assertEqual(args.log_level, "WARNING")

    def test_log_level_is_case_insensitive(self) -> None:
        args = cli.build_parser().parse_args(["--log-level", "debug", "-a", "--style", "native"])
        self.assertEqual(args.log_level, "DEBUG")
        self.assertTrue(args.all)
        self.assertEqual(args.style, "native")

    def test_rejects_unknown_log_level(self) -> None:
        with mock.patch("sys.stderr"):
            with self.assertRaises(SystemExit):
                cli.build_parser().parse_args(["--log-level", "chatty"])


class ResolveStartTests(unittest.TestCase):
    def test_directory_and_file_arguments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "f.txt").write_text("x", encoding="utf-8")

            self.assertEqual(cli.resolve_start(None, root), (root, None))
            self.assertEqual(cli.resolve_start(str(root / "f.txt"), root), (root, root / "f.txt"))

    def test_missing_path_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SystemExit) as ctx:
                cli.resolve_start(str(Path(tmp) / "nope"), Path(tmp))
        self.assertIn("Path not found", str(ctx.exception.code))


class MainTests(unittest.TestCase):
    def test_main_launches_app_with_resolved_options(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with mock.patch.object(cli, "configure_logging") as configure, mock.patch.object(
                cli, "load_navit_config", return_value=NavitConfig()
            ) as load, mock.patch.object(cli, "run_app") as run_app, mock.patch(
                "navit.cli.sys.stdin"
            ) as stdin, mock.patch("navit.cli.sys.stdout") as stdout:
                stdin.isatty.return_value = True
                stdout.isatty.return_value = True
                cli.main(["-a", "--no-color", "--cwd-file", str(root / "cwd"), "--log-level", "info"], default_path=root)

        configure.assert_called_once_with("INFO", None)
        load.assert_called_once_with(root)
        (directory, config), kwargs = run_app.call_args
        self.assertEqual(directory, root)
        self.assertTrue(config.show_hidden)
        self.assertTrue(kwargs["no_color"])
        self.assertEqual(kwargs["cwd_file"], root / "cwd")
        self.assertIsNone(kwargs["preferred_path"])

    def test_main_requires_terminal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.object(cli, "configure_logging"), mock.patch.object(
                cli, "load_navit_config", return_value=NavitConfig()
            ), mock.patch.object(cli, "run_app") as run_app, mock.patch("navit.cli.sys.stdin") as stdin:
                stdin.isatty.return_value = False
                with self.assertRaises(SystemExit):
                    cli.main([], default_path=Path(tmp))
        run_app.assert_not_called()


if __name__ == "__main__":
    unittest.main()
