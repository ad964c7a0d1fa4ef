"""Tests for JSON config loading, overlays, and persistence helpers."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from navit.file_model.fs import DEFAULT_PREVIEW_MAX_BYTES
from navit.input.bindings import DEFAULT_KEYBINDINGS
from navit.runtime import config


class ConfigTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.config_path = self.tmp / "cfg" / "config.json"
        patcher = mock.patch("navit.runtime.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write_config(self, data: object) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(json.dumps(data), encoding="utf-8")


class LoadConfigTests(ConfigTestCase):
    def test_missing_file_gives_defaults(self) -> None:
        loaded = config.load_navit_config()

        self.assertFalse(loaded.show_hidden)
        self.assertTrue(loaded.confirm_delete)
        self.assertFalse(loaded.exit_to_cwd)
        self.assertEqual(loaded.preview_max_bytes, DEFAULT_PREVIEW_MAX_BYTES)
        self.assertEqual(loaded.style, config.DEFAULT_STYLE)
        self.assertEqual(loaded.keybindings, DEFAULT_KEYBINDINGS)
        self.assertEqual(loaded.bookmarks, {"home": str(Path.home())})

    def test_malformed_json_falls_back(self) -> None:
        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("{not json", encoding="utf-8")

        with self.assertLogs("navit.runtime.config", level="WARNING"):
            self.assertEqual(config.load_config(), {})

    def test_non_object_top_level_falls_back(self) -> None:
        self.write_config([1, 2, 3])
        with self.assertLogs("navit.runtime.config", level="WARNING"):
            self.assertEqual(config.load_config(), {})

    def test_invalid_values_fall_back_per_key(self) -> None:
        self.write_config(
            {
                "show_hidden": "yes",
                "confirm_delete": False,
                "preview_max_bytes": -5,
                "style": "",
                "keybindings": {"up": ["w"], "down": "not-a-combo+x+y"},
                "bookmarks": {"work": "/srv/work", "": "/nowhere", "bad": 3},
            }
        )

        with self.assertLogs("navit", level="WARNING"):
            loaded = config.load_navit_config()

        self.assertFalse(loaded.show_hidden)
        self.assertFalse(loaded.confirm_delete)
        self.assertEqual(loaded.preview_max_bytes, DEFAULT_PREVIEW_MAX_BYTES)
        self.assertEqual(loaded.style, config.DEFAULT_STYLE)
        self.assertEqual(loaded.keybindings["up"], ("w",))
        self.assertEqual(loaded.keybindings["down"], DEFAULT_KEYBINDINGS["down"])
        self.assertEqual(loaded.bookmarks, {"work": "/srv/work"})

    def test_local_overlay_merges_tables(self) -> None:
        self.write_config(
            {
                "show_hidden": False,
                "style": "native",
                "keybindings": {"up": ["w"]},
                "bookmarks": {"work": "/srv/work"},
            }
        )
        project = self.tmp / "project"
        project.mkdir()
        (project / config.LOCAL_CONFIG_FILENAME).write_text(
            json.dumps({"show_hidden": True, "keybindings": {"down": ["s"]}, "bookmarks": {"docs": "/srv/docs"}}),
            encoding="utf-8",
        )

        loaded = config.load_navit_config(project)

        self.assertTrue(loaded.show_hidden)
        self.assertEqual(loaded.style, "native")
        self.assertEqual(loaded.keybindings["up"], ("w",))
        self.assertEqual(loaded.keybindings["down"], ("s",))
        self.assertEqual(loaded.bookmarks, {"work": "/srv/work", "docs": "/srv/docs"})

    def test_overlapping_bindings_are_reported(self) -> None:
        self.write_config({"keybindings": {"quit": ["j"]}})

        with self.assertLogs("navit.runtime.config", level="WARNING") as logs:
            loaded = config.load_navit_config()

        self.assertEqual(len(loaded.binding_conflicts), 1)
        self.assertTrue(any("keybinding conflict" in line for line in logs.output))


class SaveConfigTests(ConfigTestCase):
    def test_save_helpers_update_single_keys(self) -> None:
        self.write_config({"style": "native", "unknown_key": 1})

        config.save_show_hidden(True)
        config.save_confirm_delete(False)
        config.save_exit_to_cwd(True)
        config.save_preview_max_bytes(4096)
        config.save_bookmarks({"src": "/src"})
        config.save_keybindings({"up": ("w", "up")})

        data = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(
            data,
            {
                "style": "native",
                "unknown_key": 1,
                "show_hidden": True,
                "confirm_delete": False,
                "exit_to_cwd": True,
                "preview_max_bytes": 4096,
                "bookmarks": {"src": "/src"},
                "keybindings": {"up": ["w", "up"]},
            },
        )

    def test_blank_and_invalid_values_are_not_saved(self) -> None:
        config.save_style("   ")
        config.save_preview_max_bytes(0)
        self.assertFalse(self.config_path.exists())

        config.save_style(" friendly ")
        self.assertEqual(config.load_config(), {"style": "friendly"})

    def test_write_failure_is_logged_not_raised(self) -> None:
        self.config_path.parent.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.parent.write_text("a file, not a directory", encoding="utf-8")

        with self.assertLogs("navit.runtime.config", level="WARNING"):
            config.save_show_hidden(True)

    def test_round_trip_through_loader(self) -> None:
        config.save_show_hidden(True)
        config.save_style("default")

        loaded = config.load_navit_config()

        self.assertTrue(loaded.show_hidden)
        self.assertEqual(loaded.style, "default")


if __name__ == "__main__":
    unittest.main()
