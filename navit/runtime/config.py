"""Persistent JSON config helpers.

Stores display preferences, delete confirmation, keybindings, and bookmarks.
Malformed or missing config falls back to defaults, key by key.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from ..file_model.fs import DEFAULT_PREVIEW_MAX_BYTES
from ..input.bindings import BindingConflict, find_binding_conflicts, normalize_keybindings

logger = logging.getLogger(__name__)

APP_NAME = "navit"
CONFIG_FILENAME = "config.json"
LOCAL_CONFIG_FILENAME = ".navit.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_STYLE = "monokai"


def default_bookmarks() -> dict[str, str]:
    return {"home": str(Path.home())}


@dataclass(frozen=True)
class NavitConfig:
    """Effective configuration after defaults, global file, and local overlay."""

    show_hidden: bool = False
    confirm_delete: bool = True
    exit_to_cwd: bool = False
    follow_symlinks: bool = True
    preview_max_bytes: int = DEFAULT_PREVIEW_MAX_BYTES
    style: str = DEFAULT_STYLE
    keybindings: dict[str, tuple[str, ...]] = field(default_factory=lambda: normalize_keybindings(None))
    bookmarks: dict[str, str] = field(default_factory=default_bookmarks)

    @property
    def binding_conflicts(self) -> list[BindingConflict]:
        return find_binding_conflicts(self.keybindings)


def _read_json_object(path: Path) -> dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: top level is not an object", path)
        return {}
    return data


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    return _read_json_object(CONFIG_PATH)


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _merge_overlay(base: dict[str, object], overlay: Mapping[str, object]) -> dict[str, object]:
    """Overlay ``overlay`` on ``base``; the two table-valued keys merge per entry."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if key in {"keybindings", "bookmarks"} and isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def _coerce_bool(data: Mapping[str, object], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    logger.warning("config %s must be a boolean, got %r", key, value)
    return default


def _coerce_positive_int(data: Mapping[str, object], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        logger.warning("config %s must be a positive integer, got %r", key, value)
        return default
    return value


def _coerce_style(data: Mapping[str, object]) -> str:
    value = data.get("style", DEFAULT_STYLE)
    if not isinstance(value, str) or not value.strip():
        return DEFAULT_STYLE
    return value.strip()


def _coerce_bookmarks(value: object) -> dict[str, str]:
    if value is None:
        return default_bookmarks()
    if not isinstance(value, dict):
        logger.warning("config bookmarks must be an object, got %r", value)
        return default_bookmarks()
    bookmarks: dict[str, str] = {}
    for name, path in value.items():
        if not isinstance(name, str) or not name.strip():
            continue
        if not isinstance(path, str) or not path.strip():
            continue
        bookmarks[name.strip()] = path
    return bookmarks


def config_from_mapping(data: Mapping[str, object]) -> NavitConfig:
    """Build a ``NavitConfig`` from a raw JSON object, per-key fallback on bad values."""
    raw_bindings = data.get("keybindings")
    return NavitConfig(
        show_hidden=_coerce_bool(data, "show_hidden", False),
        confirm_delete=_coerce_bool(data, "confirm_delete", True),
        exit_to_cwd=_coerce_bool(data, "exit_to_cwd", False),
        follow_symlinks=_coerce_bool(data, "follow_symlinks", True),
        preview_max_bytes=_coerce_positive_int(data, "preview_max_bytes", DEFAULT_PREVIEW_MAX_BYTES),
        style=_coerce_style(data),
        keybindings=normalize_keybindings(raw_bindings if isinstance(raw_bindings, dict) else None),
        bookmarks=_coerce_bookmarks(data.get("bookmarks")),
    )


def load_navit_config(start_dir: Path | None = None) -> NavitConfig:
    """Load the global config and overlay ``start_dir/.navit.json`` when present."""
    data = load_config()
    if start_dir is not None:
        local = _read_json_object(Path(start_dir) / LOCAL_CONFIG_FILENAME)
        if local:
            logger.info("applying local config from %s", start_dir)
            data = _merge_overlay(data, local)
    loaded = config_from_mapping(data)
    for conflict in loaded.binding_conflicts:
        logger.warning("keybinding conflict: %s", conflict.describe())
    return loaded


def _save_key(key: str, value: object) -> None:
    config = load_config()
    config[key] = value
    save_config(config)


def save_show_hidden(show_hidden: bool) -> None:
    """Persist hidden-file visibility preference as a boolean."""
    _save_key("show_hidden", bool(show_hidden))


def save_confirm_delete(confirm_delete: bool) -> None:
    _save_key("confirm_delete", bool(confirm_delete))


def save_exit_to_cwd(exit_to_cwd: bool) -> None:
    _save_key("exit_to_cwd", bool(exit_to_cwd))


def save_preview_max_bytes(max_bytes: int) -> None:
    if max_bytes <= 0:
        return
    _save_key("preview_max_bytes", int(max_bytes))


def save_style(style: str) -> None:
    """Persist the Pygments style name; blank names are ignored."""
    stripped = str(style).strip()
    if not stripped:
        return
    _save_key("style", stripped)


def save_bookmarks(bookmarks: Mapping[str, str]) -> None:
    _save_key("bookmarks", dict(bookmarks))


def save_keybindings(keybindings: Mapping[str, tuple[str, ...]]) -> None:
    """Persist the full keybinding table as lists of combination strings."""
    _save_key("keybindings", {action: list(combos) for action, combos in keybindings.items()})


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "LOCAL_CONFIG_FILENAME",
    "NavitConfig",
    "config_from_mapping",
    "default_bookmarks",
    "load_config",
    "load_navit_config",
    "save_bookmarks",
    "save_config",
    "save_confirm_delete",
    "save_exit_to_cwd",
    "save_keybindings",
    "save_preview_max_bytes",
    "save_show_hidden",
    "save_style",
]
