"""Persistent JSON config helpers and runtime configuration objects.

The persisted file stores the hidden-entry preference and the active column
set. All access is defensive: malformed or missing config falls back safely.
Runtime configuration is carried by ``LazydirConfig`` instances that are
injected into each controller rather than read from module globals.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "lazydir"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

KNOWN_COLUMNS = ("type", "permissions", "size", "mtime")
DEFAULT_COLUMNS = ("type",)

GC_SETTLE_SECONDS = 0.01
GC_GRACE_SECONDS = 2.0
PARTIAL_RENDER_SECONDS = 0.04
PREVIEW_DEBOUNCE_FIRST_SECONDS = 0.01
PREVIEW_DEBOUNCE_REPEAT_SECONDS = 0.1
PROGRESS_FPS = 20
LOADING_DELAY_SECONDS = 0.2
DEFAULT_UNDO_LEVELS = 1000

SizeSpec = int | float | list[int | float] | None


def default_is_hidden_file(name: str, surface: object | None = None) -> bool:
    return name.startswith(".")


def default_is_always_hidden(name: str, surface: object | None = None) -> bool:
    return False


@dataclass
class ViewOptions:
    """Visibility rules applied to every rendered surface."""

    show_hidden: bool = False
    is_hidden_file: Callable[[str, object | None], bool] = default_is_hidden_file
    is_always_hidden: Callable[[str, object | None], bool] = default_is_always_hidden


@dataclass
class ProgressOptions:
    """Size limits for the progress float.

    Each size is an absolute cell count, a ratio in ``(0, 1)`` of the host
    size, or a list mixing both.
    """

    max_width: SizeSpec = 0.9
    min_width: SizeSpec = field(default_factory=lambda: [40, 0.4])
    max_height: SizeSpec = field(default_factory=lambda: [10, 0.9])
    min_height: SizeSpec = field(default_factory=lambda: [5, 0.1])
    border: str = "rounded"
    minimized_border: str = "none"


@dataclass
class LazydirConfig:
    """Runtime settings for one controller instance."""

    columns: list[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    view_options: ViewOptions = field(default_factory=ViewOptions)
    progress: ProgressOptions = field(default_factory=ProgressOptions)
    undo_levels: int = DEFAULT_UNDO_LEVELS
    gc_settle_seconds: float = GC_SETTLE_SECONDS
    gc_grace_seconds: float = GC_GRACE_SECONDS
    partial_render_seconds: float = PARTIAL_RENDER_SECONDS
    preview_debounce_first_seconds: float = PREVIEW_DEBOUNCE_FIRST_SECONDS
    preview_debounce_repeat_seconds: float = PREVIEW_DEBOUNCE_REPEAT_SECONDS
    progress_fps: int = PROGRESS_FPS
    loading_delay_seconds: float = LOADING_DELAY_SECONDS

    @classmethod
    def from_persisted(cls) -> LazydirConfig:
        """Build a config seeded from the persisted JSON preferences."""
        config = cls(columns=load_columns())
        config.view_options.show_hidden = load_show_hidden()
        return config


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_show_hidden() -> bool:
    """Return persisted hidden-entry visibility preference.

    Only explicit boolean values are accepted; any other type falls back to
    ``False``.
    """
    value = load_config().get("show_hidden")
    return bool(value) if isinstance(value, bool) else False


def save_show_hidden(show_hidden: bool) -> None:
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)


def normalize_columns(value: object) -> list[str] | None:
    """Return known column names from ``value`` in order, or ``None`` if invalid.

    Unknown names and duplicates are dropped; a non-list value is invalid.
    """
    if not isinstance(value, list):
        return None
    out: list[str] = []
    for item in value:
        if isinstance(item, str) and item in KNOWN_COLUMNS and item not in out:
            out.append(item)
    return out


def load_columns() -> list[str]:
    """Load the persisted column set, defaulting to ``DEFAULT_COLUMNS``."""
    columns = normalize_columns(load_config().get("columns"))
    return columns if columns is not None else list(DEFAULT_COLUMNS)


def save_columns(columns: list[str]) -> None:
    normalized = normalize_columns(list(columns))
    if normalized is None:
        return
    config = load_config()
    config["columns"] = normalized
    save_config(config)
