"""Column renderer: per-entry metadata cells for the configured columns.

A cell is either plain text or a ``(text, style)`` pair. Columns the active
adapter does not support are dropped from the column definition list.
"""

from __future__ import annotations

import stat as stat_mod
import time
from collections.abc import Sequence

from .adapters.base import Adapter
from .model.types import (
    ENTRY_DIRECTORY,
    ENTRY_LINK,
    ENTRY_SOCKET,
    Action,
    ColumnSpec,
    Entry,
)
from .text import lpad

Cell = str | tuple[str, str | None]

TYPE_CHARS = {
    ENTRY_DIRECTORY: "d",
    ENTRY_LINK: "l",
    ENTRY_SOCKET: "s",
}
SIZE_UNITS = ("B", "K", "M", "G", "T", "P")
MTIME_FORMAT = "%b %d %H:%M"


def get_supported_columns(adapter: Adapter, columns: Sequence[str | ColumnSpec]) -> list[ColumnSpec]:
    """Return configured columns that ``adapter`` can render, in order."""
    out: list[ColumnSpec] = []
    for column in columns:
        spec = column if isinstance(column, ColumnSpec) else ColumnSpec(name=column)
        if spec.name in adapter.supported_columns:
            out.append(spec)
    return out


def format_size(size: int) -> str:
    value = float(size)
    for unit in SIZE_UNITS:
        if value < 1024 or unit == SIZE_UNITS[-1]:
            if unit == "B":
                return f"{int(value)}{unit}"
            return f"{value:.1f}{unit}" if value < 10 else f"{int(value)}{unit}"
        value /= 1024
    return f"{size}B"


def _render_type(entry: Entry) -> Cell:
    return (TYPE_CHARS.get(entry.type, "-"), "type")


def _render_permissions(entry: Entry) -> Cell:
    mode = entry.metadata.get("mode")
    if not isinstance(mode, int):
        return ("----------", "permissions")
    return (stat_mod.filemode(mode), "permissions")


def _render_size(entry: Entry) -> Cell:
    size = entry.metadata.get("size")
    if entry.type == ENTRY_DIRECTORY or not isinstance(size, int):
        return ("-", "size")
    return (lpad(format_size(size), 5), "size")


def _render_mtime(entry: Entry, params: dict[str, object]) -> Cell:
    mtime = entry.metadata.get("mtime")
    if not isinstance(mtime, (int, float)):
        return ("-", "mtime")
    fmt = params.get("format")
    return (time.strftime(fmt if isinstance(fmt, str) else MTIME_FORMAT, time.localtime(mtime)), "mtime")


def render_col(adapter: Adapter, column: ColumnSpec, entry: Entry) -> Cell:
    """Render one metadata cell for ``entry``."""
    if column.name == "type":
        return _render_type(entry)
    if column.name == "permissions":
        return _render_permissions(entry)
    if column.name == "size":
        return _render_size(entry)
    if column.name == "mtime":
        return _render_mtime(entry, dict(column.params))
    raise ValueError(f"Unknown column: {column.name!r}")


def render_change_action(adapter: Adapter, action: Action) -> str:
    """Describe a metadata-change action."""
    target = adapter.display_path(action.primary_url)
    value = action.value
    if action.column == "permissions" and isinstance(value, int):
        value = oct(value)[2:]
    return f"CHANGE {target} {action.column} = {value}"
