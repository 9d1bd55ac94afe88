"""Entry model: datatypes, container URLs, and the entry cache."""

from __future__ import annotations

from .cache import EntryCache
from .types import (
    ACTION_CHANGE,
    ACTION_COPY,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_MOVE,
    ACTION_TYPES,
    ENTRY_DIRECTORY,
    ENTRY_FILE,
    ENTRY_LINK,
    ENTRY_SOCKET,
    Action,
    ColumnSpec,
    Entry,
    Highlight,
    ListedEntry,
)
from .url import addslash, join_url, parent_url, parse_url, split_entry_url

__all__ = [
    "ACTION_CHANGE",
    "ACTION_COPY",
    "ACTION_CREATE",
    "ACTION_DELETE",
    "ACTION_MOVE",
    "ACTION_TYPES",
    "ENTRY_DIRECTORY",
    "ENTRY_FILE",
    "ENTRY_LINK",
    "ENTRY_SOCKET",
    "Action",
    "ColumnSpec",
    "Entry",
    "EntryCache",
    "Highlight",
    "ListedEntry",
    "addslash",
    "join_url",
    "parent_url",
    "parse_url",
    "split_entry_url",
]
