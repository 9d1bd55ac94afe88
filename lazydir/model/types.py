"""Entry, action, and column datatypes shared across lazydir modules."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

ENTRY_FILE = "file"
ENTRY_DIRECTORY = "directory"
ENTRY_LINK = "link"
ENTRY_SOCKET = "socket"

ACTION_CREATE = "create"
ACTION_DELETE = "delete"
ACTION_MOVE = "move"
ACTION_COPY = "copy"
ACTION_CHANGE = "change"
ACTION_TYPES = (ACTION_CREATE, ACTION_DELETE, ACTION_MOVE, ACTION_COPY, ACTION_CHANGE)


@dataclass(frozen=True)
class Entry:
    """One cached directory child.

    ``identity`` is unique for the lifetime of the cache that issued it.
    ``metadata`` is adapter-specific; links may carry ``link`` (target text)
    and ``link_type`` (the resolved target's entry type).
    """

    identity: int
    name: str
    type: str
    metadata: Mapping[str, object] = field(default_factory=dict)

    @property
    def link_target(self) -> str | None:
        value = self.metadata.get("link")
        return value if isinstance(value, str) else None

    @property
    def link_type(self) -> str | None:
        value = self.metadata.get("link_type")
        return value if isinstance(value, str) else None

    def is_directory(self) -> bool:
        """Return whether the entry lists as a directory (links follow their target)."""
        if self.type == ENTRY_DIRECTORY:
            return True
        return self.type == ENTRY_LINK and self.link_type == ENTRY_DIRECTORY


@dataclass(frozen=True)
class ListedEntry:
    """Adapter-produced listing row before the cache assigns an identity."""

    name: str
    type: str
    metadata: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Action:
    """One pending mutation against a backing store.

    ``create``/``delete`` use ``url``; ``move``/``copy`` use ``src_url`` and
    ``dest_url``; ``change`` uses ``url`` plus ``column`` and ``value``.
    """

    type: str
    entry_type: str = ENTRY_FILE
    url: str | None = None
    src_url: str | None = None
    dest_url: str | None = None
    column: str | None = None
    value: object = None
    link: str | None = None

    @property
    def primary_url(self) -> str:
        """URL used to resolve the adapter that performs this action."""
        target = self.url or self.src_url or self.dest_url
        if target is None:
            raise ValueError(f"{self.type} action has no target url")
        return target


@dataclass(frozen=True)
class ColumnSpec:
    """Configured column name plus optional per-column parameters."""

    name: str
    params: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Highlight:
    """Style tag applied to ``[col_start, col_end)`` on one rendered row."""

    style: str
    row: int
    col_start: int
    col_end: int
