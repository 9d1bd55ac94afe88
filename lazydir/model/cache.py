"""Entry cache keyed by container URL with stable integer identities.

One ``EntryCache`` is owned by each controller instance. Identities are
handed out from a monotonically increasing counter and are never reissued
while the cache lives, so rendered identity tokens stay stable across
re-renders and refetches.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from .types import Entry, ListedEntry

ID_TOKEN_RE = re.compile(r"^/(\d+)")


class EntryCache:
    """Identity map plus per-container listings."""

    def __init__(self) -> None:
        self._next_id = 1
        self._entries_by_id: dict[int, Entry] = {}
        self._url_directory: dict[str, dict[str, Entry]] = {}
        self._pending_refetch: dict[str, dict[str, Entry]] = {}
        self._parent_url_by_id: dict[int, str] = {}

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._entries_by_id)

    def format_id(self, identity: int) -> str:
        """Render ``identity`` as a ``/``-prefixed zero-padded token.

        The padding width tracks the digit count of the next identity to be
        issued so every token in one render has the same width.
        """
        width = len(str(self._next_id))
        return f"/{identity:0{width}d}"

    @staticmethod
    def parse_id(line: str) -> tuple[int, str] | None:
        """Return ``(identity, token_text)`` for a rendered row, or ``None``."""
        match = ID_TOKEN_RE.match(line)
        if match is None:
            return None
        return int(match.group(1)), match.group(0)

    def _lookup_existing(self, parent_url: str, name: str) -> Entry | None:
        listing = self._url_directory.get(parent_url)
        if listing is not None and name in listing:
            return listing[name]
        pending = self._pending_refetch.get(parent_url)
        if pending is not None:
            return pending.get(name)
        return None

    def create_entry(
        self,
        parent_url: str,
        name: str,
        entry_type: str,
        metadata: Mapping[str, object] | None = None,
    ) -> Entry:
        """Build an entry, reusing the identity of a same-named cached entry."""
        existing = self._lookup_existing(parent_url, name)
        if existing is not None:
            identity = existing.identity
        else:
            identity = self._next_id
            self._next_id += 1
        return Entry(identity=identity, name=name, type=entry_type, metadata=dict(metadata or {}))

    def store_entry(self, parent_url: str, entry: Entry) -> None:
        self._url_directory.setdefault(parent_url, {})[entry.name] = entry
        self._entries_by_id[entry.identity] = entry
        self._parent_url_by_id[entry.identity] = parent_url

    def create_and_store_entry(
        self,
        parent_url: str,
        name: str,
        entry_type: str,
        metadata: Mapping[str, object] | None = None,
    ) -> Entry:
        entry = self.create_entry(parent_url, name, entry_type, metadata)
        self.store_entry(parent_url, entry)
        return entry

    def store_listed(self, parent_url: str, listed: Iterable[ListedEntry]) -> list[Entry]:
        """Store a batch of adapter rows under ``parent_url``."""
        return [
            self.create_and_store_entry(parent_url, row.name, row.type, row.metadata)
            for row in listed
        ]

    def begin_update_url(self, parent_url: str) -> None:
        """Start a refetch of ``parent_url``.

        The current listing is set aside so refetched names keep their
        identity; names that do not come back are dropped by
        ``end_update_url``.
        """
        previous = self._url_directory.pop(parent_url, None)
        self._url_directory[parent_url] = {}
        if previous:
            self._pending_refetch[parent_url] = previous

    def end_update_url(self, parent_url: str) -> None:
        previous = self._pending_refetch.pop(parent_url, None)
        if not previous:
            return
        current = self._url_directory.get(parent_url, {})
        for name, entry in previous.items():
            if name in current:
                continue
            self._entries_by_id.pop(entry.identity, None)
            self._parent_url_by_id.pop(entry.identity, None)

    def abort_update_url(self, parent_url: str) -> None:
        """Abandon a refetch, keeping set-aside entries that were not re-listed."""
        previous = self._pending_refetch.pop(parent_url, None)
        if not previous:
            return
        current = self._url_directory.setdefault(parent_url, {})
        for name, entry in previous.items():
            current.setdefault(name, entry)

    def list_url(self, parent_url: str) -> dict[str, Entry]:
        """Return a snapshot copy of the entries cached for ``parent_url``.

        While a refetch is in flight, names not yet re-listed are still
        reported from the set-aside listing.
        """
        snapshot = dict(self._pending_refetch.get(parent_url, {}))
        snapshot.update(self._url_directory.get(parent_url, {}))
        return snapshot

    def get_entry_by_id(self, identity: int) -> Entry | None:
        return self._entries_by_id.get(identity)

    def get_parent_url(self, identity: int) -> str | None:
        return self._parent_url_by_id.get(identity)

    def remove_entry(self, parent_url: str, name: str) -> None:
        listing = self._url_directory.get(parent_url)
        if listing is None:
            return
        entry = listing.pop(name, None)
        if entry is not None:
            self._entries_by_id.pop(entry.identity, None)
            self._parent_url_by_id.pop(entry.identity, None)

    def clear_everything(self) -> None:
        """Drop every cached listing and identity mapping.

        The identity counter keeps counting so tokens from discarded surfaces
        can never alias new entries.
        """
        self._entries_by_id.clear()
        self._url_directory.clear()
        self._pending_refetch.clear()
        self._parent_url_by_id.clear()
