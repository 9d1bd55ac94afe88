"""In-memory ``mem://`` adapter.

Keeps a flat map of container URL to named rows. Useful for scratch
listings and for driving the view layer without touching a filesystem.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence

from ..errors import AdapterError
from ..model.types import (
    ACTION_CHANGE,
    ACTION_COPY,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_MOVE,
    ENTRY_DIRECTORY,
    Action,
    ColumnSpec,
    Entry,
    ListedEntry,
)
from ..model.url import addslash, join_url, split_entry_url
from .base import Adapter, ListingChunk, ListingStream, chunked

MEMORY_SCHEME = "mem://"
DEFAULT_CHUNK_SIZE = 200


class MemoryAdapter(Adapter):
    """Adapter over an in-process tree of containers."""

    name = "memory"
    scheme = MEMORY_SCHEME
    supported_columns = ("type", "size", "mtime")

    def __init__(
        self,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        writable: bool = True,
        before_chunk: Callable[[int], None] | None = None,
    ) -> None:
        self.chunk_size = chunk_size
        self.writable = writable
        self.before_chunk = before_chunk
        self.performed: list[Action] = []
        self._containers: dict[str, dict[str, ListedEntry]] = {self.scheme: {}}
        self._contents: dict[str, str] = {}

    def add(
        self,
        url: str,
        entry_type: str,
        metadata: Mapping[str, object] | None = None,
        *,
        content: str | None = None,
    ) -> None:
        """Add ``url`` (creating missing parent containers)."""
        container, name = split_entry_url(url.rstrip("/") if entry_type == ENTRY_DIRECTORY else url)
        self._ensure_container(container)
        self._containers[container][name] = ListedEntry(name=name, type=entry_type, metadata=dict(metadata or {}))
        if entry_type == ENTRY_DIRECTORY:
            self._containers.setdefault(join_url(container, name) + "/", {})
        if content is not None:
            self._contents[join_url(container, name)] = content

    def _ensure_container(self, container: str) -> None:
        if container in self._containers:
            return
        parent, name = split_entry_url(container.rstrip("/"))
        self._ensure_container(parent)
        self._containers[parent].setdefault(name, ListedEntry(name=name, type=ENTRY_DIRECTORY))
        self._containers[container] = {}

    def has(self, url: str) -> bool:
        container, name = split_entry_url(url.rstrip("/"))
        return name in self._containers.get(container, {})

    def names(self, container_url: str) -> list[str]:
        return sorted(self._containers.get(addslash(container_url), {}))

    def list(self, url: str, column_defs: Sequence[ColumnSpec]) -> ListingStream:
        return ListingStream(self._iter_chunks(addslash(url)))

    def _iter_chunks(self, url: str) -> Iterator[ListingChunk]:
        if url not in self._containers:
            raise AdapterError(f"No such container: {url}")
        rows = list(self._containers[url].values())
        for index, chunk in enumerate(chunked(rows, self.chunk_size)):
            if self.before_chunk is not None:
                self.before_chunk(index)
            yield chunk

    def is_modifiable(self, surface: object) -> bool:
        return self.writable

    def perform_action(self, action: Action) -> None:
        self.performed.append(action)
        if action.type == ACTION_CREATE:
            if self.has(action.primary_url):
                raise AdapterError(f"Already exists: {action.primary_url}")
            metadata = {"link": action.link} if action.link else None
            self.add(action.primary_url, action.entry_type, metadata)
        elif action.type == ACTION_DELETE:
            self._remove(action.primary_url)
        elif action.type in (ACTION_MOVE, ACTION_COPY):
            if not action.src_url or not action.dest_url:
                raise AdapterError(f"{action.type} requires src and dest urls")
            if self.has(action.dest_url):
                raise AdapterError(f"Already exists: {action.dest_url}")
            self._copy(action.src_url, action.dest_url)
            if action.type == ACTION_MOVE:
                self._remove(action.src_url)
        elif action.type == ACTION_CHANGE:
            container, name = self._existing(action.primary_url)
            row = self._containers[container][name]
            metadata = dict(row.metadata)
            metadata[str(action.column)] = action.value
            self._containers[container][name] = ListedEntry(name=name, type=row.type, metadata=metadata)
        else:
            raise AdapterError(f"Bad action type: {action.type!r}")

    def _existing(self, url: str) -> tuple[str, str]:
        container, name = split_entry_url(url.rstrip("/"))
        if name not in self._containers.get(container, {}):
            raise AdapterError(f"No such entry: {url}")
        return container, name

    def _remove(self, url: str) -> None:
        container, name = self._existing(url)
        row = self._containers[container].pop(name)
        self._contents.pop(join_url(container, name), None)
        if row.type == ENTRY_DIRECTORY:
            prefix = join_url(container, name) + "/"
            for key in [key for key in self._containers if key.startswith(prefix)]:
                del self._containers[key]

    def _copy(self, src_url: str, dest_url: str) -> None:
        container, name = self._existing(src_url)
        row = self._containers[container][name]
        dest_container, dest_name = split_entry_url(dest_url.rstrip("/"))
        self._ensure_container(dest_container)
        self._containers[dest_container][dest_name] = ListedEntry(name=dest_name, type=row.type, metadata=dict(row.metadata))
        src_key = join_url(container, name)
        dest_key = join_url(dest_container, dest_name)
        if src_key in self._contents:
            self._contents[dest_key] = self._contents[src_key]
        if row.type == ENTRY_DIRECTORY:
            src_prefix = src_key + "/"
            dest_prefix = dest_key + "/"
            for key in [key for key in self._containers if key.startswith(src_prefix)]:
                self._containers[dest_prefix + key[len(src_prefix):]] = {
                    child: ListedEntry(name=child, type=child_row.type, metadata=dict(child_row.metadata))
                    for child, child_row in self._containers[key].items()
                }

    def preview_lines(self, url: str, entry: Entry, max_lines: int = 200) -> list[str]:
        content = self._contents.get(url)
        if content is None:
            return []
        return content.splitlines()[:max_lines]
