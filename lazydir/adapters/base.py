"""Backing-store adapter interface and the streaming listing abstraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from ..errors import AdapterError
from ..model.types import (
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
from ..model.url import parse_url


@dataclass(frozen=True)
class ListingChunk:
    """One batch of listed rows; ``has_more`` is ``False`` on the final chunk."""

    entries: tuple[ListedEntry, ...]
    has_more: bool


class ListingStream:
    """Cancellable iterator of ``ListingChunk`` values.

    Iteration ends after the chunk whose ``has_more`` is ``False`` or after
    ``close()``. Producer failures surface as ``AdapterError`` from ``next``.
    """

    def __init__(self, chunks: Iterator[ListingChunk]) -> None:
        self._chunks = chunks
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> ListingStream:
        return self

    def __next__(self) -> ListingChunk:
        if self._closed:
            raise StopIteration
        try:
            chunk = next(self._chunks)
        except StopIteration:
            self._closed = True
            raise
        except AdapterError:
            self._closed = True
            raise
        except OSError as exc:
            self._closed = True
            raise AdapterError(str(exc)) from exc
        if not chunk.has_more:
            self._closed = True
        return chunk

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._chunks, "close", None)
        if close is not None:
            close()


def chunked(rows: Sequence[ListedEntry], chunk_size: int) -> Iterator[ListingChunk]:
    """Yield ``rows`` as chunks, always ending with a ``has_more=False`` chunk."""
    size = max(1, chunk_size)
    total = len(rows)
    if total == 0:
        yield ListingChunk(entries=(), has_more=False)
        return
    for start in range(0, total, size):
        end = start + size
        yield ListingChunk(entries=tuple(rows[start:end]), has_more=end < total)


class Adapter(ABC):
    """Capability set every backing store provides.

    Adapters are chosen by container-URL scheme and are not mutated by the
    view layer after construction.
    """

    name: str = ""
    scheme: str = ""
    supported_columns: tuple[str, ...] = ()
    preserves_undo: bool = False

    @abstractmethod
    def list(self, url: str, column_defs: Sequence[ColumnSpec]) -> ListingStream:
        """Start listing container ``url``."""

    @abstractmethod
    def perform_action(self, action: Action) -> None:
        """Apply ``action``; raise ``AdapterError`` on failure."""

    def is_modifiable(self, surface: object) -> bool:
        return True

    def display_path(self, url: str) -> str:
        _scheme, path = parse_url(url)
        return path if path is not None else url

    def render_action(self, action: Action) -> str:
        """Human-readable one-line description of ``action``."""
        if action.type in (ACTION_CREATE, ACTION_DELETE):
            target = self.display_path(action.primary_url)
            if action.entry_type == ENTRY_DIRECTORY and not target.endswith("/"):
                target += "/"
            return f"{action.type.upper()} {target}"
        if action.type in (ACTION_MOVE, ACTION_COPY):
            src = self.display_path(action.src_url or "")
            dest = self.display_path(action.dest_url or "")
            return f"  {action.type.upper()} {src} -> {dest}"
        raise ValueError(f"Bad action type: {action.type!r}")

    def preview_lines(self, url: str, entry: Entry, max_lines: int = 200) -> list[str]:
        """Lines shown in the preview pane for a non-directory entry."""
        return []
