"""Surface rendering: entries → aligned, identity-prefixed rows.

Each render reads a snapshot of the cache for the surface's container,
orders it (directories first, then byte-wise by name), drops hidden entries,
formats one row per entry, and replaces the surface text in one write.
Column widths are recomputed from scratch on every render.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..adapters import AdapterRegistry
from ..adapters.base import Adapter
from ..columns import Cell, get_supported_columns, render_col
from ..errors import UrlResolutionError
from ..model.cache import EntryCache
from ..model.types import (
    ENTRY_DIRECTORY,
    ENTRY_LINK,
    ENTRY_SOCKET,
    ColumnSpec,
    Entry,
    Highlight,
)
from ..model.url import addslash, parse_url
from ..runtime.config import LazydirConfig, ViewOptions
from ..runtime.event_loop import EventLoop
from ..text import display_width, rpad
from .cursor import CursorMemory, entry_column
from .surface import Surface, Workspace


def should_display(entry: Entry, view_options: ViewOptions, surface: Surface | None = None) -> bool:
    """Return whether ``entry`` gets a row under the current visibility rules."""
    name = entry.name
    if view_options.is_always_hidden(name, surface):
        return False
    return view_options.show_hidden or not view_options.is_hidden_file(name, surface)


def entry_sort_key(entry: Entry) -> tuple[bool, bytes]:
    return (not entry.is_directory(), entry.name.encode("utf-8", "surrogateescape"))


def sort_entries(entries: Iterable[Entry]) -> list[Entry]:
    return sorted(entries, key=entry_sort_key)


def format_entry_cols(
    entry: Entry,
    column_defs: Sequence[ColumnSpec],
    col_width: list[int | None],
    adapter: Adapter,
    cache: EntryCache,
) -> list[Cell]:
    """Build the cells of one row and widen ``col_width`` to fit them.

    Cell 0 is the identity token, then one cell per column, then the name
    (plus an arrow cell for links with a known target).
    """
    name = entry.name
    id_key = cache.format_id(entry.identity)
    col_width[0] = display_width(id_key)
    cols: list[Cell] = [id_key]
    for i, column in enumerate(column_defs):
        chunk = render_col(adapter, column, entry)
        text = chunk[0] if isinstance(chunk, tuple) else chunk
        col_width[i + 1] = max(col_width[i + 1] or 0, display_width(text))
        cols.append(chunk)

    if entry.type == ENTRY_DIRECTORY:
        cols.append((name + "/", "dir"))
    elif entry.type == ENTRY_SOCKET:
        cols.append((name, "socket"))
    elif entry.type == ENTRY_LINK:
        link_is_dir = entry.link_type == ENTRY_DIRECTORY
        link_text = None
        if link_is_dir:
            name += "/"
        if entry.link_target is not None:
            link_text = "-> " + entry.link_target
            if link_is_dir:
                link_text = addslash(link_text)
        cols.append((name, "link"))
        if link_text is not None:
            cols.append((link_text, "comment"))
    else:
        cols.append((name, "file"))
    return cols


def render_table(rows: Sequence[Sequence[Cell]], col_width: Sequence[int | None]) -> tuple[list[str], list[Highlight]]:
    """Join cells with single spaces, padding each to its column width.

    Cells past the end of ``col_width`` (name and link target) are unpadded.
    """
    lines: list[str] = []
    highlights: list[Highlight] = []
    for row_index, cols in enumerate(rows):
        pieces: list[str] = []
        col = 0
        for i, chunk in enumerate(cols):
            if isinstance(chunk, tuple):
                text, style = chunk
            else:
                text, style = chunk, None
            text = rpad(text, col_width[i] if i < len(col_width) else None)
            if style:
                highlights.append(Highlight(style=style, row=row_index, col_start=col, col_end=col + len(text)))
            pieces.append(text)
            col += len(text) + 1
        lines.append(" ".join(pieces))
    return lines, highlights


@dataclass(frozen=True)
class ResolvedSurface:
    scheme: str
    adapter: Adapter
    column_defs: list[ColumnSpec]


class SurfaceRenderer:
    """Synchronous render pass plus deferred cursor placement."""

    def __init__(
        self,
        *,
        loop: EventLoop,
        workspace: Workspace,
        cache: EntryCache,
        adapters: AdapterRegistry,
        cursor_memory: CursorMemory,
        config: LazydirConfig,
    ) -> None:
        self.loop = loop
        self.workspace = workspace
        self.cache = cache
        self.adapters = adapters
        self.cursor_memory = cursor_memory
        self.config = config

    def resolve(self, surface: Surface) -> ResolvedSurface:
        """Resolve scheme, adapter, and supported columns for ``surface``."""
        scheme, path = parse_url(surface.url)
        if scheme is None or path is None:
            raise UrlResolutionError(f"Could not parse url '{surface.url}'")
        adapter = self.adapters.get_adapter(surface.url)
        if adapter is None:
            raise UrlResolutionError(f"no adapter for surface '{surface.url}'")
        return ResolvedSurface(
            scheme=scheme,
            adapter=adapter,
            column_defs=get_supported_columns(adapter, self.config.columns),
        )

    def write_text(self, surface: Surface, lines: Sequence[str]) -> None:
        """Replace ``surface`` text outside of undo history, keeping its lock state."""
        if not surface.valid:
            return
        was_modifiable = surface.modifiable
        surface.modifiable = True
        surface.set_lines(lines, record_undo=False)
        surface.modifiable = was_modifiable
        surface.modified = False
        surface.highlights = []

    def render_error(self, surface: Surface, message: str) -> None:
        self.write_text(surface, [f"Error: {message}"])
        surface.highlights = [Highlight(style="error", row=0, col_start=0, col_end=len(surface.lines[0]))]

    def render(self, surface: Surface, *, jump: bool = False, jump_first: bool = False) -> bool:
        """Render the cached entries of ``surface``'s container into it.

        Returns whether the remembered cursor target was found (and consumed).
        Raises ``UrlResolutionError`` after writing the error into the surface
        when the URL cannot be resolved.
        """
        if not surface.valid:
            return False
        try:
            resolved = self.resolve(surface)
        except UrlResolutionError as exc:
            self.render_error(surface, str(exc))
            raise

        entries = sort_entries(self.cache.list_url(surface.url).values())
        jump_idx = 0 if jump_first else None
        seek_found = False
        seek_name = self.cursor_memory.recall(surface.url)
        view_options = self.config.view_options
        col_width: list[int | None] = [1] * (len(resolved.column_defs) + 1)
        rows: list[list[Cell]] = []
        for entry in entries:
            if not should_display(entry, view_options, surface):
                continue
            rows.append(format_entry_cols(entry, resolved.column_defs, col_width, resolved.adapter, self.cache))
            if seek_name is not None and not seek_found and entry.name == seek_name:
                seek_found = True
                jump_idx = len(rows) - 1
                self.cursor_memory.remember(surface.url, None)

        lines, highlights = render_table(rows, col_width)
        surface.modifiable = True
        surface.set_lines(lines)
        surface.modifiable = False
        surface.modified = False
        surface.highlights = highlights

        if jump:
            # Rows were just replaced; place cursors once the current turn settles.
            self.loop.call_soon(self._jump_to_row, surface, jump_idx)
        return seek_found

    def _jump_to_row(self, surface: Surface, jump_idx: int | None) -> None:
        if not surface.valid:
            return
        for window in self.workspace.windows_for(surface):
            row = jump_idx if jump_idx is not None else window.cursor[0]
            line = surface.line(row)
            parsed = EntryCache.parse_id(line)
            if parsed is None:
                continue
            entry = self.cache.get_entry_by_id(parsed[0])
            if entry is None:
                continue
            self.workspace.set_cursor(window, row, entry_column(line, entry.name))
