"""Cursor continuity across re-renders.

Re-rendering replaces every row, so line numbers from before a render mean
nothing afterwards. ``CursorMemory`` keeps the *name* of the entry that
should be under the cursor per container URL until a render finds it.
"""

from __future__ import annotations

from ..model.cache import EntryCache
from .surface import Window, Workspace


class CursorMemory:
    """Container URL → name of the entry to relocate the cursor onto."""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    def remember(self, url: str, name: str | None) -> None:
        """Record ``name`` for ``url``; ``None`` clears the memory."""
        if name is None:
            self._names.pop(url, None)
        else:
            self._names[url] = name

    def recall(self, url: str) -> str | None:
        return self._names.get(url)

    def clear(self) -> None:
        self._names.clear()


def identity_prefix_width(line: str) -> int | None:
    """Columns occupied by the identity token and its separator on ``line``.

    Returns ``None`` when the line does not start with an identity token.
    """
    parsed = EntryCache.parse_id(line)
    if parsed is None:
        return None
    _identity, token = parsed
    return len(token) + 1 if len(line) > len(token) else len(token)


def entry_column(line: str, name: str) -> int:
    """Column of ``name`` on ``line``, searched after the identity prefix."""
    prefix = identity_prefix_width(line) or 0
    found = line.find(name, prefix)
    return found if found >= 0 else prefix


def relocate_cursor(
    workspace: Workspace,
    cache: EntryCache,
    memory: CursorMemory,
    window: Window,
) -> bool:
    """Move ``window``'s cursor onto the remembered entry, once.

    Rows are scanned top to bottom; the first row whose entry name matches
    wins and the memory is cleared. Without a match the memory is kept for
    the next render.
    """
    surface = window.surface
    name = memory.recall(surface.url)
    if name is None:
        return False
    for row, line in enumerate(surface.lines):
        parsed = EntryCache.parse_id(line)
        if parsed is None:
            continue
        entry = cache.get_entry_by_id(parsed[0])
        if entry is None or entry.name != name:
            continue
        workspace.set_cursor(window, row, entry_column(line, name))
        memory.remember(surface.url, None)
        return True
    return False


def clamp_cursor_column(workspace: Workspace, window: Window) -> bool:
    """Push the cursor right of the identity prefix; return whether it moved."""
    row, col = window.cursor
    min_col = identity_prefix_width(window.surface.line(row))
    if min_col is None or col >= min_col:
        return False
    workspace.place_cursor(window, row, min_col)
    return True
