"""Headless host UI model: surfaces, windows, floats, keymaps, and events.

``Workspace`` plays the role of the editor host. It owns every surface and
window and publishes lifecycle events that the view controller subscribes to:

``entered``       a window starts showing a surface (or gains focus)
``hidden``        a surface stops being shown in any window
``deleted``       a surface was deleted
``cursor_moved``  a window cursor moved
``window_leave``  the focused window lost focus or closed
``resized``       the host size changed
``user``          application-defined events (``pattern`` names the event)
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..errors import SurfaceLockedError
from ..model.types import Highlight

DEFAULT_UNDO_LEVELS = 1000
NO_UNDO = -1


@dataclass(eq=False)
class Surface:
    """Editable line buffer bound to one container URL."""

    surface_id: int
    url: str
    lines: list[str] = field(default_factory=lambda: [""])
    kind: str = "listing"
    modified: bool = False
    modifiable: bool = True
    loaded: bool = True
    valid: bool = True
    loading: bool = False
    undo_levels: int = DEFAULT_UNDO_LEVELS
    undo_history: list[list[str]] = field(default_factory=list)
    highlights: list[Highlight] = field(default_factory=list)
    pending_render: dict[str, object] | None = None
    keymaps: dict[str, Callable[[], object]] = field(default_factory=dict)

    def set_lines(self, lines: Sequence[str], *, record_undo: bool = True) -> None:
        """Replace all lines, recording undo unless history is suspended."""
        if not self.modifiable:
            raise SurfaceLockedError(f"surface {self.url!r} is not modifiable")
        if record_undo:
            if self.undo_levels < 0:
                self.undo_history.clear()
            elif self.undo_levels > 0:
                self.undo_history.append(list(self.lines))
                del self.undo_history[: -self.undo_levels]
        self.lines = list(lines) or [""]

    def edit(self, lines: Sequence[str]) -> None:
        """User edit: replace lines and mark the surface modified."""
        self.set_lines(lines)
        self.modified = True

    def undo(self) -> bool:
        if not self.undo_history or not self.modifiable:
            return False
        self.lines = self.undo_history.pop()
        self.modified = True
        return True

    def line(self, row: int) -> str:
        if 0 <= row < len(self.lines):
            return self.lines[row]
        return ""


@dataclass(eq=False)
class Window:
    """Viewport showing one surface with its own cursor."""

    window_id: int
    surface: Surface
    cursor: tuple[int, int] = (0, 0)
    is_preview: bool = False
    preview_entry_id: int | None = None
    valid: bool = True


@dataclass(frozen=True)
class FloatConfig:
    width: int
    height: int
    row: int
    col: int
    anchor: str = "NW"
    border: str = "none"
    zindex: int = 50


@dataclass(eq=False)
class FloatWindow(Window):
    config: FloatConfig = field(default_factory=lambda: FloatConfig(width=1, height=1, row=0, col=0))


class Workspace:
    """In-memory editor host."""

    def __init__(self, width: int = 120, height: int = 40) -> None:
        self.width = width
        self.height = height
        self.surfaces: dict[int, Surface] = {}
        self.windows: list[Window] = []
        self.floats: list[FloatWindow] = []
        self.current: Window | None = None
        self._ids = itertools.count(1)
        self._window_ids = itertools.count(1000)
        self._subscription_ids = itertools.count(1)
        self._listeners: dict[str, dict[int, Callable[..., object]]] = {}

    # -- events -----------------------------------------------------------

    def subscribe(self, event: str, callback: Callable[..., object]) -> int:
        subscription = next(self._subscription_ids)
        self._listeners.setdefault(event, {})[subscription] = callback
        return subscription

    def unsubscribe(self, subscription: int) -> None:
        for listeners in self._listeners.values():
            listeners.pop(subscription, None)

    def emit(self, event: str, **payload: object) -> None:
        for callback in list(self._listeners.get(event, {}).values()):
            callback(**payload)

    # -- surfaces ---------------------------------------------------------

    def create_surface(self, url: str, kind: str = "listing") -> Surface:
        surface = Surface(surface_id=next(self._ids), url=url, kind=kind)
        self.surfaces[surface.surface_id] = surface
        return surface

    def find_surface(self, url: str) -> Surface | None:
        for surface in self.surfaces.values():
            if surface.url == url and surface.valid:
                return surface
        return None

    def all_windows(self) -> list[Window]:
        return [*self.windows, *self.floats]

    def visible_surface_ids(self) -> set[int]:
        return {window.surface.surface_id for window in self.all_windows() if window.valid}

    def is_visible(self, surface: Surface) -> bool:
        return surface.surface_id in self.visible_surface_ids()

    def windows_for(self, surface: Surface) -> list[Window]:
        return [window for window in self.all_windows() if window.valid and window.surface is surface]

    def delete_surface(self, surface: Surface, force: bool = False) -> None:
        """Delete ``surface``; windows showing it are closed first."""
        if not surface.valid:
            return
        if surface.modified and not force:
            raise SurfaceLockedError(f"surface {surface.url!r} has unsaved changes")
        for window in self.windows_for(surface):
            self._drop_window(window)
        surface.valid = False
        surface.loaded = False
        self.surfaces.pop(surface.surface_id, None)
        self.emit("deleted", surface=surface)

    @property
    def current_surface(self) -> Surface | None:
        return self.current.surface if self.current is not None else None

    # -- windows ----------------------------------------------------------

    def open_window(self, surface: Surface, *, preview: bool = False, enter: bool = True) -> Window:
        window = Window(window_id=next(self._window_ids), surface=surface, is_preview=preview)
        self.windows.append(window)
        if enter:
            self.focus(window)
        return window

    def focus(self, window: Window) -> None:
        previous = self.current
        if previous is window:
            return
        if previous is not None and previous.valid:
            self.emit("window_leave", window=previous)
        self.current = window
        self.emit("entered", surface=window.surface, window=window)

    def set_window_surface(self, window: Window, surface: Surface) -> None:
        previous = window.surface
        window.surface = surface
        window.cursor = (0, 0)
        if previous is not surface and previous.valid and not self.is_visible(previous):
            self.emit("hidden", surface=previous)
        if window is self.current:
            self.emit("entered", surface=surface, window=window)

    def _drop_window(self, window: Window) -> None:
        window.valid = False
        if window in self.windows:
            self.windows.remove(window)
        if window in self.floats:
            self.floats.remove(window)
        if self.current is window:
            self.current = self.windows[-1] if self.windows else None

    def close_window(self, window: Window) -> None:
        if not window.valid:
            return
        was_current = self.current is window
        self._drop_window(window)
        if was_current:
            self.emit("window_leave", window=window)
        surface = window.surface
        if surface.valid and not self.is_visible(surface):
            self.emit("hidden", surface=surface)
        if was_current and self.current is not None:
            self.emit("entered", surface=self.current.surface, window=self.current)

    def preview_window(self) -> Window | None:
        for window in self.windows:
            if window.valid and window.is_preview:
                return window
        return None

    def set_cursor(self, window: Window, row: int, col: int) -> None:
        """Move ``window``'s cursor (clamped to the surface) and publish it."""
        lines = window.surface.lines
        row = max(0, min(row, len(lines) - 1))
        col = max(0, min(col, max(0, len(lines[row]))))
        window.cursor = (row, col)
        self.emit("cursor_moved", window=window)

    def place_cursor(self, window: Window, row: int, col: int) -> None:
        """Move the cursor without publishing ``cursor_moved``."""
        lines = window.surface.lines
        row = max(0, min(row, len(lines) - 1))
        window.cursor = (row, max(0, col))

    # -- floats -----------------------------------------------------------

    def open_float(self, surface: Surface, config: FloatConfig, *, enter: bool = True) -> FloatWindow:
        window = FloatWindow(window_id=next(self._window_ids), surface=surface, config=config)
        self.floats.append(window)
        if enter:
            self.focus(window)
        return window

    def set_float_config(self, window: FloatWindow, config: FloatConfig) -> None:
        window.config = config

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.emit("resized", width=width, height=height)

    # -- input ------------------------------------------------------------

    def press(self, key: str) -> bool:
        """Dispatch ``key`` to the focused surface's keymap."""
        surface = self.current_surface
        if surface is None:
            return False
        handler = surface.keymaps.get(key)
        if handler is None:
            return False
        handler()
        return True
