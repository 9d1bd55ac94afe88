"""Debounced preview-pane sync driven by cursor movement."""

from __future__ import annotations

from collections.abc import Callable

from ..model.types import Entry
from ..runtime.event_loop import EventLoop, RepeatingTimer
from .cursor import clamp_cursor_column
from .surface import Surface, Window, Workspace


class PreviewSync:
    """Coalesce bursts of cursor motion into one preview refresh.

    The first movement arms a timer for ``first_seconds``; further movement
    before it fires re-arms it for ``repeat_seconds``. When it fires, the
    entry under the cursor is previewed if it differs from the one shown.
    """

    def __init__(
        self,
        *,
        loop: EventLoop,
        workspace: Workspace,
        get_cursor_entry: Callable[[Window], Entry | None],
        open_preview: Callable[[Window, Entry], None],
        first_seconds: float,
        repeat_seconds: float,
    ) -> None:
        self.loop = loop
        self.workspace = workspace
        self.get_cursor_entry = get_cursor_entry
        self.open_preview = open_preview
        self.first_seconds = first_seconds
        self.repeat_seconds = repeat_seconds
        self._timers: dict[int, RepeatingTimer] = {}

    def on_cursor_moved(self, window: Window) -> None:
        if window.is_preview:
            return
        clamp_cursor_column(self.workspace, window)
        surface = window.surface
        timer = self._timers.get(surface.surface_id)
        if timer is not None:
            timer.again()
            return
        timer = RepeatingTimer(self.loop, lambda: self._fire(surface))
        timer.start(self.first_seconds, self.repeat_seconds)
        self._timers[surface.surface_id] = timer

    def _fire(self, surface: Surface) -> None:
        timer = self._timers.pop(surface.surface_id, None)
        if timer is not None:
            timer.stop()
        self.loop.call_soon(self._sync, surface)

    def _sync(self, surface: Surface) -> None:
        window = self.workspace.current
        if window is None or window.surface is not surface:
            return
        entry = self.get_cursor_entry(window)
        if entry is None:
            return
        preview = self.workspace.preview_window()
        if preview is None:
            return
        if entry.identity != preview.preview_entry_id:
            self.open_preview(window, entry)

    def cancel(self, surface: Surface) -> None:
        timer = self._timers.pop(surface.surface_id, None)
        if timer is not None:
            timer.stop()

    def cancel_all(self) -> None:
        for timer in self._timers.values():
            timer.stop()
        self._timers.clear()
