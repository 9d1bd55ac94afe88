"""Progress and cancellation view shown while a batch of actions runs.

States: ``hidden`` → ``shown`` ⇄ ``minimized`` → ``closed``. The modal view
shows the current action and an ``index/total`` counter with a bouncing
bar; the minimized view is a one-line corner float with a spinner. Both are
redrawn from a single animation timer.
"""

from __future__ import annotations

from collections.abc import Callable

from ..adapters import AdapterRegistry
from ..columns import render_change_action
from ..loading import get_bar_iter, get_iter
from ..model.types import ACTION_CHANGE, Action
from ..runtime.config import LazydirConfig
from ..runtime.event_loop import EventLoop, RepeatingTimer
from ..text import display_width
from ..view.surface import FloatWindow, Surface, Workspace
from .layout import calculate_dims, centered_float, corner_float, render_text

PROGRESS_URL = "lazydir://progress"
DESIRED_WIDTH = 120
DESIRED_HEIGHT = 10
MINIMIZED_WIDTH = 16
ACTION_HINTS = ("[M]inimize", "[C]ancel")


class ProgressController:
    """Modal/minimized status view plus cancel and minimize controls."""

    def __init__(
        self,
        *,
        loop: EventLoop,
        workspace: Workspace,
        adapters: AdapterRegistry,
        config: LazydirConfig,
    ) -> None:
        self.loop = loop
        self.workspace = workspace
        self.adapters = adapters
        self.config = config
        self.lines = ["", ""]
        self.count = ""
        self.spinner = ""
        self.surface: Surface | None = None
        self.window: FloatWindow | None = None
        self.min_surface: Surface | None = None
        self.min_window: FloatWindow | None = None
        self.timer: RepeatingTimer | None = None
        self.cancel: Callable[[], object] | None = None
        self.closing = False
        self._subscriptions: list[int] = []

    @property
    def state(self) -> str:
        if self.window is not None:
            return "shown"
        if self.min_window is not None:
            return "minimized"
        if self.closing:
            return "closed"
        return "hidden"

    def show(self, cancel: Callable[[], object] | None = None) -> None:
        """Open the modal view and start animating; no-op if already shown."""
        if self.window is not None and self.window.valid:
            return
        self.closing = False
        self.cancel = cancel
        bar_iter = get_bar_iter()
        spinner_iter = get_iter("dots")

        def tick() -> None:
            self.lines[1] = f"{self.count} {next(bar_iter)}"
            self.spinner = next(spinner_iter)
            self._render()

        if self.timer is None:
            self.timer = RepeatingTimer(self.loop, tick)
            self.timer.start(0, 1.0 / self.config.progress_fps)

        self.surface = self.workspace.create_surface(PROGRESS_URL, kind="progress")
        self.surface.modifiable = False
        width, height = self._dims()
        self.window = self.workspace.open_float(
            self.surface,
            centered_float(width, height, self.workspace.width, self.workspace.height, self.config.progress.border),
        )
        self._subscriptions = [
            self.workspace.subscribe("resized", lambda **_payload: self._reposition()),
            self.workspace.subscribe("window_leave", self._on_window_leave),
        ]
        self.surface.keymaps.update(
            {
                "c": self._cancel,
                "C": self._cancel,
                "m": self.minimize,
                "M": self.minimize,
            }
        )

    def _cancel(self) -> None:
        if self.cancel is not None:
            self.cancel()

    def _on_window_leave(self, window: object) -> None:
        if window is self.window:
            self.minimize()

    def _dims(self) -> tuple[int, int]:
        min_width = max(DESIRED_WIDTH, display_width(self.lines[0]))
        return calculate_dims(
            min_width,
            DESIRED_HEIGHT,
            self.config.progress,
            self.workspace.width,
            self.workspace.height,
        )

    def _write(self, surface: Surface, lines: list[str]) -> None:
        surface.modifiable = True
        surface.set_lines(lines, record_undo=False)
        surface.modifiable = False
        surface.modified = False

    def _render(self) -> None:
        if self.surface is not None and self.surface.valid and self.window is not None:
            config = self.window.config
            self._write(self.surface, render_text(self.lines, config.width, config.height, actions=ACTION_HINTS))
        if self.min_surface is not None and self.min_surface.valid:
            self._write(self.min_surface, [f"{self.spinner}lazydir: {self.count}"])

    def _reposition(self) -> None:
        if self.window is None or not self.window.valid:
            return
        width, height = self._dims()
        self.workspace.set_float_config(
            self.window,
            centered_float(width, height, self.workspace.width, self.workspace.height, self.config.progress.border),
        )

    def _cleanup_main_win(self) -> None:
        for subscription in self._subscriptions:
            self.workspace.unsubscribe(subscription)
        self._subscriptions = []
        window, surface = self.window, self.surface
        self.window = None
        self.surface = None
        if window is not None:
            self.workspace.close_window(window)
        if surface is not None:
            self.workspace.delete_surface(surface, force=True)

    def minimize(self) -> None:
        """Swap the modal for a corner float; the batch keeps running."""
        if self.closing or self.window is None:
            return
        self._cleanup_main_win()
        self.min_surface = self.workspace.create_surface(PROGRESS_URL, kind="progress")
        self.min_surface.modifiable = False
        self.min_window = self.workspace.open_float(
            self.min_surface,
            corner_float(
                MINIMIZED_WIDTH,
                1,
                self.workspace.width,
                self.workspace.height,
                self.config.progress.minimized_border,
            ),
            enter=False,
        )
        self._render()

    def set_action(self, action: Action, index: int, total: int) -> None:
        """Show ``action`` as number ``index`` of ``total``."""
        adapter = self.adapters.get_adapter_for_action(action)
        if action.type == ACTION_CHANGE:
            self.lines[0] = render_change_action(adapter, action)
        else:
            self.lines[0] = adapter.render_action(action)
        self.count = f"{index}/{total}"
        self._reposition()
        self._render()

    def close(self) -> None:
        """Stop animating and tear down whichever view is open; idempotent."""
        self.closing = True
        if self.timer is not None:
            self.timer.stop()
            self.timer = None
        self._cleanup_main_win()
        min_window, min_surface = self.min_window, self.min_surface
        self.min_window = None
        self.min_surface = None
        if min_window is not None:
            self.workspace.close_window(min_window)
        if min_surface is not None:
            self.workspace.delete_surface(min_surface, force=True)
