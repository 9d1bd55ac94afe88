"""Busy-indicator frames and the per-surface loading indicator."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Iterator

from .runtime.event_loop import EventLoop, RepeatingTimer
from .view.surface import Surface

SPINNERS: dict[str, tuple[str, ...]] = {
    "dots": ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"),
    "line": ("|", "/", "-", "\\"),
}
BAR_WIDTH = 20
BAR_SIZE = 3
LOADING_FRAME_SECONDS = 0.1


def get_iter(name: str = "dots") -> Iterator[str]:
    """Endless iterator over the named spinner's frames."""
    return itertools.cycle(SPINNERS[name])


def bar_frames(width: int = BAR_WIDTH, bar_size: int = BAR_SIZE) -> list[str]:
    """Frames of a bar bouncing left to right and back inside ``[...]``."""
    inner = max(bar_size, width - 2)
    travel = inner - bar_size
    positions = list(range(travel + 1)) + list(range(travel - 1, 0, -1))
    return ["[" + " " * pos + "=" * bar_size + " " * (travel - pos) + "]" for pos in positions]


def get_bar_iter(width: int = BAR_WIDTH, bar_size: int = BAR_SIZE) -> Iterator[str]:
    return itertools.cycle(bar_frames(width, bar_size))


class LoadingIndicator:
    """Animated ``Loading`` placeholder drawn into surfaces still being fetched.

    Drawing starts only after ``delay`` so fast listings never flash it.
    """

    def __init__(
        self,
        loop: EventLoop,
        draw: Callable[[Surface, list[str]], None],
        *,
        delay: float,
        frame_seconds: float = LOADING_FRAME_SECONDS,
    ) -> None:
        self._loop = loop
        self._draw = draw
        self._delay = delay
        self._frame_seconds = frame_seconds
        self._timers: dict[int, RepeatingTimer] = {}

    def is_loading(self, surface: Surface) -> bool:
        return surface.surface_id in self._timers

    def set_loading(self, surface: Surface, is_loading: bool) -> None:
        key = surface.surface_id
        if is_loading:
            if key in self._timers:
                return
            bar_iter = get_bar_iter()
            timer = RepeatingTimer(self._loop, lambda: self._draw(surface, ["Loading", next(bar_iter)]))
            timer.start(self._delay, self._frame_seconds)
            self._timers[key] = timer
            surface.loading = True
            return
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.stop()
        surface.loading = False
