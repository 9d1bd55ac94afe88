"""Listing surfaces: rendering, streaming population, cursor and preview sync.

Imports are resolved lazily so low-level modules can import
``lazydir.view.surface`` without pulling in the controller.
"""

from __future__ import annotations


def __getattr__(name: str):
    if name in {"ViewController", "ENTER_EVENT"}:
        from . import controller as _controller

        return getattr(_controller, name)
    if name in {"Surface", "Window", "FloatWindow", "FloatConfig", "Workspace"}:
        from . import surface as _surface

        return getattr(_surface, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ENTER_EVENT",
    "FloatConfig",
    "FloatWindow",
    "Surface",
    "ViewController",
    "Window",
    "Workspace",
]
