"""User-facing notifications routed through ``logging``."""

from __future__ import annotations

import logging
from collections.abc import Callable

LOGGER = logging.getLogger("lazydir")

Notifier = Callable[[str, int], None]


def log_notify(message: str, level: int = logging.INFO) -> None:
    """Default notifier: emit ``message`` on the ``lazydir`` logger."""
    LOGGER.log(level, message)
