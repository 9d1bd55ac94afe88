"""Runtime plumbing: event loop, timers, configuration, and notifications."""

from __future__ import annotations

from .event_loop import EventLoop, ManualClock, RepeatingTimer, TimerHandle
from .notify import Notifier, log_notify

__all__ = [
    "EventLoop",
    "ManualClock",
    "Notifier",
    "RepeatingTimer",
    "TimerHandle",
    "log_notify",
]
