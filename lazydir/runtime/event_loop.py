"""Single-threaded cooperative event loop and restartable timers.

All lazydir state is mutated from callbacks run by one ``EventLoop``. Work
yields only by scheduling a callback (``call_soon``/``call_later``) or by
arming a ``RepeatingTimer``; there is no thread-level concurrency.

The loop reads time from an injected ``monotonic`` callable. Pairing it with
``ManualClock`` gives a loop whose time only moves through ``advance``.
"""

from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def monotonic(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += max(0.0, seconds)


class TimerHandle:
    """Cancellable reference to one scheduled callback."""

    __slots__ = ("when", "_callback", "_args", "cancelled")

    def __init__(self, when: float, callback: Callable[..., object], args: tuple[object, ...]) -> None:
        self.when = when
        self._callback = callback
        self._args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def _run(self) -> None:
        self._callback(*self._args)


class EventLoop:
    """Deadline-ordered callback queue.

    Callbacks due at the same instant run in scheduling order. Exceptions
    raised by a callback propagate to whoever is driving the loop.
    """

    def __init__(
        self,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._monotonic = monotonic
        self._sleep = sleep
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    def time(self) -> float:
        return self._monotonic()

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> TimerHandle:
        handle = TimerHandle(self.time() + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    def call_soon(self, callback: Callable[..., object], *args: object) -> TimerHandle:
        return self.call_later(0.0, callback, *args)

    def _prune(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)

    def next_deadline(self) -> float | None:
        """Return when the earliest live callback is due, or ``None`` if idle."""
        self._prune()
        if not self._queue:
            return None
        return self._queue[0][0]

    def has_pending(self) -> bool:
        return self.next_deadline() is not None

    def run_ready(self) -> int:
        """Run every callback due now, including ones they schedule for now.

        Returns the number of callbacks executed.
        """
        ran = 0
        while True:
            self._prune()
            if not self._queue or self._queue[0][0] > self.time():
                return ran
            _when, _seq, handle = heapq.heappop(self._queue)
            handle.cancelled = True
            handle._run()
            ran += 1

    def advance(self, seconds: float) -> int:
        """Step a ``ManualClock``-backed loop forward, firing due callbacks in order.

        The clock is moved deadline by deadline so callbacks observe the time
        they were scheduled for.
        """
        clock = getattr(self._monotonic, "__self__", None)
        if not isinstance(clock, ManualClock):
            raise TypeError("advance() requires a loop driven by ManualClock.monotonic")
        target = clock.now + max(0.0, seconds)
        ran = self.run_ready()
        while True:
            deadline = self.next_deadline()
            if deadline is None or deadline > target:
                break
            clock.now = max(clock.now, deadline)
            ran += self.run_ready()
        clock.now = max(clock.now, target)
        ran += self.run_ready()
        return ran

    def run_until(self, predicate: Callable[[], bool], timeout: float | None = None) -> bool:
        """Drive the loop in real time until ``predicate()`` holds.

        Returns ``False`` when the loop goes idle or ``timeout`` elapses first.
        """
        deadline = None if timeout is None else self.time() + timeout
        while not predicate():
            self.run_ready()
            if predicate():
                return True
            next_due = self.next_deadline()
            if next_due is None:
                return False
            now = self.time()
            if deadline is not None and now >= deadline:
                return False
            wait = next_due - now
            if deadline is not None:
                wait = min(wait, deadline - now)
            if wait > 0:
                self._sleep(wait)
        return True


class RepeatingTimer:
    """Restartable timer with an initial timeout and a repeat interval.

    ``again()`` re-arms the timer using the repeat interval, discarding any
    pending fire. A stopped timer never fires until started again.
    """

    def __init__(self, loop: EventLoop, callback: Callable[[], object]) -> None:
        self._loop = loop
        self._callback = callback
        self._handle: TimerHandle | None = None
        self._repeat = 0.0

    @property
    def active(self) -> bool:
        return self._handle is not None and not self._handle.cancelled

    @property
    def repeat(self) -> float:
        return self._repeat

    def start(self, timeout: float, repeat: float = 0.0) -> None:
        self.stop()
        self._repeat = max(0.0, repeat)
        self._handle = self._loop.call_later(timeout, self._fire)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def again(self) -> None:
        """Restart with the repeat interval; no-op for one-shot timers."""
        if self._repeat <= 0:
            return
        self.start(self._repeat, self._repeat)

    def _fire(self) -> None:
        self._handle = None
        if self._repeat > 0:
            self._handle = self._loop.call_later(self._repeat, self._fire)
        self._callback()
