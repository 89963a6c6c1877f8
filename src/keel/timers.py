"""Periodic callbacks driven by a polling loop."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Wall-clock time in whole milliseconds."""

    return time.time_ns() // 1_000_000


@dataclass(slots=True)
class _Timer:
    callback: Callable[[], object]
    interval_ms: int
    last_run: int


class IntervalScheduler:
    """Run callbacks every ``ms`` milliseconds from a single polling loop.

    Callbacks run on the loop's thread; a slow callback delays every other
    timer.
    """

    def __init__(self, *, clock: Clock = now_ms, sleep: Callable[[float], None] = time.sleep) -> None:
        self._clock = clock
        self._sleep = sleep
        self._timers: list[_Timer] = []
        self._running = False

    def set_interval(self, callback: Callable[[], object], ms: int) -> None:
        if ms <= 0:
            raise ValueError("Interval must be a positive number of milliseconds")
        self._timers.append(_Timer(callback=callback, interval_ms=ms, last_run=self._clock()))

    def __len__(self) -> int:
        return len(self._timers)

    def run_pending(self, now: int | None = None) -> int:
        """Fire every timer whose interval has elapsed; return how many ran."""

        current = self._clock() if now is None else now
        fired = 0
        for timer in self._timers:
            if current - timer.last_run >= timer.interval_ms:
                timer.callback()
                timer.last_run = current
                fired += 1
        return fired

    def run(self, *, poll: float = 0.001) -> None:
        """Poll until :meth:`stop` is called, sleeping ``poll`` seconds between checks."""

        self._running = True
        logger.debug("Scheduler started with %d timer(s)", len(self._timers))
        while self._running:
            self.run_pending()
            self._sleep(poll)
        logger.debug("Scheduler stopped")

    def stop(self) -> None:
        self._running = False


__all__ = ["IntervalScheduler", "now_ms"]
