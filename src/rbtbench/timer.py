"""Monotonic duration measurement."""

import time
from typing import Optional


class DurationTimer:
    """
    Measures one span at a time in nanoseconds.

    Usage:
        timer = DurationTimer()
        timer.start()
        work()
        elapsed_ns = timer.stop()

        with timer:
            work()
        print(timer.elapsed)
    """

    def __init__(self):
        self._started: Optional[int] = None
        self.elapsed: int = 0

    @property
    def running(self) -> bool:
        return self._started is not None

    def start(self) -> None:
        if self._started is not None:
            raise RuntimeError("Timer already running")
        self._started = time.perf_counter_ns()

    def stop(self) -> int:
        end = time.perf_counter_ns()
        if self._started is None:
            raise RuntimeError("Timer was not started")
        self.elapsed = end - self._started
        self._started = None
        return self.elapsed

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()


def per_second(count: int, elapsed_ns: int) -> float:
    """Operations per second for count operations taking elapsed_ns."""
    return (1_000_000_000.0 / max(elapsed_ns, 1)) * count
