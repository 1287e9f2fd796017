"""Lightweight wall-clock profiling for the benchmark harness.

Provides TimerAccumulator: repeated measurements with mean/best.

No heavy dependencies (no cProfile overhead inside the scan loop).
"""

import time
from contextlib import contextmanager
from typing import List


class TimerAccumulator:
    """Accumulate timing measurements of one benchmark case.

    Examples
    --------
    >>> acc = TimerAccumulator("scan 16x16")
    >>> for _ in range(10):
    ...     with acc.measure():
    ...         run()
    >>> acc.best(), acc.mean()
    """

    def __init__(self, name: str):
        self.name = name
        self.samples: List[float] = []

    @contextmanager
    def measure(self):
        """Context manager to measure and record one sample."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.samples.append(time.perf_counter() - start)

    @property
    def count(self) -> int:
        return len(self.samples)

    @property
    def total_time(self) -> float:
        return sum(self.samples)

    def mean(self) -> float:
        """Mean time per measurement in seconds, 0.0 if none."""
        return self.total_time / self.count if self.count else 0.0

    def best(self) -> float:
        """Fastest measurement in seconds, 0.0 if none."""
        return min(self.samples) if self.samples else 0.0

    def __repr__(self) -> str:
        return (
            f"TimerAccumulator({self.name}, best={self.best():.6f}s, "
            f"mean={self.mean():.6f}s, count={self.count})"
        )
