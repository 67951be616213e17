"""Queue depth statistics: current, min, max, mean and overflow count."""

from __future__ import annotations

import threading


class QueueDepthTracker:
    """Tracks sampled queue depths.

    A sample counts as an overflow when ``depth >= capacity``; a capacity of
    0 disables overflow counting.
    """

    def __init__(self, capacity: int = 0) -> None:
        self.capacity = capacity
        self._lock = threading.Lock()
        self._reset_locked()

    def _reset_locked(self) -> None:
        self._current = 0
        self._min: int | None = None
        self._max = 0
        self._sum = 0
        self._count = 0
        self._overflows = 0

    def record(self, depth: int) -> None:
        """Record one depth sample."""
        with self._lock:
            self._current = depth
            if self._min is None or depth < self._min:
                self._min = depth
            self._max = max(self._max, depth)
            self._sum += depth
            self._count += 1
            if self.capacity > 0 and depth >= self.capacity:
                self._overflows += 1

    def current(self) -> int:
        return self._current

    def min_depth(self) -> int:
        """Smallest sample seen, or 0 before any sample."""
        return 0 if self._min is None else self._min

    def max_depth(self) -> int:
        return self._max

    def mean_depth(self) -> float:
        with self._lock:
            return self._sum / self._count if self._count else 0.0

    def overflows(self) -> int:
        return self._overflows

    def reset(self) -> None:
        """Clear all samples; the capacity is kept."""
        with self._lock:
            self._reset_locked()