"""Fixed-capacity rolling window of recent values."""

from __future__ import annotations

import math
from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class RollingWindow(Generic[T]):
    """Keeps the most recent ``capacity`` values; index 0 is the oldest."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("RollingWindow capacity must be positive")
        self._values: deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._values.maxlen or 0

    def push(self, value: T) -> None:
        """Append a value, evicting the oldest when full."""
        self._values.append(value)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[T]:
        return iter(self._values)

    def __getitem__(self, index: int) -> T:
        return self._values[index]

    def full(self) -> bool:
        return len(self._values) == self.capacity

    def mean(self) -> float:
        """Arithmetic mean; 0.0 when empty."""
        if not self._values:
            return 0.0
        return sum(float(v) for v in self._values) / len(self._values)

    def stddev(self) -> float:
        """Population standard deviation; 0.0 with fewer than two values."""
        n = len(self._values)
        if n < 2:
            return 0.0
        m = self.mean()
        return math.sqrt(sum((float(v) - m) ** 2 for v in self._values) / n)

    def clear(self) -> None:
        self._values.clear()