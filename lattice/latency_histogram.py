"""Fixed-bucket latency histogram."""

from __future__ import annotations

import threading

U64_MAX = (1 << 64) - 1

# Exclusive upper bound of each bucket in nanoseconds; the last catches everything.
BOUNDS: tuple[int, ...] = (
    1_000,  # <1 µs
    5_000,  # 1–5 µs
    10_000,  # 5–10 µs
    50_000,  # 10–50 µs
    100_000,  # 50–100 µs
    500_000,  # 100–500 µs
    1_000_000,  # 500 µs–1 ms
    U64_MAX,  # >1 ms
)


class LatencyHistogram:
    """Counts latency samples into eight fixed buckets; safe across threads."""

    BOUNDS = BOUNDS
    BUCKETS = len(BOUNDS)

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts = [0] * self.BUCKETS

    @property
    def buckets(self) -> tuple[int, ...]:
        """Snapshot of the per-bucket sample counts."""
        with self._lock:
            return tuple(self._counts)

    def record(self, ns: int) -> None:
        """Count one sample of ``ns`` nanoseconds."""
        index = next(
            (i for i, bound in enumerate(self.BOUNDS) if ns < bound),
            self.BUCKETS - 1,
        )
        with self._lock:
            self._counts[index] += 1

    def total(self) -> int:
        with self._lock:
            return sum(self._counts)

    def percentile(self, p: float) -> int:
        """Upper bound of the bucket holding the ``p`` quantile; 0 with no samples."""
        counts = self.buckets
        n = sum(counts)
        if n == 0:
            return 0
        target = int(p * n)
        cumulative = 0
        for count, bound in zip(counts, self.BOUNDS):
            cumulative += count
            if cumulative > target:
                return bound
        return self.BOUNDS[-1]

    def p50(self) -> int:
        return self.percentile(0.50)

    def p99(self) -> int:
        return self.percentile(0.99)

    def p999(self) -> int:
        return self.percentile(0.999)

    def reset(self) -> None:
        with self._lock:
            self._counts = [0] * self.BUCKETS