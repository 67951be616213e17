"""Aggregated counters, latency histograms and queue depth for one pipeline."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from lattice.latency_histogram import LatencyHistogram
from lattice.queue_depth import QueueDepthTracker

_LABELS: tuple[tuple[int, str], ...] = (
    (1_000, "     <1 µs "),
    (5_000, "   1–5 µs  "),
    (10_000, "  5–10 µs  "),
    (50_000, " 10–50 µs  "),
    (100_000, "50–100 µs  "),
    (500_000, "100–500 µs "),
    (1_000_000, "500 µs–1 ms"),
)


def latency_label(ns: int) -> str:
    """Human-readable bucket label for a latency in nanoseconds."""
    if ns == 0:
        return "  <no data>"
    for bound, label in _LABELS:
        if ns < bound:
            return label
    return "    >1 ms  "


def _hist_line(name: str, h: LatencyHistogram) -> str:
    return (
        f"  {name:<24}  p50={latency_label(h.p50()):<12} "
        f"p99={latency_label(h.p99()):<12} "
        f"p999={latency_label(h.p999()):<12}  n={h.total()}"
    )


@dataclass
class PipelineStats:
    """Counters, latency histograms and ring depth for one pipeline instance."""

    packets_received: int = 0
    packets_dropped: int = 0
    packets_processed: int = 0
    signal_computations: int = 0
    anomaly_alerts_fired: int = 0
    shm_write_latency: LatencyHistogram = field(default_factory=LatencyHistogram)
    signal_compute_latency: LatencyHistogram = field(default_factory=LatencyHistogram)
    anomaly_check_latency: LatencyHistogram = field(default_factory=LatencyHistogram)
    shm_ring_depth: QueueDepthTracker = field(default_factory=QueueDepthTracker)

    def reset(self) -> None:
        """Zero every counter, histogram and depth sample."""
        self.packets_received = 0
        self.packets_dropped = 0
        self.packets_processed = 0
        self.signal_computations = 0
        self.anomaly_alerts_fired = 0
        self.shm_write_latency.reset()
        self.signal_compute_latency.reset()
        self.anomaly_check_latency.reset()
        self.shm_ring_depth.reset()

    def format_report(self) -> str:
        """Render the stats as a text table."""
        rx = self.packets_received
        drp = self.packets_dropped
        drop_pct = 100.0 * drp / rx if rx > 0 else 0.0
        rule = "─" * 61
        depth = self.shm_ring_depth
        lines = [
            f"┌{rule}┐",
            "│                   lattice-ipc pipeline stats                │",
            f"├{rule}┤",
            f"│ packets received   : {rx:12d}                          │",
            f"│ packets processed  : {self.packets_processed:12d}                          │",
            f"│ packets dropped    : {drp:12d}  ({drop_pct:.2f}%)               │",
            f"│ signal computations: {self.signal_computations:12d}                          │",
            f"│ anomaly alerts     : {self.anomaly_alerts_fired:12d}                          │",
            f"├{rule}┤",
            "│ latency histograms                                          │",
            _hist_line("shm_write", self.shm_write_latency),
            _hist_line("signal_compute", self.signal_compute_latency),
            _hist_line("anomaly_check", self.anomaly_check_latency),
            f"├{rule}┤",
            "│ shm ring depth                                              │",
            f"│  current={depth.current()}  min={depth.min_depth()}"
            f"  max={depth.max_depth()}  mean={depth.mean_depth():.1f}"
            f"  overflows={depth.overflows()}",
            f"└{rule}┘",
        ]
        return "\n".join(lines) + "\n"

    def print_report(self, file: TextIO | None = None) -> None:
        """Write the stats table to ``file`` (standard output by default)."""
        (file or sys.stdout).write(self.format_report())