"""Pipeline configuration: defaults, KEY=VALUE files and environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, Mapping

_U64_MAX = (1 << 64) - 1
_U32_MASK = (1 << 32) - 1
_WHITESPACE = " \t\r\n"
_ENV_PREFIX = "LATTICE_"

_UNSIGNED_RE = re.compile(r"\s*([+-]?)(\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_TRUE_WORDS = frozenset({"1", "true", "yes"})


def _parse_u64(text: str) -> int:
    """Leading unsigned integer of ``text``, C-library style; 0 if none."""
    match = _UNSIGNED_RE.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    value = int(digits)
    if value > _U64_MAX:
        return _U64_MAX
    if sign == "-":
        value = (-value) % (1 << 64)
    return value


def _parse_u32(text: str) -> int:
    return _parse_u64(text) & _U32_MASK


def _parse_float(text: str) -> float:
    """Leading floating-point number of ``text``; 0.0 if none."""
    match = _FLOAT_RE.match(text)
    if match is None:
        return 0.0
    return float(match.group(1))


def _parse_bool(text: str) -> bool:
    return text in _TRUE_WORDS


def _is_power_of_two(value: int) -> bool:
    return value >= 2 and value & (value - 1) == 0


# Configuration key -> (attribute name, value parser)
_KEYS: dict[str, tuple[str, Callable[[str], object]]] = {
    "SHM_NAME": ("shm_name", str),
    "SHM_CAPACITY": ("shm_capacity", _parse_u32),
    "QTY_THRESHOLD": ("qty_threshold", _parse_u32),
    "Z_SCORE_THRESHOLD": ("z_score_threshold", _parse_float),
    "MAX_TRACKED_ORDERS": ("max_tracked_orders", _parse_u32),
    "TIME_WINDOW_NS": ("time_window_ns", _parse_u64),
    "ROLLING_WINDOW_SZ": ("rolling_window_sz", _parse_u32),
    "OFI_WINDOW_SIZE": ("ofi_window_size", _parse_u32),
    "OBI_WINDOW_SIZE": ("obi_window_size", _parse_u32),
    "TRADE_WINDOW_SIZE": ("trade_window_size", _parse_u32),
    "NUM_SYMBOLS": ("num_symbols", _parse_u32),
    "BASE_PRICE": ("base_price", _parse_float),
    "ORDER_ARRIVAL_RATE": ("order_arrival_rate", _parse_float),
    "CANCEL_RATE": ("cancel_rate", _parse_float),
    "MODIFY_RATE": ("modify_rate", _parse_float),
    "SIM_SEED": ("sim_seed", _parse_u64),
    "WATCHDOG_TIMEOUT_MS": ("watchdog_timeout_ms", _parse_u32),
    "LOG_ALERTS": ("log_alerts", _parse_bool),
    "LOG_SIGNALS": ("log_signals", _parse_bool),
    "STATS_INTERVAL_MS": ("stats_interval_ms", _parse_u32),
}


@dataclass
class LatticeConfig:
    """All tunable settings of a pipeline, with compiled-in defaults."""

    # Shared-memory channel
    shm_name: str = "/lattice_feed"
    shm_capacity: int = 4096

    # Anomaly detector
    qty_threshold: int = 1000
    z_score_threshold: float = -2.0
    max_tracked_orders: int = 4096
    time_window_ns: int = 500_000_000
    rolling_window_sz: int = 256

    # Signal engine
    ofi_window_size: int = 10
    obi_window_size: int = 20
    trade_window_size: int = 50

    # Market simulator
    num_symbols: int = 4
    base_price: float = 100.0
    order_arrival_rate: float = 1000.0
    cancel_rate: float = 0.40
    modify_rate: float = 0.20
    sim_seed: int = 42

    # Watchdog
    watchdog_timeout_ms: int = 1000

    # Diagnostics
    log_alerts: bool = True
    log_signals: bool = False
    stats_interval_ms: int = 5000

    def apply(self, key: str, value: str) -> bool:
        """Set the field named by an upper-case ``key``; False if the key is unknown."""
        entry = _KEYS.get(key)
        if entry is None:
            return False
        attr, parse = entry
        setattr(self, attr, parse(value))
        return True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LatticeConfig:
        """Build a config from ``LATTICE_<KEY>`` variables; absent or empty ones keep defaults."""
        env = os.environ if environ is None else environ
        cfg = cls()
        for key in _KEYS:
            value = env.get(_ENV_PREFIX + key)
            if value:
                cfg.apply(key, value)
        return cfg

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> LatticeConfig:
        """Parse a KEY=VALUE file.

        Blank lines, lines starting with '#' and lines without '=' are
        skipped; keys are case-insensitive and unknown keys are ignored.
        Raises OSError if the file cannot be opened.
        """
        try:
            handle = open(path, encoding="utf-8", errors="surrogateescape")
        except OSError as exc:
            raise OSError(f"cannot open config file: {os.fspath(path)}") from exc

        cfg = cls()
        with handle:
            for line in handle:
                text = line.strip(_WHITESPACE)
                if not text or text.startswith("#"):
                    continue
                key, sep, value = text.partition("=")
                if not sep:
                    continue
                cfg.apply(key.strip(_WHITESPACE).upper(), value.strip(_WHITESPACE))
        return cfg

    def validate(self) -> list[str]:
        """Describe every out-of-range value; an empty list means the config is valid."""
        checks = [
            (
                not self.shm_name or not self.shm_name.startswith("/"),
                "shm_name must be non-empty and start with '/'",
            ),
            (
                not _is_power_of_two(self.shm_capacity),
                "shm_capacity must be a power of two >= 2",
            ),
            (
                not _is_power_of_two(self.max_tracked_orders),
                "max_tracked_orders must be a power of two >= 2",
            ),
            (
                self.z_score_threshold > 0.0,
                "z_score_threshold must be <= 0 (alerts on abnormally fast cancels)",
            ),
            (self.base_price <= 0.0, "base_price must be positive"),
            (self.order_arrival_rate <= 0.0, "order_arrival_rate must be positive"),
            (
                self.cancel_rate < 0.0 or self.cancel_rate > 1.0,
                "cancel_rate must be in [0.0, 1.0]",
            ),
            (
                self.modify_rate < 0.0 or self.modify_rate > 1.0,
                "modify_rate must be in [0.0, 1.0]",
            ),
            (
                self.cancel_rate + self.modify_rate > 2.0,
                "cancel_rate + modify_rate should not exceed 2.0",
            ),
            (self.num_symbols == 0, "num_symbols must be >= 1"),
            (self.watchdog_timeout_ms == 0, "watchdog_timeout_ms must be > 0"),
            (self.rolling_window_sz == 0, "rolling_window_sz must be > 0"),
            (self.ofi_window_size == 0, "ofi_window_size must be > 0"),
            (self.obi_window_size == 0, "obi_window_size must be > 0"),
            (self.trade_window_size == 0, "trade_window_size must be > 0"),
            (self.stats_interval_ms == 0, "stats_interval_ms must be > 0"),
        ]
        return [message for failed, message in checks if failed]