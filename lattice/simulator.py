"""Seeded market event simulator producing order-book feed events."""

from __future__ import annotations

import math
import random
from collections import deque
from dataclasses import dataclass, field, replace

from lattice.feed_event import EventType, FeedEvent, make_feed_event

_NS_PER_MS = 1_000_000
_BURST_JITTER_NS = 999_999
_MAX_QTY = 1_000_000.0
_U32_MASK = 0xFFFFFFFF
_U16_MASK = 0xFFFF


@dataclass
class SimConfig:
    """Tunable simulation parameters."""

    num_symbols: int = 4
    tick_size: float = 0.01
    base_price: float = 100.0
    order_arrival_rate: float = 1000.0

    cancel_rate: float = 0.40
    modify_rate: float = 0.20

    qty_mean_log: float = 4.6
    qty_stddev_log: float = 0.8

    price_reversion: float = 0.05
    price_volatility: float = 0.002

    burst_period_ms: int = 500
    burst_min_orders: int = 10
    burst_max_orders: int = 50

    max_pending_orders: int = 256
    seed: int = 42


@dataclass
class _PendingOrder:
    order_id: int
    price: float
    qty: int
    is_bid: bool


@dataclass
class _SymbolState:
    mid_price: float
    next_burst_ns: int
    pending: list[_PendingOrder] = field(default_factory=list)


def _round_half_away(x: float) -> float:
    return math.copysign(math.floor(abs(x) + 0.5), x)


class MarketSimulator:
    """Generates ADD / MODIFY / CANCEL feed events for several symbols.

    Arrivals follow a Poisson process, each symbol's mid price follows an
    Ornstein-Uhlenbeck process, sizes are log-normal, and each symbol
    periodically emits a burst of ADD events within one millisecond.
    The symbol index is carried in ``FeedEvent.src_port``. The same seed
    always yields the same sequence.
    """

    def __init__(self, config: SimConfig | None = None) -> None:
        cfg = SimConfig() if config is None else config
        if cfg.num_symbols <= 0:
            raise ValueError("num_symbols must be >= 1")
        if cfg.order_arrival_rate <= 0.0:
            raise ValueError("order_arrival_rate must be positive")
        if cfg.burst_min_orders > cfg.burst_max_orders:
            raise ValueError("burst_min_orders must not exceed burst_max_orders")
        if cfg.tick_size <= 0.0:
            raise ValueError("tick_size must be positive")
        self._cfg = cfg
        self.reset()

    def __iter__(self) -> MarketSimulator:
        return self

    def __next__(self) -> FeedEvent:
        return self.next()

    def next(self) -> FeedEvent:
        """Return the next event and advance the simulated clock."""
        if self._burst_queue:
            return self._consume_burst()

        self._current_ns += self._next_arrival_ns()

        sym = self._next_symbol % self._cfg.num_symbols
        self._next_symbol = (self._next_symbol + 1) & _U32_MASK
        state = self._symbols[sym]

        if self._current_ns >= state.next_burst_ns:
            self._fill_burst(sym, self._current_ns)
            state.next_burst_ns = self._current_ns + self._burst_period_ns()
            if self._burst_queue:
                return self._consume_burst()

        return self._pick_event(sym, self._current_ns)

    def current_ns(self) -> int:
        return self._current_ns

    def adds_generated(self) -> int:
        return self._n_adds

    def cancels_generated(self) -> int:
        return self._n_cancels

    def modifies_generated(self) -> int:
        return self._n_modifies

    def trades_generated(self) -> int:
        return self._n_trades

    def total_generated(self) -> int:
        return self._n_adds + self._n_cancels + self._n_modifies + self._n_trades

    def config(self) -> SimConfig:
        return self._cfg

    def reset(self) -> None:
        """Restart from the seed: same events again from the beginning."""
        cfg = self._cfg
        self._rng = random.Random(cfg.seed)
        first_burst = self._burst_period_ns()
        self._symbols = [
            _SymbolState(mid_price=cfg.base_price, next_burst_ns=first_burst)
            for _ in range(cfg.num_symbols)
        ]
        self._burst_queue: deque[FeedEvent] = deque()
        self._next_order_id = 1
        self._current_ns = 0
        self._next_symbol = 0
        self._n_adds = 0
        self._n_cancels = 0
        self._n_modifies = 0
        self._n_trades = 0

    def _burst_period_ns(self) -> int:
        return self._cfg.burst_period_ms * _NS_PER_MS

    def _consume_burst(self) -> FeedEvent:
        event = self._burst_queue.popleft()
        self._current_ns = event.inject_ns
        return event

    def _pick_event(self, sym: int, ts: int) -> FeedEvent:
        cfg = self._cfg
        state = self._symbols[sym]

        if len(state.pending) >= cfg.max_pending_orders:
            return self._emit_cancel(sym, ts)
        if not state.pending:
            return self._emit_add(sym, ts)

        denom = 1.0 + cfg.cancel_rate + cfg.modify_rate
        p_cancel = cfg.cancel_rate / denom
        p_modify = cfg.modify_rate / denom
        r = self._rng.random()
        if r < p_cancel:
            return self._emit_cancel(sym, ts)
        if r < p_cancel + p_modify:
            return self._emit_modify(sym, ts)
        return self._emit_add(sym, ts)

    def _emit_add(self, sym: int, ts: int) -> FeedEvent:
        cfg = self._cfg
        rng = self._rng
        state = self._symbols[sym]

        state.mid_price += cfg.price_reversion * (
            cfg.base_price - state.mid_price
        ) + cfg.price_volatility * rng.gauss(0.0, 1.0)
        state.mid_price = max(state.mid_price, cfg.tick_size)

        is_bid = rng.getrandbits(1) == 1
        offset = rng.randint(0, 4) * cfg.tick_size
        price = state.mid_price - offset if is_bid else state.mid_price + offset
        price = _round_half_away(price / cfg.tick_size) * cfg.tick_size
        price = max(price, cfg.tick_size)

        qty = self._next_qty()
        order_id = self._next_order_id
        self._next_order_id += 1

        state.pending.append(_PendingOrder(order_id, price, qty, is_bid))
        self._n_adds += 1
        return self._make_event(EventType.ADD, is_bid, order_id, price, qty, sym, ts)

    def _emit_cancel(self, sym: int, ts: int) -> FeedEvent:
        state = self._symbols[sym]
        if not state.pending:
            return self._emit_add(sym, ts)
        order = state.pending.pop(self._rng.randrange(len(state.pending)))
        self._n_cancels += 1
        return self._make_event(
            EventType.CANCEL, order.is_bid, order.order_id, order.price, order.qty, sym, ts
        )

    def _emit_modify(self, sym: int, ts: int) -> FeedEvent:
        state = self._symbols[sym]
        if not state.pending:
            return self._emit_add(sym, ts)
        order = state.pending[self._rng.randrange(len(state.pending))]
        factor = self._rng.uniform(0.5, 1.5)
        order.qty = int(max(1.0, _round_half_away(order.qty * factor)))
        self._n_modifies += 1
        return self._make_event(
            EventType.MODIFY, order.is_bid, order.order_id, order.price, order.qty, sym, ts
        )

    def _fill_burst(self, sym: int, start_ns: int) -> None:
        cfg = self._cfg
        count = self._rng.randint(cfg.burst_min_orders, cfg.burst_max_orders)
        events = [
            self._emit_add(sym, start_ns + self._rng.randint(0, _BURST_JITTER_NS))
            for _ in range(count)
        ]
        events.sort(key=lambda ev: ev.inject_ns)
        self._burst_queue = deque(events)

    @staticmethod
    def _make_event(
        event_type: EventType,
        is_bid: bool,
        order_id: int,
        price: float,
        qty: int,
        sym: int,
        ts: int,
    ) -> FeedEvent:
        event = make_feed_event(event_type, is_bid, order_id, price, qty)
        return replace(event, inject_ns=ts, receive_ns=ts, src_port=sym & _U16_MASK)

    def _next_arrival_ns(self) -> int:
        return int(self._rng.expovariate(self._cfg.order_arrival_rate) * 1e9)

    def _next_qty(self) -> int:
        raw = self._rng.lognormvariate(self._cfg.qty_mean_log, self._cfg.qty_stddev_log)
        return int(min(max(_round_half_away(raw), 1.0), _MAX_QTY))