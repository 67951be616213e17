"""Microstructure signals computed from a live order book."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import NamedTuple

from lattice.feed_event import EventType, FeedEvent, decode
from lattice.order_book import OrderBook
from lattice.rolling_window import RollingWindow

OFI_WINDOW = 10
OBI_WINDOW = 20
TRADE_WINDOW = 50
VAMP_DEPTH = 3


@dataclass(frozen=True)
class SignalSnapshot:
    """Signals after one event."""

    timestamp_ns: int = 0
    mid_price: float = 0.0
    microprice: float = 0.0
    obi: float = 0.0
    spread: float = 0.0
    ofi: float = 0.0
    vamp: float = 0.0
    obi_mean: float = 0.0
    obi_std: float = 0.0
    tfi: float = 0.5


class _TradeRecord(NamedTuple):
    qty: int
    is_buy: bool


class SignalEngine:
    """Feeds events through an order book and keeps the latest signal snapshot.

    A BBO change refreshes every signal; otherwise only the timestamp and
    VAMP move. Trades additionally update trade flow imbalance.
    """

    def __init__(self) -> None:
        self._book = OrderBook()
        self._snapshot = SignalSnapshot()
        self._prev_bid_qty = 0.0
        self._prev_ask_qty = 0.0
        self._ofi_window: RollingWindow[float] = RollingWindow(OFI_WINDOW)
        self._obi_window: RollingWindow[float] = RollingWindow(OBI_WINDOW)
        self._trade_window: RollingWindow[_TradeRecord] = RollingWindow(TRADE_WINDOW)

    def process(self, event: FeedEvent) -> SignalSnapshot:
        """Apply one event and return the updated snapshot."""
        ts = time.monotonic_ns()
        d = decode(event)

        if self._book.process(event):
            bid_qty = float(self._book.best_bid_qty())
            ask_qty = float(self._book.best_ask_qty())
            self._ofi_window.push(
                (bid_qty - self._prev_bid_qty) - (ask_qty - self._prev_ask_qty)
            )
            self._prev_bid_qty = bid_qty
            self._prev_ask_qty = ask_qty
            self._recompute_signals(ts)
        else:
            self._snapshot = replace(self._snapshot, timestamp_ns=ts)

        # Deep levels can move without a BBO change, so VAMP is always refreshed.
        self._snapshot = replace(self._snapshot, vamp=self._compute_vamp())

        if d.type is EventType.TRADE:
            self._trade_window.push(_TradeRecord(d.qty, d.is_bid))
            self._snapshot = replace(self._snapshot, tfi=self._compute_tfi())

        return self._snapshot

    def last_snapshot(self) -> SignalSnapshot:
        return self._snapshot

    def book(self) -> OrderBook:
        return self._book

    def reset(self) -> None:
        """Clear the book, windows and snapshot."""
        self._book.clear()
        self._snapshot = SignalSnapshot()
        self._prev_bid_qty = 0.0
        self._prev_ask_qty = 0.0
        self._ofi_window.clear()
        self._obi_window.clear()
        self._trade_window.clear()

    def _recompute_signals(self, ts_ns: int) -> None:
        bid = self._book.best_bid()
        ask = self._book.best_ask()
        bid_qty = float(self._book.best_bid_qty())
        ask_qty = float(self._book.best_ask_qty())
        denom = bid_qty + ask_qty

        if denom > 0.0:
            obi = (bid_qty - ask_qty) / denom
            microprice = (ask_qty * bid + bid_qty * ask) / denom
        else:
            obi = 0.0
            microprice = 0.0

        self._obi_window.push(obi)
        self._snapshot = replace(
            self._snapshot,
            timestamp_ns=ts_ns,
            mid_price=(bid + ask) * 0.5,
            spread=ask - bid,
            obi=obi,
            microprice=microprice,
            obi_mean=self._obi_window.mean(),
            obi_std=self._obi_window.stddev(),
            ofi=self._ofi_window[-1] if len(self._ofi_window) else 0.0,
        )

    def _compute_vamp(self) -> float:
        levels = self._book.top_bids(VAMP_DEPTH) + self._book.top_asks(VAMP_DEPTH)
        den = sum(float(q) for _, q in levels)
        num = sum(p * float(q) for p, q in levels)
        return num / den if den > 0.0 else 0.0

    def _compute_tfi(self) -> float:
        buy_vol = sum(float(t.qty) for t in self._trade_window if t.is_buy)
        sell_vol = sum(float(t.qty) for t in self._trade_window if not t.is_buy)
        total = buy_vol + sell_vol
        return buy_vol / total if total > 0.0 else 0.5