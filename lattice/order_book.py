"""Two-sided price-level order book with a cached best bid and offer."""

from __future__ import annotations

import heapq

from lattice.feed_event import EventType, FeedEvent, decode

_U32_MASK = 0xFFFFFFFF


class OrderBook:
    """Aggregated quantity per price level on each side, plus the BBO."""

    def __init__(self) -> None:
        self._bids: dict[float, int] = {}
        self._asks: dict[float, int] = {}
        self._best_bid = 0.0
        self._best_ask = 0.0
        self._best_bid_qty = 0
        self._best_ask_qty = 0

    def process(self, event: FeedEvent) -> bool:
        """Apply one event; return True if the best bid or offer changed."""
        d = decode(event)
        before = self._bbo()

        if d.type is EventType.ADD:
            levels = self._side(d.is_bid)
            levels[d.price] = (levels.get(d.price, 0) + d.qty) & _U32_MASK
        elif d.type is EventType.MODIFY:
            self._side(d.is_bid)[d.price] = d.qty
        elif d.type is EventType.CANCEL:
            self._side(d.is_bid).pop(d.price, None)
        elif d.type is EventType.TRADE:
            # Ask side first: an aggressive buyer hits the passive ask.
            for levels in (self._asks, self._bids):
                resting = levels.get(d.price)
                if resting is None:
                    continue
                if resting <= d.qty:
                    del levels[d.price]
                else:
                    levels[d.price] = resting - d.qty
        else:
            return False

        self._refresh_bbo()
        return self._bbo() != before

    def best_bid(self) -> float:
        return self._best_bid

    def best_ask(self) -> float:
        return self._best_ask

    def best_bid_qty(self) -> int:
        return self._best_bid_qty

    def best_ask_qty(self) -> int:
        return self._best_ask_qty

    def has_both_sides(self) -> bool:
        return bool(self._bids) and bool(self._asks)

    def top_bids(self, n: int) -> list[tuple[float, int]]:
        """Up to ``n`` bid levels as (price, qty), highest price first."""
        return heapq.nlargest(n, self._bids.items())

    def top_asks(self, n: int) -> list[tuple[float, int]]:
        """Up to ``n`` ask levels as (price, qty), lowest price first."""
        return heapq.nsmallest(n, self._asks.items())

    def clear(self) -> None:
        """Empty both sides and zero the BBO."""
        self._bids.clear()
        self._asks.clear()
        self._refresh_bbo()

    def _side(self, is_bid: bool) -> dict[float, int]:
        return self._bids if is_bid else self._asks

    def _bbo(self) -> tuple[float, float, int, int]:
        return (self._best_bid, self._best_ask, self._best_bid_qty, self._best_ask_qty)

    def _refresh_bbo(self) -> None:
        if self._bids:
            self._best_bid = max(self._bids)
            self._best_bid_qty = self._bids[self._best_bid]
        else:
            self._best_bid, self._best_bid_qty = 0.0, 0
        if self._asks:
            self._best_ask = min(self._asks)
            self._best_ask_qty = self._asks[self._best_ask]
        else:
            self._best_ask, self._best_ask_qty = 0.0, 0