import pytest

from lattice.feed_event import EventType, FeedEvent, make_feed_event
from lattice.order_book import OrderBook


def add_bid(oid, price, qty):
    return make_feed_event(EventType.ADD, True, oid, price, qty)


def add_ask(oid, price, qty):
    return make_feed_event(EventType.ADD, False, oid, price, qty)


def modify_bid(oid, price, qty):
    return make_feed_event(EventType.MODIFY, True, oid, price, qty)


def cancel_bid(oid, price):
    return make_feed_event(EventType.CANCEL, True, oid, price, 0)


def trade_sell(oid, price, qty):
    return make_feed_event(EventType.TRADE, False, oid, price, qty)


def test_initially_empty():
    book = OrderBook()
    assert not book.has_both_sides()
    assert book.best_bid() == 0.0
    assert book.best_ask() == 0.0
    assert book.best_bid_qty() == 0
    assert book.best_ask_qty() == 0


def test_add_bid():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    assert book.best_bid() == 100.0
    assert book.best_bid_qty() == 200


def test_add_ask():
    book = OrderBook()
    book.process(add_ask(1, 101.0, 150))
    assert book.best_ask() == 101.0
    assert book.best_ask_qty() == 150


def test_best_bid_is_highest():
    book = OrderBook()
    book.process(add_bid(1, 99.0, 100))
    book.process(add_bid(2, 100.0, 200))
    book.process(add_bid(3, 98.0, 50))
    assert book.best_bid() == 100.0


def test_best_ask_is_lowest():
    book = OrderBook()
    book.process(add_ask(1, 103.0, 100))
    book.process(add_ask(2, 101.0, 200))
    book.process(add_ask(3, 105.0, 50))
    assert book.best_ask() == 101.0


def test_add_accumulates_at_same_price():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(add_bid(2, 100.0, 300))
    assert book.best_bid_qty() == 500


def test_modify_updates_qty():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(modify_bid(1, 100.0, 350))
    assert book.best_bid_qty() == 350


def test_cancel_removes_top_level():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(add_bid(2, 99.0, 100))
    book.process(cancel_bid(1, 100.0))
    assert book.best_bid() == 99.0
    assert book.best_bid_qty() == 100


def test_cancel_last_level_empties_side():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(cancel_bid(1, 100.0))
    assert book.best_bid() == 0.0
    assert book.best_bid_qty() == 0
    assert not book.has_both_sides()


def test_trade_reduces_qty():
    book = OrderBook()
    book.process(add_ask(1, 101.0, 300))
    book.process(trade_sell(1, 101.0, 100))
    assert book.best_ask_qty() == 200


def test_trade_removes_level_at_zero():
    book = OrderBook()
    book.process(add_ask(1, 101.0, 100))
    book.process(trade_sell(1, 101.0, 100))
    assert book.best_ask() == 0.0
    assert book.best_ask_qty() == 0


def test_process_returns_true_on_bbo_change():
    assert OrderBook().process(add_bid(1, 100.0, 200)) is True


def test_process_returns_false_on_deep_change():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(add_ask(2, 101.0, 100))
    book.process(add_bid(3, 99.0, 500))
    assert book.process(modify_bid(3, 99.0, 600)) is False


def test_process_returns_false_on_unknown_event():
    book = OrderBook()
    assert book.process(FeedEvent()) is False
    assert book.best_bid() == 0.0


def test_has_both_sides():
    book = OrderBook()
    assert not book.has_both_sides()
    book.process(add_bid(1, 100.0, 100))
    assert not book.has_both_sides()
    book.process(add_ask(2, 101.0, 100))
    assert book.has_both_sides()


def test_clear():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 200))
    book.process(add_ask(2, 101.0, 150))
    book.clear()
    assert not book.has_both_sides()
    assert book.best_bid() == 0.0
    assert book.best_ask() == 0.0


def test_top_bids_returns_depth():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 300))
    book.process(add_bid(2, 99.0, 200))
    book.process(add_bid(3, 98.0, 100))
    book.process(add_bid(4, 97.0, 50))
    levels = book.top_bids(3)
    assert len(levels) == 3
    assert [p for p, _ in levels] == pytest.approx([100.0, 99.0, 98.0])
    assert [q for _, q in levels] == [300, 200, 100]


def test_top_asks_returns_depth():
    book = OrderBook()
    book.process(add_ask(1, 101.0, 300))
    book.process(add_ask(2, 102.0, 200))
    book.process(add_ask(3, 103.0, 100))
    levels = book.top_asks(3)
    assert len(levels) == 3
    assert [p for p, _ in levels] == pytest.approx([101.0, 102.0, 103.0])


def test_top_bids_shallow_book():
    book = OrderBook()
    book.process(add_bid(1, 100.0, 500))
    assert book.top_bids(3) == [(100.0, 500)]