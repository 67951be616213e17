from collections import defaultdict

import pytest

from lattice.feed_event import EventType, decode
from lattice.simulator import MarketSimulator, SimConfig

NO_BURSTS = 10_000_000  # burst period in ms, far beyond any test run


def take(sim, n):
    return [sim.next() for _ in range(n)]


def test_default_config_values():
    cfg = SimConfig()
    assert cfg.num_symbols == 4
    assert cfg.base_price == 100.0
    assert cfg.seed == 42
    assert MarketSimulator().config() == cfg


def test_same_seed_same_sequence():
    a = take(MarketSimulator(SimConfig(seed=7)), 500)
    b = take(MarketSimulator(SimConfig(seed=7)), 500)
    assert [e.pack() for e in a] == [e.pack() for e in b]


def test_different_seeds_differ():
    a = take(MarketSimulator(SimConfig(seed=1)), 200)
    b = take(MarketSimulator(SimConfig(seed=2)), 200)
    assert [e.pack() for e in a] != [e.pack() for e in b]


def test_reset_replays_sequence():
    sim = MarketSimulator()
    first = [e.pack() for e in take(sim, 300)]
    sim.reset()
    assert sim.current_ns() == 0
    assert sim.total_generated() == 0
    assert [e.pack() for e in take(sim, 300)] == first


def test_first_event_is_add_for_symbol_zero():
    ev = MarketSimulator().next()
    d = decode(ev)
    assert d.type is EventType.ADD
    assert d.order_id == 1
    assert ev.src_port == 0
    assert ev.payload_len == 28


def test_round_robin_symbols_without_bursts():
    sim = MarketSimulator(SimConfig(burst_period_ms=NO_BURSTS))
    ports = [e.src_port for e in take(sim, 12)]
    assert ports == [0, 1, 2, 3] * 3


def test_counters_account_for_every_event():
    sim = MarketSimulator()
    events = take(sim, 2000)
    kinds = defaultdict(int)
    for ev in events:
        kinds[decode(ev).type] += 1
    assert sim.trades_generated() == 0
    assert sim.total_generated() == (
        sim.adds_generated() + sim.cancels_generated() + sim.modifies_generated()
    )
    assert sim.total_generated() >= len(events)
    assert kinds[EventType.CANCEL] == sim.cancels_generated()
    assert kinds[EventType.MODIFY] == sim.modifies_generated()
    assert kinds[EventType.ADD] <= sim.adds_generated()


def test_cancels_and_modifies_refer_to_live_orders():
    sim = MarketSimulator(SimConfig(burst_period_ms=NO_BURSTS))
    live = defaultdict(dict)
    for ev in take(sim, 3000):
        d = decode(ev)
        book = live[ev.src_port]
        if d.type is EventType.ADD:
            assert d.order_id not in book
            book[d.order_id] = (d.price, d.is_bid)
        elif d.type is EventType.CANCEL:
            assert book.pop(d.order_id) == (d.price, d.is_bid)
        else:
            assert book[d.order_id] == (d.price, d.is_bid)


def test_pending_cap_forces_cancels():
    cfg = SimConfig(
        burst_period_ms=NO_BURSTS, max_pending_orders=2, cancel_rate=0.0, modify_rate=0.0
    )
    sim = MarketSimulator(cfg)
    outstanding = defaultdict(int)
    for ev in take(sim, 400):
        d = decode(ev)
        outstanding[ev.src_port] += 1 if d.type is EventType.ADD else -1
        assert 0 <= outstanding[ev.src_port] <= 2
    assert sim.cancels_generated() > 0
    assert sim.modifies_generated() == 0


def test_zero_rates_give_only_adds():
    cfg = SimConfig(burst_period_ms=NO_BURSTS, cancel_rate=0.0, modify_rate=0.0)
    sim = MarketSimulator(cfg)
    events = take(sim, 200)
    assert all(decode(e).type is EventType.ADD for e in events)
    assert sim.adds_generated() == 200
    assert sim.cancels_generated() == 0


def test_burst_emits_clustered_adds():
    cfg = SimConfig(burst_period_ms=1, burst_min_orders=10, burst_max_orders=10)
    sim = MarketSimulator(cfg)
    consumed = 0
    first = None
    for _ in range(10_000):
        first = sim.next()
        consumed += 1
        if sim.total_generated() > consumed:
            break
    assert sim.total_generated() - consumed == 9
    burst = [first] + take(sim, 9)
    assert sim.total_generated() == consumed + 9
    assert {e.src_port for e in burst} == {first.src_port}
    assert all(decode(e).type is EventType.ADD for e in burst)
    times = [e.inject_ns for e in burst]
    assert times == sorted(times)
    assert times[-1] - times[0] <= 999_999


def test_iteration_protocol_matches_next():
    a = MarketSimulator(SimConfig(seed=3))
    b = MarketSimulator(SimConfig(seed=3))
    it = iter(a)
    assert [next(it).pack() for _ in range(50)] == [e.pack() for e in take(b, 50)]


@pytest.mark.parametrize(
    "cfg",
    [
        SimConfig(num_symbols=0),
        SimConfig(order_arrival_rate=0.0),
        SimConfig(burst_min_orders=20, burst_max_orders=10),
        SimConfig(tick_size=0.0),
    ],
)
def test_invalid_config_rejected(cfg):
    with pytest.raises(ValueError):
        MarketSimulator(cfg)