# lattice

Tools for order-book feeds and market microstructure:

- **Feed events** (`lattice.feed_event`): `FeedEvent` is a record with a fixed 96-byte
  little-endian wire form. `FeedEvent.pack()` writes that form and `FeedEvent.unpack()` reads it.
  The event's payload can carry a 28-byte order message. `make_feed_event` builds such an event.
  `decode` reads the payload back into a `DecodedEvent`, whose `type` is an `EventType`:
  `ADD`, `MODIFY`, `CANCEL`, `TRADE` or `UNKNOWN`. A payload shorter than 28 bytes decodes as `UNKNOWN`.
- **Rolling window** (`lattice.rolling_window`): `RollingWindow` is a fixed-capacity window.
  It provides `push`, `mean` and `stddev` (population). Index 0 is the oldest value.
- **Order book** (`lattice.order_book`): `OrderBook` keeps the aggregated quantity at each
  price level on both sides and caches the best bid and offer.
  - `process(event)` returns `True` when the best bid or offer changed.
  - `top_bids(n)` and `top_asks(n)` return `(price, qty)` pairs, best level first.
- **Signals** (`lattice.signal_engine`): `SignalEngine.process(event)` returns a frozen
  `SignalSnapshot` with these fields:
  - mid price, spread and microprice;
  - order book imbalance (OBI), with its rolling mean and population standard deviation over the last 20 BBO changes;
  - order flow imbalance (OFI);
  - volume-adjusted mid price (VAMP) over the top 3 levels of each side;
  - trade flow imbalance (TFI) over the last 50 trades. TFI is 0.5 when there are no trades.
- **Observability**:
  - `LatencyHistogram` (`lattice.latency_histogram`) has eight fixed buckets and reports the percentiles p50, p99 and p999.
  - `QueueDepthTracker` (`lattice.queue_depth`) records the current, minimum, maximum and mean depth, and counts overflows.
  - `PipelineStats` (`lattice.pipeline_stats`) holds counters, three histograms and a depth tracker. It can render them as a text table.
- **Configuration** (`lattice.config`): `LatticeConfig` reads `KEY=VALUE` files and
  `LATTICE_*` environment variables, and validates the values.
- **Simulation** (`lattice.simulator`): `MarketSimulator`, configured by `SimConfig`,
  produces reproducible streams of add, modify and cancel events. The stream includes periodic bursts of adds.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from lattice.feed_event import EventType, make_feed_event
from lattice.signal_engine import SignalEngine

engine = SignalEngine()
engine.process(make_feed_event(EventType.ADD, True, 1, 100.0, 600))
snap = engine.process(make_feed_event(EventType.ADD, False, 2, 101.0, 400))
print(snap.obi, snap.microprice, snap.spread)   # 0.2 100.6 1.0
```

### Feeding simulated events

```python
from lattice.simulator import MarketSimulator, SimConfig
from lattice.signal_engine import SignalEngine

sim = MarketSimulator(SimConfig(num_symbols=2, seed=7))
engines = [SignalEngine() for _ in range(2)]
for _ in range(10_000):
    ev = sim.next()
    engines[ev.src_port].process(ev)
print(sim.adds_generated(), sim.cancels_generated(), sim.modifies_generated())
```

Each event carries its symbol in `src_port`. The same seed always gives the same sequence of events,
and `reset()` starts that sequence again. `MarketSimulator` is also an iterator, so it can be used in a `for` loop.

### Configuration

```python
from lattice.config import LatticeConfig

cfg = LatticeConfig.from_file("lattice.cfg")   # raises OSError if the file cannot be opened
problems = cfg.validate()                       # list of messages; empty means valid
```

Keys in a configuration file are case-insensitive. Blank lines and lines that start with `#` are skipped.
Lines without `=` are also skipped, and unknown keys are ignored.

`LatticeConfig.from_env()` reads variables such as `LATTICE_NUM_SYMBOLS` and `LATTICE_BASE_PRICE`.
It reads `os.environ` unless another mapping is passed. Variables that are missing or empty keep their defaults.

### Pipeline statistics

```python
import sys
from lattice.pipeline_stats import PipelineStats

stats = PipelineStats()
stats.packets_received += 10
stats.shm_write_latency.record(800)
stats.shm_ring_depth.record(4)
stats.print_report()              # to standard output
stats.print_report(sys.stderr)    # or to any text stream
text = stats.format_report()
```

The histograms and the depth tracker lock internally. The plain counters on `PipelineStats` do not.

## What this package does not do

- It has no command-line program. Everything is used from Python.
- It has no shared-memory transport. The `shm_*` settings in `LatticeConfig` and the `shm_*` fields
  of `PipelineStats` are only stored, validated and reported.
- It has no anomaly or spoofing detectors. The detector settings in `LatticeConfig`
  (`qty_threshold`, `z_score_threshold`, `max_tracked_orders`, `time_window_ns`, `rolling_window_sz`)
  are only stored and validated.
- The window sizes of `SignalEngine` are fixed at 10 (OFI), 20 (OBI) and 50 (trades).
  The matching `LatticeConfig` fields do not change them.
- The simulator does not generate trade events, so `trades_generated()` stays at 0.