"""Feed events and the order-event payload encoding they carry."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

MAX_PAYLOAD = 64
ORDER_PAYLOAD_LEN = 28

# inject_ns, receive_ns, src_ip, src_port, dst_port, payload_len, 6 pad bytes, payload
_EVENT_STRUCT = struct.Struct("<QQIHHH6x64s")
# type, side, 6 reserved bytes, order_id, price, qty
_ORDER_STRUCT = struct.Struct("<BB6xQdI")


class EventType(IntEnum):
    """Kind of order-book event carried in a payload."""

    UNKNOWN = 0
    ADD = 1
    MODIFY = 2
    CANCEL = 3
    TRADE = 4


@dataclass
class FeedEvent:
    """One raw feed event with a fixed 96-byte wire layout."""

    SIZE: ClassVar[int] = _EVENT_STRUCT.size

    inject_ns: int = 0
    receive_ns: int = 0
    src_ip: int = 0
    src_port: int = 0
    dst_port: int = 0
    payload_len: int = 0
    payload: bytes = bytes(MAX_PAYLOAD)

    def __post_init__(self) -> None:
        payload = bytes(self.payload)
        if len(payload) > MAX_PAYLOAD:
            raise ValueError(f"payload longer than {MAX_PAYLOAD} bytes")
        if not 0 <= self.payload_len <= MAX_PAYLOAD:
            raise ValueError(f"payload_len must be within 0..{MAX_PAYLOAD}")
        self.payload = payload.ljust(MAX_PAYLOAD, b"\0")

    def pack(self) -> bytes:
        """Serialise to the 96-byte little-endian wire form."""
        return _EVENT_STRUCT.pack(
            self.inject_ns,
            self.receive_ns,
            self.src_ip,
            self.src_port,
            self.dst_port,
            self.payload_len,
            self.payload,
        )

    @classmethod
    def unpack(cls, data: bytes) -> FeedEvent:
        """Parse the 96-byte wire form."""
        if len(data) != cls.SIZE:
            raise ValueError(f"feed event must be {cls.SIZE} bytes, got {len(data)}")
        return cls(*_EVENT_STRUCT.unpack(data))


@dataclass(frozen=True)
class DecodedEvent:
    """Order fields decoded from a feed event payload."""

    type: EventType = EventType.UNKNOWN
    is_bid: bool = False
    order_id: int = 0
    price: float = 0.0
    qty: int = 0


def decode(event: FeedEvent) -> DecodedEvent:
    """Decode the order fields of an event; short payloads give an UNKNOWN event."""
    if event.payload_len < ORDER_PAYLOAD_LEN:
        return DecodedEvent()
    raw = bytes(event.payload).ljust(ORDER_PAYLOAD_LEN, b"\0")
    code, side, order_id, price, qty = _ORDER_STRUCT.unpack_from(raw)
    try:
        kind = EventType(code)
    except ValueError:
        kind = EventType.UNKNOWN
    return DecodedEvent(kind, side != 0, order_id, price, qty)


def make_feed_event(
    event_type: EventType, is_bid: bool, order_id: int, price: float, qty: int
) -> FeedEvent:
    """Build a feed event whose payload encodes one order event."""
    payload = _ORDER_STRUCT.pack(int(event_type), 1 if is_bid else 0, order_id, price, qty)
    return FeedEvent(payload_len=ORDER_PAYLOAD_LEN, payload=payload)