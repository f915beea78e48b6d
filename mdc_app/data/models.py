"""
Canonical data models for the packet protocol.

This module defines the immutable records exchanged with the server: the
17-byte market data packet and the 2-byte client request.
"""

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any

PACKET_SIZE = 17
REQUEST_SIZE = 2
DEFAULT_VALID_SYMBOLS = ("AAPL", "MSFT", "AMZN", "META")

# symbol(4s) side(c) quantity(i) price(i) sequence(i), big-endian
PACKET_STRUCT = struct.Struct(">4sciii")
REQUEST_STRUCT = struct.Struct(">BB")

INT32_MAX = 2**31 - 1


class Side(str, Enum):
    """Buy/sell indicator; the value is the wire byte."""
    BUY = "B"
    SELL = "S"


class CallType(IntEnum):
    """Request call types understood by the server."""
    STREAM_ALL = 1
    RESEND_ONE = 2


@dataclass(frozen=True)
class Packet:
    """Validated market data packet. Build through PacketValidator."""
    symbol: str         # 4-character ticker
    side: Side
    quantity: int       # > 0
    price: int          # > 0, fixed-point units
    sequence: int       # > 0, unique sort key

    def __post_init__(self) -> None:
        if not isinstance(self.side, Side):
            raise ValueError(f"side must be a Side, got {self.side!r}")
        if len(self.symbol) != 4:
            raise ValueError(f"symbol must be 4 characters, got {self.symbol!r}")
        for name in ("quantity", "price", "sequence"):
            value = getattr(self, name)
            if not 0 < value <= INT32_MAX:
                raise ValueError(f"{name} must be a positive int32, got {value}")

    def to_dict(self) -> dict[str, Any]:
        """Export record with the committed field names."""
        return {
            "symbol": self.symbol,
            "side": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "sequence": self.sequence,
        }


@dataclass(frozen=True)
class Request:
    """Client request: call type plus the sequence to resend."""
    call_type: CallType
    resend_seq: int = 0

    @classmethod
    def stream_all(cls) -> "Request":
        return cls(call_type=CallType.STREAM_ALL, resend_seq=0)

    @classmethod
    def resend(cls, sequence: int) -> "Request":
        return cls(call_type=CallType.RESEND_ONE, resend_seq=sequence)

    @property
    def wire_seq(self) -> int:
        """Sequence as it travels on the wire, truncated to 8 bits."""
        return self.resend_seq & 0xFF

    @property
    def truncated(self) -> bool:
        return self.wire_seq != self.resend_seq

    def to_bytes(self) -> bytes:
        return REQUEST_STRUCT.pack(int(self.call_type), self.wire_seq)
