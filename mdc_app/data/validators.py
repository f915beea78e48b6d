"""
Packet validation for decoded frames.

Decodes a 17-byte frame and enforces field-level invariants in a fixed order:
symbol membership, side membership, quantity, price, sequence. The first
failing check raises MalformedPacketError naming the field and its value.
Validation is pure: no packet is stored or logged here.
"""

from collections import Counter
from collections.abc import Iterable
from typing import Optional

from ..errors import MalformedPacketError
from .models import DEFAULT_VALID_SYMBOLS, Packet, Side
from .parsers import decode_frame

VALID_SIDES = frozenset(side.value for side in Side)


class ValidationMetrics:
    """Simple counters for validation outcomes."""

    def __init__(self):
        self.total_frames = 0
        self.valid_packets = 0
        self.malformed_packets = 0
        self.rejections_by_field: Counter = Counter()

    def record_valid(self) -> None:
        self.total_frames += 1
        self.valid_packets += 1

    def record_malformed(self, field: str) -> None:
        self.total_frames += 1
        self.malformed_packets += 1
        self.rejections_by_field[field] += 1

    def get_stats(self) -> dict:
        return {
            "total_frames": self.total_frames,
            "valid_packets": self.valid_packets,
            "malformed_packets": self.malformed_packets,
            "rejections_by_field": dict(self.rejections_by_field),
        }


class PacketValidator:
    """Validates frames against the protocol's field rules."""

    def __init__(self, valid_symbols: Optional[Iterable[str]] = None):
        self.valid_symbols = frozenset(valid_symbols or DEFAULT_VALID_SYMBOLS)
        self.metrics = ValidationMetrics()

    def validate(self, frame: bytes) -> Packet:
        """
        Decode and validate a single frame.

        Args:
            frame: Exactly 17 bytes; length is the framer's responsibility

        Returns:
            The validated Packet

        Raises:
            MalformedPacketError: On the first field that violates its rule
        """
        try:
            packet = validate_packet(frame, self.valid_symbols)
        except MalformedPacketError as e:
            self.metrics.record_malformed(e.field)
            raise
        self.metrics.record_valid()
        return packet


def validate_packet(frame: bytes, valid_symbols: Iterable[str] = DEFAULT_VALID_SYMBOLS) -> Packet:
    """Stateless form of PacketValidator.validate."""
    fields = decode_frame(frame)

    if fields.symbol not in valid_symbols:
        raise MalformedPacketError(
            f"Invalid symbol: {fields.symbol!r}",
            field="symbol", value=fields.symbol, raw_frame=frame
        )

    if fields.side not in VALID_SIDES:
        raise MalformedPacketError(
            f"Invalid buy/sell indicator: {fields.side!r}",
            field="side", value=fields.side, raw_frame=frame
        )

    if fields.quantity <= 0:
        raise MalformedPacketError(
            f"Invalid quantity: {fields.quantity}",
            field="quantity", value=fields.quantity, raw_frame=frame
        )

    if fields.price <= 0:
        raise MalformedPacketError(
            f"Invalid price: {fields.price}",
            field="price", value=fields.price, raw_frame=frame
        )

    if fields.sequence <= 0:
        raise MalformedPacketError(
            f"Invalid packet sequence: {fields.sequence}",
            field="sequence", value=fields.sequence, raw_frame=frame
        )

    return Packet(
        symbol=fields.symbol,
        side=Side(fields.side),
        quantity=fields.quantity,
        price=fields.price,
        sequence=fields.sequence,
    )
