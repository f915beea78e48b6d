"""
Wire codec for the fixed-length packet protocol.

Unpacks raw 17-byte frames into field values without judging them, and
encodes packets and requests back into wire form.
"""

from dataclasses import dataclass

from .models import PACKET_STRUCT, REQUEST_STRUCT, CallType, Packet, Request


@dataclass(frozen=True)
class RawFields:
    """Field values decoded from a frame, not yet validated."""
    symbol: str
    side: str
    quantity: int
    price: int
    sequence: int


def decode_frame(frame: bytes) -> RawFields:
    """
    Unpack a frame into raw field values.

    The caller guarantees the frame is exactly PACKET_SIZE bytes. Text fields
    are decoded with replacement so invalid bytes can still be reported.
    """
    symbol, side, quantity, price, sequence = PACKET_STRUCT.unpack(frame)
    return RawFields(
        symbol=symbol.decode("ascii", errors="replace"),
        side=side.decode("ascii", errors="replace"),
        quantity=quantity,
        price=price,
        sequence=sequence,
    )


def encode_fields(symbol: str, side: str, quantity: int, price: int, sequence: int) -> bytes:
    """Pack arbitrary field values into a frame, valid or not."""
    return PACKET_STRUCT.pack(
        symbol.encode("ascii"),
        side.encode("ascii"),
        quantity,
        price,
        sequence,
    )


def encode_packet(packet: Packet) -> bytes:
    """Encode a packet into its 17-byte wire frame."""
    return encode_fields(
        packet.symbol, packet.side.value, packet.quantity, packet.price, packet.sequence
    )


def decode_request(data: bytes) -> Request:
    """Parse a 2-byte client request. Used by test servers."""
    call_type, resend_seq = REQUEST_STRUCT.unpack(data)
    return Request(call_type=CallType(call_type), resend_seq=resend_seq)
