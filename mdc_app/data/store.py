"""
Sequence-indexed packet store.

Holds validated packets keyed by sequence number across all connection rounds
of a session. Insertion is idempotent (first writer wins), which absorbs
duplicate deliveries from overlapping resend responses.
"""

from collections.abc import Iterable, Iterator
from itertools import islice
from typing import Optional

import structlog

from ..errors import MalformedPacketError
from .models import DEFAULT_VALID_SYMBOLS, Packet

logger = structlog.get_logger(__name__)


class PacketStore:
    """Deduplicating mapping from sequence number to Packet."""

    def __init__(self, valid_symbols: Optional[Iterable[str]] = None):
        self.valid_symbols = frozenset(valid_symbols or DEFAULT_VALID_SYMBOLS)
        self._packets: dict[int, Packet] = {}
        self._max_sequence = 0
        self.duplicates = 0

    def __len__(self) -> int:
        return len(self._packets)

    def __contains__(self, sequence: object) -> bool:
        return sequence in self._packets

    @property
    def max_sequence(self) -> int:
        """Highest sequence stored, 0 when empty."""
        return self._max_sequence

    def get(self, sequence: int) -> Optional[Packet]:
        return self._packets.get(sequence)

    def insert(self, packet: Packet) -> bool:
        """
        Insert a packet unless its sequence is already present.

        Returns:
            True if newly inserted, False for a duplicate. Informational only.

        Raises:
            MalformedPacketError: If the symbol is outside the valid set
        """
        if packet.symbol not in self.valid_symbols:
            raise MalformedPacketError(
                f"Invalid symbol: {packet.symbol!r}",
                field="symbol", value=packet.symbol
            )

        if packet.sequence in self._packets:
            self.duplicates += 1
            logger.debug("Duplicate packet ignored", sequence=packet.sequence)
            return False

        self._packets[packet.sequence] = packet
        if packet.sequence > self._max_sequence:
            self._max_sequence = packet.sequence
        return True

    def sequences(self) -> list[int]:
        """Stored sequence numbers in ascending order."""
        return sorted(self._packets)

    def missing_count(self) -> int:
        """Number of gaps in [1, max_sequence], without listing them."""
        return self._max_sequence - len(self._packets)

    def missing_sequences(self, limit: Optional[int] = None) -> list[int]:
        """
        Every integer in [1, max_sequence] not present, ascending.

        Sequences above the highest one seen are unknown and never reported.
        With ``limit`` only the lowest ``limit`` gaps are returned.
        """
        return list(islice(self._iter_missing(), limit))

    def is_complete(self) -> bool:
        return len(self._packets) == self._max_sequence

    def export_sorted(self) -> list[Packet]:
        """All stored packets ordered ascending by sequence."""
        return [self._packets[seq] for seq in sorted(self._packets)]

    def _iter_missing(self) -> Iterator[int]:
        for seq in range(1, self._max_sequence + 1):
            if seq not in self._packets:
                yield seq
