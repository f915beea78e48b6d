"""
Final integrity check for a completed dataset.

Re-derives completeness from the exported packet list itself, independent of
the store's gap computation, and refuses the dataset unless every sequence
from 1 to the maximum is present exactly once.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from ..data.models import Packet
from ..errors import IntegrityViolationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IntegrityReport:
    """Summary of a passed integrity check."""
    count: int
    max_sequence: int
    unique: int


def verify_integrity(packets: Sequence[Packet], allow_empty: bool = False) -> IntegrityReport:
    """
    Assert the dataset is duplicate-free and gap-free.

    Args:
        packets: Exported packets
        allow_empty: Accept a dataset with no packets at all

    Returns:
        IntegrityReport on success

    Raises:
        IntegrityViolationError: With expected vs. actual counts
    """
    sequences = [p.sequence for p in packets]
    counts = Counter(sequences)

    duplicates = sorted(seq for seq, n in counts.items() if n > 1)
    if duplicates:
        raise IntegrityViolationError(
            f"Duplicate sequence numbers detected: {duplicates}",
            expected=len(counts),
            actual=len(sequences),
            duplicates=duplicates
        )

    if not sequences:
        if allow_empty:
            logger.warning("Integrity check passed on empty dataset")
            return IntegrityReport(count=0, max_sequence=0, unique=0)
        raise IntegrityViolationError(
            "No packets received",
            expected=1,
            actual=0
        )

    max_sequence = max(sequences)
    if len(sequences) != max_sequence:
        raise IntegrityViolationError(
            f"Missing sequences. Expected {max_sequence}, got {len(sequences)}",
            expected=max_sequence,
            actual=len(sequences)
        )

    logger.info("Data integrity check passed", count=len(sequences), max_sequence=max_sequence)
    return IntegrityReport(count=len(sequences), max_sequence=max_sequence, unique=len(counts))
