"""
Session state data models.

This module defines the session lifecycle states, run statistics and the
terminal result record returned by the session controller.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from ..data.models import Packet


class SessionState(str, Enum):
    """Session lifecycle states."""
    IDLE = "idle"
    CONNECTING = "connecting"
    REQUESTING = "requesting"
    STREAMING_INITIAL = "streaming_initial"
    CLOSED_GAPS_FOUND = "closed_gaps_found"
    RESEND_ROUND = "resend_round"
    CLOSED_COMPLETE = "closed_complete"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({SessionState.SUCCEEDED, SessionState.FAILED})


class FailureReason(str, Enum):
    """Reason codes reported with a terminal state."""
    COMPLETE = "complete"
    TRANSPORT_ERROR = "transport_error"
    RESEND_EXHAUSTED = "resend_exhausted"
    INTEGRITY_VIOLATION = "integrity_violation"
    PERSISTENCE_ERROR = "persistence_error"


@dataclass(frozen=True)
class StateTransition:
    """One recorded state change."""
    from_state: SessionState
    to_state: SessionState
    trigger: str
    target_sequence: Optional[int] = None


@dataclass
class SessionStats:
    """Counters collected over all rounds of a session."""
    chunks_received: int = 0
    bytes_received: int = 0
    frames_decoded: int = 0
    packets_inserted: int = 0
    duplicates: int = 0
    malformed_discarded: int = 0
    partial_bytes_discarded: int = 0
    resend_requests: int = 0
    resend_passes: int = 0
    transport_errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class SessionResult:
    """Terminal outcome of a session run."""
    success: bool
    state: SessionState
    reason: FailureReason
    packets: list[Packet] = field(default_factory=list)
    missing: list[int] = field(default_factory=list)
    rounds: int = 0
    stats: SessionStats = field(default_factory=SessionStats)
    error: Optional[Exception] = None
    validation: dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return str(self.error) if self.error else self.reason.value

    def summary(self) -> dict[str, Any]:
        """JSON-friendly summary for logs and the CLI."""
        return {
            "success": self.success,
            "state": self.state.value,
            "reason": self.reason.value,
            "message": self.message,
            "packets": len(self.packets),
            "missing": self.missing,
            "rounds": self.rounds,
            "stats": self.stats.to_dict(),
            "validation": self.validation,
        }
