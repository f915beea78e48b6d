"""
Session state machine.

Holds the current session state and enforces the legal transition table.
Every change is logged through log_state_transition and kept in the history
so tests and callers can audit the path a session took.
"""

from typing import Any, Optional

from ..errors import StateTransitionError
from ..logging.config import get_session_logger, log_state_transition
from .models import TERMINAL_STATES, SessionState, StateTransition

ALLOWED_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.CONNECTING}),
    SessionState.CONNECTING: frozenset({SessionState.REQUESTING, SessionState.FAILED}),
    SessionState.REQUESTING: frozenset({SessionState.STREAMING_INITIAL, SessionState.FAILED}),
    SessionState.STREAMING_INITIAL: frozenset({
        SessionState.CLOSED_GAPS_FOUND,
        SessionState.CLOSED_COMPLETE,
        SessionState.FAILED,
    }),
    SessionState.CLOSED_GAPS_FOUND: frozenset({SessionState.RESEND_ROUND, SessionState.FAILED}),
    SessionState.RESEND_ROUND: frozenset({
        SessionState.RESEND_ROUND,
        SessionState.CLOSED_GAPS_FOUND,
        SessionState.CLOSED_COMPLETE,
    }),
    SessionState.CLOSED_COMPLETE: frozenset({SessionState.SUCCEEDED, SessionState.FAILED}),
    SessionState.SUCCEEDED: frozenset(),
    SessionState.FAILED: frozenset(),
}


class SessionStateMachine:
    """Current state of one session plus its transition history."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.state = SessionState.IDLE
        self.target_sequence: Optional[int] = None
        self.history: list[StateTransition] = []
        self.logger = get_session_logger(__name__)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_transition(self, to_state: SessionState) -> bool:
        return to_state in ALLOWED_TRANSITIONS[self.state]

    def transition(
        self,
        to_state: SessionState,
        trigger: str,
        target_sequence: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> StateTransition:
        """
        Move to ``to_state``.

        Raises:
            StateTransitionError: If the table does not allow the move
        """
        if not self.can_transition(to_state):
            raise StateTransitionError(
                f"Illegal transition {self.state.value} -> {to_state.value}",
                current_state=self.state.value,
                attempted_transition=to_state.value
            )

        if to_state == SessionState.RESEND_ROUND and target_sequence is None:
            raise StateTransitionError(
                "Resend round requires a target sequence",
                current_state=self.state.value,
                attempted_transition=to_state.value
            )

        record = StateTransition(
            from_state=self.state,
            to_state=to_state,
            trigger=trigger,
            target_sequence=target_sequence,
        )

        log_context = dict(context or {})
        if target_sequence is not None:
            log_context["target_sequence"] = target_sequence

        log_state_transition(
            self.logger,
            session_id=self.session_id,
            from_state=self.state.value,
            to_state=to_state.value,
            trigger=trigger,
            context=log_context or None
        )

        self.state = to_state
        self.target_sequence = target_sequence
        self.history.append(record)
        return record

    def path(self) -> list[SessionState]:
        """States visited so far, starting with IDLE."""
        return [SessionState.IDLE] + [t.to_state for t in self.history]
