"""
System failure error classifications for unrecoverable errors.

These exceptions represent session-level failures. The session controller
catches them, moves to the Failed state and reports them with a reason code.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for unrecoverable session failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class TransportError(SystemFailureError):
    """Connect, read or write failure on the byte-stream transport."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.endpoint = endpoint


class IntegrityViolationError(SystemFailureError):
    """Final dataset has duplicates or is not gap-free."""

    def __init__(self, message: str, expected: Optional[int] = None,
                 actual: Optional[int] = None, duplicates: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.expected = expected
        self.actual = actual
        self.duplicates = duplicates or []


class ResendExhaustedError(SystemFailureError):
    """Gaps still present after the last permitted resend pass."""

    def __init__(self, message: str, missing: Optional[list] = None,
                 passes: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.missing = missing or []
        self.passes = passes


class PersistenceError(SystemFailureError):
    """Export sink failed to write the dataset."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class StateTransitionError(SystemFailureError):
    """Invalid state transition that corrupts the session state machine."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class ConfigurationError(SystemFailureError):
    """Client configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
