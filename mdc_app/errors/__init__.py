"""
Error classification system for the market data client.

This module provides a structured exception hierarchy separating per-frame data
quality problems (recoverable, healed by resend) from session-level failures
(unrecoverable, terminate the session).
"""

from .data_quality import (
    DataQualityError,
    MalformedPacket,
    MalformedPacketError,
)
from .system_failures import (
    SystemFailureError,
    TransportError,
    IntegrityViolationError,
    ResendExhaustedError,
    PersistenceError,
    StateTransitionError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedPacket",
    "MalformedPacketError",
    # System Failures
    "SystemFailureError",
    "TransportError",
    "IntegrityViolationError",
    "ResendExhaustedError",
    "PersistenceError",
    "StateTransitionError",
    "ConfigurationError",
]
