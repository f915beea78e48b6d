"""
Data quality error classifications for packet processing.

These exceptions describe frames that arrived intact at the framing level but
carry field values the protocol does not allow. They are recoverable: the
session discards the frame and heals the gap through a resend.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Base class for data quality issues that can be handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class MalformedPacketError(DataQualityError):
    """Frame decoded but a field failed validation."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, raw_frame: Optional[bytes] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.raw_frame = raw_frame


MalformedPacket = MalformedPacketError
