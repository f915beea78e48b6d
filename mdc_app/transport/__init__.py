"""
Byte-stream transport module.

The session depends only on the Transport capability set; TcpTransport is the
socket-backed implementation used in production.
"""
from .base import Transport
from .tcp import TcpTransport

__all__ = ["Transport", "TcpTransport"]
