"""Base class for bidirectional byte-stream transports."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Optional


class Transport(ABC):
    """
    Connection-per-round byte stream.

    Lifecycle: connect once, write the request, drain chunks() until the peer
    closes, then close. Failures raise TransportError.
    """

    endpoint: Optional[str] = None

    @abstractmethod
    def connect(self, host: str, port: int) -> None:
        """Open the connection."""
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Send all of ``data``."""
        pass

    @abstractmethod
    def chunks(self) -> Iterator[bytes]:
        """Yield received chunks until the peer closes the stream."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        pass

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
