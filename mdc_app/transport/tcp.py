"""TCP socket transport."""

import socket
from collections.abc import Iterator
from typing import Optional

import structlog

from ..errors import TransportError
from .base import Transport

logger = structlog.get_logger(__name__)


class TcpTransport(Transport):
    """Blocking TCP client transport with connect and read timeouts."""

    def __init__(
        self,
        connect_timeout_s: float = 10.0,
        read_timeout_s: Optional[float] = 30.0,
        chunk_size: int = 4096,
    ):
        self.connect_timeout_s = connect_timeout_s
        self.read_timeout_s = read_timeout_s
        self.chunk_size = chunk_size
        self.sock: Optional[socket.socket] = None
        self.endpoint = None

    def connect(self, host: str, port: int) -> None:
        self.endpoint = f"{host}:{port}"
        try:
            self.sock = socket.create_connection((host, port), timeout=self.connect_timeout_s)
        except OSError as e:
            raise TransportError(
                f"Connect to {self.endpoint} failed: {e}",
                operation="connect",
                endpoint=self.endpoint
            ) from e

        self.sock.settimeout(self.read_timeout_s)
        logger.debug("Transport connected", endpoint=self.endpoint)

    def write(self, data: bytes) -> None:
        sock = self._require_socket("write")
        try:
            sock.sendall(data)
        except OSError as e:
            raise TransportError(
                f"Write to {self.endpoint} failed: {e}",
                operation="write",
                endpoint=self.endpoint
            ) from e

    def chunks(self) -> Iterator[bytes]:
        sock = self._require_socket("read")
        while True:
            try:
                chunk = sock.recv(self.chunk_size)
            except socket.timeout as e:
                raise TransportError(
                    f"Read from {self.endpoint} timed out after {self.read_timeout_s}s",
                    operation="read",
                    endpoint=self.endpoint
                ) from e
            except OSError as e:
                raise TransportError(
                    f"Read from {self.endpoint} failed: {e}",
                    operation="read",
                    endpoint=self.endpoint
                ) from e
            if not chunk:
                return
            yield chunk

    def close(self) -> None:
        if self.sock is None:
            return
        try:
            self.sock.close()
        finally:
            self.sock = None
            logger.debug("Transport closed", endpoint=self.endpoint)

    def _require_socket(self, operation: str) -> socket.socket:
        if self.sock is None:
            raise TransportError(
                f"Transport not connected for {operation}",
                operation=operation,
                endpoint=self.endpoint
            )
        return self.sock
