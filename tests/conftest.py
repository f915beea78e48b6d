"""Pytest configuration and shared fixtures."""

from collections.abc import Iterator
from typing import Callable, Optional

import pytest
import structlog

from mdc_app.config.defaults import ClientConfig, ExportParams, ResendParams
from mdc_app.data.models import CallType, Packet, Request, Side
from mdc_app.data.parsers import decode_request, encode_packet
from mdc_app.errors import TransportError
from mdc_app.transport.base import Transport


class ScriptedServer:
    """
    In-memory stand-in for the packet server.

    Serves a canonical packet set. The initial stream can drop or replace
    frames, selected connections can be refused, and selected sequences can be
    withheld from resend replies. Replies are cut into small chunks so frames
    straddle chunk boundaries.
    """

    def __init__(
        self,
        packets: list[Packet],
        drop: tuple = (),
        replace: Optional[dict[int, bytes]] = None,
        withhold: tuple = (),
        refuse: tuple = (),
        fail_read: tuple = (),
        chunk_size: int = 5,
        trailing: bytes = b"",
    ):
        self.packets = {p.sequence: p for p in packets}
        self.drop = set(drop)
        self.replace = replace or {}
        self.withhold = set(withhold)
        self.refuse = set(refuse)          # 1-based connection numbers
        self.fail_read = set(fail_read)    # 1-based connection numbers
        self.chunk_size = chunk_size
        self.trailing = trailing
        self.connections = 0
        self.requests: list[Request] = []
        self.transports: list["FakeTransport"] = []

    def factory(self) -> "FakeTransport":
        transport = FakeTransport(self)
        self.transports.append(transport)
        return transport

    def respond(self, request: Request) -> bytes:
        if request.call_type == CallType.STREAM_ALL:
            frames = [
                self.replace.get(seq, encode_packet(self.packets[seq]))
                for seq in sorted(self.packets)
                if seq not in self.drop
            ]
            return b"".join(frames) + self.trailing

        seq = request.resend_seq
        if seq in self.packets and seq not in self.withhold:
            return encode_packet(self.packets[seq]) + self.trailing
        return b""

    @property
    def resend_sequences(self) -> list[int]:
        return [r.resend_seq for r in self.requests if r.call_type == CallType.RESEND_ONE]


class FakeTransport(Transport):
    """Transport backed by a ScriptedServer."""

    def __init__(self, server: ScriptedServer):
        self.server = server
        self.request: Optional[Request] = None
        self.number = 0
        self.closed = False
        self.endpoint = None

    def connect(self, host: str, port: int) -> None:
        self.endpoint = f"{host}:{port}"
        self.server.connections += 1
        self.number = self.server.connections
        if self.number in self.server.refuse:
            raise TransportError("Connection refused", operation="connect", endpoint=self.endpoint)

    def write(self, data: bytes) -> None:
        self.request = decode_request(data)
        self.server.requests.append(self.request)

    def chunks(self) -> Iterator[bytes]:
        data = self.server.respond(self.request)
        if self.number in self.server.fail_read:
            yield data[: len(data) // 2]
            raise TransportError("Connection reset", operation="read", endpoint=self.endpoint)
        size = self.server.chunk_size
        for offset in range(0, len(data), size):
            yield data[offset:offset + size]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_packet() -> Callable[..., Packet]:
    """Factory for valid packets."""
    def _make(sequence: int, symbol: str = "AAPL", side: Side = Side.BUY,
              quantity: int = 100, price: Optional[int] = None) -> Packet:
        return Packet(
            symbol=symbol,
            side=side,
            quantity=quantity,
            price=price if price is not None else 1000 + sequence,
            sequence=sequence,
        )
    return _make


@pytest.fixture
def packets(make_packet) -> list[Packet]:
    """Four valid packets with sequences 1..4 and mixed symbols/sides."""
    return [
        make_packet(1, "AAPL", Side.BUY, 50, 15000),
        make_packet(2, "MSFT", Side.SELL, 30, 31000),
        make_packet(3, "AMZN", Side.BUY, 10, 12800),
        make_packet(4, "META", Side.SELL, 80, 29000),
    ]


@pytest.fixture
def client_config(tmp_path) -> ClientConfig:
    """Config writing to a temp file with fast, bounded resend."""
    return ClientConfig(
        resend=ResendParams(max_passes=3, initial_delay_s=0.01, multiplier=2.0, max_delay_s=0.05),
        export=ExportParams(output_path=str(tmp_path / "output.json")),
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Collects requested backoff delays instead of sleeping."""
    return []


@pytest.fixture
def scripted_server() -> type[ScriptedServer]:
    """The ScriptedServer class, for building per-test servers."""
    return ScriptedServer


@pytest.fixture
def unconfigured_structlog():
    """Run with structlog reset to its library defaults, then restore."""
    saved = structlog.get_config()
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
    structlog.configure(**saved)
