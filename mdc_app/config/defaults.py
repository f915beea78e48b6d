"""Default configuration parameters for the market data client."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class TransportParams:
    """TCP endpoint and socket parameters."""
    host: str = "localhost"
    port: int = 3000
    connect_timeout_s: float = 10.0
    read_timeout_s: Optional[float] = 30.0         # None blocks until close
    chunk_size: int = 4096                           # Max bytes per recv


@dataclass(frozen=True)
class ProtocolParams:
    """Wire protocol parameters."""
    valid_symbols: tuple[str, ...] = ("AAPL", "MSFT", "AMZN", "META")
    frame_length: int = 17


@dataclass(frozen=True)
class ResendParams:
    """Bounded resend policy."""
    max_passes: int = 5                              # 0 disables resend
    initial_delay_s: float = 0.1                     # Delay before the second pass
    multiplier: float = 2.0
    max_delay_s: float = 5.0
    max_gap: int = 10_000                            # More missing sequences fails at once


@dataclass(frozen=True)
class IntegrityParams:
    """Final integrity check parameters."""
    allow_empty: bool = False


@dataclass(frozen=True)
class ExportParams:
    """Persistence sink parameters."""
    method: str = "file"                             # file, stdout
    output_path: str = "output.json"
    format: str = "json"                             # json, jsonl
    indent: int = 2
    create_dirs: bool = True


@dataclass(frozen=True)
class ClientConfig:
    """Complete client configuration."""
    transport: TransportParams = field(default_factory=TransportParams)
    protocol: ProtocolParams = field(default_factory=ProtocolParams)
    resend: ResendParams = field(default_factory=ResendParams)
    integrity: IntegrityParams = field(default_factory=IntegrityParams)
    export: ExportParams = field(default_factory=ExportParams)


def get_default_config() -> ClientConfig:
    """Get the default configuration instance."""
    return ClientConfig(
        transport=TransportParams(),
        protocol=ProtocolParams(),
        resend=ResendParams(),
        integrity=IntegrityParams(),
        export=ExportParams(),
    )
