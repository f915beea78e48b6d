"""Base classes for dataset export sinks."""

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from ..data.models import Packet


class DeliveryStatus(Enum):
    """Export status. Failed exports raise PersistenceError instead."""
    SUCCESS = "success"


@dataclass
class DeliveryResult:
    """Result of an export attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    record_count: int = 0
    target: Optional[str] = None


class BaseExportSink(ABC):
    """Base class for export sinks."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"mdc.delivery.{name}")
        self._export_count = 0

    @abstractmethod
    def export(self, packets: Sequence[Packet]) -> DeliveryResult:
        """
        Write the packets, already sorted by sequence.

        Args:
            packets: Verified packets in ascending sequence order

        Returns:
            DeliveryResult describing the write

        Raises:
            PersistenceError: If the destination cannot be written
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the destination is writable."""
        pass

    def render(self, packets: Sequence[Packet], format: str = "json", indent: int = 2) -> str:
        """Serialise packets as a JSON array or as JSON lines."""
        records = [packet.to_dict() for packet in packets]
        if format == "jsonl":
            return "".join(json.dumps(record) + "\n" for record in records)
        return json.dumps(records, indent=indent) + "\n"

    def get_stats(self) -> dict[str, Any]:
        return {"name": self.name, "export_count": self._export_count}
