"""Standard output dataset export."""

import sys
from collections.abc import Sequence

from ..config.export import StdoutExportConfig
from ..data.models import Packet
from ..errors import PersistenceError
from .base import BaseExportSink, DeliveryResult, DeliveryStatus


class StdoutExportSink(BaseExportSink):
    """Prints the dataset document to stdout."""

    def __init__(self, name: str, config: StdoutExportConfig):
        super().__init__(name, config)
        self.config: StdoutExportConfig = config

    def export(self, packets: Sequence[Packet]) -> DeliveryResult:
        """Print packets to stdout."""
        document = self.render(packets, self.config.format, self.config.indent)
        try:
            sys.stdout.write(document)
            sys.stdout.flush()
        except OSError as e:
            raise PersistenceError(
                f"Failed to write to stdout: {e}",
                operation="write",
                target="stdout"
            ) from e

        self._export_count += 1
        self.logger.info("Data printed to stdout", sink=self.name, records=len(packets))
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message="Printed to stdout",
            record_count=len(packets),
            target="stdout"
        )

    def health_check(self) -> bool:
        return not sys.stdout.closed
