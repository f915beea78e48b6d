"""File-based dataset export."""

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from ..config.export import FileExportConfig
from ..data.models import Packet
from ..errors import PersistenceError
from .base import BaseExportSink, DeliveryResult, DeliveryStatus


class FileExportSink(BaseExportSink):
    """Writes the dataset to a file, replacing it atomically."""

    def __init__(self, name: str, config: FileExportConfig):
        super().__init__(name, config)
        self.config: FileExportConfig = config
        self.output_path = Path(config.output_path)

        if config.format not in ["json", "jsonl"]:
            raise PersistenceError(
                f"Unsupported format: {config.format}",
                operation="configure",
                target=str(self.output_path)
            )

    def export(self, packets: Sequence[Packet]) -> DeliveryResult:
        """Write packets to the output file."""
        document = self.render(packets, self.config.format, self.config.indent)

        try:
            if self.config.create_dirs:
                self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write(document)
        except OSError as e:
            self.logger.error(
                "Dataset export failed",
                sink=self.name,
                output_path=str(self.output_path),
                error=str(e)
            )
            raise PersistenceError(
                f"Failed to write {self.output_path}: {e}",
                operation="write",
                target=str(self.output_path)
            ) from e

        self._export_count += 1
        self.logger.info(
            "Data saved to file",
            sink=self.name,
            output_path=str(self.output_path),
            records=len(packets)
        )
        return DeliveryResult(
            status=DeliveryStatus.SUCCESS,
            message=f"Written to {self.output_path}",
            record_count=len(packets),
            target=str(self.output_path)
        )

    def _atomic_write(self, document: str) -> None:
        """Write to a sibling temp file, then rename over the target."""
        directory = self.output_path.parent
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.output_path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write(document)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.output_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        try:
            test_file = self.output_path.parent / ".health_check_test"
            test_file.write_text("test")
            test_file.unlink()
            return True

        except OSError as e:
            self.logger.warning(
                "Health check failed",
                sink=self.name,
                error=str(e)
            )
            return False
