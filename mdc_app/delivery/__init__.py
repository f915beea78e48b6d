"""
Dataset export sinks.

Write the verified, sequence-ordered packet list to its destination.
"""
from ..config.defaults import ExportParams
from ..config.export import ExportMethod, create_file_export, create_stdout_export
from .base import BaseExportSink, DeliveryResult, DeliveryStatus
from .file_delivery import FileExportSink
from .stdout_delivery import StdoutExportSink


def create_sink(params: ExportParams) -> BaseExportSink:
    """Build the sink selected by the export section of the config."""
    method = ExportMethod(params.method)
    if method == ExportMethod.STDOUT:
        return StdoutExportSink("stdout", create_stdout_export(params))
    return FileExportSink("file", create_file_export(params))


__all__ = [
    "BaseExportSink",
    "DeliveryResult",
    "DeliveryStatus",
    "FileExportSink",
    "StdoutExportSink",
    "create_sink",
]
