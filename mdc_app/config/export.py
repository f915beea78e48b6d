"""Configuration for dataset export sinks."""

from dataclasses import dataclass
from enum import Enum

from .defaults import ExportParams


class ExportMethod(Enum):
    """Supported export methods."""
    FILE_OUTPUT = "file"
    STDOUT = "stdout"


@dataclass(frozen=True)
class FileExportConfig:
    """Configuration for file-based export."""
    output_path: str
    format: str = "json"  # json, jsonl
    indent: int = 2
    create_dirs: bool = True


@dataclass(frozen=True)
class StdoutExportConfig:
    """Configuration for stdout export."""
    format: str = "json"  # json, jsonl
    indent: int = 2


def create_file_export(params: ExportParams) -> FileExportConfig:
    """Build a file export config from the export section."""
    return FileExportConfig(
        output_path=params.output_path,
        format=params.format,
        indent=params.indent,
        create_dirs=params.create_dirs,
    )


def create_stdout_export(params: ExportParams) -> StdoutExportConfig:
    """Build a stdout export config from the export section."""
    return StdoutExportConfig(format=params.format, indent=params.indent)
