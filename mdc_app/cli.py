"""Command-line entry point for the market data client."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from .config.loader import ConfigLoader
from .engine import SessionController
from .errors import ConfigurationError
from .logging.config import configure_logging

EXIT_OK = 0
EXIT_SESSION_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mdc-client",
        description="Download the full packet stream, heal gaps by resend and export it as JSON.",
    )
    p.add_argument("--host", help="server host (default: localhost)")
    p.add_argument("--port", type=int, help="server port (default: 3000)")
    p.add_argument("--config-dir", type=Path, help="directory containing client.yaml")
    p.add_argument("--output", help="output file path (default: output.json)")
    p.add_argument("--format", choices=["json", "jsonl"], help="output document format")
    p.add_argument("--stdout", action="store_true", help="print the dataset instead of writing a file")
    p.add_argument("--max-passes", type=int, help="maximum resend passes before giving up")
    p.add_argument("--log-level", default="INFO", type=str.upper,
                   choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("--json-logs", action="store_true", help="emit structured JSON logs")
    return p


def overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Translate CLI flags into a config override mapping."""
    overrides: dict[str, Any] = {}

    def put(section: str, key: str, value: Any) -> None:
        if value is not None:
            overrides.setdefault(section, {})[key] = value

    put("transport", "host", args.host)
    put("transport", "port", args.port)
    put("export", "output_path", args.output)
    put("export", "format", args.format)
    put("resend", "max_passes", args.max_passes)
    if args.stdout:
        put("export", "method", "stdout")
    return overrides


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, format_json=args.json_logs)

    try:
        config = ConfigLoader.create(args.config_dir).load(overrides_from_args(args))
    except ConfigurationError as e:
        print(json.dumps({"success": False, "reason": "configuration_error", "errors": e.errors}),
              file=sys.stderr)
        return EXIT_CONFIG_ERROR

    result = SessionController(config).run()

    # keep stdout clean when it carries the dataset itself
    stream = sys.stderr if config.export.method == "stdout" else sys.stdout
    print(json.dumps(result.summary()), file=stream)
    return EXIT_OK if result.success else EXIT_SESSION_FAILED


if __name__ == "__main__":
    raise SystemExit(main())
