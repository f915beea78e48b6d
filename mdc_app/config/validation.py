"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

KNOWN_SECTIONS = {
    "transport": {"host", "port", "connect_timeout_s", "read_timeout_s", "chunk_size"},
    "protocol": {"valid_symbols", "frame_length"},
    "resend": {"max_passes", "initial_delay_s", "multiplier", "max_delay_s", "max_gap"},
    "integrity": {"allow_empty"},
    "export": {"method", "output_path", "format", "indent", "create_dirs"},
}


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_transport_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate transport parameters."""
        errors = []

        if "host" in params:
            value = params["host"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="transport.host",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "port" in params:
            value = params["port"]
            if not _is_int(value) or not 0 < value < 65536:
                errors.append(ValidationError(
                    field="transport.port",
                    message="Must be an integer between 1 and 65535",
                    value=value
                ))

        if "connect_timeout_s" in params:
            value = params["connect_timeout_s"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="transport.connect_timeout_s",
                    message="Must be a positive number",
                    value=value
                ))

        if "read_timeout_s" in params:
            value = params["read_timeout_s"]
            if value is not None and (not _is_number(value) or value <= 0):
                errors.append(ValidationError(
                    field="transport.read_timeout_s",
                    message="Must be a positive number or null",
                    value=value
                ))

        if "chunk_size" in params:
            value = params["chunk_size"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="transport.chunk_size",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_protocol_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate wire protocol parameters."""
        errors = []

        if "valid_symbols" in params:
            value = params["valid_symbols"]
            if (not isinstance(value, (list, tuple)) or not value
                    or not all(isinstance(s, str) and len(s) == 4 and s.isascii() for s in value)):
                errors.append(ValidationError(
                    field="protocol.valid_symbols",
                    message="Must be a non-empty list of 4-character ASCII symbols",
                    value=value
                ))

        if "frame_length" in params:
            value = params["frame_length"]
            if value != 17:
                errors.append(ValidationError(
                    field="protocol.frame_length",
                    message="Packet layout is fixed at 17 bytes",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_resend_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate resend policy parameters."""
        errors = []

        if "max_passes" in params:
            value = params["max_passes"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="resend.max_passes",
                    message="Must be a non-negative integer",
                    value=value
                ))

        for name in ("initial_delay_s", "max_delay_s"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=f"resend.{name}",
                        message="Must be a non-negative number",
                        value=value
                    ))

        if "multiplier" in params:
            value = params["multiplier"]
            if not _is_number(value) or value < 1:
                errors.append(ValidationError(
                    field="resend.multiplier",
                    message="Must be a number >= 1",
                    value=value
                ))

        if "max_gap" in params:
            value = params["max_gap"]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field="resend.max_gap",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_export_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate export sink parameters."""
        errors = []

        if "method" in params and params["method"] not in ("file", "stdout"):
            errors.append(ValidationError(
                field="export.method",
                message="Must be one of: file, stdout",
                value=params["method"]
            ))

        if "format" in params and params["format"] not in ("json", "jsonl"):
            errors.append(ValidationError(
                field="export.format",
                message="Must be one of: json, jsonl",
                value=params["format"]
            ))

        if "output_path" in params:
            value = params["output_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="export.output_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        if "indent" in params:
            value = params["indent"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(
                    field="export.indent",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "create_dirs" in params and not isinstance(params["create_dirs"], bool):
            errors.append(ValidationError(
                field="export.create_dirs",
                message="Must be a boolean",
                value=params["create_dirs"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section, value in config.items():
            if section not in KNOWN_SECTIONS:
                errors.append(ValidationError(field=section, message="Unknown section", value=value))
                continue
            if not isinstance(value, dict):
                errors.append(ValidationError(field=section, message="Must be a mapping", value=value))
                continue
            for key in value:
                if key not in KNOWN_SECTIONS[section]:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown setting",
                        value=value[key]
                    ))

        if errors:
            return errors

        if "transport" in config:
            errors.extend(ConfigValidator.validate_transport_params(config["transport"]))

        if "protocol" in config:
            errors.extend(ConfigValidator.validate_protocol_params(config["protocol"]))

        if "resend" in config:
            errors.extend(ConfigValidator.validate_resend_params(config["resend"]))

        if "integrity" in config and "allow_empty" in config["integrity"]:
            if not isinstance(config["integrity"]["allow_empty"], bool):
                errors.append(ValidationError(
                    field="integrity.allow_empty",
                    message="Must be a boolean",
                    value=config["integrity"]["allow_empty"]
                ))

        if "export" in config:
            errors.extend(ConfigValidator.validate_export_params(config["export"]))

        return errors
