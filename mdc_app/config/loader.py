"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ClientConfig,
    ExportParams,
    IntegrityParams,
    ProtocolParams,
    ResendParams,
    TransportParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "client.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ClientConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from client.yaml, empty if the file is absent."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping",
                errors=[f"top-level value is {type(file_config).__name__}"]
            )
        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides, e.g. from the command line (highest priority)
        2. client.yaml in the config directory
        3. Dataclass defaults (lowest priority)
        """
        config = asdict(self.defaults)

        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> ClientConfig:
        """Merge, validate and materialise the client configuration."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            messages = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            raise ConfigurationError(
                "Invalid client configuration: " + "; ".join(messages),
                errors=messages
            )

        return self._dict_to_config(merged)

    def _dict_to_config(self, config: dict[str, Any]) -> ClientConfig:
        """Convert a merged dictionary back into frozen dataclasses."""
        protocol = dict(config["protocol"])
        protocol["valid_symbols"] = tuple(protocol["valid_symbols"])

        return ClientConfig(
            transport=TransportParams(**config["transport"]),
            protocol=ProtocolParams(**protocol),
            resend=ResendParams(**config["resend"]),
            integrity=IntegrityParams(**config["integrity"]),
            export=ExportParams(**config["export"]),
        )

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
