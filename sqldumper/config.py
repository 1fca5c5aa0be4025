"""
Configuration loading and validation for SQL Dumper.
"""

import os
import re
from typing import Any

import yaml

from .exceptions import ConfigurationError
from .models import ConnectionSettings, DumpSettings


class ConfigLoader:
    """Loads configuration from a YAML file."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
    SECTIONS = ('connection', 'dump', 'output', 'logging')

    def __init__(self, config_path: str):
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        with open(self.config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigurationError(f"Configuration file '{self.config_path}' must contain a mapping")

        unexpected = sorted(set(config) - set(self.SECTIONS))
        if unexpected:
            raise ConfigurationError(f"Unexpected configuration section(s): ({','.join(unexpected)})")

        return self._resolve_env_vars(config)

    def _resolve_env_vars(self, obj: Any) -> Any:
        """Recursively resolve environment variables in config."""
        if isinstance(obj, str):
            matches = self.ENV_VAR_PATTERN.findall(obj)
            for match in matches:
                env_value = os.environ.get(match, '')
                obj = obj.replace(f'${{{match}}}', env_value)
            return obj
        elif isinstance(obj, dict):
            return {k: self._resolve_env_vars(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [self._resolve_env_vars(item) for item in obj]
        return obj

    def _section(self, name: str) -> dict[str, Any]:
        return dict(self.config.get(name) or {})

    def get_connection_settings(self) -> dict[str, Any]:
        """Get database connection parameters."""
        return self._section('connection')

    def get_dump_settings(self) -> dict[str, Any]:
        """Get dump options."""
        return self._section('dump')

    def get_output_settings(self) -> dict[str, Any]:
        """Get output settings."""
        return self._section('output')

    def get_logging_settings(self) -> dict[str, Any]:
        """Get logging settings."""
        return self._section('logging')

    def build_connection_settings(self, **overrides: Any) -> ConnectionSettings:
        """Validated connection settings; non-empty overrides replace file values."""
        options = self.get_connection_settings()
        options.update({k: v for k, v in overrides.items() if v})
        return ConnectionSettings.from_dict(options)

    def build_dump_settings(self) -> DumpSettings:
        return DumpSettings.from_dict(self.get_dump_settings())
