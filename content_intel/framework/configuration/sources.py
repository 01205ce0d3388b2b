"""
Configuration sources for loading configuration data.
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ...infrastructure.exceptions import ConfigurationError

# Settings that are always lists, even when the variable holds a single item.
LIST_FIELDS = {'enabled_plugins', 'plugin_modules', 'plugin_search_paths'}

# Settings that stay strings even when they look numeric.
STRING_FIELDS = {'statistics_db', 'search_log_db', 'content_path', 'file_base_url'}


class ConfigurationSource(ABC):
    """Abstract base class for configuration sources."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Load configuration data from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass


class DictConfigurationSource(ConfigurationSource):
    """In-memory configuration source, used for defaults and tests."""

    def __init__(self, data: Dict[str, Any], priority: int = 50):
        self.data = data
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        return dict(self.data)

    def get_priority(self) -> int:
        return self.priority


class YAMLConfigurationSource(ConfigurationSource):
    """YAML file configuration source."""

    def __init__(self, file_path: Union[str, Path], priority: int = 100, required: bool = True):
        self.file_path = Path(file_path)
        self.priority = priority
        self.required = required

    def load(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.file_path.exists():
            if not self.required:
                return {}
            raise ConfigurationError(
                f"Configuration file not found: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML",
                cause=e
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_READ_ERROR",
                cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_CONFIG_FORMAT"
            )
        return data

    def get_priority(self) -> int:
        return self.priority


class EnvironmentConfigurationSource(ConfigurationSource):
    """
    Environment variable configuration source.

    CONTENT_INTEL_PLUGIN_TIMEOUT=10 sets `plugin_timeout`; a double
    underscore descends into nested sections, so
    CONTENT_INTEL_LOGGING_CONFIG__LEVEL=DEBUG sets `logging_config.level`.
    """

    def __init__(self, prefix: str = "CONTENT_INTEL_", priority: int = 200,
                 environ: Optional[Dict[str, str]] = None):
        self.prefix = prefix.upper()
        self.priority = priority
        self.environ = environ

    def load(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}
        environ = self.environ if self.environ is not None else os.environ

        for key, value in environ.items():
            if key.startswith(self.prefix):
                config_key = key[len(self.prefix):].lower()
                self._set_nested_value(config, config_key, self._parse_value(value, config_key))

        return config

    def _set_nested_value(self, config: Dict[str, Any], key: str, value: Any) -> None:
        parts = key.split('__')
        current = config
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def _parse_value(self, value: str, key: str = "") -> Any:
        """Parse environment variable value to appropriate type."""
        if key in LIST_FIELDS:
            return [item.strip() for item in value.split(',') if item.strip()]

        if key in STRING_FIELDS:
            return value

        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        if value.lower() in ('null', 'none'):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if ',' in value:
            return [item.strip() for item in value.split(',')]

        return value

    def get_priority(self) -> int:
        return self.priority
