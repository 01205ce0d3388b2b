"""
Core configuration management class.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml

from ...domain.interfaces import ConfigStore
from ...infrastructure.di import Injectable
from ...infrastructure.exceptions import ConfigurationError
from .models import ContentIntelSettings
from .sources import ConfigurationSource
from .validation import ConfigurationValidator

logger = logging.getLogger(__name__)


class ContentIntelConfiguration(ConfigStore, Injectable):
    """
    Main configuration class with priority-based merging of sources.

    Values set at runtime through `set` live in an override layer above all
    sources; they are validated immediately and survive reloads until
    `save` persists them or `reset_overrides` drops them.
    """

    def __init__(self, sources: Optional[List[ConfigurationSource]] = None):
        self._sources = sources or []
        self._config_data: Dict[str, Any] = {}
        self._overrides: Dict[str, Any] = {}
        self._settings: ContentIntelSettings = ContentIntelSettings()
        self._reload_callbacks: List[Callable[[], None]] = []
        self._config_lock = threading.RLock()

        if self._sources:
            self._load_configuration()

    def add_source(self, source: ConfigurationSource) -> None:
        """Add a configuration source."""
        with self._config_lock:
            self._sources.append(source)
            self._sources.sort(key=lambda s: s.get_priority())

    def _load_configuration(self) -> None:
        """Load and merge configuration from all sources."""
        merged_config: Dict[str, Any] = {}

        # Load from sources in priority order (lowest to highest)
        for source in sorted(self._sources, key=lambda s: s.get_priority()):
            try:
                source_config = source.load()
                merged_config = self._deep_merge(merged_config, source_config)
            except Exception as e:
                logger.error(f"Failed to load configuration from source: {type(source).__name__}: {e}")
                raise

        with self._config_lock:
            settings = self._validate(self._deep_merge(merged_config, self._overrides))
            self._config_data = merged_config
            self._settings = settings

    def _validate(self, config_data: Dict[str, Any]) -> ContentIntelSettings:
        try:
            warnings = ConfigurationValidator.validate_configuration(config_data)
        except ConfigurationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

        for warning in warnings:
            logger.warning(warning)

        known = {key: value for key, value in config_data.items() if key in ContentIntelSettings.model_fields}
        return ContentIntelSettings(**known)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @property
    def settings(self) -> ContentIntelSettings:
        with self._config_lock:
            return self._settings

    def get(self, key: str, default: Any = None) -> Any:
        """Read a setting; dotted keys descend into nested sections."""
        with self._config_lock:
            data = self._settings.model_dump()
            extra = self._deep_merge(self._config_data, self._overrides)

        current: Any = data
        for part in key.split('.'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            elif current is data and part in extra:
                current = extra[part]
            else:
                return default
        return current

    def set(self, key: str, value: Any) -> None:
        """Set a runtime override; invalid values raise ConfigurationValidationError."""
        with self._config_lock:
            overrides = dict(self._overrides)
            target = overrides
            parts = key.split('.')
            for part in parts[:-1]:
                target[part] = dict(target.get(part) or {})
                target = target[part]
            target[parts[-1]] = value

            self._settings = self._validate(self._deep_merge(self._config_data, overrides))
            self._overrides = overrides

        logger.info(f"Configuration value updated: {key}")

    def reset_overrides(self) -> None:
        with self._config_lock:
            self._overrides = {}
            self._settings = self._validate(self._config_data)

    def save(self, file_path: Union[str, Path]) -> None:
        """Persist the effective configuration (sources plus overrides) as YAML."""
        path = Path(file_path)
        with self._config_lock:
            data = self._deep_merge(self._config_data, self._overrides)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)
        except OSError as e:
            raise ConfigurationError(
                f"Error writing configuration file: {path}",
                config_path=str(path),
                error_code="CONFIG_WRITE_ERROR",
                cause=e
            ) from e

        logger.info(f"Configuration saved to {path}")

    def reload_configuration(self) -> None:
        """Reload configuration from all sources."""
        try:
            self._load_configuration()
        except Exception as e:
            logger.error(f"Failed to reload configuration: {e}")
            raise

        # Notify callbacks
        for callback in self._reload_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in reload callback: {e}")

    def get_raw_config(self) -> Dict[str, Any]:
        """Get the raw configuration data."""
        with self._config_lock:
            return self._deep_merge(self._config_data, self._overrides)

    def add_reload_callback(self, callback: Callable[[], None]) -> None:
        """Add a callback to be called when configuration is reloaded."""
        self._reload_callbacks.append(callback)

    def remove_reload_callback(self, callback: Callable[[], None]) -> None:
        """Remove a reload callback."""
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)
