"""
Configuration builder for creating ContentIntelConfiguration instances.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .core import ContentIntelConfiguration
from .sources import (
    ConfigurationSource, DictConfigurationSource,
    EnvironmentConfigurationSource, YAMLConfigurationSource
)


class ConfigurationBuilder:
    """
    Builder for creating ContentIntelConfiguration instances with multiple sources.

    Supports in-memory defaults, YAML files, environment variables and custom sources.
    """

    def __init__(self):
        self._sources: List[ConfigurationSource] = []

    def add_dict_source(self, data: Dict[str, Any], priority: int = 50) -> 'ConfigurationBuilder':
        """Add an in-memory configuration source."""
        self._sources.append(DictConfigurationSource(data, priority))
        return self

    def add_yaml_source(self, path: Union[str, Path], priority: int = 100,
                        required: bool = True) -> 'ConfigurationBuilder':
        """
        Add a YAML configuration source.

        Args:
            path: Path to the YAML configuration file
            priority: Priority of this source (higher = more important)
            required: Whether a missing file is an error
        """
        self._sources.append(YAMLConfigurationSource(path, priority, required))
        return self

    def add_environment_source(self, prefix: str = "CONTENT_INTEL_", priority: int = 200,
                               environ: Optional[Dict[str, str]] = None) -> 'ConfigurationBuilder':
        """
        Add environment variable configuration source.

        Args:
            prefix: Environment variable prefix (default: CONTENT_INTEL_)
            priority: Priority of this source (higher = more important)
            environ: Mapping to read instead of os.environ
        """
        self._sources.append(EnvironmentConfigurationSource(prefix, priority, environ))
        return self

    def add_source(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """Add a custom configuration source."""
        self._sources.append(source)
        return self

    def add_defaults(self) -> 'ConfigurationBuilder':
        """Add default configuration sources (environment variables with CONTENT_INTEL_ prefix)."""
        return self.add_environment_source("CONTENT_INTEL_", 200)

    def build(self) -> ContentIntelConfiguration:
        """
        Build the configuration instance with all added sources.

        Returns:
            ContentIntelConfiguration instance with all sources loaded and merged
        """
        if not self._sources:
            # Add default environment source if no sources specified
            self.add_defaults()

        return ContentIntelConfiguration(self._sources.copy())
