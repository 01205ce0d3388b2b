"""
Configuration Management System

Type-safe configuration management with hierarchical configuration support,
YAML and environment variable sources, and validation.
"""

from .models import (
    LoggingConfiguration,
    ContentIntelSettings
)

from .sources import (
    ConfigurationSource,
    DictConfigurationSource,
    YAMLConfigurationSource,
    EnvironmentConfigurationSource
)

from .validation import (
    ConfigurationValidator,
    ConfigurationValidationError
)

from .core import ContentIntelConfiguration

from .builder import ConfigurationBuilder

from .utils import (
    load_configuration_from_file,
    load_default_configuration
)

__all__ = [
    # Models
    'LoggingConfiguration',
    'ContentIntelSettings',

    # Sources
    'ConfigurationSource',
    'DictConfigurationSource',
    'YAMLConfigurationSource',
    'EnvironmentConfigurationSource',

    # Validation
    'ConfigurationValidator',
    'ConfigurationValidationError',

    # Core
    'ContentIntelConfiguration',

    # Builder
    'ConfigurationBuilder',

    # Utilities
    'load_configuration_from_file',
    'load_default_configuration'
]
