"""
Utility functions for common configuration patterns.
"""

from pathlib import Path
from typing import Union

from .builder import ConfigurationBuilder
from .core import ContentIntelConfiguration


def load_configuration_from_file(file_path: Union[str, Path], required: bool = True) -> ContentIntelConfiguration:
    """
    Load configuration from a single YAML file with environment variable overrides.

    Args:
        file_path: Path to the YAML configuration file
        required: Whether a missing file is an error

    Returns:
        ContentIntelConfiguration instance
    """
    return (ConfigurationBuilder()
            .add_yaml_source(file_path, 100, required)
            .add_environment_source("CONTENT_INTEL_", 200)
            .build())


def load_default_configuration() -> ContentIntelConfiguration:
    """
    Load default configuration with environment variable support.

    Returns:
        ContentIntelConfiguration instance with default settings
    """
    return (ConfigurationBuilder()
            .add_environment_source("CONTENT_INTEL_", 200)
            .build())
