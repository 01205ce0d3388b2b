"""
Configuration validation utilities.
"""

import os
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ...infrastructure.exceptions import ConfigurationError
from .models import ContentIntelSettings, LoggingConfiguration


class ConfigurationValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, validation_errors: List[Dict[str, Any]]):
        super().__init__(
            message,
            validation_errors=validation_errors,
            error_code="CONFIGURATION_VALIDATION_ERROR"
        )
        self.validation_errors = validation_errors

    def get_detailed_message(self) -> str:
        """Get a detailed error message with all validation errors."""
        lines = [self.message]
        lines.append("Validation errors:")

        for error in self.validation_errors:
            location = " -> ".join(str(loc) for loc in error.get('loc', []))
            msg = error.get('msg', 'Unknown error')
            lines.append(f"- {location}: {msg}")

        return "\n".join(lines)


class ConfigurationValidator:
    """Validates configuration data and provides detailed error messages."""

    @staticmethod
    def validate_configuration(config_data: Dict[str, Any]) -> List[str]:
        """
        Validate configuration data and return list of warnings.

        Args:
            config_data: Raw configuration data to validate

        Returns:
            List of warning messages for unknown keys

        Raises:
            ConfigurationValidationError: If validation fails with errors
        """
        errors = []
        warnings = []

        try:
            ContentIntelSettings(**config_data)
        except ValidationError as e:
            for error in e.errors():
                errors.append({
                    'loc': list(error['loc']),
                    'msg': error['msg'],
                    'type': error['type']
                })
        except TypeError as e:
            errors.append({
                'loc': ['root'],
                'msg': f"Unexpected validation error: {e}",
                'type': 'value_error'
            })

        known_keys = set(ContentIntelSettings.model_fields)
        for key in config_data:
            if key not in known_keys:
                warnings.append(f"Unknown configuration key: {key}")

        if errors:
            raise ConfigurationValidationError(
                "Configuration validation failed",
                errors
            )

        return warnings

    @staticmethod
    def validate_environment_variables(prefix: str = "CONTENT_INTEL_",
                                       environ: Optional[Dict[str, str]] = None) -> List[str]:
        """
        Validate environment variables and return warnings for unknown variables.

        Args:
            prefix: Environment variable prefix to check
            environ: Mapping to inspect instead of os.environ

        Returns:
            List of warning messages for unknown environment variables
        """
        warnings = []
        valid_paths = set(ContentIntelSettings.model_fields) - {'logging_config'}
        valid_paths.update(f"logging_config__{name}" for name in LoggingConfiguration.model_fields)

        prefix_upper = prefix.upper()
        for key in (environ if environ is not None else os.environ):
            if key.startswith(prefix_upper):
                config_key = key[len(prefix_upper):].lower()
                if config_key not in valid_paths:
                    warnings.append(f"Unknown environment variable: {key}")

        return warnings
