"""
Structured Exception Hierarchy

Provides the exception hierarchy used across Content Intel with contextual
information for error reporting and diagnostics.
"""

from typing import Dict, List, Any, Optional
import uuid
from datetime import datetime, timezone


class ContentIntelException(Exception):
    """
    Base exception class for all Content Intel exceptions.

    Provides structured error information including error codes,
    context data, and correlation IDs for tracing.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(ContentIntelException):
    """Raised when configuration-related errors occur."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        validation_errors: Optional[List[Any]] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if config_path:
            context['config_path'] = config_path
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "CONFIG_ERROR"),
            context=context,
            **kwargs
        )


class PluginError(ContentIntelException):
    """Raised when plugin-related errors occur."""

    def __init__(
        self,
        message: str,
        plugin_id: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if plugin_id:
            context['plugin_id'] = plugin_id

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "PLUGIN_ERROR"),
            context=context,
            **kwargs
        )
        self.plugin_id = plugin_id


class UnknownPluginError(PluginError):
    """Raised when a plugin id is not present in the registry."""

    def __init__(self, plugin_id: str, **kwargs):
        super().__init__(
            message=f"The \"{plugin_id}\" plugin does not exist.",
            plugin_id=plugin_id,
            error_code="UNKNOWN_PLUGIN",
            **kwargs
        )


class PluginRegistrationError(PluginError):
    """Raised when a plugin cannot be added to the registration table."""

    def __init__(self, message: str, plugin_id: Optional[str] = None, errors: Optional[List[str]] = None, **kwargs):
        context = kwargs.pop('context', {})
        if errors:
            context['validation_errors'] = errors
        super().__init__(
            message=message,
            plugin_id=plugin_id,
            error_code="PLUGIN_REGISTRATION_ERROR",
            context=context,
            **kwargs
        )
        self.errors = errors or []


class PluginCollectionError(PluginError):
    """Raised by a plugin when it cannot collect data for an entity."""

    def __init__(self, message: str, plugin_id: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            plugin_id=plugin_id,
            error_code=kwargs.pop('error_code', "PLUGIN_COLLECTION_ERROR"),
            **kwargs
        )


class PluginTimeoutError(PluginCollectionError):
    """Raised when a plugin exceeds its collection time budget."""

    def __init__(self, plugin_id: str, timeout: float, **kwargs):
        context = kwargs.pop('context', {})
        context['timeout'] = timeout
        super().__init__(
            message=f"Plugin {plugin_id} timed out after {timeout}s",
            plugin_id=plugin_id,
            error_code="PLUGIN_TIMEOUT",
            context=context,
            **kwargs
        )
        self.timeout = timeout


class EntityNotFoundError(ContentIntelException):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: Any, **kwargs):
        super().__init__(
            message=f"Entity {entity_type}/{entity_id} not found.",
            error_code="ENTITY_NOT_FOUND",
            context={"entity_type": entity_type, "entity_id": str(entity_id)},
            **kwargs
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class DataStoreError(ContentIntelException):
    """Raised when data storage errors occur."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        entity_type: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if operation:
            context['operation'] = operation
        if entity_type:
            context['entity_type'] = entity_type

        super().__init__(
            message=message,
            error_code="DATA_STORE_ERROR",
            context=context,
            **kwargs
        )
