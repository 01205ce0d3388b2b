"""
Infrastructure Layer - Core technical services

Dependency injection, exceptions, structured logging, date formatting and
the bundled storage implementations.
"""

from .di import DIContainer, Injectable
from .exceptions import (
    ContentIntelException, ConfigurationError, PluginError, UnknownPluginError,
    PluginRegistrationError, PluginCollectionError, PluginTimeoutError,
    EntityNotFoundError, DataStoreError
)
from .date_formatter import DateFormatter
from .content_repository import InMemoryContentRepository
from .statistics_storage import InMemoryStatisticsStorage, SQLiteStatisticsStorage
from .observability import (
    ContentIntelLogger, LogLevel, LogFormatter, LogHandler, get_logger, configure_default_logging
)

__all__ = [
    "DIContainer",
    "Injectable",
    "ContentIntelException",
    "ConfigurationError",
    "PluginError",
    "UnknownPluginError",
    "PluginRegistrationError",
    "PluginCollectionError",
    "PluginTimeoutError",
    "EntityNotFoundError",
    "DataStoreError",
    "DateFormatter",
    "InMemoryContentRepository",
    "InMemoryStatisticsStorage",
    "SQLiteStatisticsStorage",
    "ContentIntelLogger",
    "LogLevel",
    "LogFormatter",
    "LogHandler",
    "get_logger",
    "configure_default_logging",
]
