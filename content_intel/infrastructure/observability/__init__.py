"""
Observability - structured logging with correlation and entity context.
"""

from .logging import (
    ContentIntelLogger, LogLevel, LogFormatter, LogHandler,
    JSONLogFormatter, HumanReadableFormatter,
    ConsoleLogHandler, FileLogHandler, MemoryLogHandler,
    get_logger, configure_default_logging, get_correlation_id
)

__all__ = [
    "ContentIntelLogger",
    "LogLevel",
    "LogFormatter",
    "LogHandler",
    "JSONLogFormatter",
    "HumanReadableFormatter",
    "ConsoleLogHandler",
    "FileLogHandler",
    "MemoryLogHandler",
    "get_logger",
    "configure_default_logging",
    "get_correlation_id",
]
