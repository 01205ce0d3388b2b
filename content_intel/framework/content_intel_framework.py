"""
Content Intel Framework - assembly of the collector and its collaborators

Builds the DI container from configuration: content repository, optional
statistics storage and search log, plugin registry and collector.
"""

import importlib
import logging
from typing import Optional

from ..domain.interfaces import (
    Clock, ConfigStore, EntityStore, LanguageManager, SchemaIntrospection,
    StatisticsStorage, SystemClock, TranslationManager
)
from ..domain.models import StatisticsViewResult
from ..infrastructure.content_repository import InMemoryContentRepository
from ..infrastructure.date_formatter import DateFormatter
from ..infrastructure.di import DIContainer, Injectable
from ..infrastructure.observability import LogLevel, configure_default_logging
from ..infrastructure.statistics_storage import InMemoryStatisticsStorage, SQLiteStatisticsStorage
from .collector import ContentIntelCollector
from .configuration import ContentIntelConfiguration, LoggingConfiguration, load_default_configuration
from .field_extraction import FieldValueExtractor
from .plugin_management import ContentIntelPluginRegistry, PluginRegistrationTable, default_table
from .search_queries import SearchQueryCollector

BUNDLED_PLUGINS_MODULE = "content_intel.plugins"
BUNDLED_PROVIDER = "content_intel"


class ContentIntelFramework(Injectable):
    """Facade holding the assembled services."""

    def __init__(
        self,
        container: DIContainer,
        configuration: ContentIntelConfiguration,
        repository: InMemoryContentRepository,
        registry: ContentIntelPluginRegistry,
        collector: ContentIntelCollector,
        search: Optional[SearchQueryCollector] = None,
    ):
        self.container = container
        self.configuration = configuration
        self.repository = repository
        self.registry = registry
        self.collector = collector
        self.search = search
        self.logger = logging.getLogger(__name__)

    def close(self) -> None:
        """Release database connections."""
        if self.search is not None:
            self.search.close()
        if self.container.has(StatisticsStorage):
            storage = self.container.resolve(StatisticsStorage)
            if isinstance(storage, SQLiteStatisticsStorage):
                storage.close()
        self.logger.debug("Content Intel framework closed")


def configure_logging(logging_config: LoggingConfiguration) -> None:
    """Apply logging settings to the structured logger and the standard library loggers."""
    level = LogLevel[logging_config.level]
    configure_default_logging(
        level=level,
        use_json=logging_config.format == "json",
        log_file=logging_config.file_path if logging_config.output in ("file", "both") else None,
        console=logging_config.output in ("console", "both"),
    )
    logging.getLogger("content_intel").setLevel(getattr(logging, logging_config.level))


def _statistics_storage(configuration: ContentIntelConfiguration,
                        repository: InMemoryContentRepository) -> Optional[StatisticsStorage]:
    statistics_db = configuration.settings.statistics_db
    if statistics_db:
        return SQLiteStatisticsStorage(statistics_db)
    if repository.view_counters:
        return InMemoryStatisticsStorage({
            entity_id: StatisticsViewResult(
                total_count=int(counter.get('total_count', 0)),
                day_count=int(counter.get('day_count', 0)),
                timestamp=int(counter.get('timestamp', 0)),
            )
            for entity_id, counter in repository.view_counters.items()
        })
    return None


def _register_bundled_plugins(table: PluginRegistrationTable) -> None:
    """Import the bundled plugins and copy them into a table other than the default one."""
    importlib.import_module(BUNDLED_PLUGINS_MODULE)
    if table is default_table:
        return
    for descriptor in default_table.descriptors():
        if descriptor.provider == BUNDLED_PROVIDER and descriptor.id not in table:
            table.register(descriptor)


def create_content_intel_framework(
    configuration: Optional[ContentIntelConfiguration] = None,
    repository: Optional[InMemoryContentRepository] = None,
    table: Optional[PluginRegistrationTable] = None,
    clock: Optional[Clock] = None,
    load_bundled_plugins: bool = True,
) -> ContentIntelFramework:
    """
    Factory function to create a fully configured framework instance.

    Args:
        configuration: Loaded configuration; defaults to environment only
        repository: Content repository; defaults to the configured content dump
        table: Plugin registration table; defaults to the process-wide table
        clock: Request time source for the bundled plugins
        load_bundled_plugins: Whether to import the bundled plugins

    Returns:
        ContentIntelFramework: Configured framework instance
    """
    configuration = configuration or load_default_configuration()
    settings = configuration.settings

    container = DIContainer()
    container.register_singleton(ContentIntelConfiguration, configuration)
    container.register_singleton(ConfigStore, configuration)

    if repository is None:
        if settings.content_path:
            repository = InMemoryContentRepository.from_file(settings.content_path)
        else:
            repository = InMemoryContentRepository()

    container.register_singleton(InMemoryContentRepository, repository)
    container.register_singleton(EntityStore, repository)
    container.register_singleton(SchemaIntrospection, repository)
    container.register_singleton(TranslationManager, repository)
    container.register_singleton(LanguageManager, repository)

    clock = clock or SystemClock()
    date_formatter = DateFormatter()
    container.register_singleton(Clock, clock)
    container.register_singleton(DateFormatter, date_formatter)

    statistics_storage = _statistics_storage(configuration, repository)
    if statistics_storage is not None:
        container.register_singleton(StatisticsStorage, statistics_storage)

    table = table if table is not None else default_table
    if load_bundled_plugins:
        _register_bundled_plugins(table)

    registry = ContentIntelPluginRegistry(table, container)
    registry.initialize(
        plugin_modules=settings.plugin_modules,
        search_paths=settings.plugin_search_paths,
        use_entry_points=settings.use_entry_points,
    )
    container.register_singleton(ContentIntelPluginRegistry, registry)
    configuration.add_reload_callback(registry.clear_cached_definitions)

    collector = container.create_instance(
        ContentIntelCollector,
        field_extractor=FieldValueExtractor(repository, settings.file_base_url),
    )
    container.register_singleton(ContentIntelCollector, collector)

    search = None
    if settings.search_log_db:
        search = SearchQueryCollector(settings.search_log_db, date_formatter, clock)

    return ContentIntelFramework(
        container=container,
        configuration=configuration,
        repository=repository,
        registry=registry,
        collector=collector,
        search=search,
    )
