"""
Content Intel Collector

The aggregation engine: builds one intel report per entity from the entity
summary, a field snapshot and the data contributed by every applicable,
enabled plugin, isolating plugin failures as error entries.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .field_extraction import FieldValueExtractor
from .plugin_management import ContentIntelPluginRegistry
from ..domain.interfaces import (
    CollectAlterHook, ConfigStore, ContentIntelPlugin, EntityStore, SchemaIntrospection
)
from ..domain.models import (
    BundleInfo, ContentEntity, EntityId, EntitySummary, EntityTypeDefinition,
    FieldDefinition, IntelEntry, IntelReport
)
from ..infrastructure.di import Injectable
from ..infrastructure.exceptions import EntityNotFoundError, PluginError, PluginTimeoutError
from ..infrastructure.observability import get_logger

DEFAULT_PLUGIN_TIMEOUT = 30.0
DEFAULT_MAX_CONCURRENT_COLLECTIONS = 4


def _error_message(error: Exception) -> str:
    return str(error) or type(error).__name__


class ContentIntelCollector(Injectable):
    """
    Collects content intelligence for entities.

    Plugins for one entity run sequentially in weight order, each bounded by
    the `plugin_timeout` configuration value (seconds; None or 0 disables
    the bound). The persisted `enabled_plugins` allow-list is read on every
    call so configuration changes apply to the next collection.
    """

    def __init__(
        self,
        registry: ContentIntelPluginRegistry,
        entity_store: EntityStore,
        schema: SchemaIntrospection,
        config: ConfigStore,
        field_extractor: Optional[FieldValueExtractor] = None,
    ):
        self.registry = registry
        self.entity_store = entity_store
        self.schema = schema
        self.config = config
        self.field_extractor = field_extractor or FieldValueExtractor(
            entity_store, config.get('file_base_url', '') or ''
        )
        self._collect_alter_hooks: List[CollectAlterHook] = []
        self.logger = get_logger("content_intel.collector")

    def add_collect_alter_hook(self, hook: CollectAlterHook) -> None:
        """Append a post-collection hook; hooks run in the order added."""
        self._collect_alter_hooks.append(hook)

    # Schema passthroughs

    def get_entity_types(self) -> List[EntityTypeDefinition]:
        return sorted(self.schema.get_entity_types(), key=lambda t: t.id)

    def get_bundles(self, entity_type: str) -> List[BundleInfo]:
        return sorted(self.schema.get_bundles(entity_type), key=lambda b: b.id)

    def get_fields(self, entity_type: str, bundle: Optional[str] = None) -> List[FieldDefinition]:
        return sorted(self.schema.get_field_definitions(entity_type, bundle), key=lambda f: f.name)

    def get_plugins(self) -> List[Dict[str, Any]]:
        """Full plugin catalogue, including unavailable and disabled plugins."""
        plugins = []
        for plugin_id, descriptor in self.registry.get_definitions().items():
            try:
                plugin = self.registry.create_instance(plugin_id)
            except PluginError as e:
                self.logger.warning(f"Cannot instantiate plugin {plugin_id}", extra={"error": str(e)})
                plugins.append({**descriptor.to_dict(), "available": False})
                continue

            plugins.append({
                "id": plugin_id,
                "label": plugin.label(),
                "description": plugin.description(),
                "provider": descriptor.provider,
                "available": self.registry.is_plugin_available(plugin_id),
                "entity_types": sorted(descriptor.entity_types),
                "weight": plugin.get_weight(),
            })
        return plugins

    # Entity access

    def load_entity(self, entity_type: str, entity_id: EntityId) -> Optional[ContentEntity]:
        return self.entity_store.load(entity_type, entity_id)

    def load_entities(self, entity_type: str, entity_ids: Sequence[EntityId]) -> List[ContentEntity]:
        return self.entity_store.load_many(entity_type, entity_ids)

    def require_entity(self, entity_type: str, entity_id: EntityId) -> ContentEntity:
        entity = self.load_entity(entity_type, entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_type, entity_id)
        return entity

    def list_entities(
        self,
        entity_type: str,
        bundle: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        conditions: Optional[Dict[str, Any]] = None,
    ) -> List[EntitySummary]:
        """Entity summaries, newest (highest id) first."""
        ids = self.entity_store.query(
            entity_type,
            bundle=bundle,
            conditions=conditions or {},
            limit=limit,
            offset=offset,
            sort_desc=True,
        )
        entities = self.entity_store.load_many(entity_type, ids)
        return [self.get_entity_summary(entity) for entity in entities]

    def get_entity_summary(self, entity: ContentEntity) -> EntitySummary:
        return EntitySummary(
            entity_type=entity.entity_type,
            id=entity.id,
            uuid=entity.uuid,
            label=entity.label,
            bundle=entity.bundle,
            langcode=entity.langcode,
        )

    # Collection

    def _plugin_timeout(self) -> Optional[float]:
        timeout = self.config.get('plugin_timeout', DEFAULT_PLUGIN_TIMEOUT)
        return float(timeout) if timeout else None

    @staticmethod
    def _is_enabled(plugin_id: str, requested: List[str], enabled: List[str]) -> bool:
        if requested:
            return plugin_id in requested
        if enabled:
            return plugin_id in enabled
        return True

    async def collect_intel(
        self,
        entity: ContentEntity,
        fields: Iterable[str] = (),
        plugins: Iterable[str] = (),
    ) -> IntelReport:
        """
        Build the intel report of one entity.

        An explicit `plugins` filter takes precedence over the configured
        allow-list. Unavailable plugins never run, even when named.
        """
        requested = list(plugins)
        enabled = list(self.config.get('enabled_plugins') or [])

        with self.logger.correlation_context(), self.logger.entity_context(entity.entity_type, entity.id):
            report = IntelReport(
                entity=self.get_entity_summary(entity),
                fields=self.field_extractor.extract(entity, fields),
            )

            timeout = self._plugin_timeout()
            for plugin_id, plugin in self.registry.get_applicable_plugins(entity):
                if not self._is_enabled(plugin_id, requested, enabled):
                    continue

                entry = await self._run_plugin(plugin_id, plugin, entity, timeout)
                if entry is not None:
                    report.intel[plugin_id] = entry

            for hook in self._collect_alter_hooks:
                altered = hook(report, entity)
                if altered is not None:
                    report = altered

            self.logger.info(
                "Intel collected",
                extra={"fields": len(report.fields), "plugins": sorted(report.intel)}
            )
            return report

    async def _run_plugin(
        self,
        plugin_id: str,
        plugin: ContentIntelPlugin,
        entity: ContentEntity,
        timeout: Optional[float],
    ) -> Optional[IntelEntry]:
        label = plugin_id
        if self.registry.has_definition(plugin_id):
            label = self.registry.get_definition(plugin_id).label
        try:
            label = plugin.label()
            task = asyncio.ensure_future(plugin.collect(entity))
            try:
                done, _ = await asyncio.wait({task}, timeout=timeout)
            except asyncio.CancelledError:
                task.cancel()
                raise
            if not done:
                task.cancel()
                error = PluginTimeoutError(plugin_id, timeout)
                self.logger.warning("Plugin timed out", extra={"plugin": plugin_id, "timeout": timeout})
                return IntelEntry(plugin_label=label, error=error.message)
            data = task.result()
        except Exception as e:
            self.logger.error("Plugin failed", extra={"plugin": plugin_id}, exc_info=e)
            return IntelEntry(plugin_label=label, error=_error_message(e))

        if not data:
            self.logger.debug("Plugin returned no data", extra={"plugin": plugin_id})
            return None

        self.logger.debug("Plugin collected", extra={"plugin": plugin_id, "keys": len(data)})
        return IntelEntry(plugin_label=label, data=dict(data))

    async def collect_intel_for(
        self,
        entity_type: str,
        entity_id: EntityId,
        fields: Iterable[str] = (),
        plugins: Iterable[str] = (),
    ) -> IntelReport:
        """Load an entity and collect its intel; a missing entity raises EntityNotFoundError."""
        entity = self.require_entity(entity_type, entity_id)
        return await self.collect_intel(entity, fields, plugins)

    async def collect_batch(
        self,
        entities: Sequence[ContentEntity],
        fields: Iterable[str] = (),
        plugins: Iterable[str] = (),
    ) -> List[IntelReport]:
        """Collect intel for many entities concurrently; results keep the input order."""
        fields = list(fields)
        plugins = list(plugins)
        max_concurrent = self.config.get('max_concurrent_collections', DEFAULT_MAX_CONCURRENT_COLLECTIONS)
        semaphore = asyncio.Semaphore(max(1, int(max_concurrent)))

        async def collect_one(entity: ContentEntity) -> IntelReport:
            async with semaphore:
                return await self.collect_intel(entity, fields, plugins)

        return list(await asyncio.gather(*(collect_one(entity) for entity in entities)))
