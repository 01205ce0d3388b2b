"""
Plugin Registry Module

Catalogue of intel plugins: cached, alterable descriptor definitions and
on-demand plugin instances filtered by availability and applicability and
ordered by weight.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .plugin_descriptor import PluginDescriptor
from .plugin_discovery import PluginDiscovery, PluginRegistrationTable, default_table
from ...domain.interfaces import ContentIntelPlugin
from ...domain.models import ContentEntity
from ...infrastructure.di import DIContainer, Injectable
from ...infrastructure.exceptions import PluginError, UnknownPluginError

logger = logging.getLogger(__name__)

DescriptorAlterHook = Callable[[Dict[str, PluginDescriptor]], Optional[Dict[str, PluginDescriptor]]]
PluginList = List[Tuple[str, ContentIntelPlugin]]


class ContentIntelPluginRegistry(Injectable):
    """
    Registry producing ordered, filtered plugin instances on demand.

    Definitions are built from the registration table, passed through the
    descriptor alteration hooks in order, then cached until the table
    changes, a hook is added, or `clear_cached_definitions` is called.
    Instances are created once per definitions snapshot through the DI
    container so plugins receive their dependencies by constructor.
    """

    def __init__(
        self,
        table: Optional[PluginRegistrationTable] = None,
        container: Optional[DIContainer] = None,
    ):
        self.table = table if table is not None else default_table
        self.container = container or DIContainer()
        self._discovery = PluginDiscovery(self.table)
        self._alter_hooks: List[DescriptorAlterHook] = []
        self._definitions: Optional[Dict[str, PluginDescriptor]] = None
        self._definitions_version = -1
        self._instances: Dict[str, ContentIntelPlugin] = {}
        self._registry_lock = threading.RLock()

        logger.info("ContentIntelPluginRegistry initialized")

    def initialize(
        self,
        plugin_modules: Iterable[str] = (),
        search_paths: Iterable[Union[str, Path]] = (),
        use_entry_points: bool = False,
    ) -> None:
        """Run discovery: import plugin modules, entry points and YAML manifests."""
        self._discovery.discover_modules(plugin_modules)
        if use_entry_points:
            self._discovery.discover_entry_points()
        self._discovery.discover_manifests(search_paths)
        self.clear_cached_definitions()

        logger.info(
            "Plugin registry initialized",
            extra={"registered_plugins": len(self.table)}
        )

    def add_alter_hook(self, hook: DescriptorAlterHook) -> None:
        """Append a descriptor alteration hook; hooks run in the order added."""
        with self._registry_lock:
            self._alter_hooks.append(hook)
            self.clear_cached_definitions()

    def clear_cached_definitions(self) -> None:
        with self._registry_lock:
            self._definitions = None
            self._instances.clear()

    def get_definitions(self) -> Dict[str, PluginDescriptor]:
        """All plugin descriptors, available or not, in discovery order."""
        with self._registry_lock:
            if self._definitions is None or self._definitions_version != self.table.version:
                self._instances.clear()
                self._definitions_version = self.table.version
                self._definitions = self._build_definitions()
            return dict(self._definitions)

    def _build_definitions(self) -> Dict[str, PluginDescriptor]:
        definitions = {descriptor.id: descriptor for descriptor in self.table.descriptors()}

        for hook in self._alter_hooks:
            altered = hook(dict(definitions))
            if altered is not None:
                definitions = altered

        for plugin_id, descriptor in list(definitions.items()):
            if not isinstance(descriptor, PluginDescriptor) or descriptor.id != plugin_id:
                logger.warning(f"Dropping malformed plugin definition: {plugin_id}")
                del definitions[plugin_id]

        logger.debug(f"Built {len(definitions)} plugin definitions")
        return definitions

    def has_definition(self, plugin_id: str) -> bool:
        return plugin_id in self.get_definitions()

    def get_definition(self, plugin_id: str) -> PluginDescriptor:
        definitions = self.get_definitions()
        if plugin_id not in definitions:
            raise UnknownPluginError(plugin_id)
        return definitions[plugin_id]

    def create_instance(self, plugin_id: str) -> ContentIntelPlugin:
        """Return the plugin instance for an id, constructing it on first use."""
        with self._registry_lock:
            descriptor = self.get_definition(plugin_id)

            if plugin_id in self._instances:
                return self._instances[plugin_id]

            if descriptor.factory is None:
                raise PluginError(f"Plugin {plugin_id} has no factory", plugin_id=plugin_id)

            try:
                instance = self.container.create_instance(descriptor.factory, descriptor=descriptor)
            except Exception as e:
                logger.error(f"Failed to instantiate plugin {plugin_id}: {e}")
                raise PluginError(
                    message=f"Failed to instantiate plugin: {plugin_id}",
                    plugin_id=plugin_id,
                    cause=e
                ) from e

            self._instances[plugin_id] = instance
            return instance

    def get_available_plugins(self) -> PluginList:
        """Instances whose dependencies are met, stable-sorted by ascending weight."""
        plugins = []
        for plugin_id in self.get_definitions():
            try:
                plugin = self.create_instance(plugin_id)
            except PluginError as e:
                logger.warning(f"Skipping plugin {plugin_id}: {e}")
                continue
            if self._is_available(plugin_id, plugin):
                plugins.append((plugin_id, plugin))

        # sorted() is stable: equal weights keep discovery order.
        return sorted(plugins, key=lambda item: item[1].get_weight())

    def get_applicable_plugins(self, entity: ContentEntity) -> PluginList:
        """Available plugins that apply to the entity, in weight order."""
        applicable = []
        for plugin_id, plugin in self.get_available_plugins():
            try:
                if plugin.applies(entity):
                    applicable.append((plugin_id, plugin))
            except Exception as e:
                logger.warning(f"Plugin {plugin_id} applicability check failed: {e}")
        return applicable

    def is_plugin_available(self, plugin_id: str) -> bool:
        return self._is_available(plugin_id, self.create_instance(plugin_id))

    @staticmethod
    def _is_available(plugin_id: str, plugin: ContentIntelPlugin) -> bool:
        try:
            return bool(plugin.is_available())
        except Exception as e:
            logger.warning(f"Plugin {plugin_id} availability check failed: {e}")
            return False
