"""
Plugin Discovery Module

Plugins become known through an explicit registration table. Plugin modules
register themselves when imported (via `register` or the
`content_intel_plugin` decorator); discovery is therefore a matter of
importing the configured modules, the modules advertised through package
entry points, and the classes referenced by YAML plugin manifests.
"""

import importlib
import logging
import threading
from dataclasses import replace
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import yaml

from .plugin_descriptor import PluginDescriptor
from .plugin_validator import PluginValidator
from ...infrastructure.exceptions import PluginRegistrationError

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "content_intel.plugins"
MANIFEST_NAMES = ('plugin.yaml', 'plugin.yml')
MANIFEST_SUFFIXES = ('.plugin.yaml', '.plugin.yml')


class PluginRegistrationTable:
    """
    Ordered catalogue of registered plugin descriptors.

    Registration order is the discovery order used to break weight ties.
    `version` increases on every change so caches built from the table can
    tell when they are stale.
    """

    def __init__(self):
        self._descriptors: Dict[str, PluginDescriptor] = {}
        self._lock = threading.RLock()
        self.version = 0

    def register(self, descriptor: PluginDescriptor, factory: Optional[Callable[..., Any]] = None,
                 replace_existing: bool = False) -> PluginDescriptor:
        """Add a plugin; the factory defaults to the one carried by the descriptor."""
        factory = factory or descriptor.factory
        if factory is None:
            raise PluginRegistrationError(
                f"Plugin {descriptor.id} has no factory", plugin_id=descriptor.id
            )

        errors = PluginValidator.validate_descriptor(descriptor)
        errors.extend(PluginValidator.validate_plugin_factory(factory))
        if errors:
            raise PluginRegistrationError(
                f"Invalid plugin {descriptor.id}", plugin_id=descriptor.id, errors=errors
            )

        with self._lock:
            if descriptor.id in self._descriptors and not replace_existing:
                raise PluginRegistrationError(
                    f"Plugin id {descriptor.id} is already registered", plugin_id=descriptor.id
                )
            registered = replace(descriptor, factory=factory)
            self._descriptors[descriptor.id] = registered
            self.version += 1

        logger.debug(f"Registered plugin: {descriptor.id}", extra={"provider": descriptor.provider})
        return registered

    def unregister(self, plugin_id: str) -> bool:
        with self._lock:
            if plugin_id not in self._descriptors:
                return False
            del self._descriptors[plugin_id]
            self.version += 1
            return True

    def descriptors(self) -> List[PluginDescriptor]:
        with self._lock:
            return list(self._descriptors.values())

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()
            self.version += 1


# Table used by plugin modules that register at import time.
default_table = PluginRegistrationTable()


def register(descriptor: PluginDescriptor, factory: Callable[..., Any],
             table: Optional[PluginRegistrationTable] = None) -> PluginDescriptor:
    """Register a plugin factory under a descriptor."""
    return (table if table is not None else default_table).register(descriptor, factory)


def content_intel_plugin(
    id: str,
    label: str,
    description: Optional[str] = None,
    entity_types: Iterable[str] = (),
    weight: int = 0,
    provider: Optional[str] = None,
    table: Optional[PluginRegistrationTable] = None,
):
    """
    Class decorator registering an intel plugin.

    The provider defaults to the top-level package of the decorated class.
    """
    def decorator(cls):
        descriptor = PluginDescriptor(
            id=id,
            label=label,
            description=description,
            entity_types=frozenset(entity_types),
            weight=weight,
            provider=provider or cls.__module__.split('.')[0],
        )
        register(descriptor, cls, table)
        return cls

    return decorator


def _import_reference(reference: str) -> Any:
    """Resolve 'package.module:Attribute'."""
    module_name, _, attribute = reference.partition(':')
    module = importlib.import_module(module_name)
    target = module
    for part in attribute.split('.'):
        target = getattr(target, part)
    return target


class PluginDiscovery:
    """Runs the discovery sources that fill a registration table."""

    def __init__(self, table: Optional[PluginRegistrationTable] = None):
        self.table = table if table is not None else default_table
        self._validator = PluginValidator()

    def discover_modules(self, module_names: Iterable[str]) -> List[str]:
        """Import plugin modules; importing them registers their plugins."""
        imported = []
        for module_name in module_names:
            try:
                importlib.import_module(module_name)
                imported.append(module_name)
            except PluginRegistrationError as e:
                logger.error(f"Plugin module {module_name} failed to register: {e}",
                             extra={"errors": e.errors})
            except ImportError as e:
                logger.error(f"Cannot import plugin module {module_name}: {e}")
        logger.info(f"Imported {len(imported)} plugin modules")
        return imported

    def discover_entry_points(self, group: str = ENTRY_POINT_GROUP) -> List[str]:
        """Load the modules advertised by installed distributions."""
        loaded = []
        for entry_point in entry_points(group=group):
            try:
                entry_point.load()
                loaded.append(entry_point.name)
            except Exception as e:
                logger.error(f"Failed to load plugin entry point {entry_point.name}: {e}")
        return loaded

    def discover_manifests(self, search_paths: Iterable[Union[str, Path]]) -> List[PluginDescriptor]:
        """Register the plugins declared by YAML manifests found in the search paths."""
        discovered = []

        for search_path in (Path(p) for p in search_paths):
            if not search_path.exists():
                logger.warning(f"Plugin search path does not exist: {search_path}")
                continue

            logger.info(f"Discovering plugin manifests in: {search_path}")
            for manifest in self._find_manifests(search_path):
                descriptor = self._register_manifest(manifest)
                if descriptor:
                    discovered.append(descriptor)

        logger.info(f"Discovered {len(discovered)} plugins from manifests")
        return discovered

    def _find_manifests(self, search_path: Path) -> List[Path]:
        if search_path.is_file():
            return [search_path]
        manifests = []
        for item in sorted(search_path.iterdir()):
            if item.is_dir():
                manifests.extend(item / name for name in MANIFEST_NAMES if (item / name).exists())
            elif item.name in MANIFEST_NAMES or item.name.endswith(MANIFEST_SUFFIXES):
                manifests.append(item)
        return manifests

    def _register_manifest(self, manifest: Path) -> Optional[PluginDescriptor]:
        try:
            with open(manifest, 'r', encoding='utf-8') as f:
                metadata = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Cannot read plugin manifest {manifest}: {e}")
            return None

        if not isinstance(metadata, dict):
            logger.warning(f"Invalid manifest format in {manifest}")
            return None

        errors = self._validator.validate_plugin_metadata(metadata)
        if errors:
            logger.warning(f"Invalid plugin manifest {manifest}", extra={"validation_errors": errors})
            return None

        try:
            factory = _import_reference(metadata['class'])
            descriptor = PluginDescriptor.from_dict({
                'provider': metadata.get('provider', manifest.parent.name),
                **metadata,
            })
            return self.table.register(descriptor, factory)
        except PluginRegistrationError as e:
            logger.error(f"Plugin manifest {manifest} rejected: {e}", extra={"errors": e.errors})
        except (ImportError, AttributeError) as e:
            logger.error(f"Cannot load plugin class {metadata['class']} from {manifest}: {e}")
        return None
