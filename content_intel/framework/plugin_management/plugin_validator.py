"""
Plugin Validator Module

Validation of plugin descriptors, plugin factories and plugin manifests.
"""

import inspect
import logging
import re
from typing import Any, Callable, Dict, List

from .plugin_descriptor import PluginDescriptor
from ...domain.interfaces import ContentIntelPlugin

logger = logging.getLogger(__name__)

PLUGIN_ID_PATTERN = re.compile(r'^[a-z][a-z0-9_]*$')

REQUIRED_CAPABILITIES = ['label', 'description', 'get_weight', 'is_available', 'applies', 'collect']


class PluginValidator:
    """Validates plugin metadata and implementations before registration."""

    @staticmethod
    def validate_descriptor(descriptor: PluginDescriptor) -> List[str]:
        """Validate descriptor fields, returning a list of problems."""
        errors = []

        if not isinstance(descriptor.id, str) or not PLUGIN_ID_PATTERN.match(descriptor.id):
            errors.append(
                f"Invalid plugin id {descriptor.id!r}: use lowercase letters, digits and underscores"
            )

        if not isinstance(descriptor.label, str) or not descriptor.label.strip():
            errors.append("Plugin label must be a non-empty string")

        if descriptor.description is not None and not isinstance(descriptor.description, str):
            errors.append("Plugin description must be a string or None")

        if isinstance(descriptor.weight, bool) or not isinstance(descriptor.weight, int):
            errors.append(f"Plugin weight must be an integer, got {type(descriptor.weight).__name__}")

        for entity_type in descriptor.entity_types:
            if not isinstance(entity_type, str) or not entity_type:
                errors.append(f"Invalid entity type {entity_type!r}")

        return errors

    @staticmethod
    def validate_plugin_factory(factory: Callable[..., Any]) -> List[str]:
        """Validate a plugin class; plain factory callables are only checked for callability."""
        errors = []

        if not callable(factory):
            errors.append(f"Plugin factory must be callable, got {type(factory).__name__}")
            return errors

        if not inspect.isclass(factory):
            return errors

        if not issubclass(factory, ContentIntelPlugin):
            errors.append(f"Class {factory.__name__} must implement ContentIntelPlugin")
            return errors

        for method_name in REQUIRED_CAPABILITIES:
            method = getattr(factory, method_name, None)
            if method is None or not callable(method):
                errors.append(f"Missing required method: {method_name}")
                continue
            if getattr(method, '__isabstractmethod__', False):
                errors.append(f"Method {method_name} is not implemented (still abstract)")

        collect = getattr(factory, 'collect', None)
        if collect is not None and not getattr(collect, '__isabstractmethod__', False):
            if not inspect.iscoroutinefunction(collect):
                errors.append(f"Method collect of {factory.__name__} must be a coroutine function")

        return errors

    @staticmethod
    def validate_plugin_metadata(metadata: Dict[str, Any]) -> List[str]:
        """Validate a plugin manifest loaded from YAML."""
        errors = []

        for required_field in ('id', 'label', 'class'):
            if not metadata.get(required_field):
                errors.append(f"Missing required field: {required_field}")

        plugin_class = metadata.get('class')
        if plugin_class and (not isinstance(plugin_class, str) or ':' not in plugin_class):
            errors.append(f"Invalid class reference {plugin_class!r}: expected 'module.path:ClassName'")

        entity_types = metadata.get('entity_types', [])
        if entity_types is not None and not isinstance(entity_types, list):
            errors.append("entity_types must be a list")

        weight = metadata.get('weight', 0)
        if isinstance(weight, bool) or not isinstance(weight, int):
            errors.append("weight must be an integer")

        return errors
