"""
Plugin Management System for Content Intel

Registration, discovery, validation and lifecycle of intel plugins.
"""

from .plugin_descriptor import PluginDescriptor
from .plugin_base import ContentIntelPluginBase
from .plugin_validator import PluginValidator
from .plugin_discovery import (
    PluginDiscovery,
    PluginRegistrationTable,
    content_intel_plugin,
    default_table,
    register,
)
from .plugin_registry import ContentIntelPluginRegistry, DescriptorAlterHook

__all__ = [
    'PluginDescriptor',
    'ContentIntelPluginBase',
    'PluginValidator',
    'PluginDiscovery',
    'PluginRegistrationTable',
    'content_intel_plugin',
    'default_table',
    'register',
    'ContentIntelPluginRegistry',
    'DescriptorAlterHook',
]
