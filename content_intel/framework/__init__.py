"""
Framework Layer - Core Content Intel services

Plugin management, configuration, the aggregation engine and the factory
assembling them.
"""

from .collector import ContentIntelCollector
from .configuration import ContentIntelConfiguration, ConfigurationBuilder
from .content_intel_framework import ContentIntelFramework, create_content_intel_framework
from .field_extraction import FieldValueExtractor
from .plugin_management import ContentIntelPluginRegistry, ContentIntelPluginBase, content_intel_plugin
from .search_queries import SearchQueryCollector

__all__ = [
    "ContentIntelCollector",
    "ContentIntelConfiguration",
    "ConfigurationBuilder",
    "ContentIntelFramework",
    "create_content_intel_framework",
    "FieldValueExtractor",
    "ContentIntelPluginRegistry",
    "ContentIntelPluginBase",
    "content_intel_plugin",
    "SearchQueryCollector",
]
