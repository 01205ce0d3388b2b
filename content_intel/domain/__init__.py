"""
Domain Layer - Core domain models and interfaces

Content entities, reports, the plugin capability interface and the
interfaces of the external collaborators.
"""

from .models import (
    EntityTypeDefinition, BundleInfo, FieldDefinition, FieldItemList, ContentEntity,
    EntitySummary, IntelEntry, IntelReport, Language, TranslationMetadata, StatisticsViewResult
)
from .interfaces import (
    ContentIntelPlugin, EntityStore, SchemaIntrospection, ConfigStore,
    StatisticsStorage, TranslationManager, LanguageManager, Clock, SystemClock
)

__all__ = [
    "EntityTypeDefinition",
    "BundleInfo",
    "FieldDefinition",
    "FieldItemList",
    "ContentEntity",
    "EntitySummary",
    "IntelEntry",
    "IntelReport",
    "Language",
    "TranslationMetadata",
    "StatisticsViewResult",
    "ContentIntelPlugin",
    "EntityStore",
    "SchemaIntrospection",
    "ConfigStore",
    "StatisticsStorage",
    "TranslationManager",
    "LanguageManager",
    "Clock",
    "SystemClock",
]
