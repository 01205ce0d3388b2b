"""
Core Domain Interfaces

Defines the plugin capability interface and the narrow interfaces through
which Content Intel consumes the host platform: entity storage, schema
introspection, configuration, and the data sources of the bundled plugins.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import (
    BundleInfo, ContentEntity, EntityId, EntityTypeDefinition, FieldDefinition,
    IntelData, IntelReport, Language, StatisticsViewResult, TranslationMetadata
)


class ContentIntelPlugin(ABC):
    """
    Capability interface every intel plugin satisfies.

    Plugins are distinguished only by their descriptor and by what
    `collect` returns.
    """

    @abstractmethod
    def label(self) -> str:
        pass

    @abstractmethod
    def description(self) -> Optional[str]:
        pass

    @abstractmethod
    def get_weight(self) -> int:
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the plugin's dependencies are present."""
        pass

    @abstractmethod
    def applies(self, entity: ContentEntity) -> bool:
        """Whether the plugin should collect data for the entity."""
        pass

    @abstractmethod
    async def collect(self, entity: ContentEntity) -> IntelData:
        """
        Collect intelligence data for the entity.

        Returns a JSON-shaped mapping; an empty mapping means "no
        contribution". Must not mutate the entity.
        """
        pass


class EntityStore(ABC):
    """Entity storage of the host platform. Missing ids never raise."""

    @abstractmethod
    def load(self, entity_type: str, entity_id: EntityId) -> Optional[ContentEntity]:
        pass

    @abstractmethod
    def load_many(self, entity_type: str, entity_ids: Sequence[EntityId]) -> List[ContentEntity]:
        pass

    @abstractmethod
    def query(
        self,
        entity_type: str,
        bundle: Optional[str] = None,
        conditions: Optional[Dict[str, Any]] = None,
        limit: int = 50,
        offset: int = 0,
        sort_desc: bool = True,
    ) -> List[EntityId]:
        """Return entity ids matching the criteria, sorted by id."""
        pass


class SchemaIntrospection(ABC):
    """Entity type, bundle and field metadata of the host platform."""

    @abstractmethod
    def get_entity_types(self) -> List[EntityTypeDefinition]:
        pass

    @abstractmethod
    def get_bundles(self, entity_type: str) -> List[BundleInfo]:
        pass

    @abstractmethod
    def get_field_definitions(self, entity_type: str, bundle: Optional[str] = None) -> List[FieldDefinition]:
        """Bundle fields when a bundle is given, base fields otherwise."""
        pass


class ConfigStore(ABC):
    """Key/value configuration persistence."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass


class StatisticsStorage(ABC):
    """Page view counters."""

    @abstractmethod
    def fetch_view(self, entity_id: EntityId) -> Optional[StatisticsViewResult]:
        pass


class TranslationManager(ABC):
    """Content translation settings and per-translation metadata."""

    @abstractmethod
    def is_enabled(self, entity_type: str, bundle: Optional[str] = None) -> bool:
        pass

    def get_translation_metadata(self, entity: ContentEntity, langcode: str) -> Optional[TranslationMetadata]:
        return None


class LanguageManager(ABC):
    """Configured languages."""

    @abstractmethod
    def get_languages(self) -> Dict[str, Language]:
        pass


class Clock(ABC):
    """Source of the current request time."""

    @abstractmethod
    def now(self) -> int:
        pass


class SystemClock(Clock):
    """Wall clock, in Unix seconds."""

    def now(self) -> int:
        return int(time.time())


CollectAlterHook = Callable[[IntelReport, ContentEntity], IntelReport]
