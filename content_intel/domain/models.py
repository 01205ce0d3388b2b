"""
Core Domain Models

Defines the data structures and value objects used throughout Content Intel:
content entities and their fields as handed over by the host platform, and
the summaries and reports the collector produces from them.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple, Union

EntityId = Union[int, str]
IntelData = Dict[str, Any]

_EMPTY_VALUES = (None, "", [], {})


@dataclass(frozen=True)
class EntityTypeDefinition:
    """Describes a content entity type known to the host platform."""
    id: str
    label: str
    bundle_entity_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "bundle_entity_type": self.bundle_entity_type,
        }


@dataclass(frozen=True)
class BundleInfo:
    """A bundle (sub-type) of an entity type."""
    id: str
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label}


@dataclass(frozen=True)
class FieldDefinition:
    """Describes one field of an entity type or bundle."""
    name: str
    type: str
    label: str = ""
    required: bool = False
    cardinality: int = 1  # -1 means unlimited
    computed: bool = False
    main_property: Optional[str] = "value"
    settings: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label or self.name,
            "type": self.type,
            "required": self.required,
            "cardinality": self.cardinality,
        }


@dataclass
class FieldItemList:
    """The items stored in one field of one entity."""
    definition: FieldDefinition
    items: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def type(self) -> str:
        return self.definition.type

    def is_empty(self) -> bool:
        """A field is empty when no item carries a value in its main property."""
        main_property = self.definition.main_property
        for item in self.items:
            if main_property:
                values = [item.get(main_property)]
            else:
                values = list(item.values())
            if any(value not in _EMPTY_VALUES for value in values):
                return False
        return True

    def __iter__(self):
        return iter(self.items)


@dataclass
class ContentEntity:
    """
    A content entity as loaded from the entity store.

    Timestamps are Unix seconds; `created`/`changed` are None for entity
    types that do not track them. `translations` lists the language codes
    the entity is available in, including its original language.
    """
    entity_type: str
    id: EntityId
    uuid: str
    label: str
    bundle: Optional[str] = None
    langcode: Optional[str] = None
    fields: Dict[str, FieldItemList] = field(default_factory=dict)
    created: Optional[int] = None
    changed: Optional[int] = None
    translations: Tuple[str, ...] = ()

    def get(self, field_name: str) -> Optional[FieldItemList]:
        return self.fields.get(field_name)

    @property
    def key(self) -> str:
        return f"{self.entity_type}/{self.id}"


@dataclass(frozen=True)
class EntitySummary:
    """Snapshot of an entity's identifying data."""
    entity_type: str
    id: EntityId
    uuid: str
    label: str
    bundle: Optional[str] = None
    langcode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        summary = {
            "entity_type": self.entity_type,
            "id": self.id,
            "uuid": self.uuid,
            "label": self.label,
        }
        if self.bundle is not None:
            summary["bundle"] = self.bundle
        if self.langcode is not None:
            summary["langcode"] = self.langcode
        return summary


@dataclass
class IntelEntry:
    """Outcome of one plugin for one entity: either data or an error message."""
    plugin_label: str
    data: Optional[IntelData] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.data is None) == (self.error is None):
            raise ValueError("IntelEntry requires exactly one of data or error")

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"plugin_label": self.plugin_label, "error": self.error}
        return {"plugin_label": self.plugin_label, "data": self.data}


@dataclass
class IntelReport:
    """Aggregated result of one collection request."""
    entity: EntitySummary
    fields: Dict[str, Any] = field(default_factory=dict)
    intel: Dict[str, IntelEntry] = field(default_factory=dict)

    def set_intel_value(self, plugin_id: str, key: str, value: Any, plugin_label: Optional[str] = None) -> None:
        """Set one data key of a plugin section, creating the section when missing."""
        entry = self.intel.get(plugin_id)
        if entry is None or entry.data is None:
            self.intel[plugin_id] = IntelEntry(plugin_label=plugin_label or plugin_id, data={key: value})
        else:
            entry.data[key] = value

    def remove_intel(self, plugin_id: str) -> Optional[IntelEntry]:
        return self.intel.pop(plugin_id, None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity": self.entity.to_dict(),
            "fields": self.fields,
            "intel": {plugin_id: entry.to_dict() for plugin_id, entry in self.intel.items()},
        }


@dataclass(frozen=True)
class Language:
    """A configured site language."""
    langcode: str
    name: str
    locked: bool = False


@dataclass(frozen=True)
class TranslationMetadata:
    """Authoring metadata of one entity translation."""
    author: Optional[str] = None
    created: Optional[int] = None
    changed: Optional[int] = None
    published: Optional[bool] = None
    outdated: Optional[bool] = None


@dataclass(frozen=True)
class StatisticsViewResult:
    """Page view counters of one entity."""
    total_count: int
    day_count: int
    timestamp: int = 0
