"""
Plugin Descriptor Module

Defines the immutable metadata describing an intel plugin.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional


@dataclass(frozen=True)
class PluginDescriptor:
    """Describes a registered plugin: identity, applicability and ordering."""
    id: str
    label: str
    description: Optional[str] = None
    entity_types: FrozenSet[str] = field(default_factory=frozenset)
    weight: int = 0
    provider: str = "unknown"
    # Class or callable building the plugin; constructor parameters are injected.
    factory: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.entity_types, frozenset):
            object.__setattr__(self, 'entity_types', frozenset(self.entity_types))

    def applies_to_type(self, entity_type: str) -> bool:
        """Empty entity-type set means every type."""
        return not self.entity_types or entity_type in self.entity_types

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "entity_types": sorted(self.entity_types),
            "weight": self.weight,
            "provider": self.provider,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PluginDescriptor':
        entity_types: Iterable[str] = data.get('entity_types') or ()
        return cls(
            id=data['id'],
            label=data.get('label', data['id']),
            description=data.get('description'),
            entity_types=frozenset(entity_types),
            weight=int(data.get('weight', 0)),
            provider=data.get('provider', 'unknown'),
        )
