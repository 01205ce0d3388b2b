"""
Plugin Base Module

Default behaviour shared by intel plugins. Concrete plugins only implement
`collect` and override the availability or applicability checks when they
depend on optional services.
"""

from abc import abstractmethod
from typing import Optional

from .plugin_descriptor import PluginDescriptor
from ...domain.interfaces import ContentIntelPlugin
from ...domain.models import ContentEntity, IntelData


class ContentIntelPluginBase(ContentIntelPlugin):
    """Base class for intel plugins bound to one descriptor."""

    def __init__(self, descriptor: PluginDescriptor):
        self.descriptor = descriptor

    @property
    def plugin_id(self) -> str:
        return self.descriptor.id

    def label(self) -> str:
        return self.descriptor.label

    def description(self) -> Optional[str]:
        return self.descriptor.description

    def get_weight(self) -> int:
        return self.descriptor.weight

    def is_available(self) -> bool:
        return True

    def applies(self, entity: ContentEntity) -> bool:
        return self.descriptor.applies_to_type(entity.entity_type)

    @abstractmethod
    async def collect(self, entity: ContentEntity) -> IntelData:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.descriptor.id!r} weight={self.descriptor.weight}>"
