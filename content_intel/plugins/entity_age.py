"""
Entity age plugin: creation and update ages and a freshness category.
"""

from typing import Any, Dict, Optional

from ..domain.interfaces import Clock, SystemClock
from ..domain.models import ContentEntity, IntelData
from ..framework.plugin_management import ContentIntelPluginBase, PluginDescriptor, content_intel_plugin
from ..infrastructure.date_formatter import DateFormatter

SECONDS_PER_DAY = 86400

# (maximum age in days, category)
FRESHNESS_CATEGORIES = (
    (1, "new"),
    (7, "recent"),
    (30, "current"),
    (90, "aging"),
    (365, "old"),
)


def freshness(days_old: int) -> str:
    for max_days, category in FRESHNESS_CATEGORIES:
        if days_old <= max_days:
            return category
    return "archival"


@content_intel_plugin(
    id="entity_age",
    label="Entity Age",
    description="Calculates entity age and freshness metrics.",
    weight=110,
)
class EntityAgePlugin(ContentIntelPluginBase):
    """Ages are measured against the clock's request time."""

    def __init__(
        self,
        descriptor: PluginDescriptor,
        clock: Optional[Clock] = None,
        date_formatter: Optional[DateFormatter] = None,
    ):
        super().__init__(descriptor)
        self.clock = clock or SystemClock()
        self.date_formatter = date_formatter or DateFormatter()

    def applies(self, entity: ContentEntity) -> bool:
        return entity.created is not None

    def _elapsed(self, seconds: int) -> Dict[str, Any]:
        return {
            "seconds": seconds,
            "days": seconds // SECONDS_PER_DAY,
            "human": self.date_formatter.format_interval(seconds, 2),
        }

    async def collect(self, entity: ContentEntity) -> IntelData:
        now = self.clock.now()
        data: Dict[str, Any] = {}

        if entity.created is not None:
            data["created"] = self.date_formatter.describe(entity.created)
            data["age"] = self._elapsed(now - entity.created)
            data["freshness"] = freshness(data["age"]["days"])

        if entity.changed is not None:
            data["last_modified"] = self.date_formatter.describe(entity.changed)
            data["time_since_update"] = self._elapsed(now - entity.changed)
            if entity.created is not None:
                data["was_edited"] = entity.changed > entity.created

        return data
