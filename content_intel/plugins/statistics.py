"""
View statistics plugin: page view counters of nodes.
"""

import asyncio
from typing import Optional

from ..domain.interfaces import StatisticsStorage
from ..domain.models import ContentEntity, IntelData
from ..framework.plugin_management import ContentIntelPluginBase, PluginDescriptor, content_intel_plugin
from ..infrastructure.date_formatter import DateFormatter


@content_intel_plugin(
    id="statistics",
    label="View Statistics",
    description="Page view counts from the statistics storage.",
    entity_types=["node"],
    weight=10,
)
class StatisticsPlugin(ContentIntelPluginBase):
    """Reports total and daily views; unavailable without a statistics storage."""

    def __init__(
        self,
        descriptor: PluginDescriptor,
        statistics_storage: Optional[StatisticsStorage] = None,
        date_formatter: Optional[DateFormatter] = None,
    ):
        super().__init__(descriptor)
        self.statistics_storage = statistics_storage
        self.date_formatter = date_formatter or DateFormatter()

    def is_available(self) -> bool:
        return self.statistics_storage is not None

    async def collect(self, entity: ContentEntity) -> IntelData:
        if self.statistics_storage is None:
            return {}

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, self.statistics_storage.fetch_view, int(entity.id))
        if result is None:
            return {
                "total_views": 0,
                "day_views": 0,
                "last_view": None,
            }

        return {
            "total_views": result.total_count,
            "day_views": result.day_count,
            "last_view": self.date_formatter.describe(result.timestamp) if result.timestamp else None,
        }
