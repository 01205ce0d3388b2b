"""
Page view statistics storage.

Counters live in a `node_counter` table (nid, totalcount, daycount,
timestamp) in SQLite, or in memory for tests and content dumps.
"""

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from ..domain.interfaces import StatisticsStorage
from ..domain.models import EntityId, StatisticsViewResult
from .exceptions import DataStoreError

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS node_counter (
    nid INTEGER PRIMARY KEY,
    totalcount INTEGER NOT NULL DEFAULT 0,
    daycount INTEGER NOT NULL DEFAULT 0,
    timestamp INTEGER NOT NULL DEFAULT 0
)
"""


class InMemoryStatisticsStorage(StatisticsStorage):
    """View counters kept in a dictionary."""

    def __init__(self, counters: Optional[Dict[EntityId, StatisticsViewResult]] = None):
        self._counters: Dict[int, StatisticsViewResult] = {
            int(entity_id): result for entity_id, result in (counters or {}).items()
        }

    def record_view(self, entity_id: EntityId, timestamp: int) -> None:
        current = self._counters.get(int(entity_id), StatisticsViewResult(0, 0))
        self._counters[int(entity_id)] = StatisticsViewResult(
            total_count=current.total_count + 1,
            day_count=current.day_count + 1,
            timestamp=timestamp,
        )

    def fetch_view(self, entity_id: EntityId) -> Optional[StatisticsViewResult]:
        return self._counters.get(int(entity_id))


class SQLiteStatisticsStorage(StatisticsStorage):
    """View counters read from (and recorded into) a SQLite database."""

    def __init__(self, db_path: Union[str, Path], create: bool = False):
        self.db_path = str(db_path)
        self._lock = threading.Lock()

        if self.db_path != ':memory:' and not create and not Path(self.db_path).exists():
            raise DataStoreError(f"Statistics database not found: {self.db_path}", operation="connect")

        try:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
            if create:
                self._connection.execute(SCHEMA)
                self._connection.commit()
        except sqlite3.Error as e:
            raise DataStoreError(f"Cannot open statistics database {self.db_path}: {e}",
                                 operation="connect", cause=e) from e

        logger.debug(f"Statistics storage opened: {self.db_path}")

    def fetch_view(self, entity_id: EntityId) -> Optional[StatisticsViewResult]:
        try:
            with self._lock:
                row = self._connection.execute(
                    "SELECT totalcount, daycount, timestamp FROM node_counter WHERE nid = ?",
                    (int(entity_id),)
                ).fetchone()
        except sqlite3.Error as e:
            raise DataStoreError(f"Cannot read view statistics: {e}", operation="fetch_view", cause=e) from e

        if row is None:
            return None
        return StatisticsViewResult(total_count=row[0], day_count=row[1], timestamp=row[2] or 0)

    def record_view(self, entity_id: EntityId, timestamp: int) -> None:
        with self._lock:
            self._connection.execute(
                "INSERT INTO node_counter (nid, totalcount, daycount, timestamp) VALUES (?, 1, 1, ?) "
                "ON CONFLICT(nid) DO UPDATE SET totalcount = totalcount + 1, "
                "daycount = daycount + 1, timestamp = excluded.timestamp",
                (int(entity_id), int(timestamp))
            )
            self._connection.commit()

    def close(self) -> None:
        with self._lock:
            self._connection.close()
