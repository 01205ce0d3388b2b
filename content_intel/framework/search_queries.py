"""
Search Query Intelligence

Popular search queries and content gaps (queries that find little or no
content) read from a search log in SQLite. Two log layouts are understood:
the `content_intel_search_log` table written by `log_query`, and a
`search_api_log` table written by a search backend.
"""

import logging
import math
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..domain.interfaces import Clock, SystemClock
from ..infrastructure.date_formatter import DateFormatter
from ..infrastructure.exceptions import DataStoreError

logger = logging.getLogger(__name__)

SOURCE_CONTENT_INTEL = "content_intel"
SOURCE_SEARCH_API_LOG = "search_api_log"
SOURCE_NONE = "none"

LOG_TABLE = "content_intel_search_log"
MAX_KEYWORDS_LENGTH = 255

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {LOG_TABLE} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    keywords VARCHAR(255) NOT NULL,
    results_count INTEGER NOT NULL DEFAULT 0,
    index_id VARCHAR(64),
    timestamp INTEGER NOT NULL DEFAULT 0
)
"""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SearchQueryCollector:
    """Reads search intelligence from a SQLite search log."""

    def __init__(
        self,
        db_path: Union[str, Path],
        date_formatter: Optional[DateFormatter] = None,
        clock: Optional[Clock] = None,
    ):
        self.db_path = str(db_path)
        self.date_formatter = date_formatter or DateFormatter()
        self.clock = clock or SystemClock()
        self._source: Optional[str] = None
        self._lock = threading.Lock()

        try:
            self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise DataStoreError(f"Cannot open search log {self.db_path}: {e}",
                                 operation="connect", cause=e) from e

    def install_schema(self) -> None:
        """Create the search log table."""
        with self._lock:
            self._connection.execute(SCHEMA)
            self._connection.commit()
        self._source = None

    def _table_exists(self, table: str) -> bool:
        row = self._connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        ).fetchone()
        return row is not None

    def _column_exists(self, table: str, column: str) -> bool:
        rows = self._connection.execute(f"PRAGMA table_info({table})").fetchall()
        return any(row[1] == column for row in rows)

    def get_source(self) -> str:
        """Which log the data comes from: content_intel, search_api_log or none."""
        if self._source is None:
            with self._lock:
                if self._table_exists(LOG_TABLE):
                    self._source = SOURCE_CONTENT_INTEL
                elif self._table_exists(SOURCE_SEARCH_API_LOG):
                    self._source = SOURCE_SEARCH_API_LOG
                else:
                    self._source = SOURCE_NONE
            logger.debug(f"Search log source: {self._source}")
        return self._source

    def is_available(self) -> bool:
        return self.get_source() != SOURCE_NONE

    def get_top_queries(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Most frequent queries, most searched first."""
        source = self.get_source()
        if source == SOURCE_CONTENT_INTEL:
            return self._aggregate(LOG_TABLE, 'results_count', limit)
        if source == SOURCE_SEARCH_API_LOG:
            if not self._column_exists(SOURCE_SEARCH_API_LOG, 'keywords'):
                return []
            return self._aggregate(SOURCE_SEARCH_API_LOG, None, limit)
        return []

    def get_content_gaps(self, limit: int = 50, max_results: int = 0) -> List[Dict[str, Any]]:
        """Queries whose average result count is at most `max_results`."""
        source = self.get_source()
        if source == SOURCE_CONTENT_INTEL:
            return self._aggregate(LOG_TABLE, 'results_count', limit, max_results)
        if source == SOURCE_SEARCH_API_LOG:
            if not self._column_exists(SOURCE_SEARCH_API_LOG, 'num_results'):
                return []
            return self._aggregate(SOURCE_SEARCH_API_LOG, 'num_results', limit, max_results)
        return []

    def _aggregate(
        self,
        table: str,
        results_column: Optional[str],
        limit: int,
        max_results: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        avg_expression = f"AVG({results_column})" if results_column else "NULL"
        sql = (
            f"SELECT keywords, COUNT(*) AS count, {avg_expression} AS avg_results, "
            f"MAX(timestamp) AS last_searched FROM {table} GROUP BY keywords"
        )
        params: List[Any] = []
        if max_results is not None:
            sql += f" HAVING {avg_expression} <= ?"
            params.append(max_results)
        sql += " ORDER BY count DESC LIMIT ?"
        params.append(limit)

        try:
            with self._lock:
                rows = self._connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise DataStoreError(f"Cannot read search log: {e}", operation="aggregate", cause=e) from e

        results = []
        for keywords, count, avg_results, last_searched in rows:
            row = {
                'query': keywords,
                'count': int(count),
                'results_count': _round_half_up(avg_results) if avg_results is not None else None,
                'last_searched': self.date_formatter.describe(last_searched) if last_searched else None,
            }
            if max_results is not None:
                row['is_content_gap'] = True
            results.append(row)
        return results

    def log_query(self, keywords: str, results_count: int, index_id: Optional[str] = None) -> bool:
        """Record one search; blank keywords and a missing log table are ignored."""
        keywords = keywords.strip()
        if not keywords:
            return False

        with self._lock:
            if not self._table_exists(LOG_TABLE):
                return False
            self._connection.execute(
                f"INSERT INTO {LOG_TABLE} (keywords, results_count, index_id, timestamp) VALUES (?, ?, ?, ?)",
                (keywords[:MAX_KEYWORDS_LENGTH], int(results_count), index_id, self.clock.now())
            )
            self._connection.commit()
        return True

    def close(self) -> None:
        with self._lock:
            self._connection.close()
