"""
Tests for search query intelligence over SQLite search logs.
"""

import sqlite3

import pytest

from content_intel.framework.search_queries import (
    MAX_KEYWORDS_LENGTH, SOURCE_CONTENT_INTEL, SOURCE_NONE, SOURCE_SEARCH_API_LOG, SearchQueryCollector
)

from .fixtures.content import NOW, FixedClock


@pytest.fixture
def search(tmp_path):
    collector = SearchQueryCollector(tmp_path / "search.db", clock=FixedClock())
    yield collector
    collector.close()


@pytest.fixture
def populated(search):
    search.install_schema()
    for keywords, results in [("drupal", 10), ("drupal", 11), ("drupal", 10),
                              ("cats", 0), ("cats", 1), ("nothing", 0)]:
        search.log_query(keywords, results, index_id="content")
    return search


class TestContentIntelLog:
    """Test the log table written by log_query."""

    def test_source_detection(self, search):
        assert search.get_source() == SOURCE_NONE
        assert search.is_available() is False

        search.install_schema()
        assert search.get_source() == SOURCE_CONTENT_INTEL

    def test_top_queries(self, populated):
        queries = populated.get_top_queries()

        assert [(q["query"], q["count"], q["results_count"]) for q in queries] == [
            ("drupal", 3, 10), ("cats", 2, 1), ("nothing", 1, 0),
        ]
        assert queries[0]["last_searched"]["timestamp"] == NOW
        assert "is_content_gap" not in queries[0]

    def test_top_queries_limit(self, populated):
        assert [q["query"] for q in populated.get_top_queries(limit=1)] == ["drupal"]

    def test_content_gaps(self, populated):
        """Gaps are queries whose average result count is at most max_results."""
        assert [q["query"] for q in populated.get_content_gaps()] == ["nothing"]

        gaps = populated.get_content_gaps(max_results=1)
        assert [q["query"] for q in gaps] == ["cats", "nothing"]
        assert all(gap["is_content_gap"] for gap in gaps)

    def test_log_query_ignores_blank_keywords(self, populated):
        assert populated.log_query("   ", 3) is False
        assert len(populated.get_top_queries()) == 3

    def test_log_query_strips_and_truncates(self, populated):
        assert populated.log_query("  " + "x" * 300 + "  ", 0) is True

        longest = max(populated.get_top_queries(), key=lambda q: len(q["query"]))
        assert len(longest["query"]) == MAX_KEYWORDS_LENGTH

    def test_log_query_without_table(self, search):
        assert search.log_query("drupal", 1) is False

    def test_empty_log_sources_return_nothing(self, search):
        assert search.get_top_queries() == []
        assert search.get_content_gaps() == []


class TestSearchApiLog:
    """Test reading a search backend's log table."""

    def create_log(self, path, columns):
        connection = sqlite3.connect(str(path))
        connection.execute(f"CREATE TABLE search_api_log ({', '.join(columns)})")
        return connection

    def test_reads_search_api_log(self, tmp_path):
        path = tmp_path / "search.db"
        connection = self.create_log(path, ["keywords TEXT", "num_results INTEGER", "timestamp INTEGER"])
        connection.executemany(
            "INSERT INTO search_api_log VALUES (?, ?, ?)",
            [("drupal", 4, NOW), ("drupal", 6, NOW + 1), ("void", 0, NOW)],
        )
        connection.commit()
        connection.close()

        search = SearchQueryCollector(path)
        assert search.get_source() == SOURCE_SEARCH_API_LOG

        top = search.get_top_queries()
        assert [(q["query"], q["count"], q["results_count"]) for q in top] == [("drupal", 2, None), ("void", 1, None)]
        assert top[0]["last_searched"]["timestamp"] == NOW + 1

        assert [q["query"] for q in search.get_content_gaps()] == ["void"]
        search.close()

    def test_missing_columns(self, tmp_path):
        """Logs without the needed columns yield no rows."""
        path = tmp_path / "search.db"
        connection = self.create_log(path, ["query TEXT", "timestamp INTEGER"])
        connection.close()

        search = SearchQueryCollector(path)
        assert search.get_top_queries() == []
        assert search.get_content_gaps() == []
        search.close()
