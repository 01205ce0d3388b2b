"""
Tests for the bundled intel plugins, run through a fully assembled framework.
"""

import time

import pytest

from content_intel.domain.interfaces import StatisticsStorage
from content_intel.domain.models import StatisticsViewResult
from content_intel.framework.content_intel_framework import create_content_intel_framework
from content_intel.framework.plugin_management import PluginRegistrationTable
from content_intel.infrastructure.content_repository import InMemoryContentRepository
from content_intel.plugins.entity_age import freshness
from content_intel.plugins.word_count import count_words, strip_tags

from .fixtures.content import DAY, NOW


@pytest.fixture
def app(repository, configuration, clock):
    framework = create_content_intel_framework(
        configuration, repository, table=PluginRegistrationTable(), clock=clock
    )
    yield framework
    framework.close()


async def collect(app, entity_type, entity_id, plugins=()):
    report = await app.collector.collect_intel_for(entity_type, entity_id, plugins=plugins)
    return report.to_dict()["intel"]


class SlowStatisticsStorage(StatisticsStorage):
    """Statistics storage whose reads block well past the plugin time budget."""

    def fetch_view(self, entity_id):
        time.sleep(0.5)
        return StatisticsViewResult(total_count=3, day_count=1, timestamp=NOW)


class TestBundledCatalogue:
    """Test the registration of the bundled plugins."""

    def test_catalogue(self, app):
        """All four bundled plugins are registered with their metadata."""
        catalogue = {plugin["id"]: plugin for plugin in app.collector.get_plugins()}

        assert set(catalogue) == {"statistics", "content_translation", "word_count", "entity_age"}
        assert catalogue["statistics"]["label"] == "View Statistics"
        assert catalogue["statistics"]["entity_types"] == ["node"]
        assert catalogue["word_count"]["provider"] == "content_intel"
        assert [catalogue[pid]["weight"] for pid in ("statistics", "content_translation", "word_count",
                                                     "entity_age")] == [10, 20, 100, 110]

    def test_execution_order(self, app):
        """Available plugins are ordered by weight."""
        assert [pid for pid, _ in app.registry.get_available_plugins()] == [
            "statistics", "content_translation", "word_count", "entity_age"
        ]

    def test_bundled_plugins_not_loaded_on_request(self, repository, configuration):
        """load_bundled_plugins=False leaves a custom table empty."""
        framework = create_content_intel_framework(
            configuration, repository, table=PluginRegistrationTable(), load_bundled_plugins=False
        )
        assert framework.collector.get_plugins() == []


class TestStatisticsPlugin:
    """Test the view statistics plugin."""

    @pytest.mark.asyncio
    async def test_counters(self, app):
        intel = await collect(app, "node", 1, ["statistics"])

        assert intel["statistics"]["plugin_label"] == "View Statistics"
        data = intel["statistics"]["data"]
        assert data["total_views"] == 42
        assert data["day_views"] == 3
        assert data["last_view"]["timestamp"] == NOW - 60
        assert data["last_view"]["iso8601"] == "2023-11-14T22:12:20+00:00"
        assert data["last_view"]["human"] == "Tue, 11/14/2023 - 22:12"

    @pytest.mark.asyncio
    async def test_no_counter_row(self, app):
        """A node never viewed reports zeros."""
        intel = await collect(app, "node", 2, ["statistics"])

        assert intel["statistics"]["data"] == {"total_views": 0, "day_views": 0, "last_view": None}

    @pytest.mark.asyncio
    async def test_only_nodes(self, app):
        intel = await collect(app, "taxonomy_term", 5)
        assert "statistics" not in intel

    @pytest.mark.asyncio
    async def test_unavailable_without_storage(self, content_data, configuration, clock):
        """Without statistics storage the plugin is unavailable and never runs."""
        del content_data["statistics"]
        framework = create_content_intel_framework(
            configuration,
            InMemoryContentRepository.from_dict(content_data),
            table=PluginRegistrationTable(),
            clock=clock,
        )

        catalogue = {plugin["id"]: plugin for plugin in framework.collector.get_plugins()}
        assert catalogue["statistics"]["available"] is False

        intel = await collect(framework, "node", 1, ["statistics", "word_count"])
        assert set(intel) == {"word_count"}

    @pytest.mark.asyncio
    async def test_slow_storage_hits_time_budget(self, repository, make_configuration, clock):
        """A blocking storage read does not hold the event loop past plugin_timeout."""
        framework = create_content_intel_framework(
            make_configuration(plugin_timeout=0.1), repository, table=PluginRegistrationTable(), clock=clock
        )
        framework.container.register_singleton(StatisticsStorage, SlowStatisticsStorage())
        framework.registry.clear_cached_definitions()

        intel = await collect(framework, "node", 1, ["statistics", "word_count"])

        assert intel["statistics"] == {
            "plugin_label": "View Statistics",
            "error": "Plugin statistics timed out after 0.1s",
        }
        assert "data" in intel["word_count"]


class TestContentTranslationPlugin:
    """Test the translation status plugin."""

    @pytest.mark.asyncio
    async def test_translated_article(self, app):
        intel = await collect(app, "node", 1, ["content_translation"])
        data = intel["content_translation"]["data"]

        assert data["translation_enabled"] is True
        assert data["original_language"] == {"langcode": "en", "name": "English"}
        assert data["coverage"] == {
            "total_languages": 3,
            "translated_count": 2,
            "missing_count": 1,
            "coverage_pct": 66.7,
        }
        assert data["translated_languages"] == {"en": "English", "fr": "French"}
        assert data["missing_languages"] == {"de": "German"}
        assert data["translations"]["en"] == {"langcode": "en", "language": "English", "is_original": True}
        assert data["translations"]["fr"]["author"] == "marie"
        assert data["translations"]["fr"]["changed"] == NOW - 5 * DAY
        assert data["translations"]["fr"]["outdated"] is False

    @pytest.mark.asyncio
    async def test_untranslated_article(self, app):
        """An article only in its original language has partial coverage."""
        intel = await collect(app, "node", 3, ["content_translation"])
        coverage = intel["content_translation"]["data"]["coverage"]

        assert coverage["translated_count"] == 1
        assert coverage["coverage_pct"] == 33.3

    @pytest.mark.asyncio
    async def test_bundle_without_translation(self, app):
        """Bundles without translation support are not analyzed."""
        intel = await collect(app, "node", 2)
        assert "content_translation" not in intel


class TestWordCountPlugin:
    """Test the word count plugin."""

    @pytest.mark.asyncio
    async def test_counts_text_fields(self, app):
        intel = await collect(app, "node", 1, ["word_count"])

        assert intel["word_count"] == {
            "plugin_label": "Word Count",
            "data": {
                "total_words": 6,
                "total_characters": 32,
                "fields_analyzed": 2,
                "field_breakdown": {
                    "title": {"words": 2, "characters": 11},
                    "body": {"words": 4, "characters": 21},
                },
            },
        }

    @pytest.mark.asyncio
    async def test_empty_text_fields_skipped(self, app):
        intel = await collect(app, "node", 3, ["word_count"])

        assert intel["word_count"]["data"]["fields_analyzed"] == 1
        assert list(intel["word_count"]["data"]["field_breakdown"]) == ["title"]

    def test_strip_tags(self):
        assert strip_tags("<p>Hello <a href='#'>there</a></p>") == "Hello there"

    def test_count_words(self):
        """Numbers are not words; apostrophes and hyphens stay inside words."""
        assert count_words("It's a well-known fact, 42 times!") == 5
        assert count_words("Café naïve résumé") == 3
        assert count_words("") == 0


class TestEntityAgePlugin:
    """Test the entity age plugin."""

    @pytest.mark.asyncio
    async def test_edited_article(self, app):
        intel = await collect(app, "node", 1, ["entity_age"])
        data = intel["entity_age"]["data"]

        assert data["created"]["timestamp"] == NOW - 10 * DAY
        assert data["created"]["iso8601"] == "2023-11-04T22:13:20+00:00"
        assert data["age"] == {"seconds": 10 * DAY, "days": 10, "human": "1 week 3 days"}
        assert data["freshness"] == "current"
        assert data["time_since_update"] == {"seconds": 2 * DAY, "days": 2, "human": "2 days"}
        assert data["was_edited"] is True

    @pytest.mark.asyncio
    async def test_never_changed(self, app):
        """Without a changed time only the creation data is reported."""
        intel = await collect(app, "node", 3, ["entity_age"])
        data = intel["entity_age"]["data"]

        assert data["age"]["human"] == "1 hour"
        assert data["freshness"] == "new"
        assert "last_modified" not in data
        assert "was_edited" not in data

    @pytest.mark.asyncio
    async def test_archival_page(self, app):
        intel = await collect(app, "node", 2, ["entity_age"])
        data = intel["entity_age"]["data"]

        assert data["freshness"] == "archival"
        assert data["age"]["human"] == "1 year 1 month"
        assert data["was_edited"] is False

    @pytest.mark.asyncio
    async def test_entities_without_created_skipped(self, app):
        intel = await collect(app, "taxonomy_term", 5)
        assert "entity_age" not in intel

    @pytest.mark.parametrize("days,category", [
        (0, "new"), (1, "new"), (2, "recent"), (7, "recent"), (30, "current"),
        (31, "aging"), (90, "aging"), (365, "old"), (366, "archival"),
    ])
    def test_freshness_boundaries(self, days, category):
        assert freshness(days) == category
