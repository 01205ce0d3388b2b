"""
Content dump used across the test suite.

Node 1 is a translated article with text, tags, an image and view
statistics; node 2 is an old basic page; node 3 is a fresh French article
that has never been edited.
"""

from content_intel.domain.interfaces import Clock

NOW = 1700000000
DAY = 86400


class FixedClock(Clock):
    """Clock frozen at a given request time."""

    def __init__(self, now: int = NOW):
        self._now = now

    def now(self) -> int:
        return self._now


CONTENT = {
    "languages": {
        "en": {"name": "English"},
        "fr": {"name": "French"},
        "de": {"name": "German"},
        "zxx": {"name": "Not applicable", "locked": True},
    },
    "entity_types": {
        "node": {
            "label": "Content",
            "bundle_entity_type": "node_type",
            "base_fields": {
                "title": {"type": "string", "label": "Title", "required": True},
                "created": {"type": "created", "label": "Authored on"},
                "changed": {"type": "changed", "label": "Changed"},
                "status": {"type": "boolean", "label": "Published"},
                "path": {"type": "path", "label": "URL alias", "computed": True},
            },
            "bundles": {
                "article": {
                    "label": "Article",
                    "translation": True,
                    "fields": {
                        "body": {"type": "text_with_summary", "label": "Body"},
                        "field_tags": {
                            "type": "entity_reference",
                            "label": "Tags",
                            "cardinality": -1,
                            "settings": {"target_type": "taxonomy_term"},
                        },
                        "field_image": {
                            "type": "image",
                            "label": "Image",
                            "settings": {"target_type": "file"},
                        },
                        "field_link": {"type": "link", "label": "Link"},
                    },
                },
                "page": {
                    "label": "Basic page",
                    "fields": {
                        "body": {"type": "text_with_summary", "label": "Body"},
                    },
                },
            },
        },
        "taxonomy_term": {
            "label": "Taxonomy term",
            "bundle_entity_type": "taxonomy_vocabulary",
            "base_fields": {"name": {"type": "string", "label": "Name"}},
            "bundles": {"tags": {"label": "Tags"}},
        },
        "file": {
            "label": "File",
            "base_fields": {
                "filename": {"type": "string", "label": "Filename"},
                "uri": {"type": "uri", "label": "URI"},
                "filemime": {"type": "string", "label": "MIME type"},
                "filesize": {"type": "integer", "label": "File size"},
            },
        },
    },
    "entities": {
        "node": [
            {
                "id": 1,
                "bundle": "article",
                "langcode": "en",
                "translations": ["en", "fr"],
                "translation_metadata": {
                    "fr": {"author": "marie", "changed": NOW - 5 * DAY, "published": True, "outdated": False},
                },
                "fields": {
                    "title": "Hello World",
                    "created": NOW - 10 * DAY,
                    "changed": NOW - 2 * DAY,
                    "status": True,
                    "path": "/hello-world",
                    "body": {
                        "value": "<p>Hello <b>brave</b> new world</p>",
                        "format": "basic_html",
                        "summary": "",
                    },
                    "field_tags": [{"target_id": 5}, {"target_id": 99}],
                    "field_image": {"target_id": 7, "alt": "A cat", "width": 640, "height": 480},
                },
            },
            {
                "id": 2,
                "bundle": "page",
                "langcode": "en",
                "fields": {
                    "title": "About",
                    "created": NOW - 400 * DAY,
                    "changed": NOW - 400 * DAY,
                    "body": {"value": "About us", "format": "plain_text"},
                },
            },
            {
                "id": 3,
                "bundle": "article",
                "langcode": "fr",
                "fields": {
                    "title": "Bonjour",
                    "created": NOW - 3600,
                    "body": "",
                },
            },
        ],
        "taxonomy_term": [
            {"id": 5, "bundle": "tags", "fields": {"name": "Drupal"}},
        ],
        "file": [
            {
                "id": 7,
                "fields": {
                    "filename": "cat.jpg",
                    "uri": "public://images/cat.jpg",
                    "filemime": "image/jpeg",
                    "filesize": 2048,
                },
            },
        ],
    },
    "statistics": {
        1: {"total_count": 42, "day_count": 3, "timestamp": NOW - 60},
    },
}
