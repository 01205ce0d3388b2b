"""
Word count plugin: words and characters in the text fields of an entity.
"""

import re

from ..domain.models import ContentEntity, IntelData
from ..framework.plugin_management import ContentIntelPluginBase, content_intel_plugin

TEXT_FIELD_TYPES = frozenset({'text', 'text_long', 'text_with_summary', 'string', 'string_long'})

TAG_PATTERN = re.compile(r'<[^>]*>')
# Letters, with apostrophes and hyphens allowed inside a word.
WORD_PATTERN = re.compile(r"[^\W\d_](?:[^\W\d_]|['-])*")


def strip_tags(text: str) -> str:
    return TAG_PATTERN.sub('', text)


def count_words(text: str) -> int:
    return len(WORD_PATTERN.findall(text))


@content_intel_plugin(
    id="word_count",
    label="Word Count",
    description="Counts words in text fields.",
    weight=100,
)
class WordCountPlugin(ContentIntelPluginBase):
    """Counts words and characters per text field, with markup stripped."""

    async def collect(self, entity: ContentEntity) -> IntelData:
        field_counts = {}
        total_words = 0
        total_characters = 0

        for field_name, field_items in entity.fields.items():
            if field_items.type not in TEXT_FIELD_TYPES or field_items.is_empty():
                continue

            field_text = ' '.join(
                strip_tags(str(item['value'])) for item in field_items if item.get('value')
            ).strip()
            if not field_text:
                continue

            words = count_words(field_text)
            characters = len(field_text)
            field_counts[field_name] = {
                "words": words,
                "characters": characters,
            }
            total_words += words
            total_characters += characters

        return {
            "total_words": total_words,
            "total_characters": total_characters,
            "fields_analyzed": len(field_counts),
            "field_breakdown": field_counts,
        }
