"""
Bundled intel plugins. Importing this package registers them.
"""

from .statistics import StatisticsPlugin
from .content_translation import ContentTranslationPlugin
from .word_count import WordCountPlugin
from .entity_age import EntityAgePlugin

__all__ = [
    'StatisticsPlugin',
    'ContentTranslationPlugin',
    'WordCountPlugin',
    'EntityAgePlugin',
]
