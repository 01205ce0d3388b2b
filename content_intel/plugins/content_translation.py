"""
Translation status plugin: translation coverage across the site languages.
"""

import asyncio
from typing import Any, Dict, Optional

from ..domain.interfaces import LanguageManager, TranslationManager
from ..domain.models import ContentEntity, IntelData
from ..framework.plugin_management import ContentIntelPluginBase, PluginDescriptor, content_intel_plugin


@content_intel_plugin(
    id="content_translation",
    label="Translation Status",
    description="Translation coverage and status of translatable content.",
    weight=20,
)
class ContentTranslationPlugin(ContentIntelPluginBase):
    """
    Coverage of an entity's translations.

    Locked languages (such as "not applicable") are not content languages
    and do not count towards coverage.
    """

    def __init__(
        self,
        descriptor: PluginDescriptor,
        translation_manager: Optional[TranslationManager] = None,
        language_manager: Optional[LanguageManager] = None,
    ):
        super().__init__(descriptor)
        self.translation_manager = translation_manager
        self.language_manager = language_manager

    def is_available(self) -> bool:
        return self.translation_manager is not None

    def applies(self, entity: ContentEntity) -> bool:
        if self.translation_manager is None:
            return False
        return self.translation_manager.is_enabled(entity.entity_type, entity.bundle)

    async def collect(self, entity: ContentEntity) -> IntelData:
        if self.translation_manager is None or self.language_manager is None:
            return {}

        # Translation and language lookups are blocking store reads.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._translation_status, entity)

    def _translation_status(self, entity: ContentEntity) -> IntelData:
        all_languages = self.language_manager.get_languages()
        content_languages = {
            langcode: language.name
            for langcode, language in all_languages.items()
            if not language.locked
        }

        translations = list(entity.translations)
        translated_languages = {}
        missing_languages = {}
        for langcode, name in content_languages.items():
            if langcode in translations:
                translated_languages[langcode] = name
            else:
                missing_languages[langcode] = name

        original_langcode = entity.langcode
        total_languages = len(content_languages)
        translated_count = len(translated_languages)
        coverage_pct = round(translated_count / total_languages * 100, 1) if total_languages else 0

        translation_details = {}
        for langcode in translations:
            language = all_languages.get(langcode)
            detail: Dict[str, Any] = {
                "langcode": langcode,
                "language": language.name if language else langcode,
                "is_original": langcode == original_langcode,
            }

            metadata = self.translation_manager.get_translation_metadata(entity, langcode)
            if metadata is not None:
                detail.update({
                    "author": metadata.author,
                    "created": metadata.created,
                    "changed": metadata.changed,
                    "published": metadata.published,
                    "outdated": metadata.outdated,
                })

            translation_details[langcode] = detail

        return {
            "translation_enabled": True,
            "original_language": {
                "langcode": original_langcode,
                "name": content_languages.get(original_langcode, original_langcode),
            },
            "coverage": {
                "total_languages": total_languages,
                "translated_count": translated_count,
                "missing_count": len(missing_languages),
                "coverage_pct": coverage_pct,
            },
            "translated_languages": translated_languages,
            "missing_languages": missing_languages,
            "translations": translation_details,
        }
