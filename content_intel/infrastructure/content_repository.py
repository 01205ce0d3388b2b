"""
In-Memory Content Repository

Entity storage, schema introspection, translation settings and languages
backed by a content dump (YAML or JSON). Used by the CLI and tests in place
of a live content platform.

Dump layout::

    languages:
      en: {name: English}
      zxx: {name: Not applicable, locked: true}
    entity_types:
      node:
        label: Content
        bundle_entity_type: node_type
        translation: false
        base_fields:
          title: {type: string, label: Title, required: true}
        bundles:
          article:
            label: Article
            translation: true
            fields:
              body: {type: text_with_summary, label: Body}
    entities:
      node:
        - id: 1
          bundle: article
          langcode: en
          created: 1700000000
          changed: 1700003600
          translations: [en, fr]
          fields:
            title: Hello World
            body: {value: "<p>Hello</p>", format: basic_html}
    statistics:
      1: {total_count: 10, day_count: 2, timestamp: 1700007200}

Field values may be a scalar (stored under the main property), a single
item mapping or a list of either.
"""

import dataclasses
import json
import logging
import threading
import uuid as uuid_lib
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from ..domain.interfaces import EntityStore, LanguageManager, SchemaIntrospection, TranslationManager
from ..domain.models import (
    BundleInfo, ContentEntity, EntityId, EntityTypeDefinition, FieldDefinition,
    FieldItemList, Language, TranslationMetadata
)
from .exceptions import DataStoreError

logger = logging.getLogger(__name__)

MAIN_PROPERTIES = {
    'entity_reference': 'target_id',
    'entity_reference_revisions': 'target_id',
    'file': 'target_id',
    'image': 'target_id',
    'link': 'uri',
}

_ENTITY_ATTRIBUTES = ('id', 'uuid', 'label', 'bundle', 'langcode')


def _field_definition(name: str, raw: Dict[str, Any]) -> FieldDefinition:
    field_type = raw.get('type', 'string')
    return FieldDefinition(
        name=name,
        type=field_type,
        label=raw.get('label', ''),
        required=bool(raw.get('required', False)),
        cardinality=int(raw.get('cardinality', 1)),
        computed=bool(raw.get('computed', False)),
        main_property=raw.get('main_property', MAIN_PROPERTIES.get(field_type, 'value')),
        settings=dict(raw.get('settings') or {}),
    )


def _normalize_items(value: Any, main_property: Optional[str]) -> List[Dict[str, Any]]:
    if value is None:
        return []
    values = value if isinstance(value, list) else [value]
    items = []
    for item in values:
        if isinstance(item, dict):
            items.append(dict(item))
        else:
            items.append({main_property or 'value': item})
    return items


def _sort_key(entity_id: EntityId):
    if isinstance(entity_id, int):
        return (0, entity_id, '')
    return (1, 0, str(entity_id))


class InMemoryContentRepository(EntityStore, SchemaIntrospection, TranslationManager, LanguageManager):
    """Content platform stand-in holding entities and their schema in memory."""

    def __init__(self):
        self._entity_types: Dict[str, Dict[str, Any]] = {}
        self._entities: Dict[str, Dict[EntityId, ContentEntity]] = {}
        self._translation_metadata: Dict[str, Dict[str, TranslationMetadata]] = {}
        self._languages: Dict[str, Language] = {}
        self.view_counters: Dict[EntityId, Dict[str, int]] = {}
        self._lock = threading.RLock()

    # Loading

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'InMemoryContentRepository':
        """Load a YAML or JSON content dump."""
        path = Path(path)
        if not path.exists():
            raise DataStoreError(f"Content file not found: {path}", operation="load")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() == '.json':
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise DataStoreError(f"Cannot read content file {path}: {e}", operation="load", cause=e) from e

        repository = cls.from_dict(data or {})
        logger.info(f"Loaded content dump {path}", extra={"entity_types": len(repository._entity_types)})
        return repository

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InMemoryContentRepository':
        if not isinstance(data, dict):
            raise DataStoreError("Content dump must be a mapping", operation="load")

        repository = cls()
        for langcode, language in (data.get('languages') or {}).items():
            language = language or {}
            repository.add_language(Language(
                langcode=langcode,
                name=language.get('name', langcode),
                locked=bool(language.get('locked', False)),
            ))

        for entity_type, type_spec in (data.get('entity_types') or {}).items():
            repository.add_entity_type(entity_type, type_spec or {})

        repository.view_counters = dict(data.get('statistics') or {})

        for entity_type, records in (data.get('entities') or {}).items():
            if entity_type not in repository._entity_types:
                repository.add_entity_type(entity_type, {})
            for record in records or []:
                repository.add_record(entity_type, record)

        return repository

    def add_language(self, language: Language) -> None:
        self._languages[language.langcode] = language

    def add_entity_type(self, entity_type: str, raw: Dict[str, Any]) -> None:
        bundles = {}
        for bundle_id, bundle_raw in (raw.get('bundles') or {}).items():
            bundle_raw = bundle_raw or {}
            bundles[bundle_id] = {
                'label': bundle_raw.get('label', bundle_id),
                'translation': bundle_raw.get('translation'),
                'fields': {
                    name: _field_definition(name, field_raw or {})
                    for name, field_raw in (bundle_raw.get('fields') or {}).items()
                },
            }

        with self._lock:
            self._entity_types[entity_type] = {
                'definition': EntityTypeDefinition(
                    id=entity_type,
                    label=raw.get('label', entity_type),
                    bundle_entity_type=raw.get('bundle_entity_type'),
                ),
                'has_bundles': bool(bundles) or raw.get('bundle_entity_type') is not None,
                'has_langcode': bool(raw.get('langcode', True)),
                'translation': bool(raw.get('translation', False)),
                'base_fields': {
                    name: _field_definition(name, field_raw or {})
                    for name, field_raw in (raw.get('base_fields') or {}).items()
                },
                'bundles': bundles,
            }
            self._entities.setdefault(entity_type, {})

    def add_record(self, entity_type: str, record: Dict[str, Any]) -> ContentEntity:
        """Build an entity from a dump record and store it."""
        if 'id' not in record:
            raise DataStoreError("Entity record without id", operation="load", entity_type=entity_type)

        type_info = self._entity_types[entity_type]
        bundle = record.get('bundle') if type_info['has_bundles'] else None
        definitions = dict(self._definitions_for(entity_type, bundle))

        values = dict(record.get('fields') or {})
        for name in values:
            if name not in definitions:
                definitions[name] = _field_definition(name, {})

        fields = {
            name: FieldItemList(definition, _normalize_items(values.get(name), definition.main_property))
            for name, definition in definitions.items()
        }

        langcode = record.get('langcode', 'und') if type_info['has_langcode'] else None
        translations = tuple(record.get('translations') or ([langcode] if langcode else []))

        entity = ContentEntity(
            entity_type=entity_type,
            id=record['id'],
            uuid=str(record.get('uuid') or uuid_lib.uuid5(uuid_lib.NAMESPACE_URL, f"{entity_type}/{record['id']}")),
            label=str(record.get('label') or self._label_from_fields(fields) or ''),
            bundle=bundle,
            langcode=langcode,
            fields=fields,
            created=record.get('created', self._timestamp_from_fields(fields, 'created')),
            changed=record.get('changed', self._timestamp_from_fields(fields, 'changed')),
            translations=translations,
        )

        known = {item.name for item in dataclasses.fields(TranslationMetadata)}
        metadata = {
            code: TranslationMetadata(**{key: value for key, value in (meta or {}).items() if key in known})
            for code, meta in (record.get('translation_metadata') or {}).items()
        }

        with self._lock:
            self._entities[entity_type][entity.id] = entity
            if metadata:
                self._translation_metadata[entity.key] = metadata
        return entity

    @staticmethod
    def _label_from_fields(fields: Dict[str, FieldItemList]) -> Optional[str]:
        for name in ('title', 'name', 'label'):
            field_items = fields.get(name)
            if field_items is not None and field_items.items:
                return field_items.items[0].get(field_items.definition.main_property or 'value')
        return None

    @staticmethod
    def _timestamp_from_fields(fields: Dict[str, FieldItemList], name: str) -> Optional[int]:
        field_items = fields.get(name)
        if field_items is None or not field_items.items:
            return None
        value = field_items.items[0].get('value')
        return int(value) if isinstance(value, (int, float)) else None

    def _definitions_for(self, entity_type: str, bundle: Optional[str]) -> Dict[str, FieldDefinition]:
        type_info = self._entity_types.get(entity_type)
        if type_info is None:
            return {}
        definitions = dict(type_info['base_fields'])
        if bundle and bundle in type_info['bundles']:
            definitions.update(type_info['bundles'][bundle]['fields'])
        return definitions

    # EntityStore

    def load(self, entity_type: str, entity_id: EntityId) -> Optional[ContentEntity]:
        entities = self._entities.get(entity_type, {})
        entity = entities.get(entity_id)
        if entity is None and isinstance(entity_id, str) and entity_id.isdigit():
            entity = entities.get(int(entity_id))
        return entity

    def load_many(self, entity_type: str, entity_ids: Sequence[EntityId]) -> List[ContentEntity]:
        loaded = (self.load(entity_type, entity_id) for entity_id in entity_ids)
        return [entity for entity in loaded if entity is not None]

    def query(
        self,
        entity_type: str,
        bundle: Optional[str] = None,
        conditions: Optional[Dict[str, Any]] = None,
        limit: int = 50,
        offset: int = 0,
        sort_desc: bool = True,
    ) -> List[EntityId]:
        matches = [
            entity for entity in self._entities.get(entity_type, {}).values()
            if (bundle is None or entity.bundle == bundle)
            and all(self._matches(entity, key, value) for key, value in (conditions or {}).items())
        ]
        ids = sorted((entity.id for entity in matches), key=_sort_key, reverse=sort_desc)
        return ids[offset:offset + limit]

    @staticmethod
    def _matches(entity: ContentEntity, key: str, expected: Any) -> bool:
        if key in _ENTITY_ATTRIBUTES:
            actual = getattr(entity, key)
        else:
            field_items = entity.get(key)
            if field_items is None:
                return False
            main_property = field_items.definition.main_property or 'value'
            actual = [item.get(main_property) for item in field_items.items]
            if isinstance(expected, (list, tuple)):
                return any(value in expected for value in actual)
            return expected in actual

        if isinstance(expected, (list, tuple)):
            return actual in expected
        return actual == expected or str(actual) == str(expected)

    # SchemaIntrospection

    def get_entity_types(self) -> List[EntityTypeDefinition]:
        return [info['definition'] for info in self._entity_types.values()]

    def get_bundles(self, entity_type: str) -> List[BundleInfo]:
        type_info = self._entity_types.get(entity_type)
        if type_info is None:
            return []
        if not type_info['bundles']:
            # Types without bundles expose a single bundle named after the type.
            return [BundleInfo(id=entity_type, label=type_info['definition'].label)]
        return [BundleInfo(id=bundle_id, label=info['label']) for bundle_id, info in type_info['bundles'].items()]

    def get_field_definitions(self, entity_type: str, bundle: Optional[str] = None) -> List[FieldDefinition]:
        return list(self._definitions_for(entity_type, bundle).values())

    # TranslationManager

    def is_enabled(self, entity_type: str, bundle: Optional[str] = None) -> bool:
        type_info = self._entity_types.get(entity_type)
        if type_info is None:
            return False
        if bundle and bundle in type_info['bundles']:
            bundle_setting = type_info['bundles'][bundle]['translation']
            if bundle_setting is not None:
                return bool(bundle_setting)
        return type_info['translation']

    def get_translation_metadata(self, entity: ContentEntity, langcode: str) -> Optional[TranslationMetadata]:
        return self._translation_metadata.get(entity.key, {}).get(langcode)

    # LanguageManager

    def get_languages(self) -> Dict[str, Language]:
        return dict(self._languages)
