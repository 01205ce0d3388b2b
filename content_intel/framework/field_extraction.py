"""
Field Value Extraction

Turns the stored items of an entity's fields into the JSON-shaped values
of a field snapshot, one rule per field kind.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from ..domain.interfaces import EntityStore
from ..domain.models import ContentEntity, FieldItemList

logger = logging.getLogger(__name__)

REFERENCE_TYPES = frozenset({'entity_reference', 'entity_reference_revisions'})
FILE_TYPES = frozenset({'file', 'image'})
TEXT_TYPES = frozenset({'text', 'text_long', 'text_with_summary'})
TEMPORAL_TYPES = frozenset({'datetime', 'timestamp', 'created', 'changed'})


def _first_value(entity: ContentEntity, field_name: str) -> Any:
    field_items = entity.get(field_name)
    if field_items is None or not field_items.items:
        return None
    item = field_items.items[0]
    main_property = field_items.definition.main_property or 'value'
    return item.get(main_property)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


class FieldValueExtractor:
    """
    Extracts field snapshots from entities.

    Reference and file fields are resolved through the entity store so the
    snapshot can carry the referenced label and file metadata; file URLs are
    built from `file_base_url`.
    """

    def __init__(self, entity_store: Optional[EntityStore] = None, file_base_url: str = ""):
        self.entity_store = entity_store
        self.file_base_url = file_base_url.rstrip('/')

    def extract(self, entity: ContentEntity, field_names: Iterable[str] = ()) -> Dict[str, Any]:
        """Every non-computed, non-empty field, restricted to `field_names` when given."""
        wanted = set(field_names)
        data = {}

        for field_name, field_items in entity.fields.items():
            if wanted and field_name not in wanted:
                continue
            if field_items.definition.computed:
                continue
            if field_items.is_empty():
                continue
            data[field_name] = self.extract_field_value(field_items)

        return data

    def extract_field_value(self, field_items: FieldItemList) -> Any:
        values = []
        for item in field_items:
            value = self.extract_item_value(item, field_items)
            if value is not None:
                values.append(value)

        if field_items.definition.cardinality == 1 and len(values) == 1:
            return values[0]
        return values

    def extract_item_value(self, item: Dict[str, Any], field_items: FieldItemList) -> Any:
        field_type = field_items.type

        if field_type in REFERENCE_TYPES:
            return self._extract_reference(item, field_items)
        if field_type in FILE_TYPES:
            return self._extract_file(item, field_items)
        if field_type in TEXT_TYPES:
            return self._extract_text(item, field_type)

        if field_type == 'link':
            return {
                'uri': item.get('uri'),
                'title': item.get('title') or '',
                'options': item.get('options') or {},
            }

        if field_type in TEMPORAL_TYPES:
            value = item.get('value')
            if _is_numeric(value):
                timestamp = int(float(value))
                return {
                    'timestamp': timestamp,
                    'iso8601': datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat(),
                }
            return value

        if field_type == 'boolean':
            return bool(item.get('value'))

        main_property = field_items.definition.main_property
        if main_property and item.get(main_property) is not None:
            return item[main_property]
        return dict(item)

    def _load_target(self, target_type: str, target_id: Any) -> Optional[ContentEntity]:
        if self.entity_store is None or target_id is None:
            return None
        return self.entity_store.load(target_type, target_id)

    def _extract_reference(self, item: Dict[str, Any], field_items: FieldItemList) -> Dict[str, Any]:
        target_id = item.get('target_id')
        target_type = field_items.definition.settings.get('target_type')
        target = self._load_target(target_type, target_id) if target_type else None

        if target is None:
            logger.debug(f"Unresolved reference {target_type}/{target_id} in {field_items.name}")
            return {'target_id': target_id}
        return {
            'target_id': target_id,
            'target_type': target.entity_type,
            'label': target.label,
        }

    def _extract_file(self, item: Dict[str, Any], field_items: FieldItemList) -> Dict[str, Any]:
        value: Dict[str, Any] = {'target_id': item.get('target_id')}

        target_type = field_items.definition.settings.get('target_type', 'file')
        file_entity = self._load_target(target_type, item.get('target_id'))
        if file_entity is not None:
            uri = _first_value(file_entity, 'uri')
            value['filename'] = _first_value(file_entity, 'filename')
            value['uri'] = uri
            value['url'] = self.file_url(uri)
            value['mime'] = _first_value(file_entity, 'filemime')
            value['size'] = _first_value(file_entity, 'filesize')

        if field_items.type == 'image':
            value['alt'] = item.get('alt') or ''
            value['title'] = item.get('title') or ''
            value['width'] = item.get('width')
            value['height'] = item.get('height')
        return value

    @staticmethod
    def _extract_text(item: Dict[str, Any], field_type: str) -> Dict[str, Any]:
        value = {
            'value': item.get('value'),
            'format': item.get('format'),
        }
        if item.get('processed') is not None:
            value['processed'] = item['processed']
        if field_type == 'text_with_summary' and item.get('summary'):
            value['summary'] = item['summary']
        return value

    def file_url(self, uri: Optional[str]) -> Optional[str]:
        """Absolute URL of a stream-wrapper URI such as public://images/a.png."""
        if not uri:
            return uri
        scheme, separator, path = uri.partition('://')
        if not separator or scheme in ('http', 'https'):
            return uri
        if not self.file_base_url:
            return '/' + path
        return f"{self.file_base_url}/{path}"
