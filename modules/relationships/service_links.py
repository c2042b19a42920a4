# modules/relationships/service_links.py
"""
Relationship Store - raw CRUD over the polymorphic join table
(entity_related_data) and over direct entity-to-entity links
(entity_relationships). No enrichment happens here; see service_resolver.
"""
from typing import Any, Dict, List, Optional, Set

from modules.errors import (
    ConflictError,
    NotFoundError,
    UpstreamStoreError,
    ValidationError,
    require_fields,
)

LINK_TABLE = 'entity_related_data'
ENTITY_LINK_TABLE = 'entity_relationships'
SOURCE = 'relationships'


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class RelationshipStore:

    def __init__(self, store, registry, audit):
        self.store = store
        self.registry = registry
        self.audit = audit

    # ---------- entity <-> detail record ----------

    def create(self, entity_id: str, related_data_id: str, type_of_record: str,
               description: Optional[str] = None) -> Dict[str, Any]:
        """
        Link an existing detail record to an entity.

        The same (entity, record, type) triple is never linked twice: the
        existing-link check and the insert are two separate store calls, so two
        simultaneous creates can still both succeed.
        """
        values = {
            'entity_id': entity_id,
            'related_data_id': related_data_id,
            'type_of_record': type_of_record,
        }
        require_fields(values, 'entity_id', 'related_data_id', 'type_of_record')
        values = {k: str(v).strip() for k, v in values.items()}
        if not self.registry.is_linkable(values['type_of_record']):
            raise ValidationError(
                f"Unsupported type of record: {values['type_of_record']}",
                {'type_of_record': values['type_of_record'], 'allowed': self.registry.linkable_types()},
            )

        try:
            existing = self.store.select_where(LINK_TABLE, values)
            if not existing:
                row = self.store.insert(LINK_TABLE, dict(values, relationship_description=_clean_text(description)))
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'create', 'Failed to create relationship', e, values)
            raise
        if existing:
            self.audit.warning(SOURCE, 'create', 'Relationship already exists', values)
            raise ConflictError('Relationship already exists', {'relationship_id': existing[0].get('id')})

        self.audit.info(SOURCE, 'create', 'Created relationship', dict(values, relationship_id=row.get('id')))
        return row

    def get(self, relationship_id: str) -> Dict[str, Any]:
        require_fields({'relationship_id': relationship_id}, 'relationship_id')
        row = self.store.get(LINK_TABLE, relationship_id)
        if row is None:
            raise NotFoundError('Relationship not found', {'relationship_id': relationship_id})
        return row

    def update(self, relationship_id: str, description: Optional[str]) -> Dict[str, Any]:
        """Only the description of a link is mutable."""
        require_fields({'relationship_id': relationship_id}, 'relationship_id')
        context = {'relationship_id': relationship_id}
        try:
            row = self.store.update(LINK_TABLE, relationship_id,
                                    {'relationship_description': _clean_text(description)})
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'update', 'Failed to update relationship', e, context)
            raise
        if row is None:
            self.audit.warning(SOURCE, 'update', 'Relationship not found', context)
            raise NotFoundError('Relationship not found', context)

        self.audit.info(SOURCE, 'update', 'Updated relationship', context)
        return row

    def delete(self, relationship_id: str) -> None:
        require_fields({'relationship_id': relationship_id}, 'relationship_id')
        context = {'relationship_id': relationship_id}
        try:
            removed = self.store.delete(LINK_TABLE, relationship_id)
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'delete', 'Failed to delete relationship', e, context)
            raise
        if not removed:
            self.audit.warning(SOURCE, 'delete', 'Relationship not found', context)
            raise NotFoundError('Relationship not found', context)

        self.audit.info(SOURCE, 'delete', 'Deleted relationship', context)

    def list_by_entity(self, entity_id: str, type_of_record: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Links of one entity, grouped by type, oldest first within a type.
        Links sharing a timestamp fall back to id order, so the listing is
        stable but not strictly insertion order.
        """
        require_fields({'entity_id': entity_id}, 'entity_id')
        filters = {'entity_id': entity_id}
        if type_of_record:
            filters['type_of_record'] = type_of_record
        return self.store.select_where(LINK_TABLE, filters, order_by=('type_of_record', 'created_at', 'id'))

    def list_by_detail_record(self, related_data_id: str, type_of_record: str) -> List[Dict[str, Any]]:
        """Reverse lookup. A detail record may belong to any number of entities."""
        require_fields({'related_data_id': related_data_id, 'type_of_record': type_of_record},
                       'related_data_id', 'type_of_record')
        return self.store.select_where(
            LINK_TABLE,
            {'related_data_id': related_data_id, 'type_of_record': type_of_record},
            order_by=('created_at', 'id'),
        )

    def existing_related_ids(self, entity_id: str, type_of_record: str) -> Set[str]:
        return {row.get('related_data_id') for row in self.list_by_entity(entity_id, type_of_record)}

    # ---------- entity <-> entity ----------

    def create_entity_link(self, from_entity_id: str, to_entity_id: str,
                           relationship_type: Optional[str] = None,
                           description: Optional[str] = None) -> Dict[str, Any]:
        values = {'from_entity_id': from_entity_id, 'to_entity_id': to_entity_id}
        require_fields(values, 'from_entity_id', 'to_entity_id')
        values = {k: str(v).strip() for k, v in values.items()}
        if values['from_entity_id'] == values['to_entity_id']:
            raise ValidationError('An entity cannot be related to itself', values)

        try:
            row = self.store.insert(ENTITY_LINK_TABLE, dict(
                values,
                relationship_type=_clean_text(relationship_type),
                description=_clean_text(description),
            ))
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'create_entity_link', 'Failed to create entity relationship', e, values)
            raise
        self.audit.info(SOURCE, 'create_entity_link', 'Created entity relationship',
                        dict(values, relationship_id=row.get('id')))
        return row

    def list_entity_links(self, entity_id: str) -> List[Dict[str, Any]]:
        """Entity-to-entity links where the entity is on either side."""
        require_fields({'entity_id': entity_id}, 'entity_id')
        outgoing = self.store.select_where(ENTITY_LINK_TABLE, {'from_entity_id': entity_id}, order_by='created_at')
        incoming = self.store.select_where(ENTITY_LINK_TABLE, {'to_entity_id': entity_id}, order_by='created_at')
        seen = set()
        rows = []
        for row in outgoing + incoming:
            if row.get('id') in seen:
                continue
            seen.add(row.get('id'))
            rows.append(row)
        return rows

    def delete_entity_link(self, link_id: str) -> None:
        require_fields({'link_id': link_id}, 'link_id')
        context = {'link_id': link_id}
        try:
            removed = self.store.delete(ENTITY_LINK_TABLE, link_id)
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'delete_entity_link', 'Failed to delete entity relationship', e, context)
            raise
        if not removed:
            raise NotFoundError('Entity relationship not found', context)
        self.audit.info(SOURCE, 'delete_entity_link', 'Deleted entity relationship', context)
