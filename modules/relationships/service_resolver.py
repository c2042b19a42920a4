# modules/relationships/service_resolver.py
"""
Relationship Resolver

Turns raw link rows into UI-ready views by joining across the polymorphic
boundary: entity -> linked detail records (with display names), detail
record -> owning entities, "records not yet linked", and the categorized
relationship graph around one node.

Reads degrade instead of failing: a link whose target row is gone is shown as
"Unknown Record", a record group that cannot be loaded is shown as
"Error Loading Record", and a graph step whose fetch fails is skipped. Only
the primary lookup of each operation propagates errors.
"""
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from modules.errors import (
    DanglingReferenceError,
    NotFoundError,
    UpstreamStoreError,
    ValidationError,
    require_fields,
)
from modules.registry import ROOT_TYPE

SOURCE = 'relationships'
UNKNOWN_RECORD = 'Unknown Record'
ERROR_LOADING = 'Error Loading Record'
RELATED_ENTITIES = 'Related Entities'


def _group_by_type(relationships: List[Dict[str, Any]]) -> 'OrderedDict[str, List[Dict[str, Any]]]':
    groups: 'OrderedDict[str, List[Dict[str, Any]]]' = OrderedDict()
    for rel in relationships:
        groups.setdefault(rel.get('type_of_record'), []).append(rel)
    return groups


def _entity_ref(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {
        'id': row.get('id'),
        'name': row.get('name'),
        'type': row.get('type'),
        'created_at': row.get('created_at'),
        'updated_at': row.get('updated_at'),
    }


class RelationshipResolver:

    def __init__(self, store, registry, links, audit):
        self.store = store
        self.registry = registry
        self.links = links
        self.audit = audit

    # ---------- helpers ----------

    def _load_group(self, type_of_record: str, ids: List[str]) -> Optional[Dict[str, Dict[str, Any]]]:
        """Rows of one type keyed by id, or None when the group cannot be loaded."""
        if type_of_record not in self.registry:
            self.audit.warning(SOURCE, 'load_related_records', 'Relationship names an unknown record type',
                               {'type_of_record': type_of_record, 'ids': ids})
            return None
        try:
            return self.store.get_many(type_of_record, ids)
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'load_related_records', 'Failed to load related records', e,
                             {'type_of_record': type_of_record, 'ids': ids})
            return None

    def _display_name(self, relationship: Dict[str, Any], rows_by_id: Dict[str, Dict[str, Any]]) -> str:
        type_of_record = relationship.get('type_of_record')
        related_id = relationship.get('related_data_id')
        row = rows_by_id.get(related_id)
        if row is None:
            raise DanglingReferenceError(type_of_record, related_id)
        return self.registry.resolve_display_field(type_of_record, row)

    def _node(self, type_name: str, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': row.get('id'),
            'label': self.registry.resolve_display_field(type_name, row),
            'type': type_name,
        }

    def _branch(self, type_name: str, items: List[Dict[str, Any]], category: Optional[str] = None):
        return {
            'category': category or self.registry.humanize_label(type_name),
            'type': type_name,
            'color': self.registry.color_for(type_name),
            'items': items,
        }

    def _attempt(self, step: str, context: Dict[str, Any], fn):
        try:
            return fn()
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'build_relationship_graph',
                             f'Graph step "{step}" failed; continuing', e, context)
            return None

    # ---------- entity -> detail records ----------

    def get_enriched_relationships_for_entity(self, entity_id: str,
                                              type_of_record: Optional[str] = None) -> List[Dict[str, Any]]:
        context = {'entity_id': entity_id, 'type_of_record': type_of_record}
        try:
            relationships = self.links.list_by_entity(entity_id, type_of_record)
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'get_enriched_relationships', 'Failed to fetch relationships', e, context)
            raise

        loaded = {
            type_name: self._load_group(type_name, [r.get('related_data_id') for r in group])
            for type_name, group in _group_by_type(relationships).items()
        }

        enriched = []
        dangling = []
        for rel in relationships:
            type_name = rel.get('type_of_record')
            rows_by_id = loaded.get(type_name)
            if rows_by_id is None:
                display_name = ERROR_LOADING
            else:
                try:
                    display_name = self._display_name(rel, rows_by_id)
                except DanglingReferenceError as e:
                    display_name = UNKNOWN_RECORD
                    dangling.append(dict(e.details, relationship_id=rel.get('id')))
            enriched.append(dict(
                rel,
                related_data_display_name=display_name,
                type_label=self.registry.label_for(type_name),
            ))

        if dangling:
            self.audit.warning(SOURCE, 'get_enriched_relationships',
                               'Relationships point at records that no longer exist',
                               dict(context, dangling=dangling))
        self.audit.info(SOURCE, 'get_enriched_relationships', 'Fetched relationships',
                        dict(context, count=len(enriched)))
        return enriched

    # ---------- detail record -> entities ----------

    def get_entities_for_detail_record(self, related_data_id: str, type_of_record: str) -> List[Dict[str, Any]]:
        context = {'related_data_id': related_data_id, 'type_of_record': type_of_record}
        try:
            relationships = self.links.list_by_detail_record(related_data_id, type_of_record)
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'get_entities_for_detail_record', 'Failed to fetch relationships', e, context)
            raise
        if not relationships:
            return []

        try:
            entities = self.store.get_many(ROOT_TYPE, [r.get('entity_id') for r in relationships])
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'get_entities_for_detail_record', 'Failed to fetch entity details', e,
                             context)
            entities = {}

        return [
            {
                'relationship_id': rel.get('id'),
                'entity_id': rel.get('entity_id'),
                'type_of_record': rel.get('type_of_record'),
                'relationship_description': rel.get('relationship_description'),
                'created_at': rel.get('created_at'),
                'updated_at': rel.get('updated_at'),
                'entity': _entity_ref(entities.get(rel.get('entity_id'))),
            }
            for rel in relationships
        ]

    # ---------- available records ----------

    def get_available_records(self, type_of_record: str, entity_id: str) -> List[Dict[str, Any]]:
        """
        Every record of the type not yet linked to the entity, sorted by display
        name. Unpaginated: bounded by the size of one record-type table.
        """
        require_fields({'type': type_of_record, 'entity_id': entity_id}, 'type', 'entity_id')
        if not self.registry.is_linkable(type_of_record):
            raise ValidationError(f"Unsupported type of record: {type_of_record}",
                                  {'type_of_record': type_of_record})

        context = {'type_of_record': type_of_record, 'entity_id': entity_id}
        try:
            existing_ids = self.links.existing_related_ids(entity_id, type_of_record)
            rows = self.store.select_all(type_of_record, order_by=self.registry.display_field_for(type_of_record))
        except UpstreamStoreError as e:
            self.audit.error(SOURCE, 'get_available_records', 'Failed to fetch available records', e, context)
            raise

        available = [row for row in rows if row.get('id') not in existing_ids]
        available.sort(key=lambda row: self.registry.resolve_display_field(type_of_record, row).casefold())
        self.audit.info(SOURCE, 'get_available_records', 'Fetched available records',
                        dict(context, count=len(available)))
        return available

    # ---------- graph ----------

    def build_relationship_graph(self, root_type: str, root_id: str) -> Dict[str, Any]:
        """
        Categorized fan-out around one node:
          1. direct children (registry child links)
          2. direct parent (registry parent link)
          3. polymorphic links, one branch per linked type   (entities only)
          4. entity-to-entity links, one "Related Entities" branch (entities only)
        Each fetch is independent; a failing one is logged and its branch left out.
        """
        require_fields({'rootType': root_type, 'rootId': root_id}, 'rootType', 'rootId')
        self.registry.require(root_type)

        central = self.store.get(root_type, root_id)
        if central is None:
            raise NotFoundError('Central node not found', {'root_type': root_type, 'root_id': root_id})

        branches: List[Dict[str, Any]] = []
        branches.extend(self._child_branches(root_type, root_id))
        branches.extend(self._parent_branches(root_type, central))
        if root_type == ROOT_TYPE:
            branches.extend(self._related_data_branches(root_id))
            branches.extend(self._entity_link_branches(root_id))

        central_node = dict(self._node(root_type, central), table=root_type)
        return {'centralNode': central_node, 'relationships': branches}

    def _child_branches(self, root_type: str, root_id: str) -> List[Dict[str, Any]]:
        branches = []
        for link in self.registry.get_child_links(root_type):
            rows = self._attempt(
                'child_links',
                {'root_type': root_type, 'root_id': root_id, 'child_type': link.child_type},
                lambda: self.store.select_where(link.child_type, {link.foreign_key_field: root_id},
                                                order_by='created_at'),
            )
            if rows:
                branches.append(self._branch(link.child_type, [self._node(link.child_type, r) for r in rows]))
        return branches

    def _parent_branches(self, root_type: str, central: Dict[str, Any]) -> List[Dict[str, Any]]:
        parent = self.registry.get_parent_link(root_type)
        if parent is None:
            return []
        parent_id = central.get(parent.foreign_key_field)
        if not parent_id:
            return []
        row = self._attempt(
            'parent_link',
            {'root_type': root_type, 'parent_type': parent.parent_type, 'parent_id': parent_id},
            lambda: self.store.get(parent.parent_type, parent_id),
        )
        if not row:
            return []
        return [self._branch(parent.parent_type, [self._node(parent.parent_type, row)])]

    def _related_data_branches(self, entity_id: str) -> List[Dict[str, Any]]:
        relationships = self._attempt('related_data', {'entity_id': entity_id},
                                      lambda: self.links.list_by_entity(entity_id))
        if not relationships:
            return []

        branches = []
        for type_name, group in _group_by_type(relationships).items():
            if type_name not in self.registry:
                self.audit.warning(SOURCE, 'build_relationship_graph', 'Skipping unknown record type',
                                   {'entity_id': entity_id, 'type_of_record': type_name})
                continue
            ids = list(dict.fromkeys(r.get('related_data_id') for r in group))
            rows_by_id = self._attempt(
                'related_data',
                {'entity_id': entity_id, 'type_of_record': type_name},
                lambda: self.store.get_many(type_name, ids),
            )
            if rows_by_id is None:
                continue
            items = [
                self._node(type_name, rows_by_id[i]) if i in rows_by_id
                else {'id': i, 'label': UNKNOWN_RECORD, 'type': type_name}
                for i in ids
            ]
            branches.append(self._branch(type_name, items))
        return branches

    def _entity_link_branches(self, entity_id: str) -> List[Dict[str, Any]]:
        links = self._attempt('entity_links', {'entity_id': entity_id},
                              lambda: self.links.list_entity_links(entity_id))
        if not links:
            return []

        other_ids = []
        for link in links:
            other = link.get('to_entity_id') if link.get('from_entity_id') == entity_id else link.get('from_entity_id')
            if other and other != entity_id and other not in other_ids:
                other_ids.append(other)
        if not other_ids:
            return []

        rows_by_id = self._attempt('entity_links', {'entity_id': entity_id, 'ids': other_ids},
                                   lambda: self.store.get_many(ROOT_TYPE, other_ids))
        if rows_by_id is None:
            return []
        items = [
            self._node(ROOT_TYPE, rows_by_id[i]) if i in rows_by_id
            else {'id': i, 'label': UNKNOWN_RECORD, 'type': ROOT_TYPE}
            for i in other_ids
        ]
        return [self._branch(ROOT_TYPE, items, category=RELATED_ENTITIES)]
