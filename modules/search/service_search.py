# modules/search/service_search.py
"""
Global search across every record type in the registry.

Each type is searched on its own `search_fields` (case-insensitive substring).
Hits are mapped to one result shape, ranked title-matches-first then newest
first, and paginated after the merge. A type whose search fails is logged
and left out of the results.
"""
from typing import Any, Dict, List

from modules.errors import UpstreamStoreError

SOURCE = 'search'


class SearchService:

    def __init__(self, store, registry, audit):
        self.store = store
        self.registry = registry
        self.audit = audit

    def _result(self, descriptor, row: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': row.get('id'),
            'type': descriptor.name,
            'typeLabel': descriptor.label,
            'icon': descriptor.icon,
            'title': self.registry.resolve_display_field(descriptor.name, row),
            'subtitle': self.registry.resolve_subtitle(descriptor.name, row),
            'description': row.get('short_description') or row.get('description') or '',
            'url': f"/{descriptor.name}/{row.get('id')}",
            'created_at': row.get('created_at'),
            'updated_at': row.get('updated_at'),
        }

    def search_all(self, term: str) -> List[Dict[str, Any]]:
        results = []
        for descriptor in self.registry:
            if not descriptor.search_fields:
                continue
            try:
                rows = self.store.search(descriptor.name, descriptor.search_fields, term)
            except UpstreamStoreError as e:
                self.audit.error(SOURCE, 'search', f'Search failed for {descriptor.name}; skipping', e,
                                 {'table': descriptor.name, 'query': term})
                continue
            results.extend(self._result(descriptor, row) for row in rows)

        needle = term.casefold()
        results.sort(key=lambda r: r.get('created_at') or '', reverse=True)
        results.sort(key=lambda r: needle not in r['title'].casefold())
        return results

    def search(self, query: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        term = (query or '').strip()
        if not term:
            return {'results': [], 'total': 0, 'page': page, 'limit': limit, 'hasMore': False}

        results = self.search_all(term)
        start = (page - 1) * limit
        end = start + limit
        page_results = results[start:end]
        self.audit.info(SOURCE, 'search', 'Global search completed', {
            'query': term,
            'totalResults': len(results),
            'returnedResults': len(page_results),
            'page': page,
            'limit': limit,
        })
        return {
            'results': page_results,
            'total': len(results),
            'page': page,
            'limit': limit,
            'hasMore': end < len(results),
        }
