# modules/services.py
"""
Service wiring

create_app() builds one LedgerServices per application and stores it in
app.extensions['ledgerone']; routes fetch it with get_services().
"""
from dataclasses import dataclass

from flask import current_app

EXTENSION_KEY = 'ledgerone'


@dataclass(frozen=True)
class LedgerServices:
    registry: object
    store: object
    audit: object
    links: object
    resolver: object
    search: object


def build_services(app, registry, store) -> LedgerServices:
    from modules.audit.logger import AuditLogger
    from modules.relationships.service_links import RelationshipStore
    from modules.relationships.service_resolver import RelationshipResolver
    from modules.search.service_search import SearchService

    audit = AuditLogger(store, logger=app.logger, enabled=app.config.get('AUDIT_LOG_ENABLED', True))
    links = RelationshipStore(store, registry, audit)
    resolver = RelationshipResolver(store, registry, links, audit)
    search = SearchService(store, registry, audit)
    return LedgerServices(registry=registry, store=store, audit=audit,
                          links=links, resolver=resolver, search=search)


def get_services() -> LedgerServices:
    return current_app.extensions[EXTENSION_KEY]
