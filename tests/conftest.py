"""
Shared pytest fixtures for the LedgerOne tests.

This module provides:
- an app built with TestConfig (in-memory SQLite, tables created)
- the wired services (store, registry, links, resolver, audit)
- `failing`, which rebuilds the services over a FailingStore (tests/_support)
- small seeding helpers

Usage:
    def test_something(resolver, seed):
        entity = seed('entities', name='Acme LLC')
"""
import pytest

from app import create_app
from config import TestConfig
from models.base import db
from modules.relationships.service_links import RelationshipStore
from modules.relationships.service_resolver import RelationshipResolver
from modules.search.service_search import SearchService
from modules.services import EXTENSION_KEY
from tests._support.fault_injection import FailingStore


# =============================================================================
# App / services
# =============================================================================


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions[EXTENSION_KEY]


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def registry(services):
    return services.registry


@pytest.fixture
def audit(services):
    return services.audit


@pytest.fixture
def links(services):
    return services.links


@pytest.fixture
def resolver(services):
    return services.resolver


@pytest.fixture
def failing(store, registry, audit):
    """
    Build (store, links, resolver, search) over a FailingStore. Audit rows
    still go to the real store so failures can be asserted on.

        failing_store, links, resolver, search = failing(['bank_accounts'])
    """
    def build(tables, operations=None):
        broken = FailingStore(store, tables, operations)
        broken_links = RelationshipStore(broken, registry, audit)
        broken_resolver = RelationshipResolver(broken, registry, broken_links, audit)
        broken_search = SearchService(broken, registry, audit)
        return broken, broken_links, broken_resolver, broken_search
    return build


# =============================================================================
# Data helpers
# =============================================================================


@pytest.fixture
def seed(store):
    """Insert one row and return it: seed('contacts', name='Jane')."""
    def insert(table, **values):
        return store.insert(table, values)
    return insert


@pytest.fixture
def audit_rows(store):
    """Audit rows currently stored, optionally filtered: audit_rows(level='ERROR')."""
    def rows(**filters):
        return store.select_where('app_logs', filters, order_by='timestamp')
    return rows

