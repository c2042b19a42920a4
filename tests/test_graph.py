"""Relationship graph around one node."""
import pytest

from modules.errors import NotFoundError, ValidationError


def _categories(graph):
    return [b['category'] for b in graph['relationships']]


def _branch(graph, category):
    return next(b for b in graph['relationships'] if b['category'] == category)


@pytest.fixture
def acme(seed):
    return seed('entities', name='Acme LLC', type='Business')


def test_entity_graph_has_one_branch_per_linked_type(links, resolver, seed, acme):
    contact = seed('contacts', name='Jane Doe')
    chase = seed('bank_accounts', bank_name='Chase')
    ally = seed('bank_accounts', bank_name='Ally')
    links.create(acme['id'], contact['id'], 'contacts')
    links.create(acme['id'], chase['id'], 'bank_accounts')
    links.create(acme['id'], ally['id'], 'bank_accounts')

    graph = resolver.build_relationship_graph('entities', acme['id'])

    assert graph['centralNode'] == {'id': acme['id'], 'label': 'Acme LLC', 'type': 'entities', 'table': 'entities'}
    assert sorted(_categories(graph)) == ['Bank Accounts', 'Contacts']
    bank = _branch(graph, 'Bank Accounts')
    assert bank['type'] == 'bank_accounts'
    assert bank['color'] == '#22c55e'
    assert {i['label'] for i in bank['items']} == {'Chase', 'Ally'}
    assert all(i['type'] == 'bank_accounts' for i in bank['items'])


def test_entity_without_links_has_no_branches(resolver, acme):
    graph = resolver.build_relationship_graph('entities', acme['id'])
    assert graph['relationships'] == []


def test_related_entities_branch(links, resolver, seed, acme):
    holding = seed('entities', name='Acme Holdings')
    sister = seed('entities', name='Acme Labs')
    links.create_entity_link(holding['id'], acme['id'], 'parent of')
    links.create_entity_link(acme['id'], sister['id'], 'sister company')

    graph = resolver.build_relationship_graph('entities', acme['id'])
    branch = _branch(graph, 'Related Entities')
    assert branch['type'] == 'entities'
    assert branch['color'] == '#14b8a6'
    assert {i['label'] for i in branch['items']} == {'Acme Holdings', 'Acme Labs'}


def test_parent_account_lists_its_securities(resolver, seed):
    account = seed('investment_accounts', provider='Fidelity', account_type='Brokerage')
    seed('securities_held', investment_account_id=account['id'], symbol='VTI', name='Vanguard Total')
    seed('securities_held', investment_account_id=account['id'], symbol='', name='Cash Sweep')
    seed('securities_held', symbol='AAPL')

    graph = resolver.build_relationship_graph('investment_accounts', account['id'])
    assert _categories(graph) == ['Securities Held']
    labels = {i['label'] for i in _branch(graph, 'Securities Held')['items']}
    assert labels == {'VTI', 'Cash Sweep'}


def test_security_points_back_at_its_account(resolver, seed):
    account = seed('investment_accounts', provider='Fidelity')
    security = seed('securities_held', investment_account_id=account['id'], symbol='VTI')

    graph = resolver.build_relationship_graph('securities_held', security['id'])
    assert graph['centralNode']['label'] == 'VTI'
    assert graph['relationships'] == [{
        'category': 'Investment Accounts',
        'type': 'investment_accounts',
        'color': '#f59e0b',
        'items': [{'id': account['id'], 'label': 'Fidelity', 'type': 'investment_accounts'}],
    }]


def test_detail_record_root_skips_entity_steps(links, resolver, seed, acme):
    contact = seed('contacts', name='Jane Doe')
    links.create(acme['id'], contact['id'], 'contacts')

    graph = resolver.build_relationship_graph('contacts', contact['id'])
    assert graph['centralNode']['table'] == 'contacts'
    assert graph['relationships'] == []


def test_dangling_link_shows_as_unknown_item(links, resolver, store, seed, acme):
    email = seed('emails', email='old@acme.test')
    links.create(acme['id'], email['id'], 'emails')
    store.delete('emails', email['id'])

    graph = resolver.build_relationship_graph('entities', acme['id'])
    assert _branch(graph, 'Emails')['items'] == [{'id': email['id'], 'label': 'Unknown Record', 'type': 'emails'}]


def test_failing_step_does_not_abort_the_others(links, failing, seed, acme, audit_rows):
    contact = seed('contacts', name='Jane Doe')
    other = seed('entities', name='Beta Inc')
    links.create(acme['id'], contact['id'], 'contacts')
    links.create_entity_link(acme['id'], other['id'])

    _, _, broken_resolver, _ = failing(['entity_relationships'])
    graph = broken_resolver.build_relationship_graph('entities', acme['id'])

    assert _categories(graph) == ['Contacts']
    assert audit_rows(level='ERROR', action='build_relationship_graph')


def test_failing_linked_type_drops_only_that_branch(links, failing, seed, acme):
    contact = seed('contacts', name='Jane Doe')
    phone = seed('phones', phone='555-0100')
    links.create(acme['id'], contact['id'], 'contacts')
    links.create(acme['id'], phone['id'], 'phones')

    _, _, broken_resolver, _ = failing(['phones'])
    graph = broken_resolver.build_relationship_graph('entities', acme['id'])
    assert _categories(graph) == ['Contacts']


def test_unknown_root_type(resolver):
    with pytest.raises(NotFoundError):
        resolver.build_relationship_graph('boats', 'b1')


def test_missing_central_record(resolver):
    with pytest.raises(NotFoundError):
        resolver.build_relationship_graph('entities', 'does-not-exist')


def test_missing_parameters(resolver):
    with pytest.raises(ValidationError):
        resolver.build_relationship_graph('entities', '')


def test_contacts_branch_follows_unlink_and_relink(links, resolver, seed, acme):
    jane = seed('contacts', name='Jane Doe')
    john = seed('contacts', name='John Smith')
    rel = links.create(acme['id'], jane['id'], 'contacts')

    assert _categories(resolver.build_relationship_graph('entities', acme['id'])) == ['Contacts']

    links.delete(rel['id'])
    assert _categories(resolver.build_relationship_graph('entities', acme['id'])) == []

    links.create(acme['id'], john['id'], 'contacts')
    graph = resolver.build_relationship_graph('entities', acme['id'])
    assert _categories(graph) == ['Contacts']
    assert [i['label'] for i in _branch(graph, 'Contacts')['items']] == ['John Smith']
