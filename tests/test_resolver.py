"""Enriched reads across the polymorphic boundary."""
import pytest

from modules.errors import UpstreamStoreError, ValidationError
from modules.relationships.service_resolver import ERROR_LOADING, UNKNOWN_RECORD


@pytest.fixture
def acme(seed):
    return seed('entities', name='Acme LLC', type='Business')


class TestEnrichedRelationships:

    def test_display_name_and_type_label(self, links, resolver, seed, acme):
        account = seed('bank_accounts', bank_name='Chase', account_number='000111222333')
        links.create(acme['id'], account['id'], 'bank_accounts', 'Operating account')

        [item] = resolver.get_enriched_relationships_for_entity(acme['id'])
        assert item['related_data_display_name'] == 'Chase'
        assert item['type_label'] == 'Bank Accounts'
        assert item['relationship_description'] == 'Operating account'

    def test_empty_entity(self, resolver, acme):
        assert resolver.get_enriched_relationships_for_entity(acme['id']) == []

    def test_dangling_link_is_kept_as_unknown_record(self, links, resolver, store, seed, acme, audit_rows):
        contact = seed('contacts', name='Gone Soon')
        links.create(acme['id'], contact['id'], 'contacts')
        store.delete('contacts', contact['id'])

        [item] = resolver.get_enriched_relationships_for_entity(acme['id'])
        assert item['related_data_display_name'] == UNKNOWN_RECORD
        assert item['related_data_id'] == contact['id']
        assert audit_rows(level='WARNING', action='get_enriched_relationships')

    def test_failing_type_degrades_only_its_own_items(self, links, failing, seed, acme, audit_rows):
        account = seed('bank_accounts', bank_name='Chase')
        contact = seed('contacts', name='Jane Doe')
        links.create(acme['id'], account['id'], 'bank_accounts')
        links.create(acme['id'], contact['id'], 'contacts')

        _, _, broken_resolver, _ = failing(['bank_accounts'])
        items = broken_resolver.get_enriched_relationships_for_entity(acme['id'])

        names = {i['type_of_record']: i['related_data_display_name'] for i in items}
        assert names == {'bank_accounts': ERROR_LOADING, 'contacts': 'Jane Doe'}
        assert audit_rows(level='ERROR', action='load_related_records')

    def test_failure_of_the_link_lookup_propagates(self, failing, acme):
        _, _, broken_resolver, _ = failing(['entity_related_data'])
        with pytest.raises(UpstreamStoreError):
            broken_resolver.get_enriched_relationships_for_entity(acme['id'])

    def test_filter_by_type(self, links, resolver, seed, acme):
        email = seed('emails', email='ops@acme.test')
        phone = seed('phones', phone='555-0100')
        links.create(acme['id'], email['id'], 'emails')
        links.create(acme['id'], phone['id'], 'phones')

        items = resolver.get_enriched_relationships_for_entity(acme['id'], 'phones')
        assert [i['related_data_display_name'] for i in items] == ['555-0100']


class TestReverseLookup:

    def test_both_directions_agree(self, links, resolver, seed, acme):
        other = seed('entities', name='Beta Inc')
        website = seed('websites', url='https://shared.test')
        links.create(acme['id'], website['id'], 'websites')
        links.create(other['id'], website['id'], 'websites')

        owners = resolver.get_entities_for_detail_record(website['id'], 'websites')
        assert {o['entity']['name'] for o in owners} == {'Acme LLC', 'Beta Inc'}
        for owner in owners:
            forward = resolver.get_enriched_relationships_for_entity(owner['entity_id'])
            assert website['id'] in {i['related_data_id'] for i in forward}

    def test_item_shape(self, links, resolver, seed, acme):
        website = seed('websites', url='https://acme.test')
        rel = links.create(acme['id'], website['id'], 'websites', 'Main site')

        [item] = resolver.get_entities_for_detail_record(website['id'], 'websites')
        assert item['relationship_id'] == rel['id']
        assert item['relationship_description'] == 'Main site'
        assert item['entity'] == {
            'id': acme['id'],
            'name': 'Acme LLC',
            'type': 'Business',
            'created_at': acme['created_at'],
            'updated_at': acme['updated_at'],
        }

    def test_missing_entity_is_none(self, links, resolver, store, seed, acme):
        website = seed('websites', url='https://acme.test')
        links.create(acme['id'], website['id'], 'websites')
        store.delete('entities', acme['id'])

        [item] = resolver.get_entities_for_detail_record(website['id'], 'websites')
        assert item['entity'] is None

    def test_no_owners(self, resolver):
        assert resolver.get_entities_for_detail_record('nobody', 'websites') == []

    def test_entity_fetch_failure_keeps_relationships(self, links, failing, seed, acme):
        website = seed('websites', url='https://acme.test')
        links.create(acme['id'], website['id'], 'websites')

        _, _, broken_resolver, _ = failing(['entities'])
        [item] = broken_resolver.get_entities_for_detail_record(website['id'], 'websites')
        assert item['entity_id'] == acme['id']
        assert item['entity'] is None


class TestAvailableRecords:

    def test_linked_records_are_excluded_and_rest_sorted(self, links, resolver, seed, acme):
        chase = seed('bank_accounts', bank_name='Chase')
        seed('bank_accounts', bank_name='ally Bank')
        seed('bank_accounts', bank_name='Bank of the West')
        links.create(acme['id'], chase['id'], 'bank_accounts')

        available = resolver.get_available_records('bank_accounts', acme['id'])
        assert [r['bank_name'] for r in available] == ['ally Bank', 'Bank of the West']

    def test_other_entities_links_do_not_matter(self, links, resolver, seed, acme):
        other = seed('entities', name='Beta Inc')
        email = seed('emails', email='a@b.test')
        links.create(other['id'], email['id'], 'emails')

        available = resolver.get_available_records('emails', acme['id'])
        assert [r['id'] for r in available] == [email['id']]

    def test_everything_linked_gives_empty_list(self, links, resolver, seed, acme):
        email = seed('emails', email='a@b.test')
        links.create(acme['id'], email['id'], 'emails')
        assert resolver.get_available_records('emails', acme['id']) == []

    @pytest.mark.parametrize('type_of_record,entity_id', [
        ('', 'e1'),
        ('emails', None),
        ('entities', 'e1'),
        ('boats', 'e1'),
    ])
    def test_invalid_arguments(self, resolver, type_of_record, entity_id):
        with pytest.raises(ValidationError):
            resolver.get_available_records(type_of_record, entity_id)


class TestAcmeWalkthrough:

    @pytest.fixture
    def acme_inc(self, seed):
        return seed('entities', name='Acme Inc', type='business')

    def test_linked_contact_is_listed_with_its_description(self, links, resolver, seed, acme_inc):
        jane = seed('contacts', name='Jane Doe')
        links.create(acme_inc['id'], jane['id'], 'contacts', 'CFO')

        [item] = resolver.get_enriched_relationships_for_entity(acme_inc['id'])
        assert item['related_data_display_name'] == 'Jane Doe'
        assert item['relationship_description'] == 'CFO'

    def test_linked_contact_leaves_the_other_contact_available(self, links, resolver, seed, acme_inc):
        jane = seed('contacts', name='Jane Doe')
        john = seed('contacts', name='John Smith')
        links.create(acme_inc['id'], jane['id'], 'contacts', 'CFO')

        available = resolver.get_available_records('contacts', acme_inc['id'])
        ids = [r['id'] for r in available]
        assert jane['id'] not in ids
        assert john['id'] in ids
