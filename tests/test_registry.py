"""Record type registry: display fallback, parent/child links, validation."""
import pytest

from modules.errors import NotFoundError, RegistryConfigError
from modules.registry import (
    RECORD_TYPES,
    ChildLink,
    ParentLink,
    RecordTypeRegistry,
    humanize_label,
    validate_registry,
)


@pytest.fixture
def reg():
    return RecordTypeRegistry.from_config()


class TestDisplayField:

    def test_first_non_blank_candidate_wins(self, reg):
        record = {'id': 'c1', 'name': '   ', 'first_name': 'Ann', 'last_name': 'Lee'}
        assert reg.resolve_display_field('contacts', record) == 'Ann'

    def test_falls_back_to_id_when_all_candidates_blank(self, reg):
        record = {'id': 'c1', 'name': '', 'first_name': None}
        assert reg.resolve_display_field('contacts', record) == 'ID: c1'

    def test_value_is_trimmed(self, reg):
        assert reg.resolve_display_field('emails', {'id': 'e1', 'email': '  a@b.co '}) == 'a@b.co'

    def test_non_string_values_are_stringified(self, reg):
        record = {'id': 'b1', 'bank_name': None, 'account_name': None, 'account_number': 1234}
        assert reg.resolve_display_field('bank_accounts', record) == '1234'

    def test_unknown_type_uses_name(self, reg):
        assert reg.resolve_display_field('boats', {'id': 'x', 'name': 'Sea Breeze'}) == 'Sea Breeze'
        assert reg.resolve_display_field('boats', {'id': 'x'}) == 'ID: x'

    def test_non_mapping_record_never_raises(self, reg):
        assert reg.resolve_display_field('contacts', None) == 'ID: None'
        assert reg.resolve_display_field('contacts', 'oops') == 'ID: None'

    def test_display_field_for_is_first_candidate(self, reg):
        assert reg.display_field_for('websites') == 'url'
        assert reg.display_field_for('unknown') == 'name'


class TestSubtitle:

    def test_bank_account_number_is_masked(self, reg):
        record = {'id': 'b1', 'bank_name': 'Chase', 'account_number': '000123456789'}
        assert reg.resolve_subtitle('bank_accounts', record) == '****6789'

    def test_contact_subtitle_falls_through_to_email(self, reg):
        assert reg.resolve_subtitle('contacts', {'title': '', 'email': 'j@x.io'}) == 'j@x.io'

    def test_unknown_type_has_no_subtitle(self, reg):
        assert reg.resolve_subtitle('boats', {'name': 'x'}) == ''


class TestLinks:

    def test_child_links_derived_from_parent_entries(self, reg):
        assert reg.get_child_links('investment_accounts') == [
            ChildLink('securities_held', 'investment_account_id')
        ]
        assert reg.get_child_links('contacts') == []
        assert reg.get_child_links('nope') == []

    def test_parent_link(self, reg):
        assert reg.get_parent_link('securities_held') == ParentLink('investment_accounts', 'investment_account_id')
        assert reg.get_parent_link('entities') is None

    def test_linkable_types_exclude_root_and_child_only_types(self, reg):
        linkable = reg.linkable_types()
        assert 'entities' not in linkable
        assert 'securities_held' not in linkable
        assert {'contacts', 'bank_accounts', 'hosting_accounts'} <= set(linkable)
        assert reg.is_linkable('emails')
        assert not reg.is_linkable('boats')


class TestLookups:

    def test_require_unknown_type(self, reg):
        with pytest.raises(NotFoundError):
            reg.require('boats')

    def test_labels_and_colors(self, reg):
        assert reg.label_for('bank_accounts') == 'Bank Accounts'
        assert reg.label_for('boat_slips') == 'Boat Slips'
        assert reg.color_for('entities') == '#14b8a6'
        assert reg.color_for('boats') == '#6b7280'

    def test_every_configured_type_is_present(self, reg):
        assert set(reg.names()) == set(RECORD_TYPES)


@pytest.mark.parametrize('value,expected', [
    ('bank_accounts', 'Bank Accounts'),
    ('securities_held', 'Securities Held'),
    ('credit-cards', 'Credit Cards'),
    ('EMAILS', 'Emails'),
    ('', ''),
    (None, ''),
])
def test_humanize_label(value, expected):
    assert humanize_label(value) == expected


class TestValidation:

    def test_shipped_config_is_valid(self):
        assert validate_registry(RECORD_TYPES) == (True, [])

    def test_unknown_parent_is_reported(self):
        config = {
            'entities': {'display_fields': ['name']},
            'lots': {'display_fields': ['code'], 'parent': {'table': 'accounts', 'fk': 'account_id'}},
        }
        ok, errors = validate_registry(config)
        assert not ok
        assert any("unknown parent 'accounts'" in e for e in errors)

    def test_missing_display_fields_and_root(self):
        ok, errors = validate_registry({'contacts': {'display_fields': []}})
        assert not ok
        assert len(errors) == 2

    def test_from_config_refuses_invalid_config(self):
        with pytest.raises(RegistryConfigError):
            RecordTypeRegistry.from_config({'contacts': {'display_fields': ['name']}})
