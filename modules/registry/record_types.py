# modules/registry/record_types.py
"""
Record Type Registry - Central Configuration for LedgerOne Record Types
=======================================================================

This registry defines every record type the application manages: how a row
of that type is labelled, which direct parent it points at (if any), which
columns the global search looks at, and how the type is drawn in the
relationship graph. Every other module reads from it; nothing writes to it
after startup.

STRUCTURE:
----------
Each entry in RECORD_TYPES defines:
- label: Display label (plural)
- display_fields: Ordered candidates for a human-readable label of one row
- parent: Optional {'table', 'fk'} direct foreign key to a single parent type
- search_fields: Columns matched by /api/search
- subtitle_fields: Ordered candidates for the secondary line in search results
- icon / color: Display metadata
- linkable: Whether the type may be attached to entities via entity_related_data

Child links are never written by hand: they are derived as the inverse of the
other types' `parent` entries so the two directions cannot drift apart.

ADDING NEW RECORD TYPES:
------------------------
1. Add the model in models/ledger.py and register it in models.TABLE_MODELS
2. Add an entry here
3. Run `flask check-coverage` to confirm every field named here is a column
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from modules.errors import NotFoundError, RegistryConfigError

ROOT_TYPE = 'entities'
DEFAULT_COLOR = '#6b7280'  # gray-500


# =============================================================================
# RECORD TYPES - THE MASTER CONFIGURATION
# =============================================================================

RECORD_TYPES = {

    'entities': {
        'label': 'Entities',
        'display_fields': ['name', 'entity_name', 'short_description'],
        'search_fields': ['name', 'type', 'short_description', 'description',
                          'legal_business_name', 'industry'],
        'subtitle_fields': ['type'],
        'icon': '🏢',
        'color': '#14b8a6',  # teal-500
        'linkable': False,
    },

    # =========================================================================
    # PEOPLE & CHANNELS
    # =========================================================================
    'contacts': {
        'label': 'Contacts',
        'display_fields': ['name', 'first_name', 'last_name', 'contact_name'],
        'search_fields': ['name', 'title', 'email', 'phone', 'short_description', 'description'],
        'subtitle_fields': ['title', 'email'],
        'icon': '👤',
        'color': '#3b82f6',  # blue-500
    },

    'emails': {
        'label': 'Emails',
        'display_fields': ['email', 'email_address'],
        'search_fields': ['email', 'label', 'short_description', 'description'],
        'subtitle_fields': ['label'],
        'icon': '📧',
        'color': '#8b5cf6',  # purple-500
    },

    'phones': {
        'label': 'Phones',
        'display_fields': ['phone', 'phone_number', 'number'],
        'search_fields': ['phone', 'label', 'short_description', 'description'],
        'subtitle_fields': ['label'],
        'icon': '📞',
        'color': '#f97316',  # orange-500
    },

    'websites': {
        'label': 'Websites',
        'display_fields': ['url', 'website_url', 'domain'],
        'search_fields': ['url', 'label', 'short_description', 'description'],
        'subtitle_fields': ['label'],
        'icon': '🌐',
        'color': '#6366f1',  # indigo-500
    },

    # =========================================================================
    # ACCOUNTS
    # =========================================================================
    'bank_accounts': {
        'label': 'Bank Accounts',
        'display_fields': ['bank_name', 'account_name', 'account_number'],
        'search_fields': ['bank_name', 'account_number', 'institution_held_at',
                          'short_description', 'description'],
        'subtitle_fields': ['account_number'],
        'masked_fields': ['account_number'],
        'icon': '🏦',
        'color': '#22c55e',  # green-500
    },

    'investment_accounts': {
        'label': 'Investment Accounts',
        'display_fields': ['provider', 'account_name'],
        'search_fields': ['provider', 'account_type', 'account_number', 'institution_held_at',
                          'short_description', 'description'],
        'subtitle_fields': ['account_type'],
        'icon': '📈',
        'color': '#f59e0b',  # amber-500
    },

    'securities_held': {
        'label': 'Securities Held',
        'display_fields': ['symbol', 'name'],
        'parent': {'table': 'investment_accounts', 'fk': 'investment_account_id'},
        'search_fields': ['symbol', 'name', 'short_description', 'description'],
        'subtitle_fields': ['name'],
        'icon': '📊',
        'color': '#eab308',  # yellow-500
        'linkable': False,
    },

    'crypto_accounts': {
        'label': 'Crypto Accounts',
        'display_fields': ['platform', 'account_name'],
        'search_fields': ['platform', 'account_number', 'wallet_address',
                          'short_description', 'description'],
        'subtitle_fields': ['account_number'],
        'icon': '₿',
        'color': '#06b6d4',  # cyan-500
    },

    'credit_cards': {
        'label': 'Credit Cards',
        'display_fields': ['cardholder_name', 'issuing_bank'],
        'search_fields': ['cardholder_name', 'issuer', 'type', 'institution_held_at',
                          'short_description', 'description'],
        'subtitle_fields': ['issuer'],
        'icon': '💳',
        'color': '#ef4444',  # red-500
    },

    'hosting_accounts': {
        'label': 'Hosting Accounts',
        'display_fields': ['provider', 'account_name'],
        'search_fields': ['provider', 'username', 'login_url', 'short_description', 'description'],
        'subtitle_fields': ['username'],
        'icon': '🖥️',
        'color': '#64748b',  # slate-500
    },
}


# =============================================================================
# DESCRIPTORS
# =============================================================================

@dataclass(frozen=True)
class ParentLink:
    parent_type: str
    foreign_key_field: str


@dataclass(frozen=True)
class ChildLink:
    child_type: str
    foreign_key_field: str


@dataclass(frozen=True)
class RecordTypeDescriptor:
    name: str
    label: str
    display_field_candidates: Tuple[str, ...]
    parent_link: Optional[ParentLink] = None
    child_links: Tuple[ChildLink, ...] = ()
    search_fields: Tuple[str, ...] = ()
    subtitle_fields: Tuple[str, ...] = ()
    masked_fields: Tuple[str, ...] = ()
    icon: str = ''
    color: str = DEFAULT_COLOR
    linkable: bool = True


def humanize_label(type_name: Any) -> str:
    """'bank_accounts' -> 'Bank Accounts'. Best effort for anything else."""
    text = '' if type_name is None else str(type_name)
    parts = [p for p in text.replace('-', '_').split('_') if p]
    return ' '.join(p[:1].upper() + p[1:].lower() for p in parts)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def validate_registry(config: Mapping[str, Mapping[str, Any]]) -> Tuple[bool, List[str]]:
    """
    Validate registry configuration on startup

    Returns:
        tuple: (is_valid: bool, errors: list)
    """
    errors = []
    for name, entry in config.items():
        if not entry.get('display_fields'):
            errors.append(f"Record type '{name}' missing 'display_fields'")
        parent = entry.get('parent')
        if parent is not None:
            if 'table' not in parent or 'fk' not in parent:
                errors.append(f"Record type '{name}' parent needs 'table' and 'fk'")
            elif parent['table'] not in config:
                errors.append(f"Record type '{name}' points at unknown parent '{parent['table']}'")
            elif parent['table'] == name:
                errors.append(f"Record type '{name}' cannot be its own parent")
    if ROOT_TYPE not in config:
        errors.append(f"Root type '{ROOT_TYPE}' is not configured")
    return len(errors) == 0, errors


# =============================================================================
# REGISTRY
# =============================================================================

class RecordTypeRegistry:
    """
    Immutable lookup over RECORD_TYPES. Built once by create_app() and passed
    to every service that needs it.
    """

    def __init__(self, descriptors: Iterable[RecordTypeDescriptor]):
        self._types: Mapping[str, RecordTypeDescriptor] = MappingProxyType(
            {d.name: d for d in descriptors}
        )

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]] = RECORD_TYPES) -> 'RecordTypeRegistry':
        is_valid, errors = validate_registry(config)
        if not is_valid:
            raise RegistryConfigError('; '.join(errors))

        children: Dict[str, List[ChildLink]] = {name: [] for name in config}
        for name, entry in config.items():
            parent = entry.get('parent')
            if parent:
                children[parent['table']].append(ChildLink(name, parent['fk']))

        descriptors = []
        for name, entry in config.items():
            parent = entry.get('parent')
            descriptors.append(RecordTypeDescriptor(
                name=name,
                label=entry.get('label') or humanize_label(name),
                display_field_candidates=tuple(entry['display_fields']),
                parent_link=ParentLink(parent['table'], parent['fk']) if parent else None,
                child_links=tuple(children[name]),
                search_fields=tuple(entry.get('search_fields', ())),
                subtitle_fields=tuple(entry.get('subtitle_fields', ())),
                masked_fields=tuple(entry.get('masked_fields', ())),
                icon=entry.get('icon', ''),
                color=entry.get('color', DEFAULT_COLOR),
                linkable=entry.get('linkable', name != ROOT_TYPE),
            ))
        return cls(descriptors)

    # ---------- lookups ----------

    def __contains__(self, type_name) -> bool:
        return type_name in self._types

    def __iter__(self):
        return iter(self._types.values())

    def names(self) -> List[str]:
        return list(self._types)

    def get(self, type_name: str) -> Optional[RecordTypeDescriptor]:
        return self._types.get(type_name)

    def require(self, type_name: str) -> RecordTypeDescriptor:
        descriptor = self._types.get(type_name)
        if descriptor is None:
            raise NotFoundError(f"Unknown record type: {type_name}", {'type': type_name})
        return descriptor

    def linkable_types(self) -> List[str]:
        return [d.name for d in self._types.values() if d.linkable]

    def is_linkable(self, type_name: str) -> bool:
        descriptor = self._types.get(type_name)
        return bool(descriptor and descriptor.linkable)

    def get_child_links(self, type_name: str) -> List[ChildLink]:
        descriptor = self._types.get(type_name)
        return list(descriptor.child_links) if descriptor else []

    def get_parent_link(self, type_name: str) -> Optional[ParentLink]:
        descriptor = self._types.get(type_name)
        return descriptor.parent_link if descriptor else None

    def label_for(self, type_name: str) -> str:
        descriptor = self._types.get(type_name)
        return descriptor.label if descriptor else humanize_label(type_name)

    def color_for(self, type_name: str) -> str:
        descriptor = self._types.get(type_name)
        return descriptor.color if descriptor else DEFAULT_COLOR

    @staticmethod
    def humanize_label(type_name: Any) -> str:
        return humanize_label(type_name)

    # ---------- display ----------

    def display_field_for(self, type_name: str) -> str:
        """Primary display column, used for ordering."""
        descriptor = self._types.get(type_name)
        return descriptor.display_field_candidates[0] if descriptor else 'name'

    def resolve_display_field(self, type_name: str, record: Any) -> str:
        """
        First non-empty display candidate of `record`, else "ID: <id>".

        Runs over rows from an external store, so it must never raise: unknown
        types fall back to 'name', and anything that is not a mapping only
        gets the id fallback.
        """
        if not isinstance(record, Mapping):
            return f"ID: {getattr(record, 'id', None)}"

        descriptor = self._types.get(type_name)
        candidates = descriptor.display_field_candidates if descriptor else ('name',)
        for candidate in candidates:
            value = record.get(candidate)
            if not _is_blank(value):
                return str(value).strip() if isinstance(value, str) else str(value)
        return f"ID: {record.get('id')}"

    def resolve_subtitle(self, type_name: str, record: Mapping[str, Any]) -> str:
        descriptor = self._types.get(type_name)
        if descriptor is None:
            return ''
        for candidate in descriptor.subtitle_fields:
            value = record.get(candidate)
            if _is_blank(value):
                continue
            value = str(value)
            if candidate in descriptor.masked_fields:
                return f"****{value[-4:]}"
            return value
        return ''
