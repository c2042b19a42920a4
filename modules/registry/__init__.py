# modules/registry/__init__.py
"""
Record Type Registry
Static catalog of every LedgerOne record type (display fields, parent/child links)
"""
from .record_types import (  # noqa: F401
    RECORD_TYPES,
    ROOT_TYPE,
    ChildLink,
    ParentLink,
    RecordTypeDescriptor,
    RecordTypeRegistry,
    humanize_label,
    validate_registry,
)
