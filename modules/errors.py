# modules/errors.py
"""
Error taxonomy shared by every LedgerOne module.

Routes never build error responses by hand for these: create_app() registers
a handler for LedgerError that renders {"error": message, "kind": kind} with
the class's status code. Callers branch on `kind`, not on the message.
"""
from typing import Any, Dict, Optional


class LedgerError(Exception):
    status_code = 500
    kind = 'internal'

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def public_message(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.public_message(), 'kind': self.kind}


class ValidationError(LedgerError):
    """Required field missing or malformed; nothing was sent to the store."""
    status_code = 400
    kind = 'validation'


class NotFoundError(LedgerError):
    status_code = 404
    kind = 'not_found'


class ConflictError(LedgerError):
    """The write would duplicate an existing row (e.g. the same link twice)."""
    status_code = 409
    kind = 'conflict'


class UpstreamStoreError(LedgerError):
    """
    The data store call itself failed. Raised by the store backends after they
    have logged the operation and the ids involved; the raw driver error stays
    on `__cause__` and is never rendered.
    """
    status_code = 500
    kind = 'internal'

    def __init__(self, message: str, operation: str = '', table: str = '',
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.operation = operation
        self.table = table

    def public_message(self) -> str:
        return 'Internal server error'


class DanglingReferenceError(LedgerError):
    """A relationship names a detail record that no longer exists. Never rendered."""
    status_code = 404
    kind = 'dangling_reference'

    def __init__(self, type_of_record: str, related_data_id: str):
        super().__init__(f"{type_of_record} record {related_data_id} no longer exists",
                         {'type_of_record': type_of_record, 'related_data_id': related_data_id})
        self.type_of_record = type_of_record
        self.related_data_id = related_data_id


class RegistryConfigError(Exception):
    """RECORD_TYPES failed validation at startup."""


def require_fields(values: Dict[str, Any], *names: str) -> None:
    """Raise ValidationError naming every field in `names` that is missing or blank."""
    missing = []
    for name in names:
        value = values.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}",
                              {'missing': missing})
