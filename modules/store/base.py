# modules/store/base.py
"""
Data store boundary

Every service talks to the database through a DataStore: a handful of
generic, table-name-addressed primitives over plain dict rows. Two backends
implement it (local SQLAlchemy, hosted PostgREST); services never know which
one they were given.

Contract shared by all backends:
- rows are dicts keyed by column name, dates as ISO strings
- "not found" is a return value (None / False), never an exception
- any failure of the store itself is logged with the operation, the table and
  the ids involved, then raised as UpstreamStoreError
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from modules.errors import UpstreamStoreError

Row = Dict[str, Any]
OrderBy = Union[str, Sequence[str], None]


def order_fields(order_by: OrderBy) -> List[str]:
    if not order_by:
        return []
    if isinstance(order_by, str):
        return [order_by]
    return list(order_by)


class DataStore:
    """Abstract store. Subclasses implement every primitive below."""

    backend = 'abstract'

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('ledgerone.store')

    # ---------- reads ----------

    def get(self, table: str, record_id: Any) -> Optional[Row]:
        raise NotImplementedError

    def select_all(self, table: str, order_by: OrderBy = None, descending: bool = False) -> List[Row]:
        raise NotImplementedError

    def select_where(self, table: str, filters: Dict[str, Any], order_by: OrderBy = None,
                     descending: bool = False) -> List[Row]:
        raise NotImplementedError

    def select_in(self, table: str, field: str, values: Iterable[Any]) -> List[Row]:
        raise NotImplementedError

    def count(self, table: str) -> int:
        raise NotImplementedError

    def recent(self, table: str, limit: int = 5, order_field: str = 'created_at') -> List[Row]:
        raise NotImplementedError

    def search(self, table: str, fields: Sequence[str], term: str,
               limit: Optional[int] = None) -> List[Row]:
        raise NotImplementedError

    # ---------- writes ----------

    def insert(self, table: str, values: Dict[str, Any]) -> Row:
        raise NotImplementedError

    def update(self, table: str, record_id: Any, values: Dict[str, Any]) -> Optional[Row]:
        raise NotImplementedError

    def delete(self, table: str, record_id: Any) -> bool:
        raise NotImplementedError

    def delete_older_than(self, table: str, field: str, cutoff) -> int:
        raise NotImplementedError

    # ---------- helpers ----------

    def get_many(self, table: str, ids: Iterable[Any]) -> Dict[Any, Row]:
        """select_in on id, keyed by id."""
        wanted = list(dict.fromkeys(i for i in ids if i is not None))
        if not wanted:
            return {}
        return {row.get('id'): row for row in self.select_in(table, 'id', wanted)}

    def _failure(self, operation: str, table: str, exc: BaseException, **context) -> UpstreamStoreError:
        self.logger.error(
            "store %s on %s failed (%s): %s | %s",
            operation, table, self.backend, exc, context,
        )
        return UpstreamStoreError(
            f"{operation} on {table} failed",
            operation=operation,
            table=table,
            details=context,
        )
