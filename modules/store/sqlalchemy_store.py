# modules/store/sqlalchemy_store.py
"""
Local store backed by the Flask-SQLAlchemy models in models/.

Table names are resolved through models.TABLE_MODELS. Incoming values are
checked against the model's columns and coerced (ISO dates, numbers) so the
JSON API can pass request bodies straight through.
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models import TABLE_MODELS
from models.base import db
from modules.errors import ValidationError
from .base import DataStore, OrderBy, Row, order_fields

# Maintained by the models themselves
_MANAGED_COLUMNS = {'created_at', 'updated_at'}


class _UnknownTable(SQLAlchemyError):
    pass


class SqlAlchemyStore(DataStore):
    backend = 'sqlalchemy'

    def __init__(self, models: Optional[Dict[str, Any]] = None, logger=None):
        super().__init__(logger)
        self.models = dict(models or TABLE_MODELS)

    # ---------- internals ----------

    def _model(self, table: str):
        model = self.models.get(table)
        if model is None:
            raise _UnknownTable(f'relation "{table}" does not exist')
        return model

    def _column(self, model, field: str):
        try:
            return model.__table__.c[field]
        except KeyError:
            raise _UnknownTable(f'column "{field}" does not exist on {model.__tablename__}') from None

    def _run(self, operation: str, table: str, fn, **context):
        try:
            return fn()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise self._failure(operation, table, e, **context) from e

    def _ordering(self, model, order_by: OrderBy, descending: bool):
        clauses = []
        for field in order_fields(order_by):
            column = model.__table__.c.get(field)
            if column is None:
                continue
            clauses.append(column.desc() if descending else column.asc())
        return clauses

    def _coerce(self, table: str, column, value):
        if value is None:
            return None
        if isinstance(value, str) and not value.strip() and not isinstance(column.type, sa.String):
            return None
        try:
            if isinstance(column.type, sa.DateTime):
                return value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
            if isinstance(column.type, sa.Date):
                if isinstance(value, datetime):
                    return value.date()
                return value if isinstance(value, date) else date.fromisoformat(str(value)[:10])
            if isinstance(column.type, sa.Float):
                return float(value)
            if isinstance(column.type, sa.Integer):
                return int(value)
        except (TypeError, ValueError):
            raise ValidationError(
                f"Invalid value for {table}.{column.name}: {value!r}",
                {'field': column.name, 'value': value},
            ) from None
        return value

    def _clean(self, model, table: str, values: Dict[str, Any], allow_id: bool) -> Dict[str, Any]:
        columns = model.__table__.c
        unknown = sorted(k for k in values if k not in columns)
        if unknown:
            raise ValidationError(
                f"Unknown field(s) for {table}: {', '.join(unknown)}",
                {'unknown': unknown},
            )
        cleaned = {}
        for key, value in values.items():
            if key in _MANAGED_COLUMNS or (key == 'id' and not allow_id):
                continue
            cleaned[key] = self._coerce(table, columns[key], value)
        return cleaned

    # ---------- reads ----------

    def get(self, table: str, record_id: Any) -> Optional[Row]:
        def op():
            row = db.session.get(self._model(table), str(record_id))
            return row.to_dict() if row is not None else None
        return self._run('get', table, op, id=record_id)

    def select_all(self, table: str, order_by: OrderBy = None, descending: bool = False) -> List[Row]:
        def op():
            model = self._model(table)
            query = model.query.order_by(*self._ordering(model, order_by, descending))
            return [r.to_dict() for r in query.all()]
        return self._run('select_all', table, op)

    def select_where(self, table: str, filters: Dict[str, Any], order_by: OrderBy = None,
                     descending: bool = False) -> List[Row]:
        def op():
            model = self._model(table)
            query = model.query
            for field, value in filters.items():
                query = query.filter(self._column(model, field) == value)
            query = query.order_by(*self._ordering(model, order_by, descending))
            return [r.to_dict() for r in query.all()]
        return self._run('select_where', table, op, filters=filters)

    def select_in(self, table: str, field: str, values: Iterable[Any]) -> List[Row]:
        values = list(values)
        if not values:
            return []

        def op():
            model = self._model(table)
            query = model.query.filter(self._column(model, field).in_(values))
            return [r.to_dict() for r in query.all()]
        return self._run('select_in', table, op, field=field, values=values)

    def count(self, table: str) -> int:
        return self._run('count', table, lambda: self._model(table).query.count())

    def recent(self, table: str, limit: int = 5, order_field: str = 'created_at') -> List[Row]:
        def op():
            model = self._model(table)
            query = model.query.order_by(self._column(model, order_field).desc()).limit(limit)
            return [r.to_dict() for r in query.all()]
        return self._run('recent', table, op, limit=limit)

    def search(self, table: str, fields: Sequence[str], term: str,
               limit: Optional[int] = None) -> List[Row]:
        def op():
            model = self._model(table)
            escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
            like = f"%{escaped}%"
            conditions = [
                model.__table__.c[f].ilike(like, escape='\\')
                for f in fields if f in model.__table__.c
            ]
            if not conditions:
                return []
            query = model.query.filter(or_(*conditions))
            if 'created_at' in model.__table__.c:
                query = query.order_by(model.__table__.c.created_at.desc())
            if limit:
                query = query.limit(limit)
            return [r.to_dict() for r in query.all()]
        return self._run('search', table, op, term=term)

    # ---------- writes ----------

    def insert(self, table: str, values: Dict[str, Any]) -> Row:
        def op():
            model = self._model(table)
            row = model(**self._clean(model, table, values, allow_id=True))
            db.session.add(row)
            db.session.commit()
            return row.to_dict()
        return self._run('insert', table, op)

    def update(self, table: str, record_id: Any, values: Dict[str, Any]) -> Optional[Row]:
        def op():
            model = self._model(table)
            row = db.session.get(model, str(record_id))
            if row is None:
                return None
            for key, value in self._clean(model, table, values, allow_id=False).items():
                setattr(row, key, value)
            db.session.commit()
            return row.to_dict()
        return self._run('update', table, op, id=record_id)

    def delete(self, table: str, record_id: Any) -> bool:
        def op():
            row = db.session.get(self._model(table), str(record_id))
            if row is None:
                return False
            db.session.delete(row)
            db.session.commit()
            return True
        return self._run('delete', table, op, id=record_id)

    def delete_older_than(self, table: str, field: str, cutoff) -> int:
        def op():
            model = self._model(table)
            removed = (model.query
                       .filter(self._column(model, field) < cutoff)
                       .delete(synchronize_session=False))
            db.session.commit()
            return removed
        return self._run('delete_older_than', table, op, field=field, cutoff=str(cutoff))
