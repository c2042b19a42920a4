# models/base.py
"""
Shared SQLAlchemy instance and the column set every LedgerOne table carries.
"""
import uuid
from datetime import date, datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def new_id() -> str:
    return str(uuid.uuid4())


class RecordMixin:
    """Opaque string id + audit timestamps, and a plain-dict view of the row."""

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        row = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            row[column.name] = value
        return row

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.id}>"
