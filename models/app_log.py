# models/app_log.py
"""
Application audit log

Rows are written by modules.audit.logger.AuditLogger through the data store,
so the same table exists whether the store is local SQLAlchemy or the hosted
REST backend.
"""
from datetime import datetime

from sqlalchemy import Index

from models.base import db, new_id


class AppLog(db.Model):
    __tablename__ = 'app_logs'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    level = db.Column(db.String(10), nullable=False)      # ERROR, WARNING, INFO, DEBUG
    source = db.Column(db.String(120), nullable=False)    # relationships, api/records, ...
    action = db.Column(db.String(120), nullable=False)    # create, get_available_records, ...
    message = db.Column(db.Text, nullable=False)
    details = db.Column(db.JSON)
    stack_trace = db.Column(db.Text)

    # Request context (optional)
    user_id = db.Column(db.String(36))
    session_id = db.Column(db.String(120))
    ip_address = db.Column(db.String(50))
    user_agent = db.Column(db.String(500))

    __table_args__ = (
        Index('idx_app_logs_timestamp', 'timestamp'),
        Index('idx_app_logs_level', 'level'),
        Index('idx_app_logs_source', 'source'),
    )

    def __repr__(self):
        return f'<AppLog {self.level} {self.source}.{self.action}>'

    def to_dict(self):
        return {
            'id': self.id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'level': self.level,
            'source': self.source,
            'action': self.action,
            'message': self.message,
            'details': self.details,
            'stack_trace': self.stack_trace,
            'user_id': self.user_id,
            'session_id': self.session_id,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
        }
