# modules/audit/logger.py
"""
Audit Logger
Version: 1.0.0

Application-wide audit trail. Every entry goes two places:
1. the Flask application logger (always)
2. an `app_logs` row written through the data store (when enabled)

Writing the row is best effort. A failed write is reported to the Flask
logger and swallowed; an audit entry never fails the operation it describes.

USAGE:
------
audit.info('relationships', 'create', 'Created relationship', {'entity_id': eid})
audit.error('records', 'delete', 'Failed to delete record', exc, {'table': t, 'id': rid})
"""
import json
import logging
import traceback
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from flask import has_request_context, request

from modules.errors import NotFoundError

LOG_TABLE = 'app_logs'
LEVELS = {
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
}


def _jsonable(details: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if details is None:
        return None
    return json.loads(json.dumps(details, default=str))


class AuditLogger:

    def __init__(self, store, logger: Optional[logging.Logger] = None, enabled: bool = True):
        self.store = store
        self.logger = logger or logging.getLogger('ledgerone.audit')
        self.enabled = enabled

    # ---------- write side ----------

    def log(self, level: str, source: str, action: str, message: str,
            details: Optional[Dict[str, Any]] = None, stack_trace: Optional[str] = None) -> Optional[str]:
        """Record one entry. Returns the new log id, or None if nothing was stored."""
        level = (level or 'INFO').upper()
        if level not in LEVELS:
            level = 'INFO'

        self.logger.log(LEVELS[level], "[%s.%s] %s %s", source, action, message,
                        details if details else '')
        if not self.enabled:
            return None

        entry = {
            'level': level,
            'source': source,
            'action': action,
            'message': message,
            'stack_trace': stack_trace,
        }
        # Broad catch: nothing raised while auditing may reach the caller
        try:
            entry['details'] = _jsonable(details)
            if has_request_context():
                entry['ip_address'] = request.remote_addr
                entry['user_agent'] = request.headers.get('User-Agent')
            row = self.store.insert(LOG_TABLE, entry)
            return row.get('id')
        except Exception:
            self.logger.warning("audit log write failed for %s.%s", source, action, exc_info=True)
            return None

    def error(self, source: str, action: str, message: str, error: Optional[BaseException] = None,
              details: Optional[Dict[str, Any]] = None) -> Optional[str]:
        details = dict(details or {})
        stack_trace = None
        if error is not None:
            details['errorName'] = type(error).__name__
            details['errorMessage'] = str(error)
            stack_trace = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
        return self.log('ERROR', source, action, message, details, stack_trace)

    def warning(self, source, action, message, details=None):
        return self.log('WARNING', source, action, message, details)

    def info(self, source, action, message, details=None):
        return self.log('INFO', source, action, message, details)

    def debug(self, source, action, message, details=None):
        return self.log('DEBUG', source, action, message, details)

    # ---------- read side ----------

    def get_log(self, log_id: str) -> Dict[str, Any]:
        row = self.store.get(LOG_TABLE, log_id)
        if row is None:
            raise NotFoundError('Log entry not found', {'log_id': log_id})
        return row

    def recent(self, limit: int = 50, level: Optional[str] = None,
               source: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {}
        if level:
            filters['level'] = level.upper()
        if source:
            filters['source'] = source
        if not filters:
            return self.store.recent(LOG_TABLE, limit, order_field='timestamp')
        rows = self.store.select_where(LOG_TABLE, filters, order_by='timestamp', descending=True)
        return rows[:limit]

    def clear_old_logs(self, days: int = 30) -> int:
        cutoff = datetime.utcnow() - timedelta(days=days)
        removed = self.store.delete_older_than(LOG_TABLE, 'timestamp', cutoff)
        self.info('audit', 'clear_old_logs', 'Cleared old log entries', {'days': days, 'removed': removed})
        return removed
