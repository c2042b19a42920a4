# modules/store/postgrest_store.py
"""
Hosted store: PostgREST / Supabase REST API over requests.

Every call carries the configured timeout. Reads are retried a small number
of times (with backoff and Retry-After awareness); writes are sent once.
"""
import json
import time
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from .base import DataStore, OrderBy, Row, order_fields


def _quote(value: Any) -> str:
    """Double-quote a filter value so commas/parens inside it stay literal."""
    if isinstance(value, (datetime, date)):
        value = value.isoformat()
    text = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{text}"'


def _order_param(order_by: OrderBy, descending: bool) -> Optional[str]:
    fields = order_fields(order_by)
    if not fields:
        return None
    direction = 'desc' if descending else 'asc'
    return ','.join(f"{f}.{direction}" for f in fields)


def _content_range_total(header: Optional[str]) -> int:
    # "0-24/3573" or "*/0"
    if not header or '/' not in header:
        return 0
    total = header.rsplit('/', 1)[1]
    return int(total) if total.isdigit() else 0


class PostgrestStore(DataStore):
    backend = 'postgrest'

    def __init__(self, base_url: str, api_key: str, timeout: float = 10, retries: int = 1,
                 session: Optional[requests.Session] = None, logger=None):
        super().__init__(logger)
        if not base_url:
            raise RuntimeError("POSTGREST_URL not configured")
        self.base_url = str(base_url).rstrip('/')
        self.api_key = api_key or ''
        self.timeout = timeout
        self.retries = max(0, int(retries))
        self._session = session

    # ---------- http ----------

    def _headers(self) -> Dict[str, str]:
        return {
            'apikey': self.api_key,
            'Authorization': f'Bearer {self.api_key}',
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': 'ledgerone (postgrest-store)',
        }

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update(self._headers())
        return self._session

    def _request(self, method: str, operation: str, table: str, params=None, body=None,
                 headers=None, **context) -> requests.Response:
        url = f"{self.base_url}/{table}"
        sess = self._get_session()
        attempts = self.retries + 1 if method == 'GET' else 1

        last_exc = None
        for attempt in range(1, attempts + 1):
            try:
                resp = sess.request(
                    method, url,
                    params=params,
                    data=json.dumps(body, default=str) if body is not None else None,
                    headers=headers,
                    timeout=self.timeout,
                )
                if resp.status_code == 429 and attempt < attempts:
                    retry_after = resp.headers.get('Retry-After')
                    time.sleep(int(retry_after) if retry_after and retry_after.isdigit() else 1)
                    continue
                resp.raise_for_status()
                return resp
            except requests.RequestException as e:
                last_exc = e
                if attempt < attempts:
                    time.sleep(min(0.25 * (2 ** (attempt - 1)), 1.0))
        raise self._failure(operation, table, last_exc or RuntimeError('request failed'), **context)

    def _rows(self, resp: requests.Response, operation: str, table: str) -> List[Row]:
        if not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as e:
            raise self._failure(operation, table, e) from e
        if isinstance(data, dict):
            return [data]
        return list(data or [])

    # ---------- reads ----------

    def get(self, table: str, record_id: Any) -> Optional[Row]:
        resp = self._request('GET', 'get', table,
                             params={'select': '*', 'id': f'eq.{record_id}'}, id=record_id)
        rows = self._rows(resp, 'get', table)
        return rows[0] if rows else None

    def select_all(self, table: str, order_by: OrderBy = None, descending: bool = False) -> List[Row]:
        params = {'select': '*'}
        order = _order_param(order_by, descending)
        if order:
            params['order'] = order
        return self._rows(self._request('GET', 'select_all', table, params=params), 'select_all', table)

    def select_where(self, table: str, filters: Dict[str, Any], order_by: OrderBy = None,
                     descending: bool = False) -> List[Row]:
        params = {'select': '*'}
        for field, value in filters.items():
            params[field] = 'is.null' if value is None else f'eq.{value}'
        order = _order_param(order_by, descending)
        if order:
            params['order'] = order
        resp = self._request('GET', 'select_where', table, params=params, filters=filters)
        return self._rows(resp, 'select_where', table)

    def select_in(self, table: str, field: str, values: Iterable[Any]) -> List[Row]:
        values = list(values)
        if not values:
            return []
        params = {'select': '*', field: f"in.({','.join(_quote(v) for v in values)})"}
        resp = self._request('GET', 'select_in', table, params=params, field=field, values=values)
        return self._rows(resp, 'select_in', table)

    def count(self, table: str) -> int:
        resp = self._request('GET', 'count', table,
                             params={'select': 'id', 'limit': 1},
                             headers={'Prefer': 'count=exact'})
        return _content_range_total(resp.headers.get('Content-Range'))

    def recent(self, table: str, limit: int = 5, order_field: str = 'created_at') -> List[Row]:
        params = {'select': '*', 'order': f'{order_field}.desc', 'limit': limit}
        return self._rows(self._request('GET', 'recent', table, params=params), 'recent', table)

    def search(self, table: str, fields: Sequence[str], term: str,
               limit: Optional[int] = None) -> List[Row]:
        if not fields:
            return []
        pattern = _quote(f"*{term}*")
        params = {
            'select': '*',
            'or': '(' + ','.join(f"{f}.ilike.{pattern}" for f in fields) + ')',
            'order': 'created_at.desc',
        }
        if limit:
            params['limit'] = limit
        return self._rows(self._request('GET', 'search', table, params=params, term=term), 'search', table)

    # ---------- writes ----------

    def insert(self, table: str, values: Dict[str, Any]) -> Row:
        resp = self._request('POST', 'insert', table, body=values,
                             headers={'Prefer': 'return=representation'})
        rows = self._rows(resp, 'insert', table)
        if not rows:
            raise self._failure('insert', table, RuntimeError('insert returned no row'))
        return rows[0]

    def update(self, table: str, record_id: Any, values: Dict[str, Any]) -> Optional[Row]:
        body = {k: v for k, v in values.items() if k != 'id'}
        body['updated_at'] = datetime.utcnow().isoformat()
        resp = self._request('PATCH', 'update', table, params={'id': f'eq.{record_id}'}, body=body,
                             headers={'Prefer': 'return=representation'}, id=record_id)
        rows = self._rows(resp, 'update', table)
        return rows[0] if rows else None

    def delete(self, table: str, record_id: Any) -> bool:
        resp = self._request('DELETE', 'delete', table, params={'id': f'eq.{record_id}'},
                             headers={'Prefer': 'return=representation'}, id=record_id)
        return bool(self._rows(resp, 'delete', table))

    def delete_older_than(self, table: str, field: str, cutoff) -> int:
        if isinstance(cutoff, (datetime, date)):
            cutoff = cutoff.isoformat()
        resp = self._request('DELETE', 'delete_older_than', table, params={field: f'lt.{cutoff}'},
                             headers={'Prefer': 'return=representation'}, field=field)
        return len(self._rows(resp, 'delete_older_than', table))
