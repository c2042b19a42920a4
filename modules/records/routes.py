# modules/records/routes.py
"""
Generic record API, one set of routes for every type in the registry.

    GET    /api/<table>?page=&limit=&search=
    POST   /api/<table>
    GET    /api/<table>/<id>
    PUT    /api/<table>/<id>
    DELETE /api/<table>/<id>
    GET    /api/stats/<table>

Deleting a record does not touch entity_related_data; links left behind show
up as "Unknown Record" until they are removed.
"""
import math

from flask import current_app, jsonify, request

from modules.errors import NotFoundError, UpstreamStoreError, ValidationError
from modules.services import get_services
from . import records_bp

SOURCE = 'records'
RECENT_LIMIT = 5


# ---------- helpers ----------
def _int_arg(name, default, minimum=1):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer", {name: raw}) from None
    return max(value, minimum)


def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _audited(action, message, context, fn):
    """Run a store call; on store failure audit it and re-raise."""
    services = get_services()
    try:
        return fn()
    except UpstreamStoreError as e:
        services.audit.error(SOURCE, action, message, e, context)
        raise


# ---------- list / create ----------
@records_bp.route("/<table>", methods=["GET"])
def list_records(table):
    services = get_services()
    descriptor = services.registry.require(table)
    page = _int_arg('page', 1)
    limit = _int_arg('limit', current_app.config.get('ITEMS_PER_PAGE', 20))
    search = (request.args.get('search') or '').strip()

    context = {'table': table, 'page': page, 'limit': limit, 'search': search}
    if search:
        rows = _audited('list', 'Failed to search records', context,
                        lambda: services.store.search(table, descriptor.search_fields, search))
    else:
        rows = _audited('list', 'Failed to list records', context,
                        lambda: services.store.select_all(table, order_by='created_at', descending=True))

    total = len(rows)
    offset = (page - 1) * limit
    current_app.logger.debug("records %s: %d total, page %d", table, total, page)
    return jsonify({
        'records': rows[offset:offset + limit],
        'totalRecords': total,
        'totalPages': math.ceil(total / limit) if total else 0,
        'currentPage': page,
        'limit': limit,
    })


@records_bp.route("/<table>", methods=["POST"])
def create_record(table):
    services = get_services()
    services.registry.require(table)
    row = _audited('create', 'Failed to create record', {'table': table},
                   lambda: services.store.insert(table, _body()))
    services.audit.info(SOURCE, 'create', 'Created record', {'table': table, 'id': row.get('id')})
    return jsonify(row), 201


# ---------- single record ----------
@records_bp.route("/<table>/<record_id>", methods=["GET"])
def get_record(table, record_id):
    services = get_services()
    services.registry.require(table)
    context = {'table': table, 'id': record_id}
    row = _audited('get', 'Failed to fetch record', context,
                   lambda: services.store.get(table, record_id))
    if row is None:
        raise NotFoundError('Record not found', context)
    return jsonify(row)


@records_bp.route("/<table>/<record_id>", methods=["PUT"])
def update_record(table, record_id):
    services = get_services()
    services.registry.require(table)
    context = {'table': table, 'id': record_id}
    values = _body()
    row = _audited('update', 'Failed to update record', context,
                   lambda: services.store.update(table, record_id, values))
    if row is None:
        raise NotFoundError('Record not found', context)
    services.audit.info(SOURCE, 'update', 'Updated record', context)
    return jsonify(row)


@records_bp.route("/<table>/<record_id>", methods=["DELETE"])
def delete_record(table, record_id):
    services = get_services()
    services.registry.require(table)
    context = {'table': table, 'id': record_id}
    removed = _audited('delete', 'Failed to delete record', context,
                       lambda: services.store.delete(table, record_id))
    if not removed:
        raise NotFoundError('Record not found', context)
    services.audit.info(SOURCE, 'delete', 'Deleted record', context)
    return jsonify({'success': True})


# ---------- stats ----------
@records_bp.route("/stats/<table>", methods=["GET"])
def record_stats(table):
    services = get_services()
    services.registry.require(table)
    context = {'table': table}
    total = _audited('stats', 'Failed to count records', context,
                     lambda: services.store.count(table))
    recent = _audited('stats', 'Failed to fetch recent records', context,
                      lambda: services.store.recent(table, RECENT_LIMIT))
    return jsonify({'totalCount': total, 'recentRecords': recent})
