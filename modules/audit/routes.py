# modules/audit/routes.py
"""
Audit log API

    POST   /api/log                         {level, source, action, message, details?}
    GET    /api/admin/logs?level=&source=&limit=
    GET    /api/admin/logs/<id>
    DELETE /api/admin/logs?olderThanDays=
"""
from flask import current_app, jsonify, request

from modules.errors import ValidationError, require_fields
from modules.services import get_services
from .logger import LEVELS
from . import audit_bp


def _int_arg(name, default):
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer", {name: raw}) from None


@audit_bp.route("/log", methods=["POST"])
def create_log():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    require_fields(data, "level", "source", "action", "message")
    level = str(data["level"]).upper()
    if level not in LEVELS:
        raise ValidationError(f"Unknown log level: {data['level']}", {"allowed": list(LEVELS)})

    log_id = get_services().audit.log(level, data["source"], data["action"], data["message"],
                                      data.get("details"))
    return jsonify({"success": True, "message": "Log entry created successfully", "id": log_id}), 201


@audit_bp.route("/admin/logs", methods=["GET"])
def list_logs():
    limit = max(1, min(_int_arg("limit", 50), 500))
    rows = get_services().audit.recent(limit, request.args.get("level"), request.args.get("source"))
    return jsonify({"logs": rows, "count": len(rows)})


@audit_bp.route("/admin/logs/<log_id>", methods=["GET"])
def get_log(log_id):
    return jsonify(get_services().audit.get_log(log_id))


@audit_bp.route("/admin/logs", methods=["DELETE"])
def clear_logs():
    days = _int_arg("olderThanDays", current_app.config.get("AUDIT_LOG_RETENTION_DAYS", 30))
    if days < 0:
        raise ValidationError("olderThanDays must not be negative", {"olderThanDays": days})
    removed = get_services().audit.clear_old_logs(days)
    return jsonify({"success": True, "removed": removed})
