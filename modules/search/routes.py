from flask import current_app, jsonify, request

from modules.errors import ValidationError
from modules.services import get_services
from . import search_bp


def _int_arg(name, default):
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return max(int(raw), 1)
    except ValueError:
        raise ValidationError(f"Query parameter '{name}' must be an integer", {name: raw}) from None


@search_bp.route("/search", methods=["GET"])
def global_search():
    page = _int_arg("page", 1)
    limit = min(
        _int_arg("limit", current_app.config.get("SEARCH_DEFAULT_LIMIT", 20)),
        current_app.config.get("SEARCH_MAX_LIMIT", 100),
    )
    return jsonify(get_services().search.search(request.args.get("q", ""), page, limit))
