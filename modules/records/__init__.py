from flask import Blueprint

# Generic record CRUD for every registered record type, under /api/<table>
records_bp = Blueprint("records", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
