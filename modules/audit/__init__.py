from flask import Blueprint

# Audit trail endpoints: client-side log intake and the admin log viewer
audit_bp = Blueprint("audit", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
