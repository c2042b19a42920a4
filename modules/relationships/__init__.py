from flask import Blueprint

# Relationship APIs live under /api (links, available records, graph)
relationships_bp = Blueprint("relationships", __name__, url_prefix="/api")

# Import routes so they register with the blueprint
from . import routes  # noqa: E402,F401
