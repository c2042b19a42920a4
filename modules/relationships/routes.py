# modules/relationships/routes.py
"""
Relationship API

    POST   /api/relationships                       link a detail record to an entity
    GET    /api/relationships?entityId=&typeOfRecord=
    GET    /api/relationships/<id>
    PUT    /api/relationships/<id>                  {relationshipDescription}; null clears it
    DELETE /api/relationships/<id>
    GET    /api/relationships/by-detail-record?relatedDataId=&typeOfRecord=
    GET    /api/available-records?type=&entityId=
    GET    /api/visualize?rootType=&rootId=
    POST   /api/entity-relationships
    GET    /api/entity-relationships?entityId=
    DELETE /api/entity-relationships/<id>

Errors are raised as LedgerError subclasses and rendered by the app-level
handler; nothing here builds an error response by hand.
"""
from flask import jsonify, request

from modules.errors import ValidationError
from modules.services import get_services
from . import relationships_bp


# ---------- helpers ----------
def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _arg(name):
    return (request.args.get(name) or "").strip() or None


# ---------- entity <-> detail record ----------
@relationships_bp.route("/relationships", methods=["POST"])
def create_relationship():
    data = _body()
    row = get_services().links.create(
        data.get("entityId"),
        data.get("relatedDataId"),
        data.get("typeOfRecord"),
        data.get("relationshipDescription"),
    )
    return jsonify(row), 201


@relationships_bp.route("/relationships", methods=["GET"])
def list_relationships():
    rows = get_services().resolver.get_enriched_relationships_for_entity(
        _arg("entityId"), _arg("typeOfRecord")
    )
    return jsonify({"data": rows, "metadata": {"count": len(rows)}})


@relationships_bp.route("/relationships/by-detail-record", methods=["GET"])
def relationships_by_detail_record():
    rows = get_services().resolver.get_entities_for_detail_record(
        _arg("relatedDataId"), _arg("typeOfRecord")
    )
    return jsonify({"relationships": rows})


@relationships_bp.route("/relationships/<relationship_id>", methods=["GET"])
def get_relationship(relationship_id):
    return jsonify(get_services().links.get(relationship_id))


@relationships_bp.route("/relationships/<relationship_id>", methods=["PUT"])
def update_relationship(relationship_id):
    data = _body()
    if "relationshipDescription" not in data:
        raise ValidationError("Missing required field(s): relationshipDescription",
                              {"missing": ["relationshipDescription"]})
    row = get_services().links.update(relationship_id, data["relationshipDescription"])
    return jsonify(row)


@relationships_bp.route("/relationships/<relationship_id>", methods=["DELETE"])
def delete_relationship(relationship_id):
    get_services().links.delete(relationship_id)
    return jsonify({"success": True})


# ---------- pickers / graph ----------
@relationships_bp.route("/available-records", methods=["GET"])
def available_records():
    rows = get_services().resolver.get_available_records(_arg("type"), _arg("entityId"))
    return jsonify(rows)


@relationships_bp.route("/visualize", methods=["GET"])
def visualize():
    graph = get_services().resolver.build_relationship_graph(_arg("rootType"), _arg("rootId"))
    return jsonify(graph)


# ---------- entity <-> entity ----------
@relationships_bp.route("/entity-relationships", methods=["POST"])
def create_entity_relationship():
    data = _body()
    row = get_services().links.create_entity_link(
        data.get("fromEntityId"),
        data.get("toEntityId"),
        data.get("relationshipType"),
        data.get("description"),
    )
    return jsonify(row), 201


@relationships_bp.route("/entity-relationships", methods=["GET"])
def list_entity_relationships():
    rows = get_services().links.list_entity_links(_arg("entityId"))
    return jsonify({"data": rows, "metadata": {"count": len(rows)}})


@relationships_bp.route("/entity-relationships/<link_id>", methods=["DELETE"])
def delete_entity_relationship(link_id):
    get_services().links.delete_entity_link(link_id)
    return jsonify({"success": True})
