from __future__ import annotations

from flask import Blueprint, abort, jsonify, request

from models.schemas.association import (
    AssociationCreateSchema,
    AssociationOutSchema,
    AssociationUpdateSchema,
)
from services.dto import AssociationIn
from utils.decorators import jwt_required

from .deps import get_association_service, parse_flag, parse_pagination, parse_sort

bp = Blueprint("associations", __name__)

create_schema = AssociationCreateSchema()
update_schema = AssociationUpdateSchema()
out_schema = AssociationOutSchema()
out_list_schema = AssociationOutSchema(many=True)


@bp.post("/associations")
@jwt_required()
def create_association():
    """
    Create an association
    ---
    tags: [Associations]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, maxLength: 128 }
            website: { type: string }
            active: { type: boolean }
    responses:
      201: { description: Created }
      422: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    a = get_association_service().add_association(AssociationIn(**data))
    return jsonify({"data": out_schema.dump(a)}), 201


@bp.get("/associations")
@jwt_required()
def list_associations():
    """
    List associations (supports pagination, sorting, q search, include_deleted)
    ---
    tags: [Associations]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 20 }
      - in: query
        name: sort
        type: string
        default: name
        description: "Allowed: name or -name"
      - { in: query, name: q, type: string }
      - { in: query, name: include_deleted, type: boolean, default: false }
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    descending = parse_sort()
    rows, total = get_association_service().get_associations(
        page,
        limit,
        q=request.args.get("q"),
        descending=descending,
        include_deleted=parse_flag("include_deleted"),
    )
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"page": page, "limit": limit, "total": total}})


@bp.get("/associations/<association_id>")
@jwt_required()
def get_association(association_id: str):
    """
    Get an association by id
    ---
    tags: [Associations]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: association_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    a = get_association_service().get_association(association_id)
    if a is None:
        abort(404, description="Association not found")
    return jsonify({"data": out_schema.dump(a)})


@bp.patch("/associations/<association_id>")
@jwt_required()
def update_association(association_id: str):
    """
    Update an association (partial)
    ---
    tags: [Associations]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: association_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string, maxLength: 128 }
            website: { type: string }
            active: { type: boolean }
    responses:
      200: { description: OK }
      404: { description: Not found }
      422: { description: Validation error }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    a = get_association_service().update_association(association_id, **data)
    return jsonify({"data": out_schema.dump(a)})


@bp.delete("/associations/<association_id>")
@jwt_required()
def delete_association(association_id: str):
    """
    Soft delete an association (sets deleted_at)
    ---
    tags: [Associations]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: association_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    get_association_service().delete_association(association_id)
    return ("", 204)


@bp.post("/associations/<association_id>/restore")
@jwt_required()
def restore_association(association_id: str):
    """restores a soft-deleted association
    ---
    tags: [Associations]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: association_id, type: string, required: true }
    responses:
      200: { description: Restored }
      404: { description: Not found }
    """
    a = get_association_service().restore_association(association_id)
    return jsonify({"data": out_schema.dump(a)})
