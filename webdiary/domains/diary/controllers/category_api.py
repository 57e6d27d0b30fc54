"""Category JSON API."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from webdiary.core.auth.identity import current_identity
from webdiary.core.utils.validation import parse_model
from webdiary.domains.diary.mappers import map_category
from webdiary.domains.diary.schemas.diary_schemas import CategoryPayload
from webdiary.domains.diary.services import category_service

category_api_bp = Blueprint("category_api", __name__)


@category_api_bp.get("")
@jwt_required()
def list_categories():
    categories = category_service.list_categories(current_identity().owner_id)
    return jsonify({"ok": True, "categories": [map_category(c) for c in categories]})


@category_api_bp.post("")
@jwt_required()
def create_category():
    payload = parse_model(CategoryPayload, request.get_json(silent=True) or {})
    category = category_service.create_category(current_identity().owner_id, payload.name)
    return jsonify({"ok": True, "category": map_category(category)}), 201


@category_api_bp.patch("/<int:category_id>")
@jwt_required()
def rename_category(category_id: int):
    payload = parse_model(CategoryPayload, request.get_json(silent=True) or {})
    category = category_service.rename_category(current_identity().owner_id, category_id, payload.name)
    return jsonify({"ok": True, "category": map_category(category)})


@category_api_bp.delete("/<int:category_id>")
@jwt_required()
def delete_category(category_id: int):
    category_service.delete_category(current_identity().owner_id, category_id)
    return jsonify({"ok": True})
