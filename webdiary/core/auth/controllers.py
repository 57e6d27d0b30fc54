"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from webdiary.core.auth.auth_service import authenticate_user, issue_token, register_user
from webdiary.core.auth.identity import current_identity
from webdiary.core.auth.schemas import LoginRequest, RegisterRequest
from webdiary.core.users.schemas import serialize_user
from webdiary.core.utils.validation import parse_model
from webdiary.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    data = parse_model(RegisterRequest, request.get_json(silent=True) or {})
    user = register_user(data)
    return (
        jsonify({"ok": True, "token": issue_token(user), "user": serialize_user(user).model_dump()}),
        201,
    )


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    data = parse_model(LoginRequest, request.get_json(silent=True) or {})
    user = authenticate_user(data.username, data.password)
    if not user:
        return jsonify({"ok": False, "error": "invalid_credentials"}), 401
    return jsonify({"ok": True, "token": issue_token(user), "user": serialize_user(user).model_dump()})


@auth_bp.get("/verify")
@jwt_required()
def verify():
    identity = current_identity()
    return jsonify(
        {
            "ok": True,
            "user": {"id": identity.owner_id, "username": identity.username, "email": identity.email},
        }
    )
