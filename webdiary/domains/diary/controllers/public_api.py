"""Unauthenticated read access to shared entries."""

from __future__ import annotations

from flask import Blueprint, jsonify

from webdiary.domains.diary.mappers import map_shared_entry
from webdiary.domains.diary.services import entry_service

public_api_bp = Blueprint("public_api", __name__)


@public_api_bp.get("/share/<share_token>")
def get_shared_entry(share_token: str):
    entry = entry_service.get_shared_entry(share_token)
    return jsonify({"ok": True, "entry": map_shared_entry(entry)})
