"""Diary JSON API."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from webdiary.core.auth.identity import current_identity
from webdiary.core.errors import ValidationError
from webdiary.core.utils.pagination import page_envelope
from webdiary.core.utils.validation import parse_model
from webdiary.domains.diary.mappers import (
    map_attachment,
    map_entry,
    map_month,
    map_search_hit,
    map_timeline_item,
)
from webdiary.domains.diary.schemas.diary_schemas import (
    AttachmentRenamePayload,
    EntryPayload,
    EntryUpdatePayload,
    SearchQuery,
    TimelineQuery,
    ViewQuery,
)
from webdiary.domains.diary.search.predicates import EntryFilters
from webdiary.domains.diary.search.snippets import preview
from webdiary.domains.diary.services import entry_service, search_service, view_service
from webdiary.domains.diary.services.attachment_service import IncomingFile, UploadPolicy
from webdiary.domains.diary.services.entry_service import EntryWriteResult
from webdiary.storage import get_blob_storage

diary_api_bp = Blueprint("diary_api", __name__)


def _policy() -> UploadPolicy:
    return UploadPolicy.from_config(current_app.config)


def _load_json_field(name: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be valid JSON", field=name) from exc


def _read_entry_request() -> Tuple[Dict[str, Any], List[IncomingFile]]:
    """Body fields and uploaded files from a JSON or multipart request."""
    if not request.mimetype.startswith("multipart/form-data"):
        return dict(request.get_json(silent=True) or {}), []

    data: Dict[str, Any] = {k: v for k, v in request.form.items() if v != ""}
    for name in ("deleted_attachments", "renamed_attachments"):
        if name in data:
            data[name] = _load_json_field(name, data[name])
    if isinstance(data.get("tags"), str) and data["tags"].lstrip().startswith("["):
        data["tags"] = _load_json_field("tags", data["tags"])

    custom_names: Dict[str, str] = {}
    raw_names = data.pop("custom_filenames", None)
    if raw_names:
        loaded = _load_json_field("custom_filenames", raw_names)
        if not isinstance(loaded, dict):
            raise ValidationError("custom_filenames must map file names to display names", field="custom_filenames")
        custom_names = {str(k): str(v) for k, v in loaded.items()}

    files = [
        IncomingFile(
            filename=storage.filename or "",
            data=storage.read(),
            mime_type=storage.mimetype or "",
            display_name=custom_names.get(storage.filename or ""),
        )
        for storage in request.files.getlist("attachments")
        if storage and storage.filename
    ]
    return data, files


def _write_response(result: EntryWriteResult, status: int):
    body = {
        "ok": True,
        "entry": map_entry(result.entry),
        "uploaded_files": len(result.uploaded),
    }
    if result.partial:
        body["message"] = (
            "Entry saved but file uploads failed"
            if not result.uploaded
            else "Entry saved but some file uploads failed"
        )
        body["upload_errors"] = [failure.to_dict() for failure in result.failures]
        return jsonify(body), 207
    return jsonify(body), status


def _filters(query) -> EntryFilters:
    return EntryFilters(
        date_from=getattr(query, "date_from", None),
        date_to=getattr(query, "date_to", None),
        mood=query.mood,
        weather=query.weather,
        tags=query.tags,
        favorite=getattr(query, "favorite", None),
        category_id=getattr(query, "category_id", None),
    )


@diary_api_bp.get("/search")
@jwt_required()
def search_entries():
    owner_id = current_identity().owner_id
    query = parse_model(SearchQuery, request.args)
    config = current_app.config
    page = search_service.search_entries(
        owner_id,
        text=query.text,
        filters=_filters(query),
        limit=query.limit,
        offset=query.offset,
        default_limit=config["SEARCH_DEFAULT_LIMIT"],
        max_limit=config["SEARCH_MAX_LIMIT"],
        snippet_context=config["SEARCH_SNIPPET_CONTEXT"],
        preview_length=config["SEARCH_PREVIEW_LENGTH"],
    )
    items = [map_search_hit(hit) for hit in page.hits]
    return jsonify({"ok": True, **page_envelope(items, page.total, page.limit, page.offset)})


@diary_api_bp.get("")
@jwt_required()
def list_entries():
    owner_id = current_identity().owner_id
    query = parse_model(ViewQuery, request.args)
    filters = _filters(query)
    if query.view is None:
        entries = view_service.list_entries(owner_id, filters)
        return jsonify({"ok": True, "entries": [map_entry(e) for e in entries]})

    result = view_service.get_entries_for_view(owner_id, query.view, query.entry_date, filters)
    body: Dict[str, Any] = {
        "ok": True,
        "view": result.mode,
        "start": result.start.isoformat(),
        "end": result.end.isoformat(),
        "entries": [map_entry(e) for e in result.entries],
    }
    if result.months:
        body["months"] = [map_month(m) for m in result.months]
    else:
        body["day_counts"] = result.day_counts
    return jsonify(body)


@diary_api_bp.get("/timeline")
@jwt_required()
def timeline():
    owner_id = current_identity().owner_id
    query = parse_model(TimelineQuery, request.args)
    config = current_app.config
    page = view_service.get_timeline(
        owner_id,
        cursor=query.cursor,
        limit=query.limit,
        filters=_filters(query),
        default_limit=config["TIMELINE_DEFAULT_LIMIT"],
        max_limit=config["SEARCH_MAX_LIMIT"],
    )
    length = config["SEARCH_PREVIEW_LENGTH"]
    items = [
        (
            entry.entry_date,
            map_timeline_item(
                entry,
                page.attachment_counts.get(entry.id, 0),
                preview(entry.body_text, entry.title, length),
            ),
        )
        for entry in page.entries
    ]
    return jsonify(
        {
            "ok": True,
            "groups": view_service.group_by_month(items),
            "next_cursor": page.next_cursor,
            "has_more": page.has_more,
        }
    )


@diary_api_bp.get("/<int:entry_id>")
@jwt_required()
def get_entry(entry_id: int):
    entry = entry_service.get_entry(current_identity().owner_id, entry_id)
    return jsonify({"ok": True, "entry": map_entry(entry)})


@diary_api_bp.post("")
@jwt_required()
def create_entry():
    owner_id = current_identity().owner_id
    data, files = _read_entry_request()
    payload = parse_model(EntryPayload, data)
    result = entry_service.create_entry(
        owner_id, payload, storage=get_blob_storage(), files=files, policy=_policy()
    )
    return _write_response(result, 201)


@diary_api_bp.put("/<int:entry_id>")
@jwt_required()
def update_entry(entry_id: int):
    owner_id = current_identity().owner_id
    data, files = _read_entry_request()
    payload = parse_model(EntryUpdatePayload, data)
    result = entry_service.update_entry(
        owner_id, entry_id, payload, storage=get_blob_storage(), files=files, policy=_policy()
    )
    return _write_response(result, 200)


@diary_api_bp.delete("/<int:entry_id>")
@jwt_required()
def delete_entry(entry_id: int):
    entry_service.delete_entry(current_identity().owner_id, entry_id, storage=get_blob_storage())
    return jsonify({"ok": True})


@diary_api_bp.patch("/<int:entry_id>/favorite")
@jwt_required()
def toggle_favorite(entry_id: int):
    entry = entry_service.toggle_favorite(current_identity().owner_id, entry_id)
    return jsonify({"ok": True, "id": entry.id, "is_favorite": bool(entry.is_favorite)})


@diary_api_bp.patch("/<int:entry_id>/attachments/<int:attachment_id>")
@jwt_required()
def rename_attachment(entry_id: int, attachment_id: int):
    payload = parse_model(AttachmentRenamePayload, request.get_json(silent=True) or {})
    row = entry_service.rename_entry_attachment(
        current_identity().owner_id, entry_id, attachment_id, payload.display_name
    )
    return jsonify({"ok": True, "attachment": map_attachment(row)})


@diary_api_bp.delete("/<int:entry_id>/attachments/<int:attachment_id>")
@jwt_required()
def delete_attachment(entry_id: int, attachment_id: int):
    entry_service.delete_entry_attachment(
        current_identity().owner_id, entry_id, attachment_id, storage=get_blob_storage()
    )
    return jsonify({"ok": True})
