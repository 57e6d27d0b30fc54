"""Task JSON API."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from webdiary.core.auth.identity import current_identity
from webdiary.core.utils.validation import parse_model
from webdiary.domains.tasks.mappers import map_task
from webdiary.domains.tasks.schemas.task_schemas import TaskCreate, TaskListFilter, TaskUpdate
from webdiary.domains.tasks.services import task_service

task_api_bp = Blueprint("task_api", __name__)


@task_api_bp.get("")
@jwt_required()
def list_tasks():
    filters = parse_model(TaskListFilter, request.args)
    tasks = task_service.list_tasks(
        current_identity().owner_id,
        diary_entry_id=filters.diary_entry_id,
        completed=filters.completed,
        due_date=filters.due_date,
    )
    return jsonify({"ok": True, "tasks": [map_task(t) for t in tasks]})


@task_api_bp.get("/<int:task_id>")
@jwt_required()
def get_task(task_id: int):
    task = task_service.get_task(current_identity().owner_id, task_id)
    return jsonify({"ok": True, "task": map_task(task)})


@task_api_bp.post("")
@jwt_required()
def create_task():
    data = parse_model(TaskCreate, request.get_json(silent=True) or {})
    task = task_service.create_task(current_identity().owner_id, **data.model_dump())
    return jsonify({"ok": True, "task": map_task(task)}), 201


@task_api_bp.put("/<int:task_id>")
@jwt_required()
def update_task(task_id: int):
    data = parse_model(TaskUpdate, request.get_json(silent=True) or {})
    task = task_service.update_task(current_identity().owner_id, task_id, **data.model_dump())
    return jsonify({"ok": True, "task": map_task(task)})


@task_api_bp.patch("/<int:task_id>/toggle")
@jwt_required()
def toggle_task(task_id: int):
    task = task_service.toggle_task(current_identity().owner_id, task_id)
    return jsonify({"ok": True, "task": map_task(task)})


@task_api_bp.delete("/<int:task_id>")
@jwt_required()
def delete_task(task_id: int):
    task_service.delete_task(current_identity().owner_id, task_id)
    return jsonify({"ok": True})
