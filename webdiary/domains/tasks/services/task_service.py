"""Task services: owner-scoped CRUD with an optional diary entry link."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from webdiary.core.errors import NotFoundError, ValidationError
from webdiary.domains.diary.models import DiaryEntry
from webdiary.domains.tasks.models.task import PRIORITIES, Task
from webdiary.extensions import db


def _validate_priority(priority: Optional[str]) -> str:
    value = (priority or "medium").lower()
    if value not in PRIORITIES:
        raise ValidationError(f"priority must be one of {', '.join(PRIORITIES)}", field="priority")
    return value


def _owned_entry_id(owner_id: int, diary_entry_id: Optional[int]) -> Optional[int]:
    if diary_entry_id is None:
        return None
    if DiaryEntry.query.filter_by(id=diary_entry_id, user_id=owner_id).first() is None:
        raise NotFoundError("Diary entry not found", field="diary_entry_id")
    return diary_entry_id


def list_tasks(
    owner_id: int,
    *,
    diary_entry_id: Optional[int] = None,
    completed: Optional[bool] = None,
    due_date: Optional[date] = None,
) -> List[Task]:
    query = Task.query.filter_by(user_id=owner_id)
    if diary_entry_id is not None:
        query = query.filter(Task.diary_entry_id == diary_entry_id)
    if completed is not None:
        query = query.filter(Task.completed.is_(completed))
    if due_date is not None:
        query = query.filter(Task.due_date == due_date)
    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_task(owner_id: int, task_id: int) -> Task:
    task = Task.query.filter_by(id=task_id, user_id=owner_id).first()
    if task is None:
        raise NotFoundError("Task not found", field="id")
    return task


def create_task(
    owner_id: int,
    *,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    priority: Optional[str] = None,
    diary_entry_id: Optional[int] = None,
) -> Task:
    title_norm = (title or "").strip()
    if not title_norm:
        raise ValidationError("Title is required", field="title")
    task = Task(
        user_id=owner_id,
        title=title_norm,
        description=(description or "").strip() or None,
        due_date=due_date,
        priority=_validate_priority(priority),
        diary_entry_id=_owned_entry_id(owner_id, diary_entry_id),
        completed=False,
    )
    db.session.add(task)
    db.session.commit()
    return task


def update_task(owner_id: int, task_id: int, **fields) -> Task:
    task = get_task(owner_id, task_id)
    if "title" in fields:
        title_norm = (fields["title"] or "").strip()
        if not title_norm:
            raise ValidationError("Title is required", field="title")
        task.title = title_norm
    if "description" in fields:
        task.description = (fields["description"] or "").strip() or None
    if "due_date" in fields:
        task.due_date = fields["due_date"]
    if "priority" in fields:
        task.priority = _validate_priority(fields["priority"])
    if "diary_entry_id" in fields:
        task.diary_entry_id = _owned_entry_id(owner_id, fields["diary_entry_id"])
    if fields.get("completed") is not None:
        task.completed = bool(fields["completed"])
    db.session.commit()
    return task


def toggle_task(owner_id: int, task_id: int) -> Task:
    task = get_task(owner_id, task_id)
    task.completed = not task.completed
    db.session.commit()
    return task


def delete_task(owner_id: int, task_id: int) -> None:
    task = get_task(owner_id, task_id)
    db.session.delete(task)
    db.session.commit()
