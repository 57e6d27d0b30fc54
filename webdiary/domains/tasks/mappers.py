"""Task mappers for DTO responses."""

from __future__ import annotations

from webdiary.domains.tasks.models import Task
from webdiary.domains.tasks.schemas.task_schemas import TaskResponse


def map_task(task: Task) -> dict:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        due_date=task.due_date,
        completed=bool(task.completed),
        priority=task.priority,
        diary_entry_id=task.diary_entry_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
    ).model_dump(mode="json")
