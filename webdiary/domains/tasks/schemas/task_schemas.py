"""Task request/response schemas."""

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

Priority = Literal["low", "medium", "high"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    due_date: Optional[dt.date] = None
    priority: Priority = "medium"
    diary_entry_id: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value


class TaskUpdate(TaskCreate):
    completed: Optional[bool] = None


class TaskListFilter(BaseModel):
    diary_entry_id: Optional[int] = None
    completed: Optional[bool] = None
    due_date: Optional[dt.date] = None


class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    due_date: Optional[dt.date]
    completed: bool
    priority: str
    diary_entry_id: Optional[int]
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]
