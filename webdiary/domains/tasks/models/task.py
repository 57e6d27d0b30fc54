"""Tasks, optionally linked to a diary entry."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Mapped, mapped_column

from webdiary.extensions import db

PRIORITIES = ("low", "medium", "high")


class Task(db.Model):
    __tablename__ = "task"
    __table_args__ = (db.Index("ix_task_user_created_at", "user_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    diary_entry_id: Mapped[Optional[int]] = mapped_column(
        db.ForeignKey("diary_entry.id", ondelete="SET NULL"), index=True
    )
    title: Mapped[str] = mapped_column(db.Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(db.Text)
    due_date: Mapped[Optional[date]] = mapped_column()
    completed: Mapped[bool] = mapped_column(nullable=False, default=False)
    priority: Mapped[str] = mapped_column(db.String(20), nullable=False, default="medium")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
