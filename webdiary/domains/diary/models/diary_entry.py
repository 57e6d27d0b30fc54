"""Diary entries and their attachments."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Mapped, mapped_column, relationship

from webdiary.extensions import db

VISIBILITY_PRIVATE = "private"
VISIBILITY_UNLISTED = "unlisted"
VISIBILITY_PUBLIC = "public"
VISIBILITIES = (VISIBILITY_PRIVATE, VISIBILITY_UNLISTED, VISIBILITY_PUBLIC)

ATTACHMENT_PHOTO = "photo"
ATTACHMENT_DOCUMENT = "document"


class DiaryEntry(db.Model):
    __tablename__ = "diary_entry"
    __table_args__ = (
        db.Index("ix_diary_entry_user_entry_date", "user_id", "entry_date"),
        db.Index("ix_diary_entry_user_favorite", "user_id", "is_favorite"),
        db.Index("ix_diary_entry_user_mood", "user_id", "mood"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    entry_date: Mapped[date] = mapped_column(nullable=False)
    title: Mapped[Optional[str]] = mapped_column(db.Text)
    body_html: Mapped[Optional[str]] = mapped_column(db.Text)
    # Plain-text projection of body_html; the only body field indexed and excerpted.
    body_text: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    mood: Mapped[Optional[str]] = mapped_column(db.String(64))
    weather: Mapped[Optional[str]] = mapped_column(db.String(64))
    # Comma separated, stored denormalized.
    tags: Mapped[Optional[str]] = mapped_column(db.Text)
    visibility: Mapped[str] = mapped_column(db.String(20), nullable=False, default=VISIBILITY_PRIVATE)
    share_token: Mapped[Optional[str]] = mapped_column(db.String(64), unique=True, index=True)
    is_favorite: Mapped[bool] = mapped_column(nullable=False, default=False)
    category_id: Mapped[Optional[int]] = mapped_column(
        db.ForeignKey("category.id", ondelete="SET NULL"), index=True
    )
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

    attachments: Mapped[list["Attachment"]] = relationship(
        "Attachment",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )
    category = relationship("Category", lazy="joined")

    @property
    def tag_list(self) -> list[str]:
        return [t.strip() for t in (self.tags or "").split(",") if t.strip()]


class Attachment(db.Model):
    __tablename__ = "attachment"

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(
        db.ForeignKey("diary_entry.id", ondelete="CASCADE"), index=True, nullable=False
    )
    kind: Mapped[str] = mapped_column(db.String(20), nullable=False)
    stored_name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    display_name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    # Key inside the blob store, never a local path.
    external_ref: Mapped[str] = mapped_column(db.Text, nullable=False)
    public_url: Mapped[Optional[str]] = mapped_column(db.Text)
    mime_type: Mapped[Optional[str]] = mapped_column(db.String(100))
    size_bytes: Mapped[Optional[int]] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    entry: Mapped[DiaryEntry] = relationship("DiaryEntry", back_populates="attachments")
