"""Weighted token index rows derived from entry text."""

from __future__ import annotations

from sqlalchemy.orm import Mapped, mapped_column

from webdiary.extensions import db


class SearchToken(db.Model):
    """One row per distinct token of an entry.

    ``zone_mask`` records which zones (title/body/tags) contain the token, so
    ranking can sum zone weights without re-tokenizing the entry.
    """

    __tablename__ = "diary_search_token"
    __table_args__ = (
        db.UniqueConstraint("entry_id", "token", name="uq_diary_search_token_entry_token"),
        db.Index("ix_diary_search_token_user_token", "user_id", "token"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(
        db.ForeignKey("diary_entry.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[int] = mapped_column(nullable=False)
    token: Mapped[str] = mapped_column(db.String(128), nullable=False)
    zone_mask: Mapped[int] = mapped_column(nullable=False)
