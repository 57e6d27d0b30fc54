"""Category bookkeeping: per-owner names, unique case-insensitively."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func

from webdiary.core.errors import ConflictError, NotFoundError, ValidationError
from webdiary.domains.diary.models import Category, DiaryEntry
from webdiary.extensions import db


def list_categories(owner_id: int) -> List[Category]:
    return Category.query.filter_by(user_id=owner_id).order_by(Category.name.asc()).all()


def get_category(owner_id: int, category_id: int) -> Category:
    category = Category.query.filter_by(id=category_id, user_id=owner_id).first()
    if category is None:
        raise NotFoundError("Category not found", field="id")
    return category


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Category name is required", field="name")
    return cleaned


def _ensure_unique(owner_id: int, name: str, exclude_id: Optional[int] = None) -> None:
    query = Category.query.filter(Category.user_id == owner_id, func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Category already exists", field="name")


def create_category(owner_id: int, name: str) -> Category:
    cleaned = _clean_name(name)
    _ensure_unique(owner_id, cleaned)
    category = Category(user_id=owner_id, name=cleaned)
    db.session.add(category)
    db.session.commit()
    return category


def rename_category(owner_id: int, category_id: int, name: str) -> Category:
    category = get_category(owner_id, category_id)
    cleaned = _clean_name(name)
    _ensure_unique(owner_id, cleaned, exclude_id=category.id)
    category.name = cleaned
    db.session.commit()
    return category


def delete_category(owner_id: int, category_id: int) -> None:
    """Remove the category; its entries keep existing without one."""
    category = get_category(owner_id, category_id)
    DiaryEntry.query.filter_by(user_id=owner_id, category_id=category.id).update(
        {DiaryEntry.category_id: None}, synchronize_session=False
    )
    db.session.delete(category)
    db.session.commit()
    db.session.expire_all()
