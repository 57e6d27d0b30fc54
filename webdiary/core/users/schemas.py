"""Typed schemas for user IO."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from webdiary.core.users.models import User


class UserResponse(BaseModel):
    id: int
    username: str
    email: str


def serialize_user(user: "User") -> UserResponse:
    return UserResponse(id=user.id, username=user.username, email=user.email)
