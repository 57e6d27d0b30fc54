"""Authentication service layer."""

from __future__ import annotations

from typing import Optional

from flask_jwt_extended import create_access_token
from sqlalchemy import func, or_

from webdiary.core.auth.schemas import RegisterRequest
from webdiary.core.errors import ConflictError
from webdiary.core.users.models import User
from webdiary.extensions import bcrypt, db


def hash_password(plain_password: str) -> str:
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.check_password_hash(hashed_password, plain_password)


def register_user(payload: RegisterRequest) -> User:
    """Create a user; username and email must both be unused."""
    existing = User.query.filter(
        or_(
            func.lower(User.username) == payload.username.lower(),
            func.lower(User.email) == payload.email,
        )
    ).first()
    if existing:
        raise ConflictError("Username or email already exists")

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
    )
    db.session.add(user)
    db.session.commit()
    return user


def authenticate_user(login: str, password: str) -> Optional[User]:
    """Return the user if credentials are valid; ``login`` is a username or email."""
    needle = login.strip().lower()
    user = User.query.filter(
        or_(func.lower(User.username) == needle, func.lower(User.email) == needle)
    ).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def issue_token(user: User) -> str:
    """Create an access token carrying the caller identity claims."""
    return create_access_token(
        identity=str(user.id),
        additional_claims={"username": user.username, "email": user.email},
    )
