"""Caller identity resolved from the bearer token."""

from __future__ import annotations

from dataclasses import dataclass

from flask_jwt_extended import get_jwt, get_jwt_identity


@dataclass(frozen=True)
class CallerIdentity:
    owner_id: int
    username: str
    email: str


def current_identity() -> CallerIdentity:
    """Identity of the authenticated caller; use inside ``@jwt_required()`` views."""
    claims = get_jwt() or {}
    return CallerIdentity(
        owner_id=int(get_jwt_identity()),
        username=claims.get("username", ""),
        email=claims.get("email", ""),
    )
