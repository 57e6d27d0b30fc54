"""Error taxonomy shared by services and controllers."""

from __future__ import annotations

from typing import Any, List, Optional


class DiaryError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "error"
    status = 500

    def __init__(
        self,
        message: str = "",
        *,
        field: Optional[str] = None,
        details: Optional[List[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"ok": False, "error": self.code, "message": self.message}
        if self.field:
            body["field"] = self.field
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(DiaryError, ValueError):
    """Missing or malformed input; raised before any mutation."""

    code = "validation_error"
    status = 400


class NotFoundError(DiaryError, LookupError):
    """Row does not exist or belongs to another user."""

    code = "not_found"
    status = 404


class ConflictError(DiaryError):
    code = "conflict"
    status = 409


class DependencyError(DiaryError):
    """Data store, blob storage or identity provider unreachable."""

    code = "dependency_error"
    status = 503


__all__ = [
    "ConflictError",
    "DependencyError",
    "DiaryError",
    "NotFoundError",
    "ValidationError",
]
