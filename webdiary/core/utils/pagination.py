"""Limit/offset pagination helpers."""

from __future__ import annotations

from typing import Any, Optional

from webdiary.core.errors import ValidationError


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a non-negative integer", field=field)
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not text.isdigit():
            raise ValidationError(f"{field} must be a non-negative integer", field=field)
        number = int(text)
    if number < 0:
        raise ValidationError(f"{field} must be a non-negative integer", field=field)
    return number


def parse_limit_offset(
    limit: Optional[Any],
    offset: Optional[Any],
    *,
    default_limit: int = 20,
    max_limit: int = 100,
) -> tuple[int, int]:
    """Return a validated ``(limit, offset)`` pair.

    Missing values fall back to defaults; non-numeric or negative values raise
    ValidationError. A zero limit is rejected and large limits are clamped.
    """
    limit_val = default_limit if limit in (None, "") else _as_int(limit, "limit")
    offset_val = 0 if offset in (None, "") else _as_int(offset, "offset")
    if limit_val < 1:
        raise ValidationError("limit must be at least 1", field="limit")
    return min(limit_val, max_limit), offset_val


def page_envelope(items: list, total: int, limit: int, offset: int) -> dict[str, Any]:
    return {"total": total, "limit": limit, "offset": offset, "results": items}
