"""Input validation helpers."""

from __future__ import annotations

from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from webdiary.core.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def jsonable_errors(exc: SchemaValidationError) -> list[dict]:
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        err.pop("input", None)
    return errors


def parse_model(model: Type[M], data: Mapping[str, Any]) -> M:
    """Validate ``data`` against ``model``, raising the API ValidationError."""
    try:
        return model.model_validate(dict(data))
    except SchemaValidationError as exc:
        errors = jsonable_errors(exc)
        field = ".".join(str(part) for part in errors[0]["loc"]) if errors and errors[0].get("loc") else None
        message = f"Invalid value for {field}" if field else "Invalid request"
        raise ValidationError(message, field=field, details=errors) from exc
