"""
Input schemas for the service operations.

Each schema lists exactly the fields a caller may set. Anything else in the
incoming data (``admin``, ``user_id``, ``follower_id``...) is rejected rather
than silently assigned.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class InputSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")


class UserCreate(InputSchema):
    name: str = ""
    email: str = ""
    password: str = ""
    password_confirmation: Optional[str] = None


class UserUpdate(InputSchema):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    password_confirmation: Optional[str] = None


class MicropostCreate(InputSchema):
    content: str = ""


def _message_for(error: Mapping[str, Any]) -> str:
    if error["type"] == "extra_forbidden":
        return "can't be mass-assigned"
    return error["msg"]


def parse_payload(schema: Type[SchemaT], data: Any) -> SchemaT:
    """Build ``schema`` from a mapping or pass an existing instance through.

    Raises ``ValidationError`` with one entry per offending field.
    """
    if isinstance(data, schema):
        return data
    if data is None:
        data = {}
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        errors: dict[str, list[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "base"
            errors.setdefault(field, []).append(_message_for(error))
        raise ValidationError(errors) from exc
