"""Schema-driven input parsing that reports every violated field at once."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Callable, TypeVar
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .domain_errors import FieldError, ValidationError
from .result import Result, err, ok

M = TypeVar("M", bound=BaseModel)

_CONSTRAINT_TYPES = (bool, int, float, str)


class InputSchema(BaseModel):
    """Base for use-case input schemas. Accepts snake_case and camelCase keys."""

    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


def _field_name(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc) or "body"


def _to_field_error(error: dict[str, Any]) -> FieldError:
    field = _field_name(tuple(error.get("loc", ())))
    error_type = str(error.get("type", "invalid"))
    if error_type == "missing":
        return FieldError(field=field, code="REQUIRED", message=f"{field} is required")

    ctx = error.get("ctx") or {}
    constraints = {key: value for key, value in ctx.items() if isinstance(value, _CONSTRAINT_TYPES)}
    return FieldError(
        field=field,
        code=error_type.upper(),
        message=str(error.get("msg", "Invalid value")),
        constraints=constraints or None,
    )


def validate_input(schema: type[M], raw: Any) -> Result[M, ValidationError]:
    """Parse raw input into a trusted schema instance or an aggregated ValidationError."""
    if isinstance(raw, schema):
        return ok(raw)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        return err(ValidationError.single_field("body", "INVALID_TYPE", "Input must be an object"))
    try:
        return ok(schema.model_validate(dict(raw)))
    except PydanticValidationError as exc:
        return err(ValidationError.from_field_errors(_to_field_error(e) for e in exc.errors()))


def _uuid_validator(label: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        try:
            return str(UUID(value))
        except (TypeError, ValueError, AttributeError):
            raise PydanticCustomError("INVALID_FORMAT", f"Invalid {label} ID format") from None

    return check


def _required_text(message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not value or not value.strip():
            raise PydanticCustomError("REQUIRED", message)
        return value

    return check


UserId = Annotated[str, AfterValidator(_uuid_validator("user"))]
ProductId = Annotated[str, AfterValidator(_uuid_validator("product"))]
TokenText = Annotated[str, AfterValidator(_required_text("Token is required"))]
