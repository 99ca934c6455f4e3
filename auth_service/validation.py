"""
Request body validation as a result value.

validate_body never raises on bad input: it returns either the parsed model
or the list of field errors, and the route decides what to do with them.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from auth_service.schemas.errors import FieldError

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    """Either value is set (ok) or errors is non-empty."""

    value: ModelT | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None and not self.errors


def _body_path(model: type[BaseModel], loc: tuple[Any, ...]) -> str:
    parts = list(loc)
    # Defaults validated with validate_default report the field name, not the body key.
    if parts and isinstance(parts[0], str) and parts[0] in model.model_fields:
        parts[0] = model.model_fields[parts[0]].alias or parts[0]
    return ".".join(str(part) for part in parts)


def _field_error(model: type[BaseModel], err: dict[str, Any]) -> FieldError:
    path = _body_path(model, tuple(err.get("loc", ())))
    ctx = err.get("ctx") or {}
    if err.get("type") == "value_error" and "error" in ctx:
        # Our own field validators: show their message without pydantic's "Value error, " prefix.
        msg = str(ctx["error"])
    else:
        msg = err.get("msg", "Invalid value")
    return FieldError(msg=msg, path=path)


def validate_body(model: type[ModelT], data: Any) -> ValidationResult[ModelT]:
    """Validate a decoded JSON body against model."""
    if data is None:
        data = {}
    try:
        return ValidationResult(value=model.model_validate(data))
    except ValidationError as e:
        return ValidationResult(errors=[_field_error(model, err) for err in e.errors()])
