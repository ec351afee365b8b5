"""Request body validation returning an explicit result.

Route handlers call :func:`validate_body`, optionally add more errors from
async checks (uniqueness lookups), then turn a failed result into a 400 with
:func:`validated_or_400`.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Annotated, Any, ClassVar, Generic, TypeVar

from fastapi import HTTPException, status
from pydantic import AfterValidator, BaseModel, StringConstraints, ValidationError, model_validator

from .models import CamelModel

ModelT = TypeVar("ModelT", bound=BaseModel)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_LETTERS = re.compile(r"^[A-Za-z\s\u0900-\u097F]+$")

PASSWORD_MIN_LENGTH = 6
# bcrypt rejects longer input.
PASSWORD_MAX_BYTES = 72


def unique_message(field_name: str) -> str:
    return f"A record with that {field_name} already exists."


def letters_only(label: str) -> Callable[[str], str]:
    """Build a validator accepting Latin and Devanagari letters and spaces."""

    def check(value: str) -> str:
        if value and not _LETTERS.match(value):
            msg = f"{label} can only contain letters."
            raise ValueError(msg)
        return value

    return check


def _check_email(value: str) -> str:
    if not _EMAIL.match(value):
        msg = "Email must be a valid email address."
        raise ValueError(msg)
    return value.lower()


def check_password(value: str) -> str:
    if len(value) < PASSWORD_MIN_LENGTH:
        msg = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long."
        raise ValueError(msg)
    if len(value.encode()) > PASSWORD_MAX_BYTES:
        msg = f"Password must not exceed {PASSWORD_MAX_BYTES} bytes."
        raise ValueError(msg)
    return value


def _check_date(value: str) -> str:
    try:
        date.fromisoformat(value[:10])
    except ValueError:
        msg = "Must be a valid date (YYYY-MM-DD)."
        raise ValueError(msg) from None
    return value[:10]


# A blank value is reported the same way as a missing one.
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Email = Annotated[NonEmptyStr, AfterValidator(_check_email)]
Password = Annotated[str, StringConstraints(min_length=1), AfterValidator(check_password)]
DateStr = Annotated[NonEmptyStr, AfterValidator(_check_date)]


class UpdateModel(CamelModel):
    """Partial update body: every field optional, at least one required.

    Explicit ``null`` only clears the columns listed in ``NULLABLE``; for
    every other field it is ignored.
    """

    NULLABLE: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _require_one_field(self) -> "UpdateModel":
        if not self.model_fields_set:
            msg = "At least one field is required"
            raise ValueError(msg)
        return self

    def changes(self) -> dict[str, Any]:
        """Return the supplied fields keyed by column name."""
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in self.NULLABLE
        }


def humanize(field_name: str) -> str:
    """``clubName`` -> ``Club name``."""
    words = _CAMEL_BOUNDARY.sub(" ", field_name).replace("_", " ").lower()
    return words[:1].upper() + words[1:]


def _is_required_error(error: dict[str, Any]) -> bool:
    if error["type"] == "missing":
        return True
    return error["type"] in {"string_too_short", "too_short"} and error.get(
        "ctx",
        {},
    ).get("min_length") == 1


def _error_message(error: dict[str, Any], field_name: str | None) -> str:
    if field_name and _is_required_error(error):
        return f"{humanize(field_name)} is required."
    ctx_error = error.get("ctx", {}).get("error")
    if error["type"] == "value_error" and ctx_error is not None:
        return str(ctx_error)
    return error["msg"]


def field_errors(exc: ValidationError) -> dict[str, Any]:
    """Convert a pydantic error into the field-keyed error map.

    Only the first error per field is kept; errors without a location
    (model-level checks) are reported under ``message``.
    """
    errors: dict[str, Any] = {}
    for error in exc.errors():
        location = error.get("loc", ())
        field_name = str(location[0]) if location else None
        message = _error_message(error, field_name)
        if field_name is None:
            errors.setdefault("message", message)
        else:
            errors.setdefault(field_name, {"type": "validation", "message": message})
    return errors


@dataclass
class Validated(Generic[ModelT]):
    """Outcome of validating a request body: data or field errors."""

    data: ModelT | None = None
    errors: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.data is not None and not self.errors

    def add_error(
        self,
        field_name: str,
        message: str,
        error_type: str = "validation",
    ) -> None:
        self.errors.setdefault(field_name, {"type": error_type, "message": message})

    def add_unique_error(self, field_name: str) -> None:
        self.add_error(field_name, unique_message(field_name), "unique")


def validate_body(model: type[ModelT], body: Any) -> Validated[ModelT]:
    """Validate ``body`` against ``model`` without raising.

    :param model: Pydantic model describing the body
    :param body: Decoded JSON body
    :return: Validated result holding either the model or the errors
    """
    if not isinstance(body, dict):
        return Validated(errors={"message": "Request body must be a JSON object"})
    try:
        return Validated(data=model.model_validate(body))
    except ValidationError as e:
        return Validated(errors=field_errors(e))


def validated_or_400(result: Validated[ModelT]) -> ModelT:
    """Return the validated data or raise a 400 carrying the error map."""
    if not result.ok or result.data is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors,
        )
    return result.data
