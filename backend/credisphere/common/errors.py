"""Exception handlers rendering every failure as the error envelope.

All error responses share one of two shapes::

    {"errors": {"<field>": {"type": "...", "message": "..."}}}
    {"errors": {"message": "..."}}
"""

import logging
import re
import sqlite3
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .database import RecordNotFoundError
from .validation import unique_message

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

_UNIQUE_CONSTRAINT = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")
_SNAKE_PART = re.compile(r"_([a-z0-9])")


def error_body(detail: Any) -> dict[str, Any]:
    """Wrap an ``HTTPException`` detail in the envelope."""
    if isinstance(detail, dict):
        return {"errors": detail}
    return {"errors": {"message": str(detail)}}


def unique_violation_field(exc: sqlite3.IntegrityError) -> str | None:
    """Return the camelCase field named by a UNIQUE violation, if any."""
    match = _UNIQUE_CONSTRAINT.search(str(exc))
    if not match:
        return None
    return _SNAKE_PART.sub(lambda m: m.group(1).upper(), match.group(1))


async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors: dict[str, Any] = {}
    for error in exc.errors():
        location = [part for part in error.get("loc", ()) if part not in {"path", "query", "body"}]
        # Malformed JSON reports a byte offset instead of a field name.
        name = location[0] if location and isinstance(location[0], str) else "message"
        if name == "message":
            errors.setdefault("message", error["msg"])
        else:
            errors.setdefault(name, {"type": "validation", "message": error["msg"]})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": errors},
    )


async def integrity_error_handler(
    request: Request,
    exc: sqlite3.IntegrityError,
) -> JSONResponse:
    field = unique_violation_field(exc)
    if field is None:
        LOGGER.info("Integrity error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": {"message": "The request conflicts with existing data."}},
        )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": {field: {"type": "unique", "message": unique_message(field)}}},
    )


async def not_found_handler(
    request: Request,
    exc: RecordNotFoundError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"errors": {"message": str(exc)}},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    LOGGER.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"errors": {"message": "Internal Server Error"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the shared handlers on the application."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(sqlite3.IntegrityError, integrity_error_handler)
    app.add_exception_handler(RecordNotFoundError, not_found_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
