"""Common data models and utilities for the application."""

from .database import Database, RecordNotFoundError, utc_now
from .models import CamelModel, MessageResponse, Page
from .pagination import ListParams, ListQuery, list_params, parse_bool
from .queries import ResourceQueries
from .user import Role, User
from .validation import (
    DateStr,
    Email,
    NonEmptyStr,
    Password,
    UpdateModel,
    Validated,
    letters_only,
    validate_body,
    validated_or_400,
)

__all__ = [
    "CamelModel",
    "Database",
    "DateStr",
    "Email",
    "ListParams",
    "ListQuery",
    "MessageResponse",
    "NonEmptyStr",
    "Page",
    "Password",
    "RecordNotFoundError",
    "ResourceQueries",
    "Role",
    "UpdateModel",
    "User",
    "Validated",
    "letters_only",
    "list_params",
    "parse_bool",
    "utc_now",
    "validate_body",
    "validated_or_400",
]
