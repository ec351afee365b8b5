"""Tests for body validation and list query helpers."""

import sqlite3
from typing import ClassVar

import pytest
from fastapi import HTTPException

from credisphere.common import (
    CamelModel,
    DateStr,
    Email,
    ListParams,
    ListQuery,
    NonEmptyStr,
    UpdateModel,
    list_params,
    parse_bool,
    validate_body,
    validated_or_400,
)
from credisphere.common.errors import unique_violation_field
from credisphere.common.pagination import MAX_QUERY_INT, escape_like
from credisphere.common.validation import check_password, humanize


class Sample(CamelModel):
    club_name: NonEmptyStr
    email: Email
    founded: DateStr | None = None


class SampleUpdate(UpdateModel):
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"note"})

    club_name: NonEmptyStr | None = None
    note: str | None = None


class TestValidateBody:
    def test_valid_body(self) -> None:
        result = validate_body(Sample, {"clubName": " Eagles ", "email": "A@B.COM"})

        assert result.ok
        assert result.data is not None
        assert result.data.club_name == "Eagles"
        assert result.data.email == "a@b.com"

    def test_required_and_blank_fields(self) -> None:
        result = validate_body(Sample, {"clubName": "   "})

        assert not result.ok
        assert result.errors["clubName"] == {
            "type": "validation",
            "message": "Club name is required.",
        }
        assert result.errors["email"]["message"] == "Email is required."

    def test_custom_messages(self) -> None:
        result = validate_body(Sample, {"clubName": "x", "email": "nope", "founded": "2024-13-40"})

        assert result.errors["email"]["message"] == "Email must be a valid email address."
        assert result.errors["founded"]["message"] == "Must be a valid date (YYYY-MM-DD)."

    def test_date_is_truncated(self) -> None:
        result = validate_body(Sample, {"clubName": "x", "email": "a@b.co", "founded": "2024-02-29T10:00:00Z"})

        assert result.data is not None
        assert result.data.founded == "2024-02-29"

    def test_non_object_body(self) -> None:
        result = validate_body(Sample, ["not", "an", "object"])

        assert result.errors == {"message": "Request body must be a JSON object"}

    def test_validated_or_400(self) -> None:
        result = validate_body(Sample, {"clubName": "x", "email": "a@b.co"})
        result.add_unique_error("email")

        with pytest.raises(HTTPException) as exc_info:
            validated_or_400(result)

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail["email"] == {
            "type": "unique",
            "message": "A record with that email already exists.",
        }


class TestUpdateModel:
    def test_empty_body_is_rejected(self) -> None:
        result = validate_body(SampleUpdate, {})

        assert result.errors == {"message": "At least one field is required"}

    def test_changes_only_include_supplied_fields(self) -> None:
        data = SampleUpdate.model_validate({"clubName": "Hawks"})

        assert data.changes() == {"club_name": "Hawks"}

    def test_null_clears_only_nullable_fields(self) -> None:
        data = SampleUpdate.model_validate({"clubName": None, "note": None})

        assert data.changes() == {"note": None}


class TestListParams:
    def test_lenient_parsing(self) -> None:
        options = list_params(page="zero", limit="-5", search="  eagle ", sort_by="name", sort_order="DESC")

        assert options.page == 1
        assert options.limit == 10
        assert options.search == "eagle"
        assert options.descending

    @pytest.mark.parametrize("value", [str(MAX_QUERY_INT + 1), "100000000000000000000", "1e3"])
    def test_out_of_range_falls_back(self, value: str) -> None:
        options = list_params(page=value, limit=value)

        assert options.page == 1
        assert options.limit == 10

    def test_largest_accepted_values(self) -> None:
        options = list_params(page=str(MAX_QUERY_INT), limit=str(MAX_QUERY_INT))

        assert options.page == MAX_QUERY_INT
        assert options.offset == (MAX_QUERY_INT - 1) * MAX_QUERY_INT

    def test_offset(self) -> None:
        assert ListParams(page=3, limit=20).offset == 40

    @pytest.mark.parametrize(("value", "expected"), [("true", True), ("false", False), ("yes", None), (None, None)])
    def test_parse_bool(self, value: str | None, expected: bool | None) -> None:
        assert parse_bool(value) is expected


class TestListQuery:
    def test_search_filters_and_sort(self) -> None:
        query = ListQuery.build(
            ListParams(search="50%", sort_by="name", sort_order="desc"),
            search_columns=("club_name", "city"),
            sort_columns={"name": "club_name"},
            default_sort="id",
            filters={"active": True, "role": None},
            extra_conditions=[("role IN (?, ?)", ["admin", "member"])],
        )

        assert query.where == (
            " WHERE (club_name LIKE ? ESCAPE '\\' OR city LIKE ? ESCAPE '\\')"
            " AND active = ? AND role IN (?, ?)"
        )
        assert query.params == ["%50\\%%", "%50\\%%", True, "admin", "member"]
        assert query.order_by == " ORDER BY club_name DESC, id DESC"

    def test_unknown_sort_falls_back(self) -> None:
        query = ListQuery.build(
            ListParams(sort_by="password"),
            search_columns=(),
            sort_columns={"name": "club_name"},
            default_sort="club_name",
        )

        assert query.where == ""
        assert query.order_by == " ORDER BY club_name ASC, id ASC"

    def test_escape_like(self) -> None:
        assert escape_like("a_b%c\\") == "a\\_b\\%c\\\\"


def test_humanize() -> None:
    assert humanize("clubName") == "Club name"
    assert humanize("referenceMobile1") == "Reference mobile1"


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("abc", "Password must be at least 6 characters long."),
        ("p" * 73, "Password must not exceed 72 bytes."),
        ("é" * 37, "Password must not exceed 72 bytes."),
    ],
)
def test_check_password_rejects(value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        check_password(value)


def test_check_password_accepts_72_bytes() -> None:
    assert check_password("é" * 36) == "é" * 36


@pytest.mark.parametrize(
    ("message", "field"),
    [
        ("UNIQUE constraint failed: players.aadhar_number", "aadharNumber"),
        ("UNIQUE constraint failed: clubs.email", "email"),
        ("FOREIGN KEY constraint failed", None),
    ],
)
def test_unique_violation_field(message: str, field: str | None) -> None:
    assert unique_violation_field(sqlite3.IntegrityError(message)) == field
