"""Tests for the role names and the authenticated user model."""

import pytest

from credisphere.common import Role, User


def test_role_values_in_declaration_order() -> None:
    assert Role.values() == ["super_admin", "admin", "branch_admin", "clubadmin", "member", "user"]


def test_role_compares_as_string() -> None:
    assert Role.ADMIN == "admin"
    assert Role("member") is Role.MEMBER


@pytest.mark.parametrize(
    ("role", "expected"),
    [
        ("member", True),
        ("member,clubadmin", True),
        ("admin", False),
        ("", False),
    ],
)
def test_is_member(role: str, expected: bool) -> None:  # noqa: FBT001
    user = User(id=1, name="Test", email="test@example.com", role=role)

    assert user.is_member is expected
