"""Tests for the permission table and the ACL check."""

import pytest

from credisphere.auth import PERMISSIONS, has_permission
from credisphere.common import Role, User


def _user(role: str) -> User:
    return User(id=1, name="Test", email="test@example.com", role=role)


class TestPermissionTable:
    """The table is fixed at import time."""

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            PERMISSIONS["users.read"] = ("user",)  # type: ignore[index]

    def test_every_role_in_table_is_known(self) -> None:
        known = set(Role.values())
        for roles in PERMISSIONS.values():
            assert set(roles) <= known

    @pytest.mark.parametrize(
        "key",
        ["users.read", "users.write", "users.delete", "users.export", "roles.read"],
    )
    def test_user_management_is_super_admin_only(self, key: str) -> None:
        assert PERMISSIONS[key] == (Role.SUPER_ADMIN.value,)


class TestHasPermission:
    """Closed-by-default role checks."""

    def test_listed_role_is_allowed(self) -> None:
        assert has_permission(_user(Role.CLUB_ADMIN.value), "players.write")

    def test_unlisted_role_is_denied(self) -> None:
        assert not has_permission(_user(Role.MEMBER.value), "players.write")
        assert not has_permission(_user(Role.BRANCH_ADMIN.value), "players.export")

    def test_member_can_read_players_groups_and_competitions(self) -> None:
        member = _user(Role.MEMBER.value)
        assert has_permission(member, "players.read")
        assert has_permission(member, "groups.read")
        assert has_permission(member, "competitions.read")
        assert not has_permission(member, "clubs.read")

    def test_unknown_key_is_denied(self) -> None:
        assert not has_permission(_user(Role.SUPER_ADMIN.value), "loans.read")

    def test_missing_user_or_role_is_denied(self) -> None:
        assert not has_permission(None, "players.read")
        assert not has_permission(_user(""), "players.read")

    def test_unknown_role_is_denied(self) -> None:
        assert not has_permission(_user("janitor"), "players.read")

    def test_custom_table(self) -> None:
        table = {"reports.read": ("auditor",)}
        assert has_permission(_user("auditor"), "reports.read", table)
        assert not has_permission(_user("auditor"), "players.read", table)
