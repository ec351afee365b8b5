"""Fundamental user data model for app."""

from dataclasses import dataclass
from enum import StrEnum


class Role(StrEnum):
    """Role names stored on user records and referenced by the permission table."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    BRANCH_ADMIN = "branch_admin"
    CLUB_ADMIN = "clubadmin"
    MEMBER = "member"
    USER = "user"

    @classmethod
    def values(cls) -> list[str]:
        """Return every role value in declaration order."""
        return [role.value for role in cls]


@dataclass
class User:
    """Authenticated user as seen by route handlers.

    ``role`` is kept as the raw stored string so that the ACL lookup works
    for roles the permission table does not know about.
    """

    id: int
    name: str
    email: str
    role: str
    active: bool = True
    last_login: str | None = None

    @property
    def is_member(self) -> bool:
        return bool(self.role) and Role.MEMBER.value in self.role
