from pydantic import Field

from credisphere.common import CamelModel, Email, NonEmptyStr, Password, User

from .membership import MembershipExpiry


class LoginRequest(CamelModel):
    email: NonEmptyStr
    password: NonEmptyStr


class RegisterRequest(CamelModel):
    name: NonEmptyStr
    email: Email
    password: Password


class ChangePasswordRequest(CamelModel):
    current_password: NonEmptyStr
    new_password: Password


class UserResponse(CamelModel):
    """User as returned to clients, never carrying the password hash."""

    id: int
    name: str
    email: str
    role: str
    active: bool
    last_login: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

class MembershipExpiryResponse(CamelModel):
    ho_expired: bool
    venue_expired: bool
    earlier_expiry_date: str | None
    expiry_type: str | None
    member_id: int

    @classmethod
    def from_expiry(
        cls,
        expiry: MembershipExpiry | None,
    ) -> "MembershipExpiryResponse | None":
        return cls.model_validate(expiry) if expiry else None


class AccountResponse(UserResponse):
    membership_expiry: MembershipExpiryResponse | None = None


class LoginResponse(CamelModel):
    token: str
    user: UserResponse


class RolesResponse(CamelModel):
    roles: dict[str, str] = Field(default_factory=dict)
