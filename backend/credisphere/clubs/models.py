from typing import Annotated

from pydantic import Field, field_validator

from credisphere.common import CamelModel, Email, NonEmptyStr, Password, UpdateModel
from credisphere.common.validation import check_password

Name = Annotated[NonEmptyStr, Field(max_length=255)]
Address = Annotated[NonEmptyStr, Field(max_length=500)]
Mobile = Annotated[NonEmptyStr, Field(max_length=20)]


class ClubCreate(CamelModel):
    club_name: Name
    affiliation_number: Annotated[str, Field(max_length=255)] | None = None
    city: Name
    address: Address
    mobile: Mobile
    email: Annotated[Email, Field(max_length=255)]
    password: Password


class ClubUpdate(UpdateModel):
    """Partial club update; an empty password leaves the password unchanged."""

    club_name: Name | None = None
    affiliation_number: Annotated[str, Field(max_length=255)] | None = None
    city: Name | None = None
    address: Address | None = None
    mobile: Mobile | None = None
    email: Annotated[Email, Field(max_length=255)] | None = None
    password: str | None = None

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str | None) -> str | None:
        return check_password(value) if value else value


class ClubResponse(CamelModel):
    id: int
    club_name: str
    affiliation_number: str | None = None
    city: str
    address: str
    mobile: str
    email: str
    created_at: str
    updated_at: str
