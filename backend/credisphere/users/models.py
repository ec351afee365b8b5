from typing import Annotated

from pydantic import AfterValidator, Field, StrictBool

from credisphere.common import CamelModel, Email, NonEmptyStr, Password, Role, UpdateModel, letters_only

Name = Annotated[NonEmptyStr, Field(max_length=100), AfterValidator(letters_only("Name"))]


def _check_role(value: str) -> str:
    if value not in Role.values():
        msg = "Invalid role."
        raise ValueError(msg)
    return value


RoleStr = Annotated[str, AfterValidator(_check_role)]


class UserCreate(CamelModel):
    name: Name
    email: Email
    password: Password
    role: RoleStr
    active: StrictBool | None = None


class UserUpdate(UpdateModel):
    name: Name | None = None
    email: Email | None = None
    role: RoleStr | None = None
    active: StrictBool | None = None


class StatusUpdate(CamelModel):
    active: StrictBool


class PasswordUpdate(CamelModel):
    password: Password
