import re
from typing import Annotated, ClassVar

from pydantic import AfterValidator, Field, StrictBool

from credisphere.common import CamelModel, DateStr, NonEmptyStr, UpdateModel, letters_only
from credisphere.groups.models import GroupIdList, GroupSummary

_DIGITS = re.compile(r"^\d+$")

MOBILE_MIN_DIGITS = 10
MOBILE_MAX_DIGITS = 15
AADHAR_DIGITS = 12


def _check_mobile(value: str) -> str:
    if not _DIGITS.match(value):
        msg = "Mobile number can only contain digits."
        raise ValueError(msg)
    if len(value) < MOBILE_MIN_DIGITS:
        msg = f"Mobile number must be at least {MOBILE_MIN_DIGITS} digits."
        raise ValueError(msg)
    if len(value) > MOBILE_MAX_DIGITS:
        msg = f"Mobile number must not exceed {MOBILE_MAX_DIGITS} digits."
        raise ValueError(msg)
    if len(value) == MOBILE_MIN_DIGITS and value.startswith("0"):
        msg = "Invalid mobile number format. Indian mobile numbers should not start with 0."
        raise ValueError(msg)
    return value


def _check_aadhar(value: str) -> str:
    if len(value) != AADHAR_DIGITS or not _DIGITS.match(value):
        msg = f"Aadhar number must be exactly {AADHAR_DIGITS} digits."
        raise ValueError(msg)
    return value


FirstName = Annotated[NonEmptyStr, Field(max_length=100), AfterValidator(letters_only("First name"))]
LastName = Annotated[NonEmptyStr, Field(max_length=100), AfterValidator(letters_only("Last name"))]
MiddleName = Annotated[str, Field(max_length=100), AfterValidator(letters_only("Middle name"))]
Mobile = Annotated[NonEmptyStr, AfterValidator(_check_mobile)]
AadharNumber = Annotated[NonEmptyStr, AfterValidator(_check_aadhar)]


class PlayerCreate(CamelModel):
    first_name: FirstName
    middle_name: MiddleName | None = None
    last_name: LastName
    date_of_birth: DateStr
    position: str | None = None
    address: NonEmptyStr
    mobile: Mobile
    aadhar_number: AadharNumber
    group_ids: GroupIdList = Field(default_factory=list)


class PlayerUpdate(UpdateModel):
    NULLABLE: ClassVar[frozenset[str]] = frozenset({"middle_name", "position"})

    first_name: FirstName | None = None
    middle_name: MiddleName | None = None
    last_name: LastName | None = None
    date_of_birth: DateStr | None = None
    position: str | None = None
    address: NonEmptyStr | None = None
    mobile: Mobile | None = None
    aadhar_number: AadharNumber | None = None
    aadhar_verified: StrictBool | None = None
    group_ids: GroupIdList | None = None


class SuspensionUpdate(CamelModel):
    is_suspended: StrictBool


class AadharVerificationUpdate(CamelModel):
    aadhar_verified: StrictBool


class PlayerResponse(CamelModel):
    id: int
    unique_id_number: str
    first_name: str
    middle_name: str | None = None
    last_name: str
    date_of_birth: str
    position: str | None = None
    address: str
    mobile: str
    aadhar_number: str
    aadhar_verified: bool
    is_suspended: bool
    profile_image: str | None = None
    groups: list[GroupSummary] = Field(default_factory=list)
    created_at: str
    updated_at: str
