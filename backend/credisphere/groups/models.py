from enum import StrEnum
from typing import Annotated

from pydantic import AfterValidator, Field

from credisphere.common import CamelModel, NonEmptyStr, UpdateModel

GENDER_MESSAGE = "Gender must be Male, Female, or Mix"

GroupName = Annotated[NonEmptyStr, Field(max_length=255)]
AgeLimit = Annotated[NonEmptyStr, Field(max_length=50)]


class Gender(StrEnum):
    MALE = "Male"
    FEMALE = "Female"
    MIX = "Mix"


def _check_gender(value: str) -> str:
    if value not in {gender.value for gender in Gender}:
        raise ValueError(GENDER_MESSAGE)
    return value


GenderStr = Annotated[str, AfterValidator(_check_gender)]


def to_group_ids(values: list[str | int]) -> list[int]:
    """Accept group ids as numbers or numeric strings."""
    group_ids = []
    for value in values:
        text = str(value).strip()
        if not text.isdigit() or int(text) < 1:
            msg = f"Invalid group id: {value}"
            raise ValueError(msg)
        group_ids.append(int(text))
    return group_ids


GroupIdList = Annotated[list[str | int], AfterValidator(to_group_ids)]


class GroupCreate(CamelModel):
    group_name: GroupName
    gender: GenderStr
    age: AgeLimit


class GroupUpdate(UpdateModel):
    group_name: GroupName | None = None
    gender: GenderStr | None = None
    age: AgeLimit | None = None


class GroupResponse(CamelModel):
    id: int
    group_name: str
    gender: str
    age: str
    created_at: str
    updated_at: str


class GroupSummary(CamelModel):
    """Group as embedded in player responses."""

    id: int
    group_name: str
    gender: str
    age: str
