from typing import Annotated

from pydantic import AfterValidator, Field

from credisphere.common import CamelModel, DateStr, NonEmptyStr, UpdateModel
from credisphere.groups.models import GroupIdList

MULTIPLE_GROUPS = "Multiple groups"


def _at_least_one(group_ids: list[int]) -> list[int]:
    if not group_ids:
        msg = "At least one group must be selected"
        raise ValueError(msg)
    return group_ids


GroupIds = Annotated[GroupIdList, AfterValidator(_at_least_one)]
CompetitionName = Annotated[NonEmptyStr, Field(max_length=255)]


class CompetitionCreate(CamelModel):
    competition_name: CompetitionName
    date: DateStr
    groups: GroupIds
    last_entry_date: DateStr


class CompetitionUpdate(UpdateModel):
    competition_name: CompetitionName | None = None
    date: DateStr | None = None
    groups: GroupIds | None = None
    last_entry_date: DateStr | None = None


class CompetitionResponse(CamelModel):
    """Competition with its groups rendered as id strings."""

    id: int
    competition_name: str
    date: str
    age: str
    last_entry_date: str
    groups: list[str]
    created_at: str
    updated_at: str
