from typing import Annotated

from pydantic import Field

from credisphere.common import CamelModel, NonEmptyStr

SettingKey = Annotated[NonEmptyStr, Field(max_length=255)]


class SiteSettingWrite(CamelModel):
    """Body of both create and update; ``value`` may be empty."""

    key: SettingKey
    value: str


class SiteSettingResponse(CamelModel):
    id: int
    key: str
    value: str
    created_at: str
    updated_at: str
