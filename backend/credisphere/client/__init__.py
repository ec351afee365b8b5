"""Python client for the CrediSphere admin API."""

from .api import ApiClient, ApiError
from .resources import (
    RESOURCES,
    ClubClient,
    CompetitionClient,
    DayCloseClient,
    GroupClient,
    PartyClient,
    PlayerClient,
    ResourceClient,
    SiteSettingClient,
    UserClient,
)

__all__ = [
    "RESOURCES",
    "ApiClient",
    "ApiError",
    "ClubClient",
    "CompetitionClient",
    "DayCloseClient",
    "GroupClient",
    "PartyClient",
    "PlayerClient",
    "ResourceClient",
    "SiteSettingClient",
    "UserClient",
]
