"""Per-resource clients mirroring the admin screens."""

from pathlib import Path
from typing import Any

from .api import ApiClient


class ResourceClient:
    """CRUD calls for one resource path."""

    path: str = ""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def list(
        self,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        sort_by: str | None = None,
        sort_order: str = "asc",
        **filters: Any,
    ) -> dict[str, Any]:
        """Fetch one page: ``{items, page, totalPages, totalCount}``."""
        params: dict[str, Any] = {"page": page, "limit": limit, "sortOrder": sort_order}
        if search:
            params["search"] = search
        if sort_by:
            params["sortBy"] = sort_by
        params.update({key: value for key, value in filters.items() if value is not None})
        return self.api.get(self.path, params)

    def get(self, record_id: int) -> dict[str, Any]:
        return self.api.get(f"{self.path}/{record_id}")

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        return self.api.post(self.path, data)

    def update(self, record_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return self.api.put(f"{self.path}/{record_id}", data)

    def delete(self, record_id: int) -> dict[str, Any]:
        return self.api.delete(f"{self.path}/{record_id}")


class ExportableResourceClient(ResourceClient):
    def export(self, search: str = "", **filters: Any) -> bytes:
        """Download every matching record as an xlsx workbook."""
        params: dict[str, Any] = {"export": "true"}
        if search:
            params["search"] = search
        params.update({key: value for key, value in filters.items() if value is not None})
        return self.api.download(self.path, params)


class ClubClient(ResourceClient):
    path = "/clubs"


class GroupClient(ResourceClient):
    path = "/groups"


class CompetitionClient(ResourceClient):
    path = "/competitions"


class PartyClient(ResourceClient):
    path = "/parties"


class PlayerClient(ExportableResourceClient):
    path = "/players"

    def set_suspended(self, player_id: int, suspended: bool) -> dict[str, Any]:  # noqa: FBT001
        return self.api.patch(f"{self.path}/{player_id}/suspension", {"isSuspended": suspended})

    def set_aadhar_verified(self, player_id: int, verified: bool) -> dict[str, Any]:  # noqa: FBT001
        return self.api.patch(
            f"{self.path}/{player_id}/aadhar-verification",
            {"aadharVerified": verified},
        )

    def upload_photo(self, player_id: int, path: Path, content_type: str = "image/jpeg") -> dict[str, Any]:
        return self.api.upload(f"{self.path}/{player_id}/photo", "profileImage", path, content_type)


class UserClient(ExportableResourceClient):
    path = "/users"

    def set_active(self, user_id: int, active: bool) -> dict[str, Any]:  # noqa: FBT001
        return self.api.patch(f"{self.path}/{user_id}/status", {"active": active})

    def set_password(self, user_id: int, password: str) -> dict[str, Any]:
        return self.api.patch(f"{self.path}/{user_id}/password", {"password": password})


class DayCloseClient(ResourceClient):
    path = "/day-closes"

    def last(self) -> dict[str, Any] | None:
        return self.api.get(f"{self.path}/last").get("lastClose")

    def on_date(self, date: str) -> list[dict[str, Any]]:
        return self.api.get(f"{self.path}/date/{date}")["items"]

    def close(self, date: str | None = None, note: str | None = None) -> dict[str, Any]:
        """Record a day close: ``{closedAt, nextDay}``."""
        data = {key: value for key, value in {"date": date, "note": note}.items() if value}
        return self.api.post(self.path, data)


class SiteSettingClient(ResourceClient):
    path = "/site-settings"

    def list_all(self) -> list[dict[str, Any]]:
        return self.api.get(self.path)

    def get_by_key(self, key: str) -> dict[str, Any]:
        return self.api.get(f"{self.path}/{key}")


RESOURCES: dict[str, type[ResourceClient]] = {
    "clubs": ClubClient,
    "groups": GroupClient,
    "competitions": CompetitionClient,
    "parties": PartyClient,
    "players": PlayerClient,
    "users": UserClient,
    "day-closes": DayCloseClient,
    "site-settings": SiteSettingClient,
}
