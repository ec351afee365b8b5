"""Tests for the player routes."""

import re
from collections.abc import Callable
from datetime import UTC, datetime
from io import BytesIO
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from credisphere import AppConfig
from credisphere.common import Role
from credisphere.common.excel import XLSX_MEDIA_TYPE
from credisphere.players import PlayerQueries

Headers = dict[str, str]

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def player_body(**overrides: Any) -> dict[str, Any]:
    body = {
        "firstName": "Arjun",
        "lastName": "Patil",
        "dateOfBirth": "2010-04-12",
        "position": "Forward",
        "address": "12 Station Road",
        "mobile": "9876543210",
        "aadharNumber": "123456789012",
    }
    body.update(overrides)
    return body


@pytest.fixture
def group_id(client: TestClient, admin_headers: Headers) -> int:
    """Create a group players can join."""
    response = client.post(
        "/api/groups",
        json={"groupName": "Under 16", "gender": "Male", "age": "16"},
        headers=admin_headers,
    )
    return response.json()["id"]


@pytest.fixture
def player(client: TestClient, admin_headers: Headers, group_id: int) -> dict[str, Any]:
    """Create one player in one group."""
    response = client.post(
        "/api/players",
        json=player_body(groupIds=[group_id]),
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreatePlayer:
    def test_create(self, player: dict[str, Any], group_id: int) -> None:
        assert player["firstName"] == "Arjun"
        assert player["aadharVerified"] is False
        assert player["isSuspended"] is False
        assert player["profileImage"] is None
        assert [group["id"] for group in player["groups"]] == [group_id]
        assert player["groups"][0]["groupName"] == "Under 16"

    def test_unique_id_numbers_count_up_per_day(
        self,
        client: TestClient,
        admin_headers: Headers,
        player: dict[str, Any],
    ) -> None:
        today = datetime.now(UTC).strftime("%Y%m%d")
        assert player["uniqueIdNumber"] == f"PLAYER-{today}-0001"

        second = client.post(
            "/api/players",
            json=player_body(aadharNumber="210987654321"),
            headers=admin_headers,
        ).json()

        assert re.fullmatch(r"PLAYER-\d{8}-0002", second["uniqueIdNumber"])
        assert second["groups"] == []

    def test_duplicate_aadhar(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.post("/api/players", json=player_body(), headers=admin_headers)

        assert response.status_code == 400
        error = response.json()["errors"]["aadharNumber"]
        assert error == {"type": "unique", "message": "A player with this Aadhar number already exists."}

    def test_duplicate_aadhar_caught_by_the_database(
        self,
        client: TestClient,
        admin_headers: Headers,
        player: dict[str, Any],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def never_exists(*args: Any, **kwargs: Any) -> bool:
            return False

        monkeypatch.setattr(PlayerQueries, "exists_with", never_exists)

        response = client.post("/api/players", json=player_body(), headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {
            "errors": {
                "aadharNumber": {"type": "unique", "message": "A record with that aadharNumber already exists."},
            },
        }
        assert client.get("/api/players", headers=admin_headers).json()["totalCount"] == 1

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("firstName", "Arjun2", "First name can only contain letters."),
            ("lastName", "", "Last name is required."),
            ("mobile", "98765abc10", "Mobile number can only contain digits."),
            ("mobile", "98765", "Mobile number must be at least 10 digits."),
            ("mobile", "9876543210123456", "Mobile number must not exceed 15 digits."),
            (
                "mobile",
                "0876543210",
                "Invalid mobile number format. Indian mobile numbers should not start with 0.",
            ),
            ("aadharNumber", "12345", "Aadhar number must be exactly 12 digits."),
            ("dateOfBirth", "12-04-2010", "Must be a valid date (YYYY-MM-DD)."),
        ],
    )
    def test_field_validation(
        self,
        client: TestClient,
        admin_headers: Headers,
        field: str,
        value: str,
        message: str,
    ) -> None:
        response = client.post("/api/players", json=player_body(**{field: value}), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["errors"][field]["message"] == message

    def test_devanagari_names_are_letters(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.post(
            "/api/players",
            json=player_body(firstName="अर्जुन"),
            headers=admin_headers,
        )

        assert response.status_code == 201

    def test_unknown_group(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.post("/api/players", json=player_body(groupIds=[42]), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["errors"]["groupIds"]["message"] == "Group not found: 42"

    def test_member_cannot_create(
        self,
        client: TestClient,
        make_user: Callable[..., tuple[int, Headers]],
    ) -> None:
        _, headers = make_user(Role.MEMBER.value)

        assert client.post("/api/players", json=player_body(), headers=headers).status_code == 403

    def test_club_admin_can_create(
        self,
        client: TestClient,
        make_user: Callable[..., tuple[int, Headers]],
    ) -> None:
        _, headers = make_user(Role.CLUB_ADMIN.value)

        assert client.post("/api/players", json=player_body(), headers=headers).status_code == 201


class TestListPlayers:
    @pytest.fixture
    def players(self, client: TestClient, admin_headers: Headers) -> list[dict[str, Any]]:
        """Create three players, the last one suspended."""
        created = []
        for index, name in enumerate(("Arjun", "Bhavesh", "Chetan")):
            response = client.post(
                "/api/players",
                json=player_body(firstName=name, aadharNumber=f"12345678901{index}"),
                headers=admin_headers,
            )
            created.append(response.json())
        client.patch(
            f"/api/players/{created[2]['id']}/suspension",
            json={"isSuspended": True},
            headers=admin_headers,
        )
        return created

    def test_filters(self, client: TestClient, admin_headers: Headers, players: list[dict[str, Any]]) -> None:
        suspended = client.get(
            "/api/players",
            params={"isSuspended": "true"},
            headers=admin_headers,
        ).json()
        active = client.get(
            "/api/players",
            params={"isSuspended": "false"},
            headers=admin_headers,
        ).json()
        unfiltered = client.get(
            "/api/players",
            params={"isSuspended": "maybe"},
            headers=admin_headers,
        ).json()

        assert [item["firstName"] for item in suspended["items"]] == ["Chetan"]
        assert active["totalCount"] == 2
        assert unfiltered["totalCount"] == 3

    def test_search(self, client: TestClient, admin_headers: Headers, players: list[dict[str, Any]]) -> None:
        page = client.get("/api/players", params={"search": "bhav"}, headers=admin_headers).json()

        assert [item["firstName"] for item in page["items"]] == ["Bhavesh"]

    def test_export(self, client: TestClient, admin_headers: Headers, players: list[dict[str, Any]]) -> None:
        response = client.get("/api/players", params={"export": "true"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert "players.xlsx" in response.headers["content-disposition"]

        sheet = load_workbook(BytesIO(response.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        assert rows[0][:3] == ("ID", "Unique ID", "First Name")
        assert [row[2] for row in rows[1:]] == ["Arjun", "Bhavesh", "Chetan"]
        assert rows[3][11] == "Yes"

    def test_export_requires_permission(
        self,
        client: TestClient,
        make_user: Callable[..., tuple[int, Headers]],
    ) -> None:
        _, headers = make_user(Role.CLUB_ADMIN.value)

        response = client.get("/api/players", params={"export": "true"}, headers=headers)

        assert response.status_code == 403
        assert response.json() == {"errors": {"message": "You do not have permission to export players"}}


class TestUpdatePlayer:
    def test_update_keeps_groups_without_group_ids(
        self,
        client: TestClient,
        admin_headers: Headers,
        player: dict[str, Any],
    ) -> None:
        response = client.put(
            f"/api/players/{player['id']}",
            json={"address": "14 Market Street"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["address"] == "14 Market Street"
        assert response.json()["groups"] == player["groups"]
        assert response.json()["uniqueIdNumber"] == player["uniqueIdNumber"]

    def test_clear_middle_name(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        client.put(f"/api/players/{player['id']}", json={"middleName": "Kumar"}, headers=admin_headers)

        response = client.put(f"/api/players/{player['id']}", json={"middleName": None}, headers=admin_headers)

        assert response.json()["middleName"] is None

    def test_replace_groups(
        self,
        client: TestClient,
        admin_headers: Headers,
        player: dict[str, Any],
    ) -> None:
        other = client.post(
            "/api/groups",
            json={"groupName": "Under 19", "gender": "Mix", "age": "19"},
            headers=admin_headers,
        ).json()

        response = client.put(
            f"/api/players/{player['id']}",
            json={"groupIds": [str(other["id"])]},
            headers=admin_headers,
        )

        assert [group["id"] for group in response.json()["groups"]] == [other["id"]]

    def test_duplicate_aadhar(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        other = client.post(
            "/api/players",
            json=player_body(aadharNumber="999999999999"),
            headers=admin_headers,
        ).json()

        same = client.put(
            f"/api/players/{player['id']}",
            json={"aadharNumber": player["aadharNumber"]},
            headers=admin_headers,
        )
        taken = client.put(
            f"/api/players/{other['id']}",
            json={"aadharNumber": player["aadharNumber"]},
            headers=admin_headers,
        )

        assert same.status_code == 200
        assert taken.status_code == 400
        assert taken.json()["errors"]["aadharNumber"]["type"] == "unique"

    def test_empty_body(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.put(f"/api/players/{player['id']}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"errors": {"message": "At least one field is required"}}

    def test_validation_before_not_found(self, client: TestClient, admin_headers: Headers) -> None:
        invalid = client.put("/api/players/999", json={"mobile": "1"}, headers=admin_headers)
        missing = client.put("/api/players/999", json={"mobile": "9876543210"}, headers=admin_headers)

        assert invalid.status_code == 400
        assert missing.status_code == 404
        assert missing.json() == {"errors": {"message": "Player not found"}}


class TestPlayerFlags:
    def test_suspension(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.patch(
            f"/api/players/{player['id']}/suspension",
            json={"isSuspended": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["isSuspended"] is True

    def test_aadhar_verification(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.patch(
            f"/api/players/{player['id']}/aadhar-verification",
            json={"aadharVerified": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["aadharVerified"] is True

    def test_flag_must_be_boolean(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.patch(
            f"/api/players/{player['id']}/suspension",
            json={"isSuspended": "yes"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "isSuspended" in response.json()["errors"]

    def test_missing_player(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.patch(
            "/api/players/999/suspension",
            json={"isSuspended": True},
            headers=admin_headers,
        )

        assert response.status_code == 404


class TestPlayerPhoto:
    def test_upload(
        self,
        client: TestClient,
        admin_headers: Headers,
        app_config: AppConfig,
        player: dict[str, Any],
    ) -> None:
        response = client.post(
            f"/api/players/{player['id']}/photo",
            files={"profileImage": ("photo.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 200, response.text
        profile_image = response.json()["profileImage"]
        assert re.fullmatch(r"uploads/players/profileImage/[0-9a-f-]+/photo\.png", profile_image)

        stored = Path(app_config.upload_root) / profile_image.removeprefix("uploads/")
        assert stored.read_bytes() == PNG_BYTES
        assert client.get(f"/{profile_image}").content == PNG_BYTES

    def test_invalid_type(
        self,
        client: TestClient,
        admin_headers: Headers,
        app_config: AppConfig,
        player: dict[str, Any],
    ) -> None:
        response = client.post(
            f"/api/players/{player['id']}/photo",
            files={"profileImage": ("notes.txt", b"hello", "text/plain")},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"]["profileImage"]["type"] == "invalid_type"
        assert not (Path(app_config.upload_root) / "players").exists()

        unchanged = client.get(f"/api/players/{player['id']}", headers=admin_headers).json()
        assert unchanged["profileImage"] is None

    def test_missing_player(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.post(
            "/api/players/999/photo",
            files={"profileImage": ("photo.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 404


class TestDeletePlayer:
    def test_delete(self, client: TestClient, admin_headers: Headers, player: dict[str, Any]) -> None:
        response = client.delete(f"/api/players/{player['id']}", headers=admin_headers)

        assert response.json() == {"message": "Player deleted successfully"}
        assert client.get(f"/api/players/{player['id']}", headers=admin_headers).status_code == 404

    def test_club_admin_cannot_delete(
        self,
        client: TestClient,
        player: dict[str, Any],
        make_user: Callable[..., tuple[int, Headers]],
    ) -> None:
        _, headers = make_user(Role.CLUB_ADMIN.value)

        assert client.delete(f"/api/players/{player['id']}", headers=headers).status_code == 403
