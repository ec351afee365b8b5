"""Tests for the user management routes."""

from collections.abc import Callable
from io import BytesIO
from typing import Any

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from conftest import ADMIN_EMAIL, login
from credisphere.common import Role

Headers = dict[str, str]


def user_body(**overrides: Any) -> dict[str, Any]:
    body = {
        "name": "Meera Shah",
        "email": "meera@example.com",
        "password": "meera-pass",
        "role": Role.ADMIN.value,
    }
    body.update(overrides)
    return body


@pytest.fixture
def user(client: TestClient, admin_headers: Headers) -> dict[str, Any]:
    """Create one admin user."""
    response = client.post("/api/users", json=user_body(), headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateUser:
    def test_create(self, user: dict[str, Any]) -> None:
        assert user["email"] == "meera@example.com"
        assert user["role"] == Role.ADMIN.value
        assert user["active"] is True
        assert "password" not in user

    def test_email_is_lowercased(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.post("/api/users", json=user_body(email="Ravi@Example.com"), headers=admin_headers)

        assert response.json()["email"] == "ravi@example.com"

    def test_create_inactive(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.post("/api/users", json=user_body(active=False), headers=admin_headers)

        assert response.json()["active"] is False

    def test_duplicate_email(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.post("/api/users", json=user_body(), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["errors"]["email"] == {
            "type": "unique",
            "message": "A user with this email already exists.",
        }

    @pytest.mark.parametrize(
        ("field", "value", "message"),
        [
            ("role", "owner", "Invalid role."),
            ("name", "Meera 2", "Name can only contain letters."),
            ("email", "not-an-email", "Email must be a valid email address."),
            ("password", "abc", "Password must be at least 6 characters long."),
            ("password", "p" * 73, "Password must not exceed 72 bytes."),
        ],
    )
    def test_validation(
        self,
        client: TestClient,
        admin_headers: Headers,
        field: str,
        value: str,
        message: str,
    ) -> None:
        response = client.post("/api/users", json=user_body(**{field: value}), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["errors"][field]["message"] == message

    def test_only_super_admin_manages_users(
        self,
        client: TestClient,
        make_user: Callable[..., tuple[int, Headers]],
    ) -> None:
        _, headers = make_user(Role.ADMIN.value)

        assert client.get("/api/users", headers=headers).status_code == 403
        assert client.post("/api/users", json=user_body(), headers=headers).status_code == 403


class TestListUsers:
    @pytest.fixture(autouse=True)
    def users(self, client: TestClient, admin_headers: Headers) -> None:
        """Create users with several roles, one of them inactive."""
        for email, role, active in (
            ("branch@example.com", Role.BRANCH_ADMIN.value, True),
            ("club@example.com", Role.CLUB_ADMIN.value, True),
            ("member@example.com", Role.MEMBER.value, False),
        ):
            client.post(
                "/api/users",
                json=user_body(email=email, role=role, active=active),
                headers=admin_headers,
            )

    def test_roles_filter(self, client: TestClient, admin_headers: Headers) -> None:
        page = client.get(
            "/api/users",
            params={"roles": "clubadmin, member"},
            headers=admin_headers,
        ).json()

        assert [item["email"] for item in page["items"]] == ["club@example.com", "member@example.com"]

    def test_active_filter(self, client: TestClient, admin_headers: Headers) -> None:
        page = client.get("/api/users", params={"active": "false"}, headers=admin_headers).json()

        assert [item["email"] for item in page["items"]] == ["member@example.com"]

    def test_search(self, client: TestClient, admin_headers: Headers) -> None:
        page = client.get("/api/users", params={"search": "branch"}, headers=admin_headers).json()

        assert page["totalCount"] == 1

    def test_export(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.get(
            "/api/users",
            params={"export": "true", "active": "true"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert "users.xlsx" in response.headers["content-disposition"]
        rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert rows[0] == ("ID", "Name", "Email", "Role", "Active", "Last Login")
        assert [row[2] for row in rows[1:]] == [ADMIN_EMAIL, "branch@example.com", "club@example.com"]
        assert {row[4] for row in rows[1:]} == {"Yes"}


class TestUpdateUser:
    def test_update(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.put(
            f"/api/users/{user['id']}",
            json={"name": "Meera Desai", "role": Role.BRANCH_ADMIN.value},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Meera Desai"
        assert response.json()["role"] == Role.BRANCH_ADMIN.value

    def test_duplicate_email(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.put(
            f"/api/users/{user['id']}",
            json={"email": ADMIN_EMAIL},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"]["email"]["message"] == f"User with email {ADMIN_EMAIL} already exists."

    def test_empty_body(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.put(f"/api/users/{user['id']}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"errors": {"message": "At least one field is required"}}

    def test_not_found(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.put("/api/users/999", json={"name": "Nobody"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json() == {"errors": {"message": "User not found"}}

    def test_status(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.patch(
            f"/api/users/{user['id']}/status",
            json={"active": False},
            headers=admin_headers,
        )

        assert response.json()["active"] is False
        login_response = client.post(
            "/api/auth/login",
            json={"email": "meera@example.com", "password": "meera-pass"},
        )
        assert login_response.status_code == 403

    def test_status_of_missing_user(self, client: TestClient, admin_headers: Headers) -> None:
        response = client.patch("/api/users/999/status", json={"active": True}, headers=admin_headers)

        assert response.status_code == 404

    def test_password(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.patch(
            f"/api/users/{user['id']}/password",
            json={"password": "new-meera-pass"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert login(client, "meera@example.com", "new-meera-pass")

    def test_delete(self, client: TestClient, admin_headers: Headers, user: dict[str, Any]) -> None:
        response = client.delete(f"/api/users/{user['id']}", headers=admin_headers)

        assert response.json() == {"message": "User deleted"}
        assert client.get(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404
