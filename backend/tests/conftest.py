"""Pytest configuration file for setting up test environment."""

import sqlite3
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Add the backend directory to Python path so tests can import credisphere
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from credisphere import AppConfig, configure_fastapi_app  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-password"  # noqa: S105
TEST_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs512-signing"  # noqa: S105

Headers = dict[str, str]


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Create a configuration backed by a temporary database."""
    return AppConfig(
        database_path=str(tmp_path / "test.db"),
        logging_level=None,
        root_path="",
        api_prefix="/api",
        app_name="CrediSphere",
        default_user_role="user",
        allow_registration=True,
        frontend_url="http://localhost:5173",
        allowed_origins=["http://localhost:5173"],
        upload_root=str(tmp_path / "uploads"),
        secret_key=TEST_SECRET_KEY,
        algorithm="HS512",
        access_token_expire_minutes=60,
        bcrypt_rounds=4,
        admin_name="Super Admin",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(app_config: AppConfig) -> Iterator[TestClient]:
    """Run the application lifespan around each test."""
    with TestClient(configure_fastapi_app(app_config)) as test_client:
        yield test_client


def login(client: TestClient, email: str, password: str) -> Headers:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def admin_headers(client: TestClient) -> Headers:
    """Bearer headers of the bootstrap super admin."""
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def make_user(client: TestClient, admin_headers: Headers) -> Callable[..., tuple[int, Headers]]:
    """Create a user with the given role and return its id and bearer headers."""
    counter = iter(range(1, 1000))

    def factory(role: str, password: str = "secret-pass") -> tuple[int, Headers]:  # noqa: S107
        email = f"{role.replace('_', '')}{next(counter)}@example.com"
        response = client.post(
            "/api/users",
            json={"name": "Test User", "email": email, "password": password, "role": role},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["id"], login(client, email, password)

    return factory


@pytest.fixture
def db_execute(app_config: AppConfig) -> Callable[..., list[Any]]:
    """Run a statement against the test database outside the application."""

    def execute(query: str, params: tuple[Any, ...] = ()) -> list[Any]:
        connection = sqlite3.connect(app_config.database_path)
        try:
            rows = connection.execute(query, params).fetchall()
            connection.commit()
        finally:
            connection.close()
        return rows

    return execute
