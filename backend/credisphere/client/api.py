"""Thin httpx wrapper over the CrediSphere REST API."""

import logging
from pathlib import Path
from typing import Any

import httpx

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

API_PREFIX = "/api"
DEFAULT_TIMEOUT = 30.0

_STATUS_PREFIXES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    500: "Server Error",
}


def with_api_prefix(url: str) -> str:
    """``players`` and ``/players`` both become ``/api/players``."""
    if url.startswith(API_PREFIX):
        return url
    return f"{API_PREFIX}/{url.lstrip('/')}"


class ApiError(Exception):
    """Non-2xx response decoded from the error envelope.

    :param status: HTTP status code
    :param errors: The ``errors`` map of the response body
    """

    def __init__(self, status: int, errors: dict[str, Any]) -> None:
        self.status = status
        self.errors = errors
        super().__init__(self.message)

    @property
    def message(self) -> str:
        prefix = _STATUS_PREFIXES.get(self.status, f"Error {self.status}")
        return f"{prefix}: {self.detail}"

    @property
    def detail(self) -> str:
        """The general message, else the first field message."""
        message = self.errors.get("message")
        if isinstance(message, str):
            return message
        for value in self.errors.values():
            if isinstance(value, dict) and "message" in value:
                return str(value["message"])
        return "Request failed"

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        errors = body.get("errors") if isinstance(body, dict) else None
        if not isinstance(errors, dict):
            errors = {"message": response.reason_phrase or "Request failed"}
        return cls(response.status_code, errors)


class ApiClient:
    """Authenticated client for the admin API.

    :param base_url: Server URL, for example ``http://localhost:3000``
    :param token: Bearer token from a previous login
    :param transport: Optional httpx transport, used by tests
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.token = token
        self._client = httpx.Client(
            base_url=base_url,
            transport=transport,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request and raise :class:`ApiError` on a non-2xx status."""
        response = self._client.request(
            method,
            with_api_prefix(url),
            headers=self._headers(),
            **kwargs,
        )
        if response.is_error:
            error = ApiError.from_response(response)
            LOGGER.debug("%s %s failed: %s", method, url, error.message)
            raise error
        return response

    def get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", url, params=params).json()

    def post(self, url: str, data: Any = None) -> Any:
        return self.request("POST", url, json=data).json()

    def put(self, url: str, data: Any) -> Any:
        return self.request("PUT", url, json=data).json()

    def patch(self, url: str, data: Any) -> Any:
        return self.request("PATCH", url, json=data).json()

    def delete(self, url: str) -> Any:
        return self.request("DELETE", url).json()

    def upload(self, url: str, field_name: str, path: Path, content_type: str) -> Any:
        """POST one file as multipart form data."""
        with path.open("rb") as file:
            files = {field_name: (path.name, file, content_type)}
            return self.request("POST", url, files=files).json()

    def download(self, url: str, params: dict[str, Any] | None = None) -> bytes:
        return self.request("GET", url, params=params).content

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and keep the returned token for later requests.

        :return: The logged in user
        """
        body = self.post("/auth/login", {"email": email, "password": password})
        self.token = body["token"]
        return body["user"]

    def logout(self) -> None:
        self.post("/auth/logout")
        self.token = None

    def account(self) -> dict[str, Any]:
        return self.get("/auth/account")
