"""Configuration management for the CrediSphere application.

This module provides utilities for loading and validating configuration
from environment variables.
"""

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from jwt.algorithms import get_default_algorithms

from credisphere.auth import SecurityManager

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

_MINUTES_IN_DAY = 60 * 24
_DEFAULT_BCRYPT_ROUNDS = 10
_MIN_BCRYPT_ROUNDS = 4
_MAX_BCRYPT_ROUNDS = 31
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def configure_logging(app_config: "AppConfig") -> None:
    """Configure logging based on the application configuration.

    :param app_config: The application configuration instance
    """
    if not app_config.logging_level:
        logging.basicConfig(level=logging.INFO)
        return

    numeric_level = getattr(logging, app_config.logging_level.upper(), None)
    if not isinstance(numeric_level, int):
        LOGGER.warning("Invalid log level: %s, using INFO", app_config.logging_level)
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level)


@dataclass
class AppConfig:
    """Holds application configuration loaded from environment variables."""

    database_path: str
    logging_level: str | None
    root_path: str
    api_prefix: str

    app_name: str
    default_user_role: str
    allow_registration: bool
    frontend_url: str
    allowed_origins: list[str]
    upload_root: str

    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    bcrypt_rounds: int

    admin_name: str | None = None
    admin_email: str | None = None
    admin_password: str | None = None

    security_manager: SecurityManager = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize derived configuration attributes."""
        if len(self.secret_key) < SecurityManager.MINIMUM_JWT_SECRET_KEY_LENGTH:
            LOGGER.warning("SECRET_KEY is not set or too short, generating a random key")
            self.secret_key = os.urandom(SecurityManager.MINIMUM_JWT_SECRET_KEY_LENGTH).hex()

        self.security_manager = SecurityManager(
            secret_key=self.secret_key,
            algorithm=self.algorithm,
            expire_minutes=self.access_token_expire_minutes,
            bcrypt_rounds=self.bcrypt_rounds,
        )

    @property
    def bootstrap_admin(self) -> tuple[str, str, str] | None:
        """Name, email and password of the initial super admin, if configured."""
        if not (self.admin_email and self.admin_password):
            return None
        return self.admin_name or "Super Admin", self.admin_email, self.admin_password


def get_env_str(
    var_name: str,
    default: str | None,
    value_checker: Callable[[str], bool] | None = None,
) -> str:
    """Get an environment variable as a string with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value
    :raises ValueError: If the value does not meet the constraints
    """
    value = os.getenv(var_name, default)
    if value is None:
        msg = f"Environment variable {var_name} is required"
        raise ValueError(msg)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_optional_str(var_name: str) -> str | None:
    """Get an environment variable, treating unset and empty alike."""
    return os.getenv(var_name) or None


def get_env_int(
    var_name: str,
    default: int,
    value_checker: Callable[[int], bool] | None = None,
) -> int:
    """Get an environment variable as an integer with optional constraints.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :param value_checker: Optional function to validate the value
    :return: The environment variable value as an integer
    :raises ValueError: If the value does not meet the constraints or is not an integer
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    if not value_str.isnumeric():
        msg = f"Environment variable {var_name} must be an integer, got: {value_str}"
        raise ValueError(msg)

    value = int(value_str)

    if value_checker and not value_checker(value):
        msg = f"Environment variable {var_name} has invalid value: {value}"
        raise ValueError(msg)

    return value


def get_env_bool(var_name: str, default: bool) -> bool:  # noqa: FBT001
    """Get an environment variable as a boolean.

    :param var_name: Name of the environment variable
    :param default: Default value if the variable is not set
    :return: The parsed flag
    :raises ValueError: If the value is not a recognised boolean
    """
    value_str = os.getenv(var_name)
    if value_str is None or value_str == "":
        return default

    lowered = value_str.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"Environment variable {var_name} must be a boolean, got: {value_str}"
    raise ValueError(msg)


def get_env_list(var_name: str, default: list[str]) -> list[str]:
    """Get a comma separated environment variable as a list."""
    value_str = os.getenv(var_name)
    if not value_str:
        return default
    return [item.strip() for item in value_str.split(",") if item.strip()]


def _normalise_prefix(prefix: str) -> str:
    prefix = prefix.strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = f"/{prefix}"
    return prefix


def load_config_from_env(env_file: str | Path | None) -> AppConfig:
    """Load application configuration from environment variables.

    :param env_file: Optional .env file loaded first
    :return: An AppConfig instance populated with environment variable values
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    frontend_url = get_env_str("FRONTEND_URL", "http://localhost:5173")

    return AppConfig(
        database_path=get_env_str("DATABASE_PATH", "./credisphere.db"),
        logging_level=get_env_optional_str("LOGGING_LEVEL"),
        root_path=get_env_str("ROOT_PATH", ""),
        api_prefix=_normalise_prefix(get_env_str("API_PREFIX", "/api")),
        app_name=get_env_str("APP_NAME", "CrediSphere"),
        default_user_role=get_env_str(
            "DEFAULT_USER_ROLE",
            "user",
            lambda role: bool(role.strip()),
        ),
        allow_registration=get_env_bool("ALLOW_REGISTRATION", False),
        frontend_url=frontend_url,
        allowed_origins=get_env_list("ALLOWED_ORIGINS", [frontend_url]),
        upload_root=get_env_str("UPLOAD_ROOT", "uploads"),
        secret_key=get_env_str("SECRET_KEY", ""),
        algorithm=get_env_str(
            "ALGORITHM",
            SecurityManager.DEFAULT_JWT_ALGORITHM,
            lambda algorithm: algorithm in get_default_algorithms(),
        ),
        access_token_expire_minutes=get_env_int(
            "ACCESS_TOKEN_EXPIRE_MINUTES",
            _MINUTES_IN_DAY,  # default 1 day
            lambda minutes: minutes > 0,
        ),
        bcrypt_rounds=get_env_int(
            "BCRYPT_ROUNDS",
            _DEFAULT_BCRYPT_ROUNDS,
            lambda rounds: _MIN_BCRYPT_ROUNDS <= rounds <= _MAX_BCRYPT_ROUNDS,
        ),
        admin_name=get_env_optional_str("ADMIN_NAME"),
        admin_email=get_env_optional_str("ADMIN_EMAIL"),
        admin_password=get_env_optional_str("ADMIN_PASSWORD"),
    )
