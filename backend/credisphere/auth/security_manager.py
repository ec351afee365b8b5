"""Password hashing and JWT utility functions.

Includes bcrypt hashing run off the event loop, JWT token creation and
verification.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from credisphere.common import User
from credisphere.common.validation import PASSWORD_MAX_BYTES

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


@dataclass
class SecurityManager:
    """Manager for security configurations and validations.

    :param str secret_key: Secret key for JWT signing (generated if not provided)
    :param str algorithm: JWT signing algorithm
    :param int expire_minutes: Token expiration time in minutes
    :param int bcrypt_rounds: bcrypt cost factor for new hashes
    """

    DEFAULT_JWT_ALGORITHM = "HS512"
    DEFAULT_TOKEN_EXPIRE_MINUTES = 60 * 24
    DEFAULT_BCRYPT_ROUNDS = 10
    MINIMUM_JWT_SECRET_KEY_LENGTH = 32
    TOKEN_TYPE = "access_token"

    secret_key: str | None = None
    algorithm: str = DEFAULT_JWT_ALGORITHM
    expire_minutes: int = DEFAULT_TOKEN_EXPIRE_MINUTES
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS

    def __post_init__(self) -> None:
        """Generate secret key if not provided."""
        if (
            self.secret_key is None
            or len(self.secret_key) < self.MINIMUM_JWT_SECRET_KEY_LENGTH
        ):
            self.secret_key = os.urandom(64).hex()

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode(), salt).decode()

    async def hash_password(self, password: str) -> str:
        """Hash a password in a worker thread.

        :param password: The plaintext password
        :return: The bcrypt hash as text
        """
        return await asyncio.to_thread(self._hash, password)

    async def verify_password(self, password: str, hashed_password: str) -> bool:
        """Check a plaintext password against a stored bcrypt hash.

        :param password: The plaintext password
        :param hashed_password: The stored hash
        :return: True if the password matches
        """
        if len(password.encode()) > PASSWORD_MAX_BYTES:
            return False
        try:
            return await asyncio.to_thread(
                bcrypt.checkpw,
                password.encode(),
                hashed_password.encode(),
            )
        except ValueError:
            LOGGER.warning("Stored password hash is malformed")
            return False

    def create_access_token(self, user: User) -> str:
        """Create a new JWT access token for the user.

        :param User user: The User object for whom to create the token
        :return: A JWT access token as a string
        """
        now = datetime.now(UTC)
        payload = {
            "sub": str(user.id),
            "role": user.role,
            "exp": now + timedelta(minutes=self.expire_minutes),
            "iat": now,
            "type": self.TOKEN_TYPE,
        }

        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> int | None:
        """Verify and decode a JWT token, returning the user id.

        The user itself is loaded by the caller, so a token for a deleted
        user still fails authentication.

        :param token: The JWT token string to verify
        :return: The user id if the token is valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except jwt.ExpiredSignatureError:
            LOGGER.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            return None

        if payload.get("type") != self.TOKEN_TYPE:
            return None

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.isdigit():
            return None
        return int(subject)
