"""FastAPI dependency validators for authentication and authorization."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credisphere.common import User

from .acl import has_permission
from .membership import MemberQueries, check_membership_expiry
from .queries import UserQueries
from .security_manager import SecurityManager

bearer_scheme = HTTPBearer(auto_error=False)

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

MEMBERSHIP_EXPIRED = "Your membership has expired. Please contact your administrator."


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(detail: str = "Insufficient permissions") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class Validate:
    """Holds validator dependencies for FastAPI authentication/authorization."""

    def __init__(
        self,
        users: UserQueries,
        members: MemberQueries,
        security_manager: SecurityManager,
    ) -> None:
        """Create a new validator instance.

        :param users: User repository
        :param members: Member repository for the expiry check
        :param security_manager: JWT security manager
        """
        self.users = users
        self.members = members
        self.security_manager = security_manager

    async def current_user(
        self,
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),  # noqa: B008
    ) -> User:
        """Validate the bearer token and load the user it names.

        Members additionally pass the membership expiry check; its details
        are left on ``request.state.membership_expiry``.
        """
        if credentials is None:
            LOGGER.debug("Request without bearer token: %s", request.url.path)
            raise _unauthorized()

        user_id = self.security_manager.verify_token(credentials.credentials)
        if user_id is None:
            LOGGER.debug("JWT token validation failed")
            raise _unauthorized()

        user = await self.users.get_user(user_id)
        if user is None:
            LOGGER.debug("JWT token names unknown user %s", user_id)
            raise _unauthorized()

        request.state.membership_expiry = None
        if user.is_member:
            membership = await check_membership_expiry(self.members, self.users, user.id)
            user.active = membership.active
            request.state.membership_expiry = membership.expiry
            if not membership.active:
                raise forbidden(MEMBERSHIP_EXPIRED)

        LOGGER.debug("JWT token validated for user: %s", user.email)
        return user

    def permission(self, key: str) -> Callable[..., Awaitable[User]]:
        """Return a dependency allowing only roles listed for ``key``."""

        async def validator(user: Annotated[User, Depends(self.current_user)]) -> User:
            if not user.role:
                LOGGER.debug("User %s has no role", user.id)
                raise forbidden("User role not found")
            if not has_permission(user, key):
                LOGGER.debug(
                    "Permission %s denied for user %s with role %s",
                    key,
                    user.id,
                    user.role,
                )
                raise forbidden()
            return user

        return validator
