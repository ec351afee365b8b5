"""Role listing route."""

from typing import Annotated

from fastapi import APIRouter, Depends

from credisphere.common import Role, User

from .models import RolesResponse
from .validation import Validate


def configure_role_router(router: APIRouter, validate: Validate) -> APIRouter:
    """Configure the roles router.

    :param router: The APIRouter to configure
    :param validate: The Validate instance providing the ACL dependency
    :return: The configured APIRouter
    """

    @router.get("", response_model=RolesResponse)
    def list_roles(
        _user: Annotated[User, Depends(validate.permission("roles.read"))],
    ) -> RolesResponse:
        return RolesResponse(roles={role.name: role.value for role in Role})

    return router
