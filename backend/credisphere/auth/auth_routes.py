"""Authentication routes for the FastAPI application.

Provides endpoints for registration, login, logout and the caller's own
account.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from credisphere.common import MessageResponse, User, validate_body, validated_or_400

from .models import (
    AccountResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MembershipExpiryResponse,
    RegisterRequest,
    UserResponse,
)
from .queries import user_from_row
from .validation import Validate

LOG = logging.getLogger(__name__)
LOG.setLevel(logging.DEBUG)

INVALID_CREDENTIALS = "Invalid email or password"


async def _register(
    validate: Validate,
    body: dict[str, Any],
    default_role: str,
) -> UserResponse:
    result = validate_body(RegisterRequest, body)
    if result.data is not None and await validate.users.exists_with(
        "email",
        result.data.email,
    ):
        result.add_error(
            "email",
            f"User with email {result.data.email} already exists.",
            "unique",
        )
    data = validated_or_400(result)

    hashed_password = await validate.security_manager.hash_password(data.password)
    user_id = await validate.users.create_user(
        data.name,
        data.email,
        hashed_password,
        default_role,
    )
    LOG.info("Registered user %s with role %s", user_id, default_role)
    return UserResponse.from_row(await validate.users.get(user_id))


async def _login(validate: Validate, body: dict[str, Any]) -> LoginResponse:
    data = validated_or_400(validate_body(LoginRequest, body))

    row = await validate.users.get_by_email(data.email)
    if row is None or not await validate.security_manager.verify_password(
        data.password,
        row["password"],
    ):
        LOG.info("Failed login attempt for %s", data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    if not row["active"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    await validate.users.record_login(row["id"])
    row = await validate.users.get(row["id"])
    return LoginResponse(
        token=validate.security_manager.create_access_token(user_from_row(row)),
        user=UserResponse.from_row(row),
    )


async def _change_password(
    validate: Validate,
    body: dict[str, Any],
    user: User,
) -> MessageResponse:
    result = validate_body(ChangePasswordRequest, body)
    if result.data is not None:
        row = await validate.users.get(user.id)
        if not await validate.security_manager.verify_password(
            result.data.current_password,
            row["password"],
        ):
            result.add_error("currentPassword", "Current password is incorrect.")
    data = validated_or_400(result)

    hashed_password = await validate.security_manager.hash_password(data.new_password)
    await validate.users.update(user.id, {"password": hashed_password})
    return MessageResponse(message="Password changed successfully")


def configure_auth_router(
    router: APIRouter,
    validate: Validate,
    *,
    default_role: str,
    allow_registration: bool,
) -> APIRouter:
    """Configure the authentication router.

    :param router: The APIRouter to configure
    :param validate: The Validate instance holding repositories and security
    :param default_role: Role given to self-registered users
    :param allow_registration: Whether ``/register`` accepts new users
    :return: The configured APIRouter
    """

    @router.post(
        "/register",
        response_model=UserResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def register(body: Annotated[Any, Body()] = None) -> UserResponse:
        if not allow_registration:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Registration is disabled",
            )
        return await _register(validate, body, default_role)

    @router.post("/login", response_model=LoginResponse)
    async def login(body: Annotated[Any, Body()] = None) -> LoginResponse:
        return await _login(validate, body)

    @router.post("/logout", response_model=MessageResponse)
    def logout() -> MessageResponse:
        """With JWT, logout is handled client-side by discarding the token."""
        return MessageResponse(message="Logout successful")

    @router.get("/account", response_model=AccountResponse)
    async def get_account_info(
        request: Request,
        user: Annotated[User, Depends(validate.current_user)],
    ) -> AccountResponse:
        account = UserResponse.from_row(await validate.users.get(user.id))
        return AccountResponse(
            **account.model_dump(),
            membership_expiry=MembershipExpiryResponse.from_expiry(
                request.state.membership_expiry,
            ),
        )

    @router.patch("/account/password", response_model=MessageResponse)
    async def change_password_route(
        user: Annotated[User, Depends(validate.current_user)],
        body: Annotated[Any, Body()] = None,
    ) -> MessageResponse:
        return await _change_password(validate, body, user)

    return router
