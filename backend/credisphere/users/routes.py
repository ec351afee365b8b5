"""User management routes."""

import logging
from collections.abc import Sequence
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Query, status
from fastapi.responses import StreamingResponse

from credisphere.auth import SecurityManager, UserQueries, UserResponse, Validate, forbidden, has_permission
from credisphere.common import (
    ListParams,
    MessageResponse,
    Page,
    RecordNotFoundError,
    User,
    list_params,
    parse_bool,
    validate_body,
    validated_or_400,
)
from credisphere.common.excel import Column, build_workbook, workbook_response, yes_no

from .models import PasswordUpdate, StatusUpdate, UserCreate, UserUpdate

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

UserId = Annotated[int, Path(gt=0)]

EXPORT_COLUMNS = (
    Column("ID", "id", 10),
    Column("Name", "name", 30),
    Column("Email", "email", 30),
    Column("Role", "role"),
    Column("Active", "active", 10),
    Column("Last Login", "last_login", 20),
)


def _role_condition(roles: str | None) -> list[tuple[str, Sequence[Any]]]:
    """``roles=admin,member`` becomes ``role IN (?, ?)``."""
    values = [role.strip() for role in (roles or "").split(",") if role.strip()]
    if not values:
        return []
    placeholders = ", ".join("?" for _ in values)
    return [(f"role IN ({placeholders})", values)]


async def _get_response(users: UserQueries, user_id: int) -> UserResponse:
    row = await users.get(user_id)
    if row is None:
        raise RecordNotFoundError(users.RESOURCE, user_id)
    return UserResponse.from_row(row)


async def _export_users(
    users: UserQueries,
    options: ListParams,
    filters: dict[str, Any],
    conditions: list[tuple[str, Sequence[Any]]],
) -> StreamingResponse:
    rows = await users.list_all(options, filters, conditions)
    content = build_workbook(
        "Users",
        EXPORT_COLUMNS,
        ({**dict(row), "active": yes_no(row["active"])} for row in rows),
    )
    LOGGER.info("Exported %s users", len(rows))
    return workbook_response("users.xlsx", content)


async def _create_user(
    users: UserQueries,
    security_manager: SecurityManager,
    body: Any,
) -> UserResponse:
    result = validate_body(UserCreate, body)
    if result.data is not None and await users.exists_with("email", result.data.email):
        result.add_error("email", "A user with this email already exists.", "unique")
    data = validated_or_400(result)

    hashed_password = await security_manager.hash_password(data.password)
    user_id = await users.create_user(
        data.name,
        data.email,
        hashed_password,
        data.role,
        active=True if data.active is None else data.active,
    )
    LOGGER.info("Created user %s with role %s", user_id, data.role)
    return await _get_response(users, user_id)


async def _update_user(users: UserQueries, user_id: int, body: Any) -> UserResponse:
    result = validate_body(UserUpdate, body)
    data = validated_or_400(result)
    if await users.get(user_id) is None:
        raise RecordNotFoundError(users.RESOURCE, user_id)
    if data.email and await users.exists_with("email", data.email, exclude_id=user_id):
        result.add_error("email", f"User with email {data.email} already exists.", "unique")
        validated_or_400(result)

    changes = data.changes()
    if changes:
        await users.update(user_id, changes)
    return await _get_response(users, user_id)


def configure_user_router(
    router: APIRouter,
    users: UserQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the users router.

    :param router: The APIRouter to configure
    :param users: User repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[UserResponse])
    async def list_users(
        options: Annotated[ListParams, Depends(list_params)],
        user: Annotated[User, Depends(validate.permission("users.read"))],
        roles: Annotated[str | None, Query()] = None,
        active: Annotated[str | None, Query()] = None,
        export: Annotated[str | None, Query()] = None,
    ) -> Any:
        filters = {"active": parse_bool(active)}
        conditions = _role_condition(roles)
        if export == "true":
            if not has_permission(user, "users.export"):
                raise forbidden("You do not have permission to export users")
            return await _export_users(users, options, filters, conditions)

        rows, total_count = await users.list(options, filters, conditions)
        return Page[UserResponse].from_query_params(
            options.page,
            options.limit,
            [UserResponse.from_row(row) for row in rows],
            total_count,
        )

    @router.get("/{user_id}", response_model=UserResponse)
    async def get_user(
        user_id: UserId,
        _user: Annotated[User, Depends(validate.permission("users.read"))],
    ) -> UserResponse:
        return await _get_response(users, user_id)

    @router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def create_user(
        _user: Annotated[User, Depends(validate.permission("users.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> UserResponse:
        return await _create_user(users, validate.security_manager, body)

    @router.put("/{user_id}", response_model=UserResponse)
    async def update_user(
        user_id: UserId,
        _user: Annotated[User, Depends(validate.permission("users.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> UserResponse:
        return await _update_user(users, user_id, body)

    @router.patch("/{user_id}/status", response_model=UserResponse)
    async def set_status(
        user_id: UserId,
        _user: Annotated[User, Depends(validate.permission("users.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> UserResponse:
        data = validated_or_400(validate_body(StatusUpdate, body))
        await users.set_active(user_id, data.active)
        return await _get_response(users, user_id)

    @router.patch("/{user_id}/password", response_model=UserResponse)
    async def set_password(
        user_id: UserId,
        _user: Annotated[User, Depends(validate.permission("users.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> UserResponse:
        data = validated_or_400(validate_body(PasswordUpdate, body))
        hashed_password = await validate.security_manager.hash_password(data.password)
        await users.update(user_id, {"password": hashed_password})
        LOGGER.info("Password reset for user %s", user_id)
        return await _get_response(users, user_id)

    @router.delete("/{user_id}", response_model=MessageResponse)
    async def delete_user(
        user_id: UserId,
        _user: Annotated[User, Depends(validate.permission("users.delete"))],
    ) -> MessageResponse:
        await users.delete(user_id)
        return MessageResponse(message="User deleted")

    return router
