"""Club routes."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, status

from credisphere.auth import SecurityManager, Validate
from credisphere.common import (
    ListParams,
    MessageResponse,
    Page,
    RecordNotFoundError,
    User,
    list_params,
    validate_body,
    validated_or_400,
)

from .models import ClubCreate, ClubResponse, ClubUpdate
from .queries import ClubQueries

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

ClubId = Annotated[int, Path(gt=0)]


async def _create_club(
    clubs: ClubQueries,
    security_manager: SecurityManager,
    body: Any,
) -> ClubResponse:
    result = validate_body(ClubCreate, body)
    if result.data is not None and await clubs.email_taken(result.data.email):
        result.add_unique_error("email")
    data = validated_or_400(result)

    values = data.model_dump()
    values["password"] = await security_manager.hash_password(data.password)
    club_id = await clubs.create_with_admin(values)
    return ClubResponse.from_row(await clubs.get(club_id))


async def _update_club(
    clubs: ClubQueries,
    security_manager: SecurityManager,
    club_id: int,
    body: Any,
) -> ClubResponse:
    result = validate_body(ClubUpdate, body)
    data = validated_or_400(result)
    if await clubs.get(club_id) is None:
        raise RecordNotFoundError(clubs.RESOURCE, club_id)
    if data.email and await clubs.email_taken(data.email, exclude_id=club_id):
        result.add_unique_error("email")
        validated_or_400(result)

    changes = data.changes()
    password = changes.pop("password", "")
    if password:
        changes["password"] = await security_manager.hash_password(password)
    if changes:
        await clubs.update_with_admin(club_id, changes)
    return ClubResponse.from_row(await clubs.get(club_id))


def configure_club_router(
    router: APIRouter,
    clubs: ClubQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the clubs router.

    :param router: The APIRouter to configure
    :param clubs: Club repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[ClubResponse])
    async def list_clubs(
        options: Annotated[ListParams, Depends(list_params)],
        _user: Annotated[User, Depends(validate.permission("clubs.read"))],
    ) -> Page[ClubResponse]:
        rows, total_count = await clubs.list(options)
        return Page[ClubResponse].from_query_params(
            options.page,
            options.limit,
            [ClubResponse.from_row(row) for row in rows],
            total_count,
        )

    @router.get("/{club_id}", response_model=ClubResponse)
    async def get_club(
        club_id: ClubId,
        _user: Annotated[User, Depends(validate.permission("clubs.read"))],
    ) -> ClubResponse:
        row = await clubs.get(club_id)
        if row is None:
            raise RecordNotFoundError(clubs.RESOURCE, club_id)
        return ClubResponse.from_row(row)

    @router.post("", response_model=ClubResponse, status_code=status.HTTP_201_CREATED)
    async def create_club(
        _user: Annotated[User, Depends(validate.permission("clubs.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> ClubResponse:
        return await _create_club(clubs, validate.security_manager, body)

    @router.put("/{club_id}", response_model=ClubResponse)
    async def update_club(
        club_id: ClubId,
        _user: Annotated[User, Depends(validate.permission("clubs.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> ClubResponse:
        return await _update_club(clubs, validate.security_manager, club_id, body)

    @router.delete("/{club_id}", response_model=MessageResponse)
    async def delete_club(
        club_id: ClubId,
        _user: Annotated[User, Depends(validate.permission("clubs.delete"))],
    ) -> MessageResponse:
        await clubs.delete(club_id)
        return MessageResponse(message="Club deleted successfully")

    return router
