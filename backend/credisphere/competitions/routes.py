"""Competition routes."""

from collections.abc import Sequence
from typing import Annotated, Any

import aiosqlite
from fastapi import APIRouter, Body, Depends, Path, status

from credisphere.auth import Validate
from credisphere.common import (
    ListParams,
    MessageResponse,
    Page,
    RecordNotFoundError,
    User,
    Validated,
    list_params,
    validate_body,
    validated_or_400,
)
from credisphere.groups import GroupQueries

from .models import MULTIPLE_GROUPS, CompetitionCreate, CompetitionResponse, CompetitionUpdate
from .queries import CompetitionQueries

CompetitionId = Annotated[int, Path(gt=0)]


def _response(row: aiosqlite.Row, group_ids: Sequence[int]) -> CompetitionResponse:
    return CompetitionResponse.model_validate(
        {**dict(row), "groups": [str(group_id) for group_id in group_ids]},
    )


async def _check_groups(
    groups: GroupQueries,
    result: Validated[Any],
    group_ids: Sequence[int] | None,
) -> None:
    if not group_ids:
        return
    existing = await groups.existing_ids(group_ids)
    missing = [group_id for group_id in group_ids if group_id not in existing]
    if missing:
        result.add_error("groups", f"Group not found: {', '.join(map(str, missing))}")


async def _age_for(groups: GroupQueries, group_ids: Sequence[int]) -> str:
    """Competitions take the age limit of their first group."""
    age = await groups.age_of(group_ids[0]) if group_ids else None
    return age or MULTIPLE_GROUPS


async def _get_response(competitions: CompetitionQueries, competition_id: int) -> CompetitionResponse:
    row = await competitions.get(competition_id)
    if row is None:
        raise RecordNotFoundError(competitions.RESOURCE, competition_id)
    group_ids = await competitions.group_ids([competition_id])
    return _response(row, group_ids[competition_id])


def configure_competition_router(
    router: APIRouter,
    competitions: CompetitionQueries,
    groups: GroupQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the competitions router.

    :param router: The APIRouter to configure
    :param competitions: Competition repository
    :param groups: Group repository, for group lookups
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[CompetitionResponse])
    async def list_competitions(
        options: Annotated[ListParams, Depends(list_params)],
        _user: Annotated[User, Depends(validate.permission("competitions.read"))],
    ) -> Page[CompetitionResponse]:
        rows, total_count = await competitions.list(options)
        group_ids = await competitions.group_ids([row["id"] for row in rows])
        return Page[CompetitionResponse].from_query_params(
            options.page,
            options.limit,
            [_response(row, group_ids[row["id"]]) for row in rows],
            total_count,
        )

    @router.get("/{competition_id}", response_model=CompetitionResponse)
    async def get_competition(
        competition_id: CompetitionId,
        _user: Annotated[User, Depends(validate.permission("competitions.read"))],
    ) -> CompetitionResponse:
        return await _get_response(competitions, competition_id)

    @router.post(
        "",
        response_model=CompetitionResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def create_competition(
        _user: Annotated[User, Depends(validate.permission("competitions.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> CompetitionResponse:
        result = validate_body(CompetitionCreate, body)
        if result.data is not None:
            await _check_groups(groups, result, result.data.groups)
        data = validated_or_400(result)

        values = data.model_dump(exclude={"groups"})
        values["age"] = await _age_for(groups, data.groups)
        competition_id = await competitions.create_with_groups(values, data.groups)
        return await _get_response(competitions, competition_id)

    @router.put("/{competition_id}", response_model=CompetitionResponse)
    async def update_competition(
        competition_id: CompetitionId,
        _user: Annotated[User, Depends(validate.permission("competitions.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> CompetitionResponse:
        result = validate_body(CompetitionUpdate, body)
        if result.data is not None:
            await _check_groups(groups, result, result.data.groups)
        data = validated_or_400(result)

        changes = data.changes()
        group_ids = changes.pop("groups", None)
        if group_ids is not None:
            changes["age"] = await _age_for(groups, group_ids)
        await competitions.update_with_groups(competition_id, changes, group_ids)
        return await _get_response(competitions, competition_id)

    @router.delete("/{competition_id}", response_model=MessageResponse)
    async def delete_competition(
        competition_id: CompetitionId,
        _user: Annotated[User, Depends(validate.permission("competitions.delete"))],
    ) -> MessageResponse:
        await competitions.delete(competition_id)
        return MessageResponse(message="Competition deleted successfully")

    return router
