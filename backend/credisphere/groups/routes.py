"""Group routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, status

from credisphere.auth import Validate
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

from .models import GroupCreate, GroupResponse, GroupUpdate
from .queries import GroupQueries

GroupId = Annotated[int, Path(gt=0)]


def configure_group_router(
    router: APIRouter,
    groups: GroupQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the groups router.

    :param router: The APIRouter to configure
    :param groups: Group repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[GroupResponse])
    async def list_groups(
        options: Annotated[ListParams, Depends(list_params)],
        _user: Annotated[User, Depends(validate.permission("groups.read"))],
    ) -> Page[GroupResponse]:
        rows, total_count = await groups.list(options)
        return Page[GroupResponse].from_query_params(
            options.page,
            options.limit,
            [GroupResponse.from_row(row) for row in rows],
            total_count,
        )

    @router.get("/{group_id}", response_model=GroupResponse)
    async def get_group(
        group_id: GroupId,
        _user: Annotated[User, Depends(validate.permission("groups.read"))],
    ) -> GroupResponse:
        row = await groups.get(group_id)
        if row is None:
            raise RecordNotFoundError(groups.RESOURCE, group_id)
        return GroupResponse.from_row(row)

    @router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
    async def create_group(
        _user: Annotated[User, Depends(validate.permission("groups.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> GroupResponse:
        data = validated_or_400(validate_body(GroupCreate, body))
        group_id = await groups.insert(data.model_dump())
        return GroupResponse.from_row(await groups.get(group_id))

    @router.put("/{group_id}", response_model=GroupResponse)
    async def update_group(
        group_id: GroupId,
        _user: Annotated[User, Depends(validate.permission("groups.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> GroupResponse:
        data = validated_or_400(validate_body(GroupUpdate, body))
        changes = data.changes()
        if changes:
            await groups.update(group_id, changes)
        elif await groups.get(group_id) is None:
            raise RecordNotFoundError(groups.RESOURCE, group_id)
        return GroupResponse.from_row(await groups.get(group_id))

    @router.delete("/{group_id}", response_model=MessageResponse)
    async def delete_group(
        group_id: GroupId,
        _user: Annotated[User, Depends(validate.permission("groups.delete"))],
    ) -> MessageResponse:
        await groups.delete(group_id)
        return MessageResponse(message="Group deleted successfully")

    return router
