"""Party routes."""

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

from .models import PartyCreate, PartyResponse, PartyUpdate
from .queries import PartyQueries

PartyId = Annotated[int, Path(gt=0)]


def configure_party_router(
    router: APIRouter,
    parties: PartyQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the parties router.

    :param router: The APIRouter to configure
    :param parties: Party repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[PartyResponse])
    async def list_parties(
        options: Annotated[ListParams, Depends(list_params)],
        _user: Annotated[User, Depends(validate.permission("parties.read"))],
    ) -> Page[PartyResponse]:
        rows, total_count = await parties.list(options)
        return Page[PartyResponse].from_query_params(
            options.page,
            options.limit,
            [PartyResponse.from_row(row) for row in rows],
            total_count,
        )

    @router.get("/{party_id}", response_model=PartyResponse)
    async def get_party(
        party_id: PartyId,
        _user: Annotated[User, Depends(validate.permission("parties.read"))],
    ) -> PartyResponse:
        row = await parties.get(party_id)
        if row is None:
            raise RecordNotFoundError(parties.RESOURCE, party_id)
        return PartyResponse.from_row(row)

    @router.post("", response_model=PartyResponse, status_code=status.HTTP_201_CREATED)
    async def create_party(
        _user: Annotated[User, Depends(validate.permission("parties.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PartyResponse:
        data = validated_or_400(validate_body(PartyCreate, body))
        party_id = await parties.insert(data.model_dump())
        return PartyResponse.from_row(await parties.get(party_id))

    @router.put("/{party_id}", response_model=PartyResponse)
    async def update_party(
        party_id: PartyId,
        _user: Annotated[User, Depends(validate.permission("parties.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PartyResponse:
        data = validated_or_400(validate_body(PartyUpdate, body))
        changes = data.changes()
        if changes:
            await parties.update(party_id, changes)
        elif await parties.get(party_id) is None:
            raise RecordNotFoundError(parties.RESOURCE, party_id)
        return PartyResponse.from_row(await parties.get(party_id))

    @router.delete("/{party_id}", response_model=MessageResponse)
    async def delete_party(
        party_id: PartyId,
        _user: Annotated[User, Depends(validate.permission("parties.delete"))],
    ) -> MessageResponse:
        await parties.delete(party_id)
        return MessageResponse(message="Party deleted successfully")

    return router
