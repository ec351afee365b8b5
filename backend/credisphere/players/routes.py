"""Player routes."""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path as FilePath
from typing import Annotated, Any

import aiosqlite
from fastapi import APIRouter, Body, Depends, File, Path, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from credisphere.auth import Validate, forbidden, has_permission
from credisphere.common import (
    ListParams,
    MessageResponse,
    Page,
    RecordNotFoundError,
    User,
    Validated,
    list_params,
    parse_bool,
    validate_body,
    validated_or_400,
)
from credisphere.common.excel import Column, build_workbook, workbook_response, yes_no
from credisphere.common.uploads import UploadField, UploadSession
from credisphere.groups import GroupQueries

from .models import (
    AadharVerificationUpdate,
    PlayerCreate,
    PlayerResponse,
    PlayerUpdate,
    SuspensionUpdate,
)
from .queries import PlayerQueries

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

PlayerId = Annotated[int, Path(gt=0)]

AADHAR_TAKEN = "A player with this Aadhar number already exists."
PHOTO_FIELD = UploadField("profileImage")

EXPORT_COLUMNS = (
    Column("ID", "id", 10),
    Column("Unique ID", "unique_id_number", 25),
    Column("First Name", "first_name", 20),
    Column("Middle Name", "middle_name", 20),
    Column("Last Name", "last_name", 20),
    Column("Date of Birth", "date_of_birth"),
    Column("Position", "position"),
    Column("Address", "address", 40),
    Column("Mobile", "mobile"),
    Column("Aadhar Number", "aadhar_number", 20),
    Column("Aadhar Verified", "aadhar_verified"),
    Column("Suspended", "is_suspended"),
    Column("Groups", "groups", 40),
)


def _response(row: aiosqlite.Row, groups: Sequence[aiosqlite.Row]) -> PlayerResponse:
    return PlayerResponse.model_validate(
        {**dict(row), "groups": [dict(group) for group in groups]},
    )


def _export_row(row: aiosqlite.Row, groups: Sequence[aiosqlite.Row]) -> Mapping[str, Any]:
    return {
        **dict(row),
        "aadhar_verified": yes_no(row["aadhar_verified"]),
        "is_suspended": yes_no(row["is_suspended"]),
        "groups": ", ".join(group["group_name"] for group in groups),
    }


async def _get_response(players: PlayerQueries, player_id: int) -> PlayerResponse:
    row = await players.get(player_id)
    if row is None:
        raise RecordNotFoundError(players.RESOURCE, player_id)
    groups = await players.groups([player_id])
    return _response(row, groups[player_id])


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
        result.add_error("groupIds", f"Group not found: {', '.join(map(str, missing))}")


async def _export_players(
    players: PlayerQueries,
    options: ListParams,
    filters: Mapping[str, Any],
) -> StreamingResponse:
    rows = await players.list_all(options, filters)
    groups = await players.groups([row["id"] for row in rows])
    content = build_workbook(
        "Players",
        EXPORT_COLUMNS,
        (_export_row(row, groups[row["id"]]) for row in rows),
    )
    LOGGER.info("Exported %s players", len(rows))
    return workbook_response("players.xlsx", content)


async def _create_player(
    players: PlayerQueries,
    groups: GroupQueries,
    body: Any,
) -> PlayerResponse:
    result = validate_body(PlayerCreate, body)
    if result.data is not None:
        if await players.exists_with("aadhar_number", result.data.aadhar_number):
            result.add_error("aadharNumber", AADHAR_TAKEN, "unique")
        await _check_groups(groups, result, result.data.group_ids)
    data = validated_or_400(result)

    values = data.model_dump(exclude={"group_ids"})
    player_id = await players.create_with_groups(values, data.group_ids)
    return await _get_response(players, player_id)


async def _update_player(
    players: PlayerQueries,
    groups: GroupQueries,
    player_id: int,
    body: Any,
) -> PlayerResponse:
    result = validate_body(PlayerUpdate, body)
    data = validated_or_400(result)
    if await players.get(player_id) is None:
        raise RecordNotFoundError(players.RESOURCE, player_id)
    if data.aadhar_number and await players.exists_with(
        "aadhar_number",
        data.aadhar_number,
        exclude_id=player_id,
    ):
        result.add_error("aadharNumber", AADHAR_TAKEN, "unique")
    await _check_groups(groups, result, data.group_ids)
    validated_or_400(result)

    changes = data.changes()
    group_ids = changes.pop("group_ids", None)
    await players.update_with_groups(player_id, changes, group_ids)
    return await _get_response(players, player_id)


async def _set_flag(
    players: PlayerQueries,
    player_id: int,
    column: str,
    value: bool,
) -> PlayerResponse:
    await players.update(player_id, {column: value})
    LOGGER.info("Player %s %s set to %s", player_id, column, value)
    return await _get_response(players, player_id)


async def _upload_photo(
    players: PlayerQueries,
    upload_root: FilePath,
    player_id: int,
    upload: UploadFile,
) -> PlayerResponse:
    if await players.get(player_id) is None:
        raise RecordNotFoundError(players.RESOURCE, player_id)

    async with UploadSession(upload_root, "players", (PHOTO_FIELD,)) as session:
        stored = await session.save(PHOTO_FIELD.name, upload)
        if stored is not None:
            await players.update(player_id, {"profile_image": stored.relative_path})
    if session.errors:
        validated_or_400(Validated(errors=session.errors))
    return await _get_response(players, player_id)


def configure_player_router(
    router: APIRouter,
    players: PlayerQueries,
    groups: GroupQueries,
    validate: Validate,
    upload_root: FilePath,
) -> APIRouter:
    """Configure the players router.

    :param router: The APIRouter to configure
    :param players: Player repository
    :param groups: Group repository, for group lookups
    :param validate: Authentication and ACL dependencies
    :param upload_root: Directory profile images are stored under
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[PlayerResponse])
    async def list_players(
        options: Annotated[ListParams, Depends(list_params)],
        user: Annotated[User, Depends(validate.permission("players.read"))],
        is_suspended: Annotated[str | None, Query(alias="isSuspended")] = None,
        aadhar_verified: Annotated[str | None, Query(alias="aadharVerified")] = None,
        export: Annotated[str | None, Query()] = None,
    ) -> Any:
        filters = {
            "is_suspended": parse_bool(is_suspended),
            "aadhar_verified": parse_bool(aadhar_verified),
        }
        if export == "true":
            if not has_permission(user, "players.export"):
                raise forbidden("You do not have permission to export players")
            return await _export_players(players, options, filters)

        rows, total_count = await players.list(options, filters)
        groups_by_player = await players.groups([row["id"] for row in rows])
        return Page[PlayerResponse].from_query_params(
            options.page,
            options.limit,
            [_response(row, groups_by_player[row["id"]]) for row in rows],
            total_count,
        )

    @router.get("/{player_id}", response_model=PlayerResponse)
    async def get_player(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.read"))],
    ) -> PlayerResponse:
        return await _get_response(players, player_id)

    @router.post("", response_model=PlayerResponse, status_code=status.HTTP_201_CREATED)
    async def create_player(
        _user: Annotated[User, Depends(validate.permission("players.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PlayerResponse:
        return await _create_player(players, groups, body)

    @router.put("/{player_id}", response_model=PlayerResponse)
    async def update_player(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PlayerResponse:
        return await _update_player(players, groups, player_id, body)

    @router.patch("/{player_id}/suspension", response_model=PlayerResponse)
    async def toggle_suspension(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PlayerResponse:
        data = validated_or_400(validate_body(SuspensionUpdate, body))
        return await _set_flag(players, player_id, "is_suspended", data.is_suspended)

    @router.patch("/{player_id}/aadhar-verification", response_model=PlayerResponse)
    async def toggle_aadhar_verification(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> PlayerResponse:
        data = validated_or_400(validate_body(AadharVerificationUpdate, body))
        return await _set_flag(players, player_id, "aadhar_verified", data.aadhar_verified)

    @router.post("/{player_id}/photo", response_model=PlayerResponse)
    async def upload_photo(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.write"))],
        profile_image: Annotated[UploadFile, File(alias="profileImage")],
    ) -> PlayerResponse:
        return await _upload_photo(players, upload_root, player_id, profile_image)

    @router.delete("/{player_id}", response_model=MessageResponse)
    async def delete_player(
        player_id: PlayerId,
        _user: Annotated[User, Depends(validate.permission("players.delete"))],
    ) -> MessageResponse:
        await players.delete(player_id)
        return MessageResponse(message="Player deleted successfully")

    return router
