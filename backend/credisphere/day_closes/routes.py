"""Day close routes."""

import logging
from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from credisphere.auth import Validate
from credisphere.common import (
    ListParams,
    MessageResponse,
    Page,
    User,
    list_params,
    validate_body,
    validated_or_400,
)

from .models import (
    DayCloseCreate,
    DayCloseCreated,
    DayCloseResponse,
    DayClosesOnDateResponse,
    LastCloseResponse,
    next_day,
    parse_moment,
)
from .queries import DayCloseQueries, day_bounds, to_timestamp

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

DayCloseId = Annotated[int, Path(gt=0)]


def _bound(name: str, value: str | None, *, end_of_day: bool = False) -> str | None:
    if not value:
        return None
    try:
        return to_timestamp(parse_moment(value, end_of_day=end_of_day))
    except (ValueError, OverflowError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} format",
        ) from None


def configure_day_close_router(
    router: APIRouter,
    day_closes: DayCloseQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the day closes router.

    :param router: The APIRouter to configure
    :param day_closes: Day close repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=Page[DayCloseResponse])
    async def list_day_closes(
        options: Annotated[ListParams, Depends(list_params)],
        _user: Annotated[User, Depends(validate.permission("dayCloses.read"))],
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
    ) -> Page[DayCloseResponse]:
        start = _bound("startDate", start_date)
        end = _bound("endDate", end_date, end_of_day=True)
        rows, total_count = await day_closes.list_between(options, start, end)
        return Page[DayCloseResponse].from_query_params(
            options.page,
            options.limit,
            [DayCloseResponse.from_joined_row(row) for row in rows],
            total_count,
        )

    @router.get(
        "/last",
        response_model=LastCloseResponse,
        response_model_exclude_unset=True,
    )
    async def get_last_close(
        _user: Annotated[User, Depends(validate.permission("dayCloses.read"))],
    ) -> LastCloseResponse:
        row = await day_closes.last()
        if row is None:
            return LastCloseResponse(last_close=None, message="No day closes found")
        return LastCloseResponse(last_close=DayCloseResponse.from_joined_row(row))

    @router.get("/date/{day}", response_model=DayClosesOnDateResponse)
    async def get_closes_on_date(
        day: str,
        _user: Annotated[User, Depends(validate.permission("dayCloses.read"))],
    ) -> DayClosesOnDateResponse:
        try:
            moment = parse_moment(day)
            start, end = day_bounds(moment.date())
        except (ValueError, OverflowError):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid date format",
            ) from None
        rows = await day_closes.closed_between(start, end)
        return DayClosesOnDateResponse(
            items=[DayCloseResponse.from_joined_row(row) for row in rows],
            date=moment.date().isoformat(),
        )

    @router.post("", response_model=DayCloseCreated, status_code=status.HTTP_201_CREATED)
    async def create_day_close(
        user: Annotated[User, Depends(validate.permission("dayCloses.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> DayCloseCreated:
        data = validated_or_400(validate_body(DayCloseCreate, {} if body is None else body))
        closed_at = parse_moment(data.date) if data.date else datetime.now(UTC)
        following = next_day(closed_at)
        await day_closes.record(closed_at, user.id, data.note)
        return DayCloseCreated(closed_at=to_timestamp(closed_at), next_day=following.isoformat())

    @router.delete("/{close_id}", response_model=MessageResponse)
    async def delete_day_close(
        close_id: DayCloseId,
        _user: Annotated[User, Depends(validate.permission("dayCloses.write"))],
    ) -> MessageResponse:
        await day_closes.delete(close_id)
        return MessageResponse(message="Day close deleted successfully")

    return router
