"""Site setting routes."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from credisphere.auth import Validate
from credisphere.common import (
    ListParams,
    MessageResponse,
    User,
    validate_body,
    validated_or_400,
)

from .models import SiteSettingResponse, SiteSettingWrite
from .queries import SiteSettingQueries

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

SettingId = Annotated[int, Path(gt=0)]


def _not_found(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def configure_site_setting_router(
    router: APIRouter,
    settings: SiteSettingQueries,
    validate: Validate,
) -> APIRouter:
    """Configure the site settings router.

    :param router: The APIRouter to configure
    :param settings: Site setting repository
    :param validate: Authentication and ACL dependencies
    :return: The configured APIRouter
    """

    @router.get("", response_model=list[SiteSettingResponse])
    async def list_settings(
        _user: Annotated[User, Depends(validate.permission("siteSettings.read"))],
        sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
        sort_order: Annotated[str, Query(alias="sortOrder")] = "asc",
    ) -> list[SiteSettingResponse]:
        options = ListParams(sort_by=sort_by, sort_order="desc" if sort_order == "desc" else "asc")
        rows = await settings.list_all(options)
        return [SiteSettingResponse.from_row(row) for row in rows]

    @router.get("/{key}", response_model=SiteSettingResponse)
    async def get_setting(
        key: str,
        _user: Annotated[User, Depends(validate.permission("siteSettings.read"))],
    ) -> SiteSettingResponse:
        row = await settings.get_by_key(key.strip())
        if row is None:
            raise _not_found(f"Setting with key '{key.strip()}' not found.")
        return SiteSettingResponse.from_row(row)

    @router.post("", response_model=SiteSettingResponse, status_code=status.HTTP_201_CREATED)
    async def create_setting(
        _user: Annotated[User, Depends(validate.permission("siteSettings.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> SiteSettingResponse:
        result = validate_body(SiteSettingWrite, body)
        if result.data is not None and await settings.get_by_key(result.data.key):
            result.add_error("key", "A setting with this key already exists.", "unique")
        data = validated_or_400(result)

        setting_id = await settings.insert(data.model_dump())
        LOGGER.info("Created site setting %s", data.key)
        return SiteSettingResponse.from_row(await settings.get(setting_id))

    @router.put("/{setting_id}", response_model=SiteSettingResponse)
    async def update_setting(
        setting_id: SettingId,
        _user: Annotated[User, Depends(validate.permission("siteSettings.write"))],
        body: Annotated[Any, Body()] = None,
    ) -> SiteSettingResponse:
        result = validate_body(SiteSettingWrite, body)
        data = validated_or_400(result)
        if await settings.get(setting_id) is None:
            raise _not_found(f"Setting with ID {setting_id} not found.")
        if await settings.exists_with("key", data.key, exclude_id=setting_id):
            result.add_error("key", f"Another setting with key '{data.key}' already exists.", "unique")
            validated_or_400(result)

        await settings.update(setting_id, data.model_dump())
        return SiteSettingResponse.from_row(await settings.get(setting_id))

    @router.delete("/{setting_id}", response_model=MessageResponse)
    async def delete_setting(
        setting_id: SettingId,
        _user: Annotated[User, Depends(validate.permission("siteSettings.delete"))],
    ) -> MessageResponse:
        row = await settings.get(setting_id)
        if row is None:
            raise _not_found(f"Setting with ID {setting_id} not found.")
        await settings.delete(setting_id)
        return MessageResponse(
            message=f"Setting '{row['key']}' (ID: {setting_id}) deleted successfully",
        )

    return router
