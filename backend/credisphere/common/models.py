"""Response and request model bases shared by every resource."""

from collections.abc import Mapping
from typing import Any, Generic, Self, TypeVar

import aiosqlite
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ItemT = TypeVar("ItemT")


class CamelModel(BaseModel):
    """Model exchanged with clients using camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | aiosqlite.Row) -> Self:
        """Build the model from a database row; unknown columns are ignored."""
        return cls.model_validate(dict(row))


class Page(CamelModel, Generic[ItemT]):
    """One page of a list endpoint.

    :param items: Records on the current page
    :param page: Current page number
    :param total_pages: Number of pages for the current limit
    :param total_count: Number of records matching the filters
    """

    items: list[ItemT]
    page: int
    total_pages: int
    total_count: int

    @classmethod
    def from_query_params(
        cls,
        page: int,
        limit: int,
        items: list[ItemT],
        total_count: int,
    ) -> "Page[ItemT]":
        """Create a page from the list parameters and query results.

        :param page: Current page number
        :param limit: Number of items per page
        :param items: Records on the current page
        :param total_count: Total number of matching records
        :return: Page instance
        """
        total_pages = (total_count + limit - 1) // limit
        return cls(
            items=items,
            page=page,
            total_pages=total_pages,
            total_count=total_count,
        )


class MessageResponse(BaseModel):
    message: str
