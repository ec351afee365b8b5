"""Base repository for the flat CRUD resources.

Subclasses declare their table, columns and list whitelists as class
constants, the same way every repository keeps its SQL next to it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

import aiosqlite

from .database import Database, RecordNotFoundError, utc_now
from .pagination import ListParams, ListQuery

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class ResourceQueries:
    """Repository for one table with an integer ``id`` primary key."""

    RESOURCE: ClassVar[str] = "Record"
    TABLE: ClassVar[str]
    COLUMNS: ClassVar[tuple[str, ...]]
    CREATE_STATEMENTS: ClassVar[tuple[str, ...]] = ()

    SEARCH_COLUMNS: ClassVar[tuple[str, ...]] = ()
    SORT_COLUMNS: ClassVar[Mapping[str, str]] = {"id": "id"}
    DEFAULT_SORT: ClassVar[str] = "id"

    def __init__(self, database: Database) -> None:
        self.database = database

    async def initialize_tables(self) -> None:
        """Create this resource's tables if they do not exist."""
        await self.database.execute_script(self.CREATE_STATEMENTS)

    def _list_query(
        self,
        options: ListParams,
        filters: Mapping[str, Any] | None,
        extra_conditions: Sequence[tuple[str, Sequence[Any]]],
    ) -> ListQuery:
        return ListQuery.build(
            options,
            search_columns=self.SEARCH_COLUMNS,
            sort_columns=self.SORT_COLUMNS,
            default_sort=self.DEFAULT_SORT,
            filters=filters,
            extra_conditions=extra_conditions,
        )

    async def list(
        self,
        options: ListParams,
        filters: Mapping[str, Any] | None = None,
        extra_conditions: Sequence[tuple[str, Sequence[Any]]] = (),
    ) -> tuple[list[aiosqlite.Row], int]:
        """Return one page of rows and the total number of matching rows.

        :param options: Parsed list parameters
        :param filters: Equality filters by column, ``None`` values ignored
        :param extra_conditions: Additional raw conditions with parameters
        :return: (rows, total_count)
        """
        query = self._list_query(options, filters, extra_conditions)
        total_count = await self.database.fetch_value(
            f"SELECT COUNT(*) FROM {self.TABLE}{query.where}",  # noqa: S608
            query.params,
        )
        rows = await self.database.fetch_all(
            f"SELECT * FROM {self.TABLE}{query.where}{query.order_by} LIMIT ? OFFSET ?",  # noqa: S608
            [*query.params, options.limit, options.offset],
        )
        return rows, total_count or 0

    async def list_all(
        self,
        options: ListParams,
        filters: Mapping[str, Any] | None = None,
        extra_conditions: Sequence[tuple[str, Sequence[Any]]] = (),
    ) -> list[aiosqlite.Row]:
        """Return every matching row, ignoring pagination (used for exports)."""
        query = self._list_query(options, filters, extra_conditions)
        return await self.database.fetch_all(
            f"SELECT * FROM {self.TABLE}{query.where}{query.order_by}",  # noqa: S608
            query.params,
        )

    async def get(self, record_id: int) -> aiosqlite.Row | None:
        return await self.database.fetch_one(
            f"SELECT * FROM {self.TABLE} WHERE id = ?",  # noqa: S608
            (record_id,),
        )

    async def exists_with(
        self,
        column: str,
        value: Any,
        exclude_id: int | None = None,
    ) -> bool:
        """Check whether another row already holds ``value`` in ``column``.

        This is the optimistic pre-check; the UNIQUE constraint stays the
        source of truth under concurrent writes.
        """
        if column not in self.COLUMNS:
            msg = f"Unknown column {column} for {self.TABLE}"
            raise ValueError(msg)
        query = f"SELECT 1 FROM {self.TABLE} WHERE {column} = ?"  # noqa: S608
        params: list[Any] = [value]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        return await self.database.fetch_one(query, params) is not None

    def _writable(self, values: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(values) - set(self.COLUMNS)
        if unknown:
            msg = f"Unknown columns for {self.TABLE}: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        return dict(values)

    async def insert_with(
        self,
        connection: aiosqlite.Connection,
        values: Mapping[str, Any],
    ) -> int:
        """Insert a row inside an already open transaction."""
        data = self._writable(values)
        now = utc_now()
        data["created_at"] = now
        data["updated_at"] = now
        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        async with connection.execute(
            f"INSERT INTO {self.TABLE} ({columns}) VALUES ({placeholders})",  # noqa: S608
            list(data.values()),
        ) as cursor:
            return cursor.lastrowid

    async def update_with(
        self,
        connection: aiosqlite.Connection,
        record_id: int,
        values: Mapping[str, Any],
    ) -> None:
        """Update a row inside an already open transaction.

        :raises RecordNotFoundError: If no row has ``record_id``
        """
        data = self._writable(values)
        data["updated_at"] = utc_now()
        assignments = ", ".join(f"{column} = ?" for column in data)
        async with connection.execute(
            f"UPDATE {self.TABLE} SET {assignments} WHERE id = ?",  # noqa: S608
            [*data.values(), record_id],
        ) as cursor:
            if cursor.rowcount == 0:
                raise RecordNotFoundError(self.RESOURCE, record_id)

    async def insert(self, values: Mapping[str, Any]) -> int:
        async with self.database.transaction() as connection:
            record_id = await self.insert_with(connection, values)
        LOGGER.debug("Created %s %s", self.RESOURCE, record_id)
        return record_id

    async def update(self, record_id: int, values: Mapping[str, Any]) -> None:
        async with self.database.transaction() as connection:
            await self.update_with(connection, record_id, values)
        LOGGER.debug("Updated %s %s", self.RESOURCE, record_id)

    async def delete(self, record_id: int) -> None:
        """Hard delete a row.

        :raises RecordNotFoundError: If no row has ``record_id``
        """
        async with self.database.transaction() as connection:
            async with connection.execute(
                f"DELETE FROM {self.TABLE} WHERE id = ?",  # noqa: S608
                (record_id,),
            ) as cursor:
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(self.RESOURCE, record_id)
        LOGGER.debug("Deleted %s %s", self.RESOURCE, record_id)
