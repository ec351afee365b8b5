"""Thin async wrapper around the shared aiosqlite connection."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Iterable, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import aiosqlite

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class RecordNotFoundError(LookupError):
    """Raised by repositories when a write targets a row that does not exist."""

    def __init__(self, resource: str, record_id: Any) -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.record_id = record_id


def utc_now() -> str:
    """Timestamp format used for every created_at/updated_at column."""
    return datetime.now(UTC).isoformat(timespec="milliseconds")


class Database:
    """Shared connection plus helpers used by every repository.

    Writes go through :meth:`transaction`, which serialises them with a lock
    because all requests share the one connection.
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self.connection = connection
        self._write_lock = asyncio.Lock()

    @classmethod
    async def prepare(cls, connection: aiosqlite.Connection) -> "Database":
        """Configure a freshly opened connection.

        :param connection: Open aiosqlite connection
        :return: Database wrapper around the connection
        """
        connection.row_factory = aiosqlite.Row
        await connection.execute("PRAGMA foreign_keys = ON")
        await connection.commit()
        return cls(connection)

    async def fetch_one(
        self,
        query: str,
        params: Sequence[Any] = (),
    ) -> aiosqlite.Row | None:
        async with self.connection.execute(query, params) as cursor:
            return await cursor.fetchone()

    async def fetch_all(
        self,
        query: str,
        params: Sequence[Any] = (),
    ) -> list[aiosqlite.Row]:
        async with self.connection.execute(query, params) as cursor:
            return list(await cursor.fetchall())

    async def fetch_value(self, query: str, params: Sequence[Any] = ()) -> Any:
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    async def execute_script(self, statements: Iterable[str]) -> None:
        """Run DDL statements in one transaction."""
        async with self.transaction() as connection:
            for statement in statements:
                await connection.execute(statement)

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[aiosqlite.Connection]:
        """Commit on success, roll back and re-raise on failure."""
        async with self._write_lock:
            try:
                yield self.connection
            except BaseException:
                await self.connection.rollback()
                raise
            await self.connection.commit()
