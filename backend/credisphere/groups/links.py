"""Many-to-many links between a resource and groups."""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import aiosqlite

from credisphere.common import Database


@dataclass(frozen=True)
class GroupLinks:
    """Join table ``<table>(<owner_column>, group_id)``.

    :param database: Shared database
    :param table: Join table name
    :param owner_column: Column referencing the owning resource
    """

    database: Database
    table: str
    owner_column: str

    def create_statement(self, owner_table: str) -> str:
        return f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                {self.owner_column} INTEGER NOT NULL REFERENCES {owner_table} (id) ON DELETE CASCADE,
                group_id INTEGER NOT NULL REFERENCES groups (id) ON DELETE CASCADE,
                PRIMARY KEY ({self.owner_column}, group_id)
            );
            """

    async def replace(
        self,
        connection: aiosqlite.Connection,
        owner_id: int,
        group_ids: Iterable[int],
    ) -> None:
        """Set the owner's groups inside an open transaction."""
        await connection.execute(
            f"DELETE FROM {self.table} WHERE {self.owner_column} = ?",  # noqa: S608
            (owner_id,),
        )
        await connection.executemany(
            f"INSERT INTO {self.table} ({self.owner_column}, group_id) VALUES (?, ?)",  # noqa: S608
            [(owner_id, group_id) for group_id in dict.fromkeys(group_ids)],
        )

    async def group_ids(self, owner_ids: Sequence[int]) -> dict[int, list[int]]:
        """Return each owner's group ids, in link order."""
        result: dict[int, list[int]] = defaultdict(list)
        if not owner_ids:
            return result
        placeholders = ", ".join("?" for _ in owner_ids)
        rows = await self.database.fetch_all(
            f"SELECT {self.owner_column} AS owner_id, group_id FROM {self.table} "  # noqa: S608
            f"WHERE {self.owner_column} IN ({placeholders}) ORDER BY rowid",
            list(owner_ids),
        )
        for row in rows:
            result[row["owner_id"]].append(row["group_id"])
        return result

    async def groups(self, owner_ids: Sequence[int]) -> dict[int, list[aiosqlite.Row]]:
        """Return each owner's group rows."""
        result: dict[int, list[aiosqlite.Row]] = defaultdict(list)
        if not owner_ids:
            return result
        placeholders = ", ".join("?" for _ in owner_ids)
        rows = await self.database.fetch_all(
            f"SELECT l.{self.owner_column} AS owner_id, g.* FROM {self.table} l "  # noqa: S608
            f"JOIN groups g ON g.id = l.group_id "
            f"WHERE l.{self.owner_column} IN ({placeholders}) ORDER BY l.rowid",
            list(owner_ids),
        )
        for row in rows:
            result[row["owner_id"]].append(row)
        return result
