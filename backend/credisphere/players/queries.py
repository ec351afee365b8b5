"""Player repository."""

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from credisphere.common import Database, RecordNotFoundError, ResourceQueries
from credisphere.groups.links import GroupLinks

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

UNIQUE_ID_PREFIX = "PLAYER"


class PlayerQueries(ResourceQueries):
    """Repository for players and their group memberships."""

    RESOURCE = "Player"
    TABLE = "players"
    COLUMNS = (
        "unique_id_number",
        "first_name",
        "middle_name",
        "last_name",
        "date_of_birth",
        "position",
        "address",
        "mobile",
        "aadhar_number",
        "aadhar_verified",
        "is_suspended",
        "profile_image",
    )

    CREATE_PLAYERS_TABLE = """
        CREATE TABLE IF NOT EXISTS players (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            unique_id_number TEXT NOT NULL UNIQUE,
            first_name TEXT NOT NULL,
            middle_name TEXT,
            last_name TEXT NOT NULL,
            date_of_birth TEXT NOT NULL,
            position TEXT,
            address TEXT NOT NULL,
            mobile TEXT NOT NULL,
            aadhar_number TEXT NOT NULL UNIQUE,
            aadhar_verified INTEGER NOT NULL DEFAULT 0,
            is_suspended INTEGER NOT NULL DEFAULT 0,
            profile_image TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """

    SEARCH_COLUMNS = ("first_name", "last_name", "unique_id_number", "aadhar_number")
    SORT_COLUMNS = {
        "id": "id",
        "uniqueIdNumber": "unique_id_number",
        "name": "first_name",
        "firstName": "first_name",
        "middleName": "middle_name",
        "lastName": "last_name",
        "dateOfBirth": "date_of_birth",
        "position": "position",
        "mobile": "mobile",
        "aadharNumber": "aadhar_number",
        "aadharVerified": "aadhar_verified",
        "isSuspended": "is_suspended",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "id"

    LAST_UNIQUE_ID = """
        SELECT MAX(unique_id_number) FROM players WHERE unique_id_number LIKE ?;
        """

    def __init__(self, database: Database) -> None:
        super().__init__(database)
        self.links = GroupLinks(database, "player_groups", "player_id")
        self.CREATE_STATEMENTS = (
            PlayerQueries.CREATE_PLAYERS_TABLE,
            self.links.create_statement(self.TABLE),
        )

    async def groups(self, player_ids: Sequence[int]) -> dict[int, list[aiosqlite.Row]]:
        return await self.links.groups(player_ids)

    async def _next_unique_id(self, connection: aiosqlite.Connection) -> str:
        """Return ``PLAYER-YYYYMMDD-NNNN``, numbered per UTC day from 0001."""
        prefix = f"{UNIQUE_ID_PREFIX}-{datetime.now(UTC):%Y%m%d}-"
        async with connection.execute(PlayerQueries.LAST_UNIQUE_ID, (f"{prefix}%",)) as cursor:
            row = await cursor.fetchone()
        last = row[0] if row else None
        sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    async def create_with_groups(
        self,
        values: Mapping[str, Any],
        group_ids: Sequence[int],
    ) -> int:
        """Insert a player with a generated unique id number.

        :param values: Player columns
        :param group_ids: Groups to link
        :return: The new player id
        """
        async with self.database.transaction() as connection:
            unique_id = await self._next_unique_id(connection)
            player_id = await self.insert_with(
                connection,
                {**values, "unique_id_number": unique_id},
            )
            await self.links.replace(connection, player_id, group_ids)
        LOGGER.info("Created player %s (%s)", player_id, unique_id)
        return player_id

    async def update_with_groups(
        self,
        player_id: int,
        values: Mapping[str, Any],
        group_ids: Sequence[int] | None,
    ) -> None:
        """Apply changes; a non-empty ``group_ids`` replaces the group set.

        :raises RecordNotFoundError: If the player does not exist
        """
        async with self.database.transaction() as connection:
            if values:
                await self.update_with(connection, player_id, values)
            elif await self.get(player_id) is None:
                raise RecordNotFoundError(self.RESOURCE, player_id)
            if group_ids:
                await self.links.replace(connection, player_id, group_ids)
