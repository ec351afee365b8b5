"""Competition repository."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from credisphere.common import Database, RecordNotFoundError, ResourceQueries
from credisphere.groups.links import GroupLinks

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


class CompetitionQueries(ResourceQueries):
    """Repository for competitions and the groups they are open to."""

    RESOURCE = "Competition"
    TABLE = "competitions"
    COLUMNS = ("competition_name", "date", "age", "last_entry_date")

    CREATE_COMPETITIONS_TABLE = """
        CREATE TABLE IF NOT EXISTS competitions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            competition_name TEXT NOT NULL,
            date TEXT NOT NULL,
            age TEXT NOT NULL,
            last_entry_date TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """

    SEARCH_COLUMNS = ("competition_name", "age")
    SORT_COLUMNS = {
        "id": "id",
        "name": "competition_name",
        "competitionName": "competition_name",
        "date": "date",
        "age": "age",
        "lastEntryDate": "last_entry_date",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "competition_name"

    def __init__(self, database: Database) -> None:
        super().__init__(database)
        self.links = GroupLinks(database, "competition_groups", "competition_id")
        self.CREATE_STATEMENTS = (
            CompetitionQueries.CREATE_COMPETITIONS_TABLE,
            self.links.create_statement(self.TABLE),
        )

    async def group_ids(self, competition_ids: Sequence[int]) -> dict[int, list[int]]:
        return await self.links.group_ids(competition_ids)

    async def create_with_groups(
        self,
        values: Mapping[str, Any],
        group_ids: Sequence[int],
    ) -> int:
        async with self.database.transaction() as connection:
            competition_id = await self.insert_with(connection, values)
            await self.links.replace(connection, competition_id, group_ids)
        LOGGER.debug("Created competition %s", competition_id)
        return competition_id

    async def update_with_groups(
        self,
        competition_id: int,
        values: Mapping[str, Any],
        group_ids: Sequence[int] | None,
    ) -> None:
        """Apply changes; ``group_ids`` replaces the group set when given.

        :raises RecordNotFoundError: If the competition does not exist
        """
        async with self.database.transaction() as connection:
            if values:
                await self.update_with(connection, competition_id, values)
            elif await self.get(competition_id) is None:
                raise RecordNotFoundError(self.RESOURCE, competition_id)
            if group_ids is not None:
                await self.links.replace(connection, competition_id, group_ids)
