"""Group repository."""

from collections.abc import Iterable

from credisphere.common import ResourceQueries


class GroupQueries(ResourceQueries):
    """Repository for age/gender groups used by players and competitions."""

    RESOURCE = "Group"
    TABLE = "groups"
    COLUMNS = ("group_name", "gender", "age")

    CREATE_GROUPS_TABLE = """
        CREATE TABLE IF NOT EXISTS groups (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            group_name TEXT NOT NULL,
            gender TEXT NOT NULL CHECK (gender IN ('Male', 'Female', 'Mix')),
            age TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_GROUPS_TABLE,)

    SEARCH_COLUMNS = ("group_name", "gender", "age")
    SORT_COLUMNS = {
        "id": "id",
        "name": "group_name",
        "groupName": "group_name",
        "gender": "gender",
        "age": "age",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "group_name"

    async def existing_ids(self, group_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``group_ids`` that exist."""
        ids = list(dict.fromkeys(group_ids))
        if not ids:
            return set()
        placeholders = ", ".join("?" for _ in ids)
        rows = await self.database.fetch_all(
            f"SELECT id FROM groups WHERE id IN ({placeholders})",  # noqa: S608
            ids,
        )
        return {row["id"] for row in rows}

    async def age_of(self, group_id: int) -> str | None:
        return await self.database.fetch_value("SELECT age FROM groups WHERE id = ?", (group_id,))
