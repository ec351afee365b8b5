"""Site setting repository."""

import aiosqlite

from credisphere.common import ResourceQueries


class SiteSettingQueries(ResourceQueries):
    """Repository for key/value site settings."""

    RESOURCE = "Setting"
    TABLE = "site_settings"
    COLUMNS = ("key", "value")

    CREATE_SITE_SETTINGS_TABLE = """
        CREATE TABLE IF NOT EXISTS site_settings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            key TEXT NOT NULL UNIQUE,
            value TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_SITE_SETTINGS_TABLE,)

    SORT_COLUMNS = {
        "id": "id",
        "key": "key",
        "value": "value",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "key"

    GET_BY_KEY = """
        SELECT * FROM site_settings WHERE key = ?;
        """

    async def get_by_key(self, key: str) -> aiosqlite.Row | None:
        return await self.database.fetch_one(SiteSettingQueries.GET_BY_KEY, (key,))
