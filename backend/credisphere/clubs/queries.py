"""Club repository.

Every club owns a ``clubadmin`` user sharing its email and password; the
two rows are written together.
"""

import logging
from collections.abc import Mapping
from typing import Any

import aiosqlite

from credisphere.auth import UserQueries
from credisphere.common import Database, RecordNotFoundError, ResourceQueries, Role

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

# Club columns mirrored onto the club's admin user.
_ADMIN_FIELDS = {"email": "email", "club_name": "name", "password": "password"}


class ClubQueries(ResourceQueries):
    """Repository for clubs and their admin accounts."""

    RESOURCE = "Club"
    TABLE = "clubs"
    COLUMNS = (
        "club_name",
        "affiliation_number",
        "city",
        "address",
        "mobile",
        "email",
        "password",
    )

    CREATE_CLUBS_TABLE = """
        CREATE TABLE IF NOT EXISTS clubs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            club_name TEXT NOT NULL,
            affiliation_number TEXT,
            city TEXT NOT NULL,
            address TEXT NOT NULL,
            mobile TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE COLLATE NOCASE,
            password TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_CLUBS_TABLE,)

    SEARCH_COLUMNS = ("club_name", "city", "address", "affiliation_number")
    SORT_COLUMNS = {
        "id": "id",
        "name": "club_name",
        "clubName": "club_name",
        "affiliationNumber": "affiliation_number",
        "city": "city",
        "address": "address",
        "mobile": "mobile",
        "email": "email",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "club_name"

    GET_CLUB_EMAIL = """
        SELECT email FROM clubs WHERE id = ?;
        """

    GET_CLUB_ADMIN = """
        SELECT id FROM users WHERE email = ? AND role = ?;
        """

    def __init__(self, database: Database, users: UserQueries) -> None:
        super().__init__(database)
        self.users = users

    async def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        """Check clubs and users, since the club's admin shares its email."""
        if await self.exists_with("email", email, exclude_id):
            return True

        admin_id = None
        if exclude_id is not None:
            current = await self.get(exclude_id)
            if current is not None:
                admin = await self.database.fetch_one(
                    ClubQueries.GET_CLUB_ADMIN,
                    (current["email"], Role.CLUB_ADMIN.value),
                )
                admin_id = admin["id"] if admin else None
        return await self.users.exists_with("email", email, admin_id)

    async def create_with_admin(self, values: Mapping[str, Any]) -> int:
        """Insert the club and its ``clubadmin`` user in one transaction.

        :param values: Club columns, password already hashed
        :return: The new club id
        """
        async with self.database.transaction() as connection:
            club_id = await self.insert_with(connection, values)
            user_id = await self.users.insert_with(
                connection,
                {
                    "name": values["club_name"],
                    "email": values["email"],
                    "password": values["password"],
                    "role": Role.CLUB_ADMIN.value,
                    "active": True,
                },
            )
        LOGGER.info("Created club %s with admin user %s", club_id, user_id)
        return club_id

    async def _admin_id(self, connection: aiosqlite.Connection, email: str) -> int | None:
        async with connection.execute(
            ClubQueries.GET_CLUB_ADMIN,
            (email, Role.CLUB_ADMIN.value),
        ) as cursor:
            row = await cursor.fetchone()
        return row["id"] if row else None

    async def update_with_admin(self, club_id: int, changes: Mapping[str, Any]) -> None:
        """Update the club and mirror email, name and password onto its admin.

        :param club_id: Club to update
        :param changes: Club columns to change, password already hashed
        :raises RecordNotFoundError: If the club does not exist
        """
        async with self.database.transaction() as connection:
            async with connection.execute(ClubQueries.GET_CLUB_EMAIL, (club_id,)) as cursor:
                current = await cursor.fetchone()
            if current is None:
                raise RecordNotFoundError(self.RESOURCE, club_id)

            await self.update_with(connection, club_id, changes)

            admin_changes = {
                user_column: changes[club_column]
                for club_column, user_column in _ADMIN_FIELDS.items()
                if club_column in changes
            }
            if not admin_changes:
                return
            admin_id = await self._admin_id(connection, current["email"])
            if admin_id is None:
                LOGGER.warning("Club %s has no clubadmin user to update", club_id)
                return
            await self.users.update_with(connection, admin_id, admin_changes)
        LOGGER.debug("Updated club %s and its admin user", club_id)
