"""All queries related to user accounts.

Using the UserQueries class as a repository for authentication and
user management queries.
"""

import logging

import aiosqlite

from credisphere.common import RecordNotFoundError, ResourceQueries, User, utc_now

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


def user_from_row(row: aiosqlite.Row) -> User:
    return User(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        role=row["role"],
        active=bool(row["active"]),
        last_login=row["last_login"],
    )


class UserQueries(ResourceQueries):
    """Repository for user accounts."""

    RESOURCE = "User"
    TABLE = "users"
    COLUMNS = ("name", "email", "password", "role", "active", "last_login")

    CREATE_USERS_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE COLLATE NOCASE,
            password TEXT NOT NULL,
            role TEXT NOT NULL,
            active INTEGER NOT NULL DEFAULT 1,
            last_login TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_USERS_TABLE,)

    SEARCH_COLUMNS = ("name", "email")
    SORT_COLUMNS = {
        "id": "id",
        "name": "name",
        "email": "email",
        "role": "role",
        "active": "active",
        "lastLogin": "last_login",
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }
    DEFAULT_SORT = "id"

    COUNT_USERS = """SELECT COUNT(*) FROM users;"""

    GET_USER_BY_EMAIL = """
        SELECT * FROM users WHERE email = ?;
        """

    SET_ACTIVE = """
        UPDATE users SET active = ?, updated_at = ? WHERE id = ?;
        """

    SET_LAST_LOGIN = """
        UPDATE users SET last_login = ?, updated_at = ? WHERE id = ?;
        """

    async def count_users(self) -> int:
        """Return the number of users in the users table."""
        return await self.database.fetch_value(UserQueries.COUNT_USERS) or 0

    async def get_user(self, user_id: int) -> User | None:
        row = await self.get(user_id)
        return user_from_row(row) if row else None

    async def get_by_email(self, email: str) -> aiosqlite.Row | None:
        """Return the full row, password hash included, for a login attempt.

        :param email: Email address, matched case-insensitively
        :return: The user row or None
        """
        return await self.database.fetch_one(UserQueries.GET_USER_BY_EMAIL, (email,))

    async def create_user(
        self,
        name: str,
        email: str,
        hashed_password: str,
        role: str,
        *,
        active: bool = True,
    ) -> int:
        return await self.insert(
            {
                "name": name,
                "email": email,
                "password": hashed_password,
                "role": role,
                "active": active,
            },
        )

    async def set_active(self, user_id: int, active: bool) -> None:  # noqa: FBT001
        async with self.database.transaction() as connection:
            async with connection.execute(
                UserQueries.SET_ACTIVE,
                (active, utc_now(), user_id),
            ) as cursor:
                if cursor.rowcount == 0:
                    raise RecordNotFoundError(self.RESOURCE, user_id)
        LOGGER.info("User %s marked %s", user_id, "active" if active else "inactive")

    async def record_login(self, user_id: int) -> str:
        """Stamp the user's last login time.

        :return: The stored timestamp
        """
        now = utc_now()
        async with self.database.transaction() as connection:
            await connection.execute(UserQueries.SET_LAST_LOGIN, (now, now, user_id))
        return now
