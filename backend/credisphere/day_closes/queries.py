"""Day close repository.

``closed_at`` is stored in the same UTC ISO format as every other
timestamp, so range filters compare as plain strings.
"""

import logging
from datetime import UTC, date, datetime, time, timedelta

import aiosqlite

from credisphere.common import ListParams, ResourceQueries

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


def to_timestamp(moment: datetime) -> str:
    """Render a datetime in the stored format; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds")


def day_bounds(day: date) -> tuple[str, str]:
    """Return the half-open ``[start, end)`` timestamps covering one UTC day.

    :raises OverflowError: If ``day`` is the last representable date
    """
    start = datetime.combine(day, time.min, tzinfo=UTC)
    return to_timestamp(start), to_timestamp(start + timedelta(days=1))


class DayCloseQueries(ResourceQueries):
    """Repository for day close records."""

    RESOURCE = "Day close"
    TABLE = "day_closes"
    COLUMNS = ("closed_at", "note", "created_by")

    CREATE_DAY_CLOSES_TABLE = """
        CREATE TABLE IF NOT EXISTS day_closes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            closed_at TEXT NOT NULL,
            note TEXT,
            created_by INTEGER REFERENCES users (id) ON DELETE SET NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_CLOSED_AT_INDEX = """
        CREATE INDEX IF NOT EXISTS day_closes_closed_at ON day_closes (closed_at);
        """
    CREATE_STATEMENTS = (CREATE_DAY_CLOSES_TABLE, CREATE_CLOSED_AT_INDEX)

    SORT_COLUMNS = {"closedAt": "closed_at"}
    DEFAULT_SORT = "closed_at"

    SELECT_WITH_USER = """
        SELECT d.*, u.name AS user_name, u.email AS user_email
        FROM day_closes d LEFT JOIN users u ON u.id = d.created_by
        """

    GET_LAST = SELECT_WITH_USER + " ORDER BY d.closed_at DESC, d.id DESC LIMIT 1;"

    GET_BETWEEN = (
        SELECT_WITH_USER
        + " WHERE d.closed_at >= ? AND d.closed_at < ? ORDER BY d.closed_at DESC, d.id DESC;"
    )

    def _range_conditions(
        self,
        start: str | None,
        end: str | None,
    ) -> list[tuple[str, list[str]]]:
        conditions = []
        if start is not None:
            conditions.append(("closed_at >= ?", [start]))
        if end is not None:
            conditions.append(("closed_at <= ?", [end]))
        return conditions

    async def list_between(
        self,
        options: ListParams,
        start: str | None,
        end: str | None,
    ) -> tuple[list[aiosqlite.Row], int]:
        """Page through closes, newest first, optionally bounded by timestamps.

        :param options: Parsed list parameters; sorting is fixed
        :param start: Inclusive lower bound
        :param end: Inclusive upper bound
        :return: (rows with ``user_name``/``user_email``, total_count)
        """
        newest_first = ListParams(page=options.page, limit=options.limit, sort_order="desc")
        rows, total_count = await self.list(
            newest_first,
            extra_conditions=self._range_conditions(start, end),
        )
        return await self._with_users(rows), total_count

    async def _with_users(self, rows: list[aiosqlite.Row]) -> list[aiosqlite.Row]:
        if not rows:
            return []
        placeholders = ", ".join("?" for _ in rows)
        joined = await self.database.fetch_all(
            f"{DayCloseQueries.SELECT_WITH_USER} WHERE d.id IN ({placeholders})",  # noqa: S608
            [row["id"] for row in rows],
        )
        by_id = {row["id"]: row for row in joined}
        return [by_id[row["id"]] for row in rows]

    async def last(self) -> aiosqlite.Row | None:
        return await self.database.fetch_one(DayCloseQueries.GET_LAST)

    async def closed_between(self, start: str, end: str) -> list[aiosqlite.Row]:
        """Return every close in ``[start, end)``, newest first."""
        return await self.database.fetch_all(DayCloseQueries.GET_BETWEEN, (start, end))

    async def record(self, closed_at: datetime, user_id: int, note: str | None) -> int:
        close_id = await self.insert(
            {"closed_at": to_timestamp(closed_at), "note": note, "created_by": user_id},
        )
        LOGGER.info(
            "Day closed at %s by user %s",
            to_timestamp(closed_at),
            user_id,
            extra={
                "event": "dayclose.created",
                "day_close_id": close_id,
                "closed_at": to_timestamp(closed_at),
                "created_by": user_id,
            },
        )
        return close_id
