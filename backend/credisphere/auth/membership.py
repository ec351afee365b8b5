"""Membership records and the expiry check run on every member request."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import aiosqlite

from credisphere.common import ResourceQueries

from .queries import UserQueries

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)

HO = "HO"
VENUE = "Venue"


class MemberQueries(ResourceQueries):
    """Repository for member records linked one-to-one with users."""

    RESOURCE = "Member"
    TABLE = "members"
    COLUMNS = ("user_id", "name", "ho_expiry_date", "venue_expiry_date")

    CREATE_MEMBERS_TABLE = """
        CREATE TABLE IF NOT EXISTS members (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL UNIQUE REFERENCES users (id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            ho_expiry_date TEXT,
            venue_expiry_date TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    CREATE_STATEMENTS = (CREATE_MEMBERS_TABLE,)

    GET_MEMBER_BY_USER = """
        SELECT * FROM members WHERE user_id = ?;
        """

    async def get_by_user(self, user_id: int) -> aiosqlite.Row | None:
        return await self.database.fetch_one(MemberQueries.GET_MEMBER_BY_USER, (user_id,))


@dataclass
class MembershipExpiry:
    """Expiry details attached to member requests."""

    ho_expired: bool
    venue_expired: bool
    earlier_expiry_date: str | None
    expiry_type: str | None
    member_id: int


@dataclass
class MembershipStatus:
    active: bool
    expiry: MembershipExpiry | None = None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


async def check_membership_expiry(
    members: MemberQueries,
    users: UserQueries,
    user_id: int,
    now: datetime | None = None,
) -> MembershipStatus:
    """Compare the member's HO and venue expiry dates against now.

    When either date has passed the user's ``active`` flag is persisted as
    False. Any unexpected error is logged and the member is treated as
    active.

    :param members: Member repository
    :param users: User repository, used to deactivate expired members
    :param user_id: Id of the authenticated user
    :param now: Reference time, defaults to the current UTC time
    :return: Active flag and expiry details (None without a member record)
    """
    now = now or datetime.now(UTC)
    try:
        member = await members.get_by_user(user_id)
        if member is None:
            return MembershipStatus(active=True)

        ho_date = _parse_timestamp(member["ho_expiry_date"])
        venue_date = _parse_timestamp(member["venue_expiry_date"])
        ho_expired = ho_date is not None and ho_date < now
        venue_expired = venue_date is not None and venue_date < now

        earlier_date, expiry_type = None, None
        if ho_date and venue_date:
            if ho_date < venue_date:
                earlier_date, expiry_type = member["ho_expiry_date"], HO
            else:
                earlier_date, expiry_type = member["venue_expiry_date"], VENUE
        elif ho_date:
            earlier_date, expiry_type = member["ho_expiry_date"], HO
        elif venue_date:
            earlier_date, expiry_type = member["venue_expiry_date"], VENUE

        active = not (ho_expired or venue_expired)
        if not active:
            LOGGER.info("Membership of user %s has expired (%s)", user_id, expiry_type)
            await users.set_active(user_id, False)

        return MembershipStatus(
            active=active,
            expiry=MembershipExpiry(
                ho_expired=ho_expired,
                venue_expired=venue_expired,
                earlier_expiry_date=earlier_date,
                expiry_type=expiry_type,
                member_id=member["id"],
            ),
        )
    except Exception:
        LOGGER.exception("Error checking membership expiry for user %s", user_id)
        return MembershipStatus(active=True)
