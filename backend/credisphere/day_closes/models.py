from datetime import UTC, date, datetime, time, timedelta
from typing import Annotated

import aiosqlite
from pydantic import AfterValidator, Field

from credisphere.common import CamelModel


def parse_moment(value: str, *, end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime.

    A bare date means midnight UTC, or the last instant of that day when
    ``end_of_day`` is set.

    :raises ValueError: If ``value`` is not ISO formatted
    """
    text = value.strip()
    if len(text) == 10:
        day = date.fromisoformat(text)
        return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=UTC)
    moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def next_day(moment: datetime) -> date:
    """Return the UTC day after ``moment``.

    :raises OverflowError: If that day is past the last representable date
    """
    return moment.astimezone(UTC).date() + timedelta(days=1)


def _check_moment(value: str) -> str:
    try:
        next_day(parse_moment(value))
    except ValueError:
        msg = "Must be a valid date."
        raise ValueError(msg) from None
    except OverflowError:
        msg = "Date is out of range."
        raise ValueError(msg) from None
    return value


Moment = Annotated[str, AfterValidator(_check_moment)]


class DayCloseCreate(CamelModel):
    date: Moment | None = None
    note: str | None = None


class DayCloseUser(CamelModel):
    id: int
    name: str
    email: str


class DayCloseResponse(CamelModel):
    id: int
    closed_at: str
    note: str | None = None
    created_by: int | None = None
    user: DayCloseUser | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_joined_row(cls, row: aiosqlite.Row) -> "DayCloseResponse":
        """Build from a row carrying ``user_name``/``user_email`` columns."""
        data = dict(row)
        user = None
        if data.get("user_name") is not None:
            user = {"id": data["created_by"], "name": data["user_name"], "email": data["user_email"]}
        return cls.model_validate({**data, "user": user})


class LastCloseResponse(CamelModel):
    last_close: DayCloseResponse | None
    message: str | None = None


class DayClosesOnDateResponse(CamelModel):
    items: list[DayCloseResponse] = Field(default_factory=list)
    date: str


class DayCloseCreated(CamelModel):
    closed_at: str
    next_day: str
