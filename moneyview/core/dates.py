"""Calendar helpers for business-timezone bucketing.

Timestamps are stored in UTC. SQLite hands them back naive, so a naive
value read from the database is taken to already be UTC. Naive values
coming *in* from a client are business-local wall-clock times.
"""

import calendar
from datetime import date, datetime, time, timezone
from typing import Annotated
from zoneinfo import ZoneInfo

from pydantic import AfterValidator

UTC = timezone.utc


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


# Response-side timestamp: always serialised with an explicit UTC offset.
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


def to_local(moment: datetime, tz: ZoneInfo) -> datetime:
    return as_utc(moment).astimezone(tz)


def localize(moment: datetime, tz: ZoneInfo) -> datetime:
    """Interpret client input in the business timezone and convert to UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=tz)
    return moment.astimezone(UTC)


def local_day(moment: datetime, tz: ZoneInfo) -> date:
    return to_local(moment, tz).date()


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Inclusive [start, end] of one calendar day, in UTC."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time.max, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def range_bounds(start_day: date, end_day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    start, _ = day_bounds(start_day, tz)
    _, end = day_bounds(end_day, tz)
    return start, end


def month_bounds(year: int, month: int, tz: ZoneInfo) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    return range_bounds(date(year, month, 1), date(year, month, last_day), tz)
