"""Date Helpers - report date defaults and ranges, always relative to an explicit "today".

Invariants:
    - No function reads the clock implicitly except utcnow()
    - Ranges are inclusive on both ends
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator

from sis.core.errors import InvalidRequestError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def default_daily_date(requested: date | None, today: date) -> date:
    """Daily reports default to yesterday: today's attendance is still being taken."""
    return requested or today - timedelta(days=1)


def default_range(
    start: date | None, end: date | None, today: date,
) -> tuple[date, date]:
    """Missing bounds default to first-of-month → today, then validated."""
    start = start or today.replace(day=1)
    end = end or today
    validate_range(start, end)
    return start, end


def validate_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidRequestError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}",
            field="start_date",
        )


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_count(start: date, end: date) -> int:
    return (end - start).days + 1
