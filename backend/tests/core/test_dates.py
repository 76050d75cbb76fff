"""Date helper tests - daily default, range defaults and validation."""

from datetime import date, datetime, timezone

import pytest

from sis.core.dates import as_utc, day_count, default_daily_date, default_range, iter_days
from sis.core.errors import InvalidRequestError


def test_daily_defaults_to_yesterday():
    assert default_daily_date(None, date(2026, 3, 1)) == date(2026, 2, 28)
    assert default_daily_date(date(2026, 1, 5), date(2026, 3, 1)) == date(2026, 1, 5)


def test_range_defaults_to_month_to_date():
    assert default_range(None, None, date(2026, 10, 19)) == (date(2026, 10, 1), date(2026, 10, 19))


def test_range_rejects_reversed_bounds():
    with pytest.raises(InvalidRequestError) as exc:
        default_range(date(2026, 10, 5), date(2026, 10, 1), date(2026, 10, 19))
    assert exc.value.http_status == 400


def test_iter_days_inclusive():
    days = list(iter_days(date(2026, 2, 27), date(2026, 3, 2)))
    assert len(days) == day_count(date(2026, 2, 27), date(2026, 3, 2)) == 4


def test_as_utc_attaches_timezone_to_naive():
    naive = datetime(2026, 1, 1, 12, 0)
    assert as_utc(naive).tzinfo == timezone.utc
    assert as_utc(None) is None
