from datetime import date, datetime, timedelta

import pytest

from app.core.exceptions import InvalidPeriodError
from app.models.budget import BudgetPeriod
from app.services.budget_periods import (
    compute_end_date,
    parse_period,
    period_title,
    window_key,
    windows_intersect,
)


@pytest.mark.parametrize(
    "start, expected",
    [
        (date(2024, 2, 1), date(2024, 2, 29)),
        (date(2023, 2, 1), date(2023, 2, 28)),
        (date(2025, 2, 5), date(2025, 2, 28)),
        (date(2025, 3, 10), date(2025, 3, 31)),
        (date(2025, 4, 15), date(2025, 4, 30)),
        (date(2025, 12, 31), date(2025, 12, 31)),
        (date(2000, 2, 29), date(2000, 2, 29)),
    ],
)
def test_monthly_end_date_is_last_day_of_month(start, expected):
    assert compute_end_date(start, BudgetPeriod.MONTHLY) == expected


def test_monthly_end_date_for_every_day_of_leap_and_common_year():
    day = date(2023, 1, 1)
    while day.year < 2025:
        end = compute_end_date(day, "monthly")
        assert end.year == day.year
        assert end.month == day.month
        assert end >= day
        assert (end + timedelta(days=1)).day == 1
        day += timedelta(days=1)


@pytest.mark.parametrize(
    "start",
    [date(2025, 1, 1), date(2025, 6, 15), date(2024, 2, 29), date(2025, 12, 31)],
)
def test_yearly_end_date_is_december_31(start):
    assert compute_end_date(start, BudgetPeriod.YEARLY) == date(start.year, 12, 31)


def test_end_date_is_idempotent():
    for period in BudgetPeriod:
        end = compute_end_date(date(2024, 2, 10), period)
        assert compute_end_date(end, period) == end


def test_datetime_input_uses_calendar_date():
    late_evening = datetime(2025, 1, 31, 23, 59, 59)
    assert compute_end_date(late_evening, "monthly") == date(2025, 1, 31)


def test_parse_period_accepts_enum_and_strings():
    assert parse_period(BudgetPeriod.YEARLY) is BudgetPeriod.YEARLY
    assert parse_period("monthly") is BudgetPeriod.MONTHLY
    assert parse_period(" Yearly ") is BudgetPeriod.YEARLY


@pytest.mark.parametrize("value", ["weekly", "", None, 12])
def test_parse_period_rejects_unknown_values(value):
    with pytest.raises(InvalidPeriodError) as exc:
        parse_period(value)
    assert exc.value.error_code == "invalid_period"


def test_period_title_and_window_key():
    assert period_title("monthly", date(2025, 3, 10)) == "March 2025"
    assert period_title("yearly", date(2025, 3, 10)) == "2025"
    assert window_key("monthly", date(2025, 3, 10)) == "2025-03"
    assert window_key("yearly", date(2025, 3, 10)) == "2025"


def test_windows_intersect_is_inclusive():
    march = (date(2025, 3, 1), date(2025, 3, 31))
    assert windows_intersect(*march, date(2025, 3, 31), date(2025, 4, 30))
    assert windows_intersect(*march, date(2025, 3, 10), date(2025, 3, 31))
    assert not windows_intersect(*march, date(2025, 4, 1), date(2025, 4, 30))
