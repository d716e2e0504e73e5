"""
Budget period boundaries.

All functions work on calendar dates. Datetimes are truncated to their date
component first, so a budget window never shifts by a day because of the
time of day or timezone it was created in.
"""
from datetime import date, datetime
from typing import Union
from dateutil.relativedelta import relativedelta

from app.core.exceptions import InvalidPeriodError
from app.models.budget import BudgetPeriod

PeriodLike = Union[BudgetPeriod, str]


def parse_period(value: PeriodLike) -> BudgetPeriod:
    """Coerce a period enum or its string value, rejecting anything else."""
    if isinstance(value, BudgetPeriod):
        return value
    if isinstance(value, str):
        try:
            return BudgetPeriod(value.strip().lower())
        except ValueError:
            pass
    allowed = ", ".join(p.value for p in BudgetPeriod)
    raise InvalidPeriodError(
        f"Budget period must be one of: {allowed}",
        details=f"received {value!r}",
    )


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def compute_end_date(start_date: Union[date, datetime], period: PeriodLike) -> date:
    """Last day covered by a budget that starts on ``start_date``."""
    start = _as_date(start_date)
    period = parse_period(period)
    if period is BudgetPeriod.MONTHLY:
        # relativedelta clamps day=31 to the month's real last day (leap years included)
        return start + relativedelta(day=31)
    return date(start.year, 12, 31)


def period_title(period: PeriodLike, start_date: Union[date, datetime]) -> str:
    """Display label such as ``"March 2025"`` or ``"2025"``."""
    start = _as_date(start_date)
    if parse_period(period) is BudgetPeriod.MONTHLY:
        return start.strftime("%B %Y")
    return str(start.year)


def window_key(period: PeriodLike, start_date: Union[date, datetime]) -> str:
    """Canonical key of the window: ``"2025-03"`` for monthly, ``"2025"`` for yearly."""
    start = _as_date(start_date)
    if parse_period(period) is BudgetPeriod.MONTHLY:
        return f"{start.year:04d}-{start.month:02d}"
    return f"{start.year:04d}"


def windows_intersect(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive interval intersection test."""
    return start_a <= end_b and end_a >= start_b
