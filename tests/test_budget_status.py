from datetime import date
from decimal import Decimal
from itertools import product

import pytest

from app.models.budget import BudgetPeriod
from app.schemas.budget import BudgetStatus
from app.services.budget_status import build_budget_view, classify, percentage_used
from app.services.transaction_store import SpendTotals


def test_spending_at_threshold_is_warning():
    result = classify(Decimal("600.00"), Decimal("480.00"), 80)
    assert result.percentage_used == 80
    assert result.status is BudgetStatus.WARNING
    assert result.is_near_limit is True
    assert result.is_over_budget is False
    assert result.remaining == Decimal("120.00")


def test_overspent_budget_is_over_with_zero_remaining():
    result = classify(Decimal("600.00"), Decimal("650.00"), 80)
    assert result.remaining == Decimal("0.00")
    assert result.is_over_budget is True
    assert result.is_near_limit is False
    assert result.status is BudgetStatus.OVER
    assert result.percentage_used == 108


def test_below_threshold_is_good():
    result = classify(Decimal("600.00"), Decimal("100.00"), 80)
    assert result.status is BudgetStatus.GOOD
    assert result.percentage_used == 17


def test_percentage_rounds_half_up():
    # 477 / 600 = 79.5 %
    assert percentage_used(Decimal("600"), Decimal("477")) == 80
    assert classify(Decimal("600"), Decimal("477"), 80).status is BudgetStatus.WARNING
    assert percentage_used(Decimal("600"), Decimal("476.99")) == 79
    assert classify(Decimal("600"), Decimal("476.99"), 80).status is BudgetStatus.GOOD


def test_zero_amount_reports_zero_percent():
    assert percentage_used(0, Decimal("10")) == 0


def test_fully_spent_budget_is_not_near_limit():
    # 100 % used is outside the near-limit band and not over budget
    result = classify(Decimal("600.00"), Decimal("600.00"), 80)
    assert result.percentage_used == 100
    assert result.is_over_budget is False
    assert result.is_near_limit is False
    assert result.status is BudgetStatus.GOOD


def test_accepts_floats_and_strings():
    assert classify(600, "480", 80).status is BudgetStatus.WARNING


def test_classification_is_a_partition():
    amounts = [Decimal("0.01"), Decimal("50"), Decimal("600.00")]
    spends = [Decimal("0"), Decimal("0.01"), Decimal("40"), Decimal("49.99"), Decimal("50"), Decimal("599.99"),
              Decimal("600"), Decimal("600.01"), Decimal("1000")]
    thresholds = [0, 50, 80, 100]
    for amount, spent, threshold in product(amounts, spends, thresholds):
        result = classify(amount, spent, threshold)
        flags = [
            result.status is BudgetStatus.GOOD,
            result.status is BudgetStatus.WARNING,
            result.status is BudgetStatus.OVER,
        ]
        assert flags.count(True) == 1
        assert (result.status is BudgetStatus.OVER) == (spent > amount)
        assert not (result.is_over_budget and result.is_near_limit)
        assert result.remaining >= 0


def test_build_budget_view_attaches_derived_fields(unsaved_budget):
    budget = unsaved_budget(amount="600.00", start_date=date(2025, 3, 1))
    view = build_budget_view(budget, SpendTotals(total=Decimal("480.00"), count=3))

    assert view.id == budget.id
    assert view.end_date == date(2025, 3, 31)
    assert view.spent == Decimal("480.00")
    assert view.remaining == Decimal("120.00")
    assert view.percentage_used == 80
    assert view.status is BudgetStatus.WARNING
    assert view.transaction_count == 3
    assert view.period_title == "March 2025"


def test_build_budget_view_without_spend(unsaved_budget):
    budget = unsaved_budget(period=BudgetPeriod.YEARLY, start_date=date(2025, 1, 1))
    view = build_budget_view(budget, SpendTotals())

    assert view.spent == Decimal("0.00")
    assert view.transaction_count == 0
    assert view.status is BudgetStatus.GOOD
    assert view.period_title == "2025"
    assert view.remaining == Decimal("600.00")


@pytest.mark.parametrize("threshold, expected", [(0, BudgetStatus.WARNING), (100, BudgetStatus.GOOD)])
def test_threshold_bounds(threshold, expected):
    assert classify(Decimal("100"), Decimal("0"), threshold).status is expected
