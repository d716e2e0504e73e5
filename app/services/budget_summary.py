from decimal import Decimal
from typing import Iterable

from app.models.budget import BudgetPeriod
from app.schemas.budget import BudgetStatus, BudgetView, PortfolioSummary
from app.services.transaction_store import CENT


def build_summary(views: Iterable[BudgetView], period: BudgetPeriod) -> PortfolioSummary:
    """
    Fold classified budgets into portfolio totals.

    ``total_remaining`` adds the clamped remaining of each budget, so an
    overspent budget contributes zero rather than a negative amount.
    """
    total_budgeted = Decimal("0")
    total_spent = Decimal("0")
    total_remaining = Decimal("0")
    counts = {status: 0 for status in BudgetStatus}

    budget_count = 0
    for view in views:
        budget_count += 1
        total_budgeted += view.amount
        total_spent += view.spent
        total_remaining += max(Decimal("0"), view.remaining)
        counts[view.status] += 1

    return PortfolioSummary(
        period=period,
        total_budgeted=total_budgeted.quantize(CENT),
        total_spent=total_spent.quantize(CENT),
        total_remaining=total_remaining.quantize(CENT),
        budget_count=budget_count,
        over_budget_count=counts[BudgetStatus.OVER],
        warning_count=counts[BudgetStatus.WARNING],
        good_count=counts[BudgetStatus.GOOD],
    )
