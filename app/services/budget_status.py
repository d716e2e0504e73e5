from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from app.models.budget import Budget
from app.schemas.budget import Budget as BudgetSchema, BudgetStatus, BudgetView
from app.services.budget_periods import period_title
from app.services.transaction_store import CENT, SpendTotals

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class BudgetStatusResult:
    remaining: Decimal
    percentage_used: int
    is_over_budget: bool
    is_near_limit: bool
    status: BudgetStatus


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage_used(amount: Number, spent: Number) -> int:
    """Whole percent of ``amount`` consumed by ``spent``, rounded half up."""
    amount = _to_decimal(amount)
    if amount == 0:
        return 0
    ratio = _to_decimal(spent) / amount * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify(amount: Number, spent: Number, alert_threshold: int) -> BudgetStatusResult:
    """
    Health of a single budget.

    Over budget wins over the alert threshold: an over-budget item is never
    near its limit, and exactly one of good/warning/over applies.
    """
    amount = _to_decimal(amount)
    spent = _to_decimal(spent)

    balance = amount - spent
    used = percentage_used(amount, spent)
    is_over_budget = spent > amount
    is_near_limit = used >= alert_threshold and used < 100

    if is_over_budget:
        status = BudgetStatus.OVER
    elif is_near_limit:
        status = BudgetStatus.WARNING
    else:
        status = BudgetStatus.GOOD

    return BudgetStatusResult(
        remaining=max(Decimal("0"), balance).quantize(CENT),
        percentage_used=used,
        is_over_budget=is_over_budget,
        is_near_limit=is_near_limit,
        status=status,
    )


def build_budget_view(budget: Budget, totals: SpendTotals) -> BudgetView:
    """Attach freshly computed spend and status to a stored budget"""
    result = classify(budget.amount, totals.total, budget.alert_threshold)
    stored = BudgetSchema.model_validate(budget)
    return BudgetView(
        **stored.model_dump(),
        spent=totals.total,
        remaining=result.remaining,
        percentage_used=result.percentage_used,
        is_over_budget=result.is_over_budget,
        is_near_limit=result.is_near_limit,
        status=result.status,
        transaction_count=totals.count,
        period_title=period_title(budget.period, budget.start_date),
    )
