from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
import logging
import uuid

from app.core.config import settings
from app.core.exceptions import BudgetOverlapError
from app.models.budget import Budget, BudgetPeriod
from app.services.budget_periods import window_key

logger = logging.getLogger(__name__)

SAME_PERIOD = "same_period"
ANY_PERIOD = "any_period"
OVERLAP_POLICIES = {SAME_PERIOD, ANY_PERIOD}


class BudgetOverlapValidator:
    """Checks a candidate window against the user's other active budgets."""

    def __init__(self, db: Session, policy: Optional[str] = None):
        self.db = db
        self.policy = policy or settings.BUDGET_OVERLAP_POLICY
        if self.policy not in OVERLAP_POLICIES:
            raise ValueError(f"Unknown budget overlap policy: {self.policy}")

    def find_conflict(
        self,
        user_id: uuid.UUID,
        category_id: uuid.UUID,
        period: BudgetPeriod,
        start_date: date,
        end_date: date,
        exclude_budget_id: Optional[uuid.UUID] = None,
    ) -> Optional[Budget]:
        """Return the first active budget that blocks the candidate window, if any"""
        query = self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.category_id == category_id,
            Budget.is_active == True,
            Budget.start_date <= end_date,
            Budget.end_date >= start_date,
        )
        if self.policy == SAME_PERIOD:
            query = query.filter(Budget.period == period)
        if exclude_budget_id is not None:
            query = query.filter(Budget.id != exclude_budget_id)

        return query.order_by(Budget.start_date).first()

    def ensure_no_overlap(
        self,
        user_id: uuid.UUID,
        category_id: uuid.UUID,
        period: BudgetPeriod,
        start_date: date,
        end_date: date,
        exclude_budget_id: Optional[uuid.UUID] = None,
    ) -> None:
        conflict = self.find_conflict(
            user_id, category_id, period, start_date, end_date, exclude_budget_id
        )
        if conflict is None:
            return

        logger.info(
            f"Budget overlap for user {user_id} category {category_id}: "
            f"{period.value} {start_date}..{end_date} blocked by {conflict.id}"
        )
        raise overlap_error_for(conflict)


def overlap_error_for(budget: Budget) -> BudgetOverlapError:
    return BudgetOverlapError(
        blocking_budget_id=budget.id,
        blocking_period=budget.period.value,
        blocking_window=window_key(budget.period, budget.start_date),
    )
