from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional
import logging
import uuid

from app.core.config import settings
from app.core.exceptions import (
    BudgetNotFoundError,
    BudgetReactivationError,
    InvalidAmountError,
    InvalidCategoryError,
    ValidationError,
)
from app.models.budget import Budget, BudgetPeriod
from app.models.category import Category, CategoryTypeEnum
from app.schemas.budget import (
    BoundaryResult,
    BudgetCandidate,
    BudgetCreate,
    BudgetUpdate,
    BudgetView,
    PortfolioSummary,
)
from app.services.budget_overlap import BudgetOverlapValidator, overlap_error_for
from app.services.budget_periods import compute_end_date, parse_period, period_title, PeriodLike
from app.services.budget_status import build_budget_view
from app.services.budget_summary import build_summary
from app.services.spend_aggregator import SpendAggregator, TransactionStore
from app.services.transaction_store import CENT, SqlTransactionStore
from app.services.update_tracker import UpdateTracker
from app.utils.audit import audit

logger = logging.getLogger(__name__)

MAX_BUDGET_AMOUNT = Decimal("999999999.99")


def validate_amount(amount) -> Decimal:
    """Return ``amount`` as a 2-decimal Decimal or raise InvalidAmountError"""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError("Budget amount must be a number", details=f"received {amount!r}")

    if not value.is_finite():
        raise InvalidAmountError("Budget amount must be a number", details=f"received {amount!r}")
    if value <= 0:
        raise InvalidAmountError("Budget amount must be greater than 0")
    if value > MAX_BUDGET_AMOUNT:
        raise InvalidAmountError("Budget amount is too large")
    if value != value.quantize(CENT):
        raise InvalidAmountError("Budget amount can have at most 2 decimal places")
    return value.quantize(CENT)


def validate_alert_threshold(threshold) -> int:
    if isinstance(threshold, bool) or not isinstance(threshold, int):
        raise ValidationError("Alert threshold must be a whole number", error_code="invalid_alert_threshold")
    if threshold < 0 or threshold > 100:
        raise ValidationError("Alert threshold must be between 0 and 100", error_code="invalid_alert_threshold")
    return threshold


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Budget name is required", error_code="invalid_name")
    return cleaned


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    return notes.strip() or None


class BudgetService:
    """
    Budget lifecycle and read-time spend reporting for one request.

    Writes derive the window from (start_date, period) and check it against
    the user's other active budgets. Reads recompute spend and status from
    the transaction store every time; nothing derived is written back.
    """

    def __init__(
        self,
        db: Session,
        store: Optional[TransactionStore] = None,
        tracker: Optional[UpdateTracker] = None,
        overlap_policy: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        self.db = db
        self.overlap = BudgetOverlapValidator(db, overlap_policy)
        self.aggregator = SpendAggregator(store or SqlTransactionStore.from_session(db), max_workers)
        self.tracker = tracker

    # --- Validation ---

    def validate_and_derive_boundaries(
        self,
        user_id: uuid.UUID,
        candidate: BudgetCandidate,
        budget_id: Optional[uuid.UUID] = None,
    ) -> BoundaryResult:
        """
        Validate a candidate window and return its derived boundaries.

        Raises InvalidPeriodError, InvalidAmountError, InvalidCategoryError or
        BudgetOverlapError. ``budget_id`` excludes the budget being edited.
        """
        period = parse_period(candidate.period)
        if candidate.amount is not None:
            validate_amount(candidate.amount)
        self._get_expense_category(user_id, candidate.category_id)

        end_date = compute_end_date(candidate.start_date, period)
        self.overlap.ensure_no_overlap(
            user_id, candidate.category_id, period, candidate.start_date, end_date, budget_id
        )
        return BoundaryResult(
            start_date=candidate.start_date,
            end_date=end_date,
            period_title=period_title(period, candidate.start_date),
        )

    def _get_expense_category(self, user_id: uuid.UUID, category_id: uuid.UUID) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if (
            category is None
            or not category.is_active
            or category.type != CategoryTypeEnum.EXPENSE
            or not category.is_visible_to(user_id)
        ):
            raise InvalidCategoryError("Invalid expense category", details=f"category_id={category_id}")
        return category

    # --- Budget store ---

    def get_budget(self, user_id: uuid.UUID, budget_id: uuid.UUID) -> Budget:
        budget = self.db.query(Budget).filter(
            Budget.id == budget_id,
            Budget.user_id == user_id
        ).first()

        if not budget:
            raise BudgetNotFoundError(budget_id)
        return budget

    def create_budget(self, user_id: uuid.UUID, budget_create: BudgetCreate) -> Budget:
        amount = validate_amount(budget_create.amount)
        name = _clean_name(budget_create.name)
        threshold = budget_create.alert_threshold
        if threshold is None:
            threshold = settings.BUDGET_DEFAULT_ALERT_THRESHOLD
        threshold = validate_alert_threshold(threshold)

        boundaries = self.validate_and_derive_boundaries(
            user_id,
            BudgetCandidate(
                category_id=budget_create.category_id,
                period=budget_create.period,
                start_date=budget_create.start_date,
            ),
        )

        budget = Budget(
            user_id=user_id,
            category_id=budget_create.category_id,
            name=name,
            amount=amount,
            period=parse_period(budget_create.period),
            start_date=boundaries.start_date,
            end_date=boundaries.end_date,
            alert_threshold=threshold,
            notes=_clean_notes(budget_create.notes),
            is_active=True,
        )
        self.db.add(budget)
        self._commit_window(user_id, budget.category_id, budget.period, budget.start_date, budget.end_date)
        self.db.refresh(budget)

        logger.info(f"Created {budget.period.value} budget {budget.id} for user {user_id} ({budget.start_date}..{budget.end_date})")
        audit(
            "budget.created",
            user_id=user_id,
            budget_id=budget.id,
            category_id=budget.category_id,
            period=budget.period.value,
            amount=budget.amount,
            start_date=budget.start_date,
            end_date=budget.end_date,
        )
        self._touch(user_id)
        return budget

    def update_budget(self, user_id: uuid.UUID, budget_id: uuid.UUID, budget_update: BudgetUpdate) -> Budget:
        budget = self.get_budget(user_id, budget_id)
        update_data = budget_update.model_dump(exclude_unset=True)

        if update_data.get("is_active") is True and not budget.is_active:
            raise BudgetReactivationError("Deactivated budgets cannot be reactivated; create a new budget instead")

        # Only notes can be cleared; None for any other field means "leave as is"
        changes = {
            field: value for field, value in update_data.items()
            if value is not None or field == "notes"
        }

        period = parse_period(changes.get("period", budget.period))
        start_date: date = changes.get("start_date", budget.start_date)
        category_id = changes.get("category_id", budget.category_id)
        stays_active = budget.is_active and changes.get("is_active", True)

        window_changed = (
            period != budget.period
            or start_date != budget.start_date
            or category_id != budget.category_id
        )
        if "category_id" in changes and category_id != budget.category_id:
            self._get_expense_category(user_id, category_id)

        amount = validate_amount(changes["amount"]) if "amount" in changes else budget.amount
        name = _clean_name(changes["name"]) if "name" in changes else budget.name
        threshold = (
            validate_alert_threshold(changes["alert_threshold"])
            if "alert_threshold" in changes else budget.alert_threshold
        )

        end_date = compute_end_date(start_date, period) if window_changed else budget.end_date
        if window_changed and stays_active:
            self.overlap.ensure_no_overlap(user_id, category_id, period, start_date, end_date, budget.id)

        budget.amount = amount
        budget.name = name
        budget.alert_threshold = threshold
        if "notes" in changes:
            budget.notes = _clean_notes(changes["notes"])
        if changes.get("is_active") is False:
            budget.is_active = False

        budget.period = period
        budget.start_date = start_date
        budget.end_date = end_date
        budget.category_id = category_id

        self._commit_window(user_id, category_id, period, start_date, end_date, budget.id)
        self.db.refresh(budget)

        logger.info(f"Updated budget {budget.id} for user {user_id}: {sorted(changes)}")
        audit("budget.updated", user_id=user_id, budget_id=budget.id, fields=",".join(sorted(changes)))
        self._touch(user_id)
        return budget

    def deactivate_budget(self, user_id: uuid.UUID, budget_id: uuid.UUID) -> Budget:
        """Soft delete: budgets are kept for past-period reporting"""
        budget = self.get_budget(user_id, budget_id)
        if not budget.is_active:
            return budget

        budget.is_active = False
        self.db.commit()
        self.db.refresh(budget)

        logger.info(f"Deactivated budget {budget.id} for user {user_id}")
        audit("budget.deactivated", user_id=user_id, budget_id=budget.id)
        self._touch(user_id)
        return budget

    def deactivate_category_budgets(self, user_id: uuid.UUID, category_id: uuid.UUID) -> int:
        """Deactivate every active budget of one category; returns how many changed"""
        modified = self.db.query(Budget).filter(
            Budget.user_id == user_id,
            Budget.category_id == category_id,
            Budget.is_active == True,
        ).update({Budget.is_active: False}, synchronize_session=False)
        self.db.commit()

        if modified:
            logger.info(f"Deactivated {modified} budgets of category {category_id} for user {user_id}")
            audit("budget.category_cleared", user_id=user_id, category_id=category_id, modified_count=modified)
            self._touch(user_id)
        return modified

    # --- Reads ---

    def get_budget_with_spend(self, user_id: uuid.UUID, budget_id: uuid.UUID) -> BudgetView:
        budget = self.get_budget(user_id, budget_id)
        return build_budget_view(budget, self.aggregator.aggregate(budget))

    def list_budgets_with_spend(
        self,
        user_id: uuid.UUID,
        period: Optional[PeriodLike] = None,
        include_inactive: bool = False,
    ) -> List[BudgetView]:
        """Budgets of a user, newest first, each with spend and status attached"""
        query = self.db.query(Budget).filter(Budget.user_id == user_id)
        if not include_inactive:
            query = query.filter(Budget.is_active == True)
        if period is not None:
            query = query.filter(Budget.period == parse_period(period))

        budgets = query.order_by(Budget.created_at.desc(), Budget.start_date.desc()).all()
        totals = self.aggregator.aggregate_many(budgets)
        return [build_budget_view(budget, totals[budget.id]) for budget in budgets]

    def get_summary(self, user_id: uuid.UUID, period: PeriodLike = BudgetPeriod.MONTHLY) -> PortfolioSummary:
        period = parse_period(period)
        views = self.list_budgets_with_spend(user_id, period=period, include_inactive=False)
        return build_summary(views, period)

    # --- Helpers ---

    def _commit_window(
        self,
        user_id: uuid.UUID,
        category_id: uuid.UUID,
        period: BudgetPeriod,
        start_date: date,
        end_date: date,
        budget_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Commit, turning a lost race on the active-window unique index into an overlap error"""
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            conflict = self.overlap.find_conflict(user_id, category_id, period, start_date, end_date, budget_id)
            if conflict is None:
                raise
            logger.warning(f"Concurrent budget write for user {user_id} category {category_id} lost to {conflict.id}")
            raise overlap_error_for(conflict)

    def _touch(self, user_id: uuid.UUID) -> None:
        if self.tracker is not None:
            self.tracker.bump(user_id)
