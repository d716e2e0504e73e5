from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Numeric, Integer, Boolean, Uuid, Index, CheckConstraint, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base


class BudgetPeriod(str, enum.Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_budgets_amount_positive"),
        CheckConstraint("end_date >= start_date", name="ck_budgets_window_order"),
        CheckConstraint("alert_threshold BETWEEN 0 AND 100", name="ck_budgets_alert_threshold"),
        Index("idx_budgets_user_period_start", "user_id", "period", "start_date"),
        Index("idx_budgets_user_category_active", "user_id", "category_id", "is_active"),
        # end_date is derived from (start_date, period), so two active windows of the
        # same period intersect exactly when they share an end_date.
        Index(
            "uq_budgets_active_window",
            "user_id", "category_id", "period", "end_date",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active = true"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False)
    name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    period = Column(
        SQLEnum(BudgetPeriod, name="budgetperiod", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BudgetPeriod.MONTHLY,
    )
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # Derived from start_date + period
    alert_threshold = Column(Integer, nullable=False, default=80)
    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    category = relationship("Category")
