from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
import enum
import uuid

from app.models.budget import BudgetPeriod


class BudgetStatus(str, enum.Enum):
    GOOD = "good"
    WARNING = "warning"
    OVER = "over"


class BudgetCandidate(BaseModel):
    """Fields that decide a budget's window and whether it collides with another"""
    category_id: uuid.UUID
    period: str = BudgetPeriod.MONTHLY.value  # Parsed by the service so bad values map to InvalidPeriodError
    start_date: date
    amount: Optional[Decimal] = None


class BudgetBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category_id: uuid.UUID
    amount: Decimal
    period: str = BudgetPeriod.MONTHLY.value
    start_date: date
    alert_threshold: Optional[int] = Field(None, ge=0, le=100)  # Falls back to the configured default
    notes: Optional[str] = Field(None, max_length=500)


class BudgetCreate(BudgetBase):
    pass


class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category_id: Optional[uuid.UUID] = None
    amount: Optional[Decimal] = None
    period: Optional[str] = None
    start_date: Optional[date] = None
    alert_threshold: Optional[int] = Field(None, ge=0, le=100)
    notes: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class Budget(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: uuid.UUID
    name: str
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: date
    alert_threshold: int
    is_active: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BudgetView(Budget):
    """Stored budget plus spend figures computed at read time. Never persisted."""
    spent: Decimal
    remaining: Decimal
    percentage_used: int
    is_over_budget: bool
    is_near_limit: bool
    status: BudgetStatus
    transaction_count: int
    period_title: str


class PortfolioSummary(BaseModel):
    period: BudgetPeriod
    total_budgeted: Decimal = Decimal("0.00")
    total_spent: Decimal = Decimal("0.00")
    total_remaining: Decimal = Decimal("0.00")
    budget_count: int = 0
    over_budget_count: int = 0
    warning_count: int = 0
    good_count: int = 0


class BoundaryResult(BaseModel):
    start_date: date
    end_date: date
    period_title: str


class BudgetUpdates(BaseModel):
    has_updates: bool
    version: int


class CategoryDeactivationResult(BaseModel):
    message: str
    modified_count: int
