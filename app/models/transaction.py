from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Numeric, Boolean, Uuid, Enum as SQLEnum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base


class TransactionTypeEnum(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Transaction(Base):
    """Recorded financial activity. Read-only from the budgets side."""
    __tablename__ = "transactions"
    __table_args__ = (
        # Matches the spend lookup: user + category + date window
        Index("idx_transactions_user_category_date", "user_id", "category_id", "date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    type = Column(
        SQLEnum(TransactionTypeEnum, name="transactiontypeenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    category = relationship("Category")
