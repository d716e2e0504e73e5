from sqlalchemy import Column, String, DateTime, Boolean, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base


class CategoryTypeEnum(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Category(Base):
    """Expense/income category. Managed elsewhere; budgets only read it."""
    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=True, index=True)  # Nullable for default categories
    name = Column(String, nullable=False)
    type = Column(
        SQLEnum(CategoryTypeEnum, name="categorytypeenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CategoryTypeEnum.EXPENSE,
    )
    is_default = Column(Boolean, default=False)  # Shared with every user
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def is_visible_to(self, user_id) -> bool:
        return bool(self.is_default) or self.user_id == user_id
