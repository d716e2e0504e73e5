# Import all models here for Alembic
from app.models.category import Category, CategoryTypeEnum
from app.models.transaction import Transaction, TransactionTypeEnum
from app.models.budget import Budget, BudgetPeriod

__all__ = [
    "Category",
    "CategoryTypeEnum",
    "Transaction",
    "TransactionTypeEnum",
    "Budget",
    "BudgetPeriod",
]
