from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import logging
import uuid

from app.core.exceptions import AggregationFailureError
from app.models.transaction import Transaction, TransactionTypeEnum

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class SpendTotals:
    total: Decimal = Decimal("0.00")
    count: int = 0


class SqlTransactionStore:
    """
    Read side of the transaction table used by budget aggregation.

    Every query runs in its own short-lived session so the aggregator can
    fan queries out to worker threads without sharing a Session.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @classmethod
    def from_session(cls, db: Session) -> "SqlTransactionStore":
        return cls(sessionmaker(autocommit=False, autoflush=False, bind=db.get_bind()))

    def sum_expenses_by_category_and_window(
        self,
        user_id: uuid.UUID,
        category_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> SpendTotals:
        """Sum and count active expense transactions dated within [start_date, end_date]"""
        try:
            with self.session_factory() as session:
                total, count = session.query(
                    func.coalesce(func.sum(Transaction.amount), 0),
                    func.count(Transaction.id),
                ).filter(
                    Transaction.user_id == user_id,
                    Transaction.category_id == category_id,
                    Transaction.type == TransactionTypeEnum.EXPENSE,
                    Transaction.is_active == True,
                    Transaction.date >= start_date,
                    Transaction.date <= end_date,
                ).one()
        except SQLAlchemyError as e:
            logger.error(f"Spend query failed for user {user_id} category {category_id}: {e}")
            raise AggregationFailureError(
                "Could not compute budget spending, please retry",
                details=str(e),
            ) from e

        return SpendTotals(total=Decimal(str(total)).quantize(CENT), count=int(count or 0))
