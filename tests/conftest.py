import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.database import Base, build_engine
from app.models import Budget, BudgetPeriod, Category, CategoryTypeEnum, Transaction, TransactionTypeEnum
from app.services.budget_periods import compute_end_date


@pytest.fixture
def engine(tmp_path):
    # File-backed so aggregation worker threads get their own connections
    engine = build_engine(f"sqlite:///{tmp_path / 'budgets_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def make_category(db_session, user_id):
    def _make(name="Groceries", type=CategoryTypeEnum.EXPENSE, owner=None, is_default=False, is_active=True):
        category = Category(
            name=name,
            type=type,
            user_id=owner if owner is not None else (None if is_default else user_id),
            is_default=is_default,
            is_active=is_active,
        )
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category

    return _make


@pytest.fixture
def groceries(make_category):
    return make_category("Groceries")


@pytest.fixture
def add_transaction(db_session, user_id):
    def _add(category, amount, on, type=TransactionTypeEnum.EXPENSE, owner=None, is_active=True):
        transaction = Transaction(
            user_id=owner or user_id,
            type=type,
            amount=Decimal(str(amount)),
            category_id=category.id,
            date=on,
            description="test",
            is_active=is_active,
        )
        db_session.add(transaction)
        db_session.commit()
        return transaction

    return _add


@pytest.fixture
def add_budget(db_session, user_id):
    """Insert a budget row directly, bypassing the service checks"""
    def _add(category, start_date, period=BudgetPeriod.MONTHLY, amount="600.00", owner=None, is_active=True,
             alert_threshold=80, name="Budget"):
        budget = Budget(
            user_id=owner or user_id,
            category_id=category.id,
            name=name,
            amount=Decimal(amount),
            period=period,
            start_date=start_date,
            end_date=compute_end_date(start_date, period),
            alert_threshold=alert_threshold,
            is_active=is_active,
        )
        db_session.add(budget)
        db_session.commit()
        db_session.refresh(budget)
        return budget

    return _add


def make_budget(amount="600.00", period=BudgetPeriod.MONTHLY, start_date=date(2025, 3, 1), alert_threshold=80):
    """Unsaved budget for pure-function tests"""
    return Budget(
        id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        category_id=uuid.uuid4(),
        name="Budget",
        amount=Decimal(amount),
        period=period,
        start_date=start_date,
        end_date=compute_end_date(start_date, period),
        alert_threshold=alert_threshold,
        is_active=True,
    )


@pytest.fixture
def unsaved_budget():
    return make_budget
