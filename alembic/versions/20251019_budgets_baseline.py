"""budgets baseline: categories, transactions, budgets

Revision ID: 20251019_budgets_baseline
Revises:
Create Date: 2025-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20251019_budgets_baseline"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Reusable defaults
DEFAULT_NOW = sa.func.now()


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.Enum("income", "expense", name="categorytypeenum"), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_categories_user_id", "categories", ["user_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.Enum("income", "expense", name="transactiontypeenum"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("idx_transactions_user_category_date", "transactions", ["user_id", "category_id", "date"])

    op.create_table(
        "budgets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("period", sa.Enum("monthly", "yearly", name="budgetperiod"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("alert_threshold", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=DEFAULT_NOW),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_budgets_amount_positive"),
        sa.CheckConstraint("end_date >= start_date", name="ck_budgets_window_order"),
        sa.CheckConstraint("alert_threshold BETWEEN 0 AND 100", name="ck_budgets_alert_threshold"),
    )
    op.create_index("ix_budgets_user_id", "budgets", ["user_id"])
    op.create_index("idx_budgets_user_period_start", "budgets", ["user_id", "period", "start_date"])
    op.create_index("idx_budgets_user_category_active", "budgets", ["user_id", "category_id", "is_active"])
    # At most one active budget per (user, category, period) window
    op.create_index(
        "uq_budgets_active_window",
        "budgets",
        ["user_id", "category_id", "period", "end_date"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active = true"),
    )


def downgrade() -> None:
    op.drop_index("uq_budgets_active_window", table_name="budgets")
    op.drop_index("idx_budgets_user_category_active", table_name="budgets")
    op.drop_index("idx_budgets_user_period_start", table_name="budgets")
    op.drop_index("ix_budgets_user_id", table_name="budgets")
    op.drop_table("budgets")

    op.drop_index("idx_transactions_user_category_date", table_name="transactions")
    op.drop_index("ix_transactions_user_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_categories_user_id", table_name="categories")
    op.drop_table("categories")

    sa.Enum(name="budgetperiod").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transactiontypeenum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="categorytypeenum").drop(op.get_bind(), checkfirst=True)
