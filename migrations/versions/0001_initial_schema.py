"""Initial ledger schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-05-01

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("initial_balance", sa.Numeric(19, 2), nullable=False),
        sa.Column("balance", sa.Numeric(19, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_accounts_user_id", "accounts", ["user_id"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("account_id", sa.String(36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("amount", sa.Numeric(19, 2), nullable=False),
        sa.Column(
            "type",
            sa.Enum("income", "expense", name="transaction_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"], unique=False)
    op.create_index("ix_transactions_account_id", "transactions", ["account_id"], unique=False)
    op.create_index("ix_transactions_date", "transactions", ["date"], unique=False)

    op.create_table(
        "alerts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("day_of_month", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("amount", sa.Numeric(19, 2), nullable=True),
        sa.Column("account_id", sa.String(36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column(
            "type",
            sa.Enum("payable", "receivable", name="alert_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("last_paid_month", sa.String(7), nullable=True),
        sa.Column("transaction_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_alerts_user_id", "alerts", ["user_id"], unique=False)

    op.create_table(
        "investment_funds",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "custodian_account_id", sa.String(36), sa.ForeignKey("accounts.id"), nullable=False
        ),
        sa.Column("balance", sa.Numeric(19, 2), nullable=False),
        sa.Column("last_quota_value", sa.Numeric(19, 8), nullable=True),
        sa.Column("deleting", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index("ix_investment_funds_user_id", "investment_funds", ["user_id"], unique=False)

    op.create_table(
        "investment_movements",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column(
            "fund_id", sa.String(36), sa.ForeignKey("investment_funds.id"), nullable=False
        ),
        sa.Column(
            "origin_account_id", sa.String(36), sa.ForeignKey("accounts.id"), nullable=False
        ),
        sa.Column("amount", sa.Numeric(19, 2), nullable=False),
        sa.Column(
            "type",
            sa.Enum("buy", "sell", name="movement_type_enum", create_constraint=True),
            nullable=False,
        ),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("quota_value", sa.Numeric(19, 8), nullable=True),
        sa.Column("units", sa.Numeric(19, 8), nullable=True),
        sa.Column("account_transaction_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
    )
    op.create_index(
        "ix_investment_movements_user_id", "investment_movements", ["user_id"], unique=False
    )
    op.create_index(
        "ix_investment_movements_fund_id", "investment_movements", ["fund_id"], unique=False
    )
    op.create_index(
        "ix_investment_movements_origin_account_id",
        "investment_movements",
        ["origin_account_id"],
        unique=False,
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_categories_user_id", "categories", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_categories_user_id", table_name="categories")
    op.drop_table("categories")

    op.drop_index("ix_investment_movements_origin_account_id", table_name="investment_movements")
    op.drop_index("ix_investment_movements_fund_id", table_name="investment_movements")
    op.drop_index("ix_investment_movements_user_id", table_name="investment_movements")
    op.drop_table("investment_movements")

    op.drop_index("ix_investment_funds_user_id", table_name="investment_funds")
    op.drop_table("investment_funds")

    op.drop_index("ix_alerts_user_id", table_name="alerts")
    op.drop_table("alerts")

    op.drop_index("ix_transactions_date", table_name="transactions")
    op.drop_index("ix_transactions_account_id", table_name="transactions")
    op.drop_index("ix_transactions_user_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_accounts_user_id", table_name="accounts")
    op.drop_table("accounts")

    sa.Enum(name="movement_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="alert_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transaction_type_enum").drop(op.get_bind(), checkfirst=True)
