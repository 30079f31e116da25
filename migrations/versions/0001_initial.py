"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    alert_type = sa.Enum(
        "BALANCE_INCREASE",
        "BALANCE_DECREASE",
        "LARGE_TRANSACTION",
        "PRICE_ABOVE",
        "PRICE_BELOW",
        name="alerttype",
    )
    tx_type = sa.Enum("BUY", "SELL", "TRANSFER", name="txtype")
    severity = sa.Enum("HIGH", "MEDIUM", "LOW", name="severity")

    op.create_table(
        "user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "alert",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("alert_type", alert_type, nullable=False),
        sa.Column("whale_address", sa.String(), nullable=True),
        sa.Column("whale_label", sa.String(), nullable=True),
        sa.Column("token_symbol", sa.String(), nullable=True),
        sa.Column("threshold_value", sa.Float(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_alert_user_id", "alert", ["user_id"], unique=False)
    op.create_index("ix_alert_whale_address", "alert", ["whale_address"], unique=False)
    op.create_index("ix_alert_is_active", "alert", ["is_active"], unique=False)

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("alert_id", sa.Integer(), nullable=True),
        sa.Column("whale_address", sa.String(), nullable=True),
        sa.Column("whale_label", sa.String(), nullable=True),
        sa.Column("notification_type", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"], unique=False)
    op.create_index("ix_notification_alert_id", "notification", ["alert_id"], unique=False)
    op.create_index("ix_notification_created_at", "notification", ["created_at"], unique=False)

    op.create_table(
        "portfolio",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("wallet_address", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_portfolio_user_id", "portfolio", ["user_id"], unique=True)

    op.create_table(
        "portfolio_asset",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=False),
        sa.Column("symbol", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("avg_buy_price", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["portfolio_id"], ["portfolio.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("portfolio_id", "symbol"),
    )
    op.create_index(
        "ix_portfolio_asset_portfolio_id", "portfolio_asset", ["portfolio_id"], unique=False
    )

    op.create_table(
        "watchlist",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("whale_address", sa.String(), nullable=False),
        sa.Column("whale_label", sa.String(), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "whale_address"),
    )
    op.create_index("ix_watchlist_user_id", "watchlist", ["user_id"], unique=False)

    op.create_table(
        "custom_whale",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("notes", sa.String(), nullable=False),
        sa.Column("chain_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "address"),
    )
    op.create_index("ix_custom_whale_user_id", "custom_whale", ["user_id"], unique=False)

    op.create_table(
        "whale_activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("whale_address", sa.String(), nullable=False),
        sa.Column("whale_label", sa.String(), nullable=False),
        sa.Column("tx_hash", sa.String(), nullable=False),
        sa.Column("tx_type", tx_type, nullable=False),
        sa.Column("token_symbol", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("amount_usd", sa.Float(), nullable=False),
        sa.Column("from_address", sa.String(), nullable=True),
        sa.Column("to_address", sa.String(), nullable=True),
        sa.Column("blockchain", sa.String(), nullable=False),
        sa.Column("severity", severity, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tx_hash"),
    )
    op.create_index(
        "ix_whale_activity_whale_address", "whale_activity", ["whale_address"], unique=False
    )
    op.create_index(
        "ix_whale_activity_token_symbol", "whale_activity", ["token_symbol"], unique=False
    )
    op.create_index("ix_whale_activity_timestamp", "whale_activity", ["timestamp"], unique=False)

    op.create_table(
        "signal_action",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("signal_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("entry_price_actual", sa.Float(), nullable=True),
        sa.Column("position_size", sa.Float(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "signal_id"),
    )
    op.create_index("ix_signal_action_user_id", "signal_action", ["user_id"], unique=False)

    op.create_table(
        "subscription",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("stripe_customer_id", sa.String(), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("plan", sa.String(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subscription_user_id", "subscription", ["user_id"], unique=True)
    op.create_index(
        "ix_subscription_stripe_subscription_id",
        "subscription",
        ["stripe_subscription_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_table("subscription")
    op.drop_table("signal_action")
    op.drop_table("whale_activity")
    op.drop_table("custom_whale")
    op.drop_table("watchlist")
    op.drop_table("portfolio_asset")
    op.drop_table("portfolio")
    op.drop_table("notification")
    op.drop_table("alert")
    op.drop_table("user")
    sa.Enum(name="severity").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="txtype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="alerttype").drop(op.get_bind(), checkfirst=True)
