"""Database models for the SmartWhale API.

Only user/application state is persisted. Prices, balances and trading signals
are fetched or computed on demand; they are not stored in PostgreSQL.
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from smartwhale.utils import utc_now

# Timestamps are stored as aware UTC values.
UTCDateTime = DateTime(timezone=True)


class AlertType(str, Enum):
    """Condition watched by an alert."""

    BALANCE_INCREASE = "balance_increase"
    BALANCE_DECREASE = "balance_decrease"
    LARGE_TRANSACTION = "large_transaction"
    PRICE_ABOVE = "price_above"
    PRICE_BELOW = "price_below"

    @property
    def is_whale_alert(self) -> bool:
        return self in (
            AlertType.BALANCE_INCREASE,
            AlertType.BALANCE_DECREASE,
            AlertType.LARGE_TRANSACTION,
        )


class TxType(str, Enum):
    """Direction of a whale transaction relative to exchanges."""

    BUY = "buy"
    SELL = "sell"
    TRANSFER = "transfer"


class Severity(str, Enum):
    """USD size tier of a whale transaction."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class User(SQLModel, table=True):
    """Profile row mirrored from Supabase Auth (id is the auth user id)."""

    id: str = Field(primary_key=True)
    email: str = Field(unique=True, index=True)
    full_name: str | None = None
    role: str = Field(default="user")  # user | admin
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Alert(SQLModel, table=True):
    """Whale balance/transaction or token price alert for a user."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    alert_type: AlertType
    whale_address: str | None = Field(default=None, index=True)
    whale_label: str | None = None
    token_symbol: str | None = None
    threshold_value: float
    is_active: bool = Field(default=True, index=True)
    last_triggered_at: datetime | None = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Notification(SQLModel, table=True):
    """A triggered alert delivered to a user."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    alert_id: int | None = Field(default=None, index=True)
    whale_address: str | None = None
    whale_label: str | None = None
    notification_type: str
    message: str
    data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)


class Portfolio(SQLModel, table=True):
    """One portfolio per user; created lazily."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(unique=True, index=True)
    wallet_address: str | None = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class PortfolioAsset(SQLModel, table=True):
    """A token holding inside a portfolio."""

    __tablename__ = "portfolio_asset"
    __table_args__ = (UniqueConstraint("portfolio_id", "symbol"),)

    id: int | None = Field(default=None, primary_key=True)
    portfolio_id: int = Field(foreign_key="portfolio.id", index=True)
    symbol: str  # BTC | ETH | ...
    name: str
    amount: float = Field(default=0.0)
    avg_buy_price: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class WatchlistEntry(SQLModel, table=True):
    """A whale address followed by a user."""

    __tablename__ = "watchlist"
    __table_args__ = (UniqueConstraint("user_id", "whale_address"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    whale_address: str
    whale_label: str | None = None
    added_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class CustomWhale(SQLModel, table=True):
    """A user-defined whale address (stored lowercased)."""

    __tablename__ = "custom_whale"
    __table_args__ = (UniqueConstraint("user_id", "address"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    address: str
    name: str
    notes: str = Field(default="")
    chain_id: int = Field(default=1)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class WhaleActivity(SQLModel, table=True):
    """On-chain transfer of a tracked whale, written by the sync job."""

    __tablename__ = "whale_activity"

    id: int | None = Field(default=None, primary_key=True)
    whale_address: str = Field(index=True)
    whale_label: str
    tx_hash: str = Field(unique=True)
    tx_type: TxType
    token_symbol: str = Field(index=True)
    amount: float
    amount_usd: float
    from_address: str | None = None
    to_address: str | None = None
    blockchain: str = Field(default="ethereum")
    severity: Severity
    timestamp: datetime = Field(index=True, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class SignalAction(SQLModel, table=True):
    """A user's recorded reaction to a generated trading signal."""

    __tablename__ = "signal_action"
    __table_args__ = (UniqueConstraint("user_id", "signal_id"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    signal_id: str
    action: str  # followed | ignored | closed | ...
    entry_price_actual: float | None = None
    position_size: float | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class Subscription(SQLModel, table=True):
    """Stripe subscription state for a user."""

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(unique=True, index=True)
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = Field(default=None, index=True)
    status: str = Field(default="inactive")  # active | past_due | cancelled | ...
    plan: str = Field(default="free")  # free | pro | enterprise
    updated_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
