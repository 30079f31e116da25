"""Whale wallet, activity and analytics schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from smartwhale.db import Severity, TxType
from smartwhale.utils import is_valid_address, utc_now


class WhaleSummary(BaseModel):
    """Balance of one tracked whale in the overview."""

    address: str
    label: str
    balance: float  # ETH
    balance_usd: float
    percent_change_24h: float | None = None


class WhalesOverview(BaseModel):
    """Aggregate view over the tracked whale list."""

    whales: list[WhaleSummary]
    total_value: float
    total_eth: float
    whale_count: int
    market_impact: float  # % of circulating ETH held by the listed whales
    eth_price: float


class RankedWhale(BaseModel):
    """Whale row of the ranked list."""

    rank: int = 0
    address: str
    label: str
    balance: float
    usd_value: float
    transactions: int
    last_update: datetime = Field(default_factory=utc_now)


class TopWhales(BaseModel):
    whales: list[RankedWhale]
    eth_price: float


class TokenHolding(BaseModel):
    """ERC-20 balance held by a whale."""

    token: str
    symbol: str
    balance: float
    usd_value: float | None = None
    contract_address: str = ""
    decimals: int = 18


class BalancePoint(BaseModel):
    """End-of-day ETH balance."""

    time: str  # YYYY-MM-DD
    balance: float


class WhaleTransaction(BaseModel):
    """Normal (ETH) transaction of a whale, labelled by the classifier."""

    hash: str
    from_address: str
    to_address: str | None = None
    value_eth: float
    value_usd: float
    timestamp: datetime
    block_number: int
    tx_type: TxType
    severity: Severity
    is_error: bool = False


class WhaleDetail(RankedWhale):
    """Ranked whale with holdings, balance history and recent transactions."""

    portfolio_breakdown: list[TokenHolding] = []
    balance_history: list[BalancePoint] = []
    recent_transactions: list[WhaleTransaction] = []


class ActivityOut(BaseModel):
    """Classified whale transaction in the activity feed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    whale_address: str
    whale_label: str
    tx_hash: str
    tx_type: TxType
    token_symbol: str
    amount: float
    amount_usd: float
    from_address: str | None = None
    to_address: str | None = None
    blockchain: str = "ethereum"
    severity: Severity
    timestamp: datetime


class ActivityStats(BaseModel):
    """Counts over a (filtered) activity list."""

    total: int = 0
    total_value_usd: float = 0.0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0


class ActivityFeed(BaseModel):
    activities: list[ActivityOut]
    stats: ActivityStats


class AnalyticsStats(BaseModel):
    """Aggregates over persisted whale activity for a period."""

    period: str
    total_transactions: int
    total_volume_usd: float
    active_whales: int
    avg_transaction_usd: float
    buy_count: int
    sell_count: int
    severity: ActivityStats
    top_tokens: list[dict]


class SyncStats(BaseModel):
    """Result of one whale sync run."""

    whales_tracked: int
    activities_found: int = 0
    skipped_duplicates: int = 0
    errors: int = 0
    execution_time_ms: int = 0
    error_details: list[dict] = []


class CustomWhaleCreate(BaseModel):
    """Body of POST /api/whales/custom."""

    address: str
    name: str | None = Field(default=None, max_length=100)
    notes: str = Field(default="", max_length=1000)
    chain_id: int = 1

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_address(value):
            raise ValueError("Invalid Ethereum address format")
        return value.lower()


class CustomWhaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    address: str
    name: str
    notes: str
    chain_id: int
    created_at: datetime


class WatchlistCreate(BaseModel):
    """Body of POST /api/watchlist."""

    whale_address: str
    whale_label: str | None = Field(default=None, max_length=100)

    @field_validator("whale_address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_address(value):
            raise ValueError("Invalid Ethereum address format")
        return value.lower()


class WatchlistItem(BaseModel):
    """Watchlist entry enriched with the live balance (None when unavailable)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    whale_address: str
    whale_label: str | None = None
    added_at: datetime
    balance: float | None = None
    balance_usd: float | None = None
