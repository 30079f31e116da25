"""Trading signal schemas. Signals are computed per request and never stored."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from smartwhale.utils import utc_now


class SignalType(str, Enum):
    STRONG_BUY = "STRONG_BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG_SELL"

    @property
    def is_sell(self) -> bool:
        return self in (SignalType.SELL, SignalType.STRONG_SELL)


class Indicators(BaseModel):
    """Heuristic indicators derived from a 24h market snapshot."""

    rsi: float
    macd: float
    bollinger_position: float
    volume_ratio: float


class WhaleFlow(BaseModel):
    buys: int = 0
    sells: int = 0
    volume_usd: float = 0.0


class TradingSignal(BaseModel):
    id: str
    token: str  # ticker symbol
    token_name: str
    coin_id: str | None = None
    signal_type: SignalType
    confidence: int
    score: float
    entry_price: float
    target_price: float
    stop_loss: float
    time_horizon: str  # short | medium | long
    source: str  # technical | whale_flow
    title: str = ""
    description: str = ""
    indicators: Indicators | None = None
    whale_flow: WhaleFlow | None = None
    reasoning: list[str] = []
    created_at: datetime = Field(default_factory=utc_now)


class SignalStats(BaseModel):
    total: int = 0
    strong_buy: int = 0
    buy: int = 0
    hold: int = 0
    sell: int = 0
    strong_sell: int = 0
    avg_confidence: float = 0.0


class SignalFeed(BaseModel):
    signals: list[TradingSignal]
    stats: SignalStats
    whale_data: bool  # whale flow was blended into technical scores


class SignalActionCreate(BaseModel):
    """Body of POST /api/signals/actions (upsert per signal)."""

    signal_id: str = Field(min_length=1, max_length=200)
    action: str = Field(min_length=1, max_length=50)
    entry_price_actual: float | None = Field(default=None, gt=0)
    position_size: float | None = Field(default=None, gt=0)
    notes: str | None = Field(default=None, max_length=1000)


class SignalActionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    signal_id: str
    action: str
    entry_price_actual: float | None
    position_size: float | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
