"""Price and chart schemas (CoinGecko-backed)."""
from datetime import datetime

from pydantic import BaseModel, Field

from smartwhale.utils import utc_now


class PriceQuote(BaseModel):
    """Current price of a coin, keyed by CoinGecko id."""

    coin_id: str
    price: float
    change_24h: float | None = None
    market_cap: float | None = None
    volume_24h: float | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class PricePoint(BaseModel):
    """One point of a price history chart."""

    timestamp: datetime
    price: float


class TokenPrice(BaseModel):
    """Price entry of /api/prices, keyed by ticker symbol in the response."""

    symbol: str
    coin_id: str
    price: float
    market_cap: float | None = None
    volume_24h: float | None = None
    change_24h: float | None = None


class PricesRequest(BaseModel):
    """Body of POST /api/prices."""

    tokens: list[str] = Field(min_length=1, max_length=50)
