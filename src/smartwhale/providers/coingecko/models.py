"""Models for the CoinGecko provider (API params and market snapshot rows)."""
from pydantic import BaseModel


class CoinGeckoSimplePriceParams(BaseModel):
    """Params for /simple/price. Merge with 'ids' at call site."""

    vs_currencies: str = "usd"
    include_market_cap: str = "true"
    include_24hr_vol: str = "true"
    include_24hr_change: str = "true"
    include_last_updated_at: str = "true"


class CoinGeckoMarketsParams(BaseModel):
    """Params for /coins/markets (signal snapshot)."""

    vs_currency: str = "usd"
    order: str = "market_cap_desc"
    per_page: int = 20
    page: int = 1
    sparkline: str = "false"
    price_change_percentage: str = "24h,7d"


class CoinGeckoChartParams(BaseModel):
    """Params for /coins/{id}/market_chart."""

    vs_currency: str = "usd"
    days: int = 7


class MarketSnapshot(BaseModel):
    """One /coins/markets row; the fields the signal generator reads."""

    id: str
    symbol: str
    name: str
    current_price: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None
    high_24h: float | None = None
    low_24h: float | None = None
    price_change_percentage_24h: float | None = None
    price_change_percentage_7d_in_currency: float | None = None

    @property
    def ticker(self) -> str:
        return self.symbol.upper()
