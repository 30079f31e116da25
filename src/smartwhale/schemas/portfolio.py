"""Portfolio schemas."""
from pydantic import BaseModel, Field, field_validator


class AssetCreate(BaseModel):
    """Body of POST /api/portfolio/assets."""

    symbol: str = Field(min_length=1, max_length=20)
    amount: float = Field(ge=0)
    avg_buy_price: float = Field(default=0.0, ge=0)
    name: str | None = Field(default=None, max_length=100)

    @field_validator("symbol")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class AssetUpdate(BaseModel):
    """Body of PUT /api/portfolio/assets/{symbol}."""

    amount: float = Field(ge=0)
    avg_buy_price: float | None = Field(default=None, ge=0)
    name: str | None = Field(default=None, max_length=100)


class PortfolioToken(BaseModel):
    """An asset valued at request time."""

    token_id: str  # ticker symbol
    name: str
    balance: float
    price_usd: float
    value_usd: float
    avg_buy_price: float
    pnl_usd: float
    holding_time_days: int


class PortfolioView(BaseModel):
    portfolio_id: int | None = None
    tokens: list[PortfolioToken]
    total_value_usd: float
    total_invested_usd: float
    total_pnl_usd: float
    demo: bool = False
    prices_live: bool = True
