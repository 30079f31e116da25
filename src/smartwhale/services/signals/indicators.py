"""Heuristic indicators derived from a single 24h market snapshot.

These are not real RSI/MACD/Bollinger computations (no candle history is
fetched); each one maps snapshot fields onto the familiar scale.
"""
import math

from smartwhale.providers.coingecko import MarketSnapshot
from smartwhale.schemas import Indicators


def pseudo_rsi(change_24h: float) -> float:
    """50 +/- 3 points per percent of 24h change, clamped to [0, 100]."""
    return max(0.0, min(100.0, 50.0 + 3.0 * change_24h))


def pseudo_macd(change_24h: float, change_7d: float | None) -> float:
    """Today's move against the average daily move of the week."""
    if change_7d is None:
        return change_24h / 2
    return change_24h - change_7d / 7


def bollinger_position(price: float, low_24h: float | None, high_24h: float | None) -> float:
    """Where the price sits in the 24h range: 0 at the low, 1 at the high, 0.5 if unknown."""
    if low_24h is None or high_24h is None or high_24h <= low_24h:
        return 0.5
    return max(0.0, min(1.0, (price - low_24h) / (high_24h - low_24h)))


def volume_ratio(total_volume: float | None, market_cap: float | None) -> float:
    """24h turnover: traded volume as a percent of market cap."""
    if not total_volume or not market_cap:
        return 0.0
    return total_volume / market_cap * 100


def compute_indicators(snapshot: MarketSnapshot) -> Indicators | None:
    """All four indicators for a snapshot row; None when price or change is missing."""
    price = snapshot.current_price
    change = snapshot.price_change_percentage_24h
    if price is None or change is None or not math.isfinite(price) or price <= 0:
        return None
    return Indicators(
        rsi=round(pseudo_rsi(change), 2),
        macd=round(pseudo_macd(change, snapshot.price_change_percentage_7d_in_currency), 4),
        bollinger_position=round(bollinger_position(price, snapshot.low_24h, snapshot.high_24h), 4),
        volume_ratio=round(volume_ratio(snapshot.total_volume, snapshot.market_cap), 2),
    )
