"""Weighted scoring, classification and price targets for trading signals."""
import math
from dataclasses import dataclass

from smartwhale.schemas import Indicators, SignalType, WhaleFlow

RSI_WEIGHT = 0.3
MACD_WEIGHT = 0.3
BOLLINGER_WEIGHT = 0.2
VOLUME_WEIGHT = 0.2

TECHNICAL_SHARE = 0.75
WHALE_SHARE = 0.25

HIGH_TURNOVER_PCT = 10.0


@dataclass(frozen=True)
class PriceOffsets:
    """Target and stop as fractions of the entry price."""

    target: float
    stop: float


OFFSETS: dict[SignalType, PriceOffsets] = {
    SignalType.STRONG_BUY: PriceOffsets(target=0.15, stop=-0.05),
    SignalType.BUY: PriceOffsets(target=0.10, stop=-0.05),
    SignalType.HOLD: PriceOffsets(target=0.05, stop=-0.03),
    SignalType.SELL: PriceOffsets(target=-0.07, stop=0.07),
    SignalType.STRONG_SELL: PriceOffsets(target=-0.13, stop=0.07),
}


def rsi_score(rsi: float) -> int:
    if rsi < 30:
        return 2
    if rsi < 45:
        return 1
    if rsi > 70:
        return -2
    if rsi > 55:
        return -1
    return 0


def macd_score(macd: float) -> int:
    if macd > 2:
        return 2
    if macd > 0.5:
        return 1
    if macd < -2:
        return -2
    if macd < -0.5:
        return -1
    return 0


def bollinger_score(position: float) -> int:
    if position < 0.2:
        return 2
    if position < 0.4:
        return 1
    if position > 0.8:
        return -2
    if position > 0.6:
        return -1
    return 0


def volume_score(ratio: float, change_24h: float) -> int:
    """High turnover confirms the direction of the day's move."""
    if ratio <= HIGH_TURNOVER_PCT or change_24h == 0:
        return 0
    return 1 if change_24h > 0 else -1


def technical_score(indicators: Indicators, change_24h: float) -> float:
    """Weighted sum of the component scores, in [-2, 2]."""
    return (
        RSI_WEIGHT * rsi_score(indicators.rsi)
        + MACD_WEIGHT * macd_score(indicators.macd)
        + BOLLINGER_WEIGHT * bollinger_score(indicators.bollinger_position)
        + VOLUME_WEIGHT * volume_score(indicators.volume_ratio, change_24h)
    )


def whale_score(flow: WhaleFlow | None) -> float | None:
    """2 x net buy ratio in [-2, 2]; None without any buys or sells."""
    if flow is None or flow.buys + flow.sells == 0:
        return None
    return 2.0 * (flow.buys - flow.sells) / (flow.buys + flow.sells)


def blend(technical: float, whale: float | None) -> float:
    if whale is None:
        return technical
    return TECHNICAL_SHARE * technical + WHALE_SHARE * whale


def classify(score: float) -> SignalType:
    if score >= 1.2:
        return SignalType.STRONG_BUY
    if score >= 0.4:
        return SignalType.BUY
    if score > -0.4:
        return SignalType.HOLD
    if score > -1.2:
        return SignalType.SELL
    return SignalType.STRONG_SELL


def confidence(score: float) -> int:
    """50% at a neutral score, capped at 95%."""
    return min(95, round(50 + 22.5 * abs(score)))


def time_horizon(score: float) -> str:
    strength = abs(score)
    if strength >= 1.2:
        return "short"
    if strength >= 0.4:
        return "medium"
    return "long"


def price_levels(signal_type: SignalType, entry: float) -> tuple[float, float]:
    """(target, stop) at the fixed offsets for the signal class."""
    offsets = OFFSETS[signal_type]
    return entry * (1 + offsets.target), entry * (1 + offsets.stop)


def prices_are_valid(signal_type: SignalType, entry: float, target: float, stop: float) -> bool:
    """Positive, finite, and ordered stop < entry < target (reversed for sells)."""
    values = (entry, target, stop)
    if not all(math.isfinite(v) and v > 0 for v in values):
        return False
    if signal_type.is_sell:
        return target < entry < stop
    return stop < entry < target
