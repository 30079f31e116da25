"""Signals from persisted whale activity: net buy/sell flow per token over 24h."""
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from smartwhale.db import TxType, WhaleActivity
from smartwhale.schemas import SignalType, TradingSignal, WhaleFlow
from smartwhale.services.signals.scoring import (price_levels,
                                                 prices_are_valid)
from smartwhale.utils import format_usd, utc_now

MIN_VOLUME_USD = 100_000
MIN_ACTIVITIES = 2


def classify_flow(net_ratio: float, buys: int, sells: int) -> tuple[SignalType, int]:
    """Signal class and confidence from the net-flow ratio and trade counts."""
    if net_ratio > 0.6 and buys >= 3:
        return SignalType.STRONG_BUY, min(85 + 2 * buys, 95)
    if net_ratio > 0.3 and buys >= 2:
        return SignalType.BUY, min(70 + 3 * buys, 85)
    if abs(net_ratio) < 0.15:
        return SignalType.HOLD, 55
    if net_ratio < -0.6 and sells >= 3:
        return SignalType.STRONG_SELL, min(85 + 2 * sells, 95)
    if net_ratio < -0.3 and sells >= 2:
        return SignalType.SELL, min(70 + 3 * sells, 85)
    return SignalType.HOLD, 55


_TITLES = {
    SignalType.STRONG_BUY: "Strong Whale Accumulation Detected",
    SignalType.BUY: "Whale Buying Pressure",
    SignalType.HOLD: "Mixed Whale Activity",
    SignalType.SELL: "Whale Distribution Detected",
    SignalType.STRONG_SELL: "Strong Whale Sell-Off",
}


def whale_flow_signals(
    activities: Iterable[WhaleActivity],
    prices: dict[str, float],
    now: datetime | None = None,
) -> list[TradingSignal]:
    """One signal per token with enough 24h whale volume and a known price.

    Args:
        activities: Whale activity rows of the last 24 hours.
        prices: USD price per uppercase ticker; tokens without a price are skipped.
        now: Creation time (defaults to now).
    """
    now = now or utc_now()
    by_token: dict[str, list[WhaleActivity]] = defaultdict(list)
    for activity in activities:
        by_token[activity.token_symbol.upper()].append(activity)

    signals: list[TradingSignal] = []
    for token, rows in sorted(by_token.items()):
        buys = [r for r in rows if r.tx_type == TxType.BUY]
        sells = [r for r in rows if r.tx_type == TxType.SELL]
        transfers = [r for r in rows if r.tx_type == TxType.TRANSFER]
        buy_volume = sum(r.amount_usd for r in buys)
        sell_volume = sum(r.amount_usd for r in sells)
        transfer_volume = sum(r.amount_usd for r in transfers)
        total_volume = buy_volume + sell_volume + transfer_volume
        if total_volume < MIN_VOLUME_USD or len(rows) < MIN_ACTIVITIES:
            continue

        entry = prices.get(token)
        if not entry:
            continue
        net_volume = buy_volume - sell_volume
        net_ratio = net_volume / total_volume
        signal_type, confidence = classify_flow(net_ratio, len(buys), len(sells))
        target, stop = price_levels(signal_type, entry)
        if not prices_are_valid(signal_type, entry, target, stop):
            continue

        unique_whales = len({r.whale_address for r in rows})
        signals.append(
            TradingSignal(
                id=f"whale-{token.lower()}-{now:%Y%m%d%H}",
                token=token,
                token_name=token,
                signal_type=signal_type,
                confidence=confidence,
                score=round(2 * net_ratio, 4),
                entry_price=entry,
                target_price=round(target, 6),
                stop_loss=round(stop, 6),
                time_horizon="short" if len(buys) + len(sells) > 5 else "medium",
                source="whale_flow",
                title=_TITLES[signal_type],
                description=(
                    f"{len(buys)} buys ({format_usd(buy_volume)}) vs "
                    f"{len(sells)} sells ({format_usd(sell_volume)}) of {token} in 24h"
                ),
                whale_flow=WhaleFlow(buys=len(buys), sells=len(sells), volume_usd=total_volume),
                reasoning=[
                    f"{len(buys)} buy transactions totaling {format_usd(buy_volume)}",
                    f"{len(sells)} sell transactions totaling {format_usd(sell_volume)}",
                    f"{len(transfers)} transfers totaling {format_usd(transfer_volume)}",
                    f"Net flow {format_usd(abs(net_volume))} "
                    f"({'accumulation' if net_volume > 0 else 'distribution'})",
                    f"{unique_whales} unique whales",
                ],
                created_at=now,
            )
        )
    return signals
