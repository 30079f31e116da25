"""Aggregates over persisted whale activity."""
from collections import Counter
from datetime import datetime, timedelta

from sqlmodel import Session, select

from smartwhale.db import TxType, WhaleActivity
from smartwhale.schemas import AnalyticsStats
from smartwhale.services.classifier import summarize
from smartwhale.utils import as_utc, utc_now

PERIODS: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
TOP_TOKENS = 5


def activity_stats(session: Session, period: str = "24h", now: datetime | None = None) -> AnalyticsStats:
    """Counts, volume, distinct whales and severity split of activity in the period.

    Raises:
        ValueError: Unknown period (use 24h, 7d or 30d).
    """
    if period not in PERIODS:
        raise ValueError(f"Invalid period '{period}'. Use one of: {', '.join(PERIODS)}")
    since = (as_utc(now) if now else utc_now()) - PERIODS[period]
    rows = session.exec(select(WhaleActivity).where(WhaleActivity.timestamp >= since)).all()

    volume = sum(r.amount_usd for r in rows)
    tx_types = Counter(r.tx_type for r in rows)
    token_volume: Counter[str] = Counter()
    for r in rows:
        token_volume[r.token_symbol] += r.amount_usd
    return AnalyticsStats(
        period=period,
        total_transactions=len(rows),
        total_volume_usd=volume,
        active_whales=len({r.whale_address.lower() for r in rows}),
        avg_transaction_usd=volume / len(rows) if rows else 0.0,
        buy_count=tx_types[TxType.BUY],
        sell_count=tx_types[TxType.SELL],
        severity=summarize(rows),
        top_tokens=[
            {"token": token, "volume_usd": usd}
            for token, usd in token_volume.most_common(TOP_TOKENS)
        ],
    )
