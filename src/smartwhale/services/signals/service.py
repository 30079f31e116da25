"""Trading signal generator: technical heuristics blended with whale flow."""
import logging
from collections import Counter
from datetime import datetime, timedelta

from sqlmodel import Session, select

from smartwhale.db import WhaleActivity
from smartwhale.providers.coingecko import (STABLECOINS, CoinGeckoProvider,
                                            MarketSnapshot)
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.schemas import (Indicators, SignalFeed, SignalStats,
                                SignalType, TradingSignal, WhaleFlow)
from smartwhale.services.market_service import MarketService
from smartwhale.services.protocols import WhaleFlowSource
from smartwhale.services.signals import scoring
from smartwhale.services.signals.indicators import compute_indicators
from smartwhale.services.signals.whale_flow import whale_flow_signals
from smartwhale.services.utils import TTLCache
from smartwhale.utils import utc_now

logger = logging.getLogger(__name__)

SNAPSHOT_TTL_SECONDS = 600
_SNAPSHOT_KEY = "top"


class SignalService:
    """Generates ephemeral trading signals; nothing here is persisted.

    The CoinGecko top-N snapshot is cached in memory for 10 minutes per
    process. Whale buy/sell counts, when available, are blended into the
    technical score; any failure while gathering them falls back to
    technical-only scoring.
    """

    def __init__(
        self,
        coingecko: CoinGeckoProvider,
        market: MarketService,
        whale_flow: WhaleFlowSource | None = None,
        error_mapper: ProviderErrorMapper | None = None,
        *,
        top_n: int = 20,
        snapshot_ttl_seconds: float = SNAPSHOT_TTL_SECONDS,
    ) -> None:
        self._coingecko = coingecko
        self._market = market
        self._whale_flow = whale_flow
        self._error_mapper = error_mapper or ProviderErrorMapper("Signal", "CoinGecko")
        self._top_n = top_n
        self._snapshots: TTLCache[list[MarketSnapshot]] = TTLCache(snapshot_ttl_seconds)

    async def get_snapshot(self) -> list[MarketSnapshot]:
        """Top-N coins by market cap, cached. Raises HTTPException on provider errors."""
        cached = self._snapshots.get(_SNAPSHOT_KEY)
        if cached is not None:
            return cached
        try:
            snapshot = await self._coingecko.get_markets(per_page=self._top_n)
        except PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e)
        self._snapshots.set(_SNAPSHOT_KEY, snapshot)
        return snapshot

    async def generate(self, *, use_whale_data: bool = True) -> tuple[list[TradingSignal], bool]:
        """Technical signals for the snapshot, whale-blended when possible.

        Returns:
            (signals, whale_data) where whale_data says whether flows were blended.
        """
        snapshot = await self.get_snapshot()
        if not use_whale_data or self._whale_flow is None:
            return build_signals(snapshot, {}), False
        try:
            flows = await self._whale_flow.whale_flow_by_token()
            return build_signals(snapshot, flows), bool(flows)
        except (*PROVIDER_EXCEPTIONS, ArithmeticError) as exc:
            logger.warning("Whale-blended scoring failed, using technical only: %s", exc)
            return build_signals(snapshot, {}), False

    async def get_feed(
        self,
        session: Session,
        *,
        token: str | None = None,
        signal_type: SignalType | None = None,
        limit: int = 10,
        use_whale_data: bool = True,
    ) -> SignalFeed:
        """Technical and whale-flow signals, filtered, best confidence first."""
        signals, whale_data = await self.generate(use_whale_data=use_whale_data)
        signals += await self.whale_activity_signals(session)

        if token:
            signals = [s for s in signals if s.token == token.upper()]
        if signal_type is not None:
            signals = [s for s in signals if s.signal_type == signal_type]
        signals.sort(key=lambda s: s.confidence, reverse=True)
        signals = signals[:limit]
        return SignalFeed(signals=signals, stats=signal_stats(signals), whale_data=whale_data)

    async def whale_activity_signals(self, session: Session) -> list[TradingSignal]:
        """Signals from whale activity stored by the sync job over the last 24h."""
        since = utc_now() - timedelta(hours=24)
        rows = session.exec(select(WhaleActivity).where(WhaleActivity.timestamp >= since)).all()
        if not rows:
            return []
        prices, _ = await self._market.get_usd_prices(sorted({r.token_symbol for r in rows}))
        return whale_flow_signals(rows, prices)


def build_signals(
    snapshot: list[MarketSnapshot],
    flows: dict[str, WhaleFlow],
    now: datetime | None = None,
) -> list[TradingSignal]:
    """Score every non-stablecoin in the snapshot; drop rows with bad data or prices."""
    now = now or utc_now()
    signals: list[TradingSignal] = []
    for coin in snapshot:
        if coin.ticker in STABLECOINS:
            continue
        indicators = compute_indicators(coin)
        if indicators is None:
            continue
        change = coin.price_change_percentage_24h or 0.0
        technical = scoring.technical_score(indicators, change)
        flow = flows.get(coin.ticker)
        whale = scoring.whale_score(flow)
        score = scoring.blend(technical, whale)

        signal_type = scoring.classify(score)
        entry = float(coin.current_price)
        target, stop = scoring.price_levels(signal_type, entry)
        if not scoring.prices_are_valid(signal_type, entry, target, stop):
            logger.debug("Dropping %s signal: invalid price levels", coin.id)
            continue

        signals.append(
            TradingSignal(
                id=f"technical-{coin.id}-{now:%Y%m%d%H}",
                token=coin.ticker,
                token_name=coin.name,
                coin_id=coin.id,
                signal_type=signal_type,
                confidence=scoring.confidence(score),
                score=round(score, 4),
                entry_price=entry,
                target_price=round(target, 6),
                stop_loss=round(stop, 6),
                time_horizon=scoring.time_horizon(score),
                source="technical",
                title=f"{signal_type.value.replace('_', ' ').title()}: {coin.name}",
                description=f"{coin.ticker} {change:+.2f}% in 24h",
                indicators=indicators,
                whale_flow=flow if whale is not None else None,
                reasoning=_reasoning(indicators, flow if whale is not None else None),
                created_at=now,
            )
        )
    return signals


def signal_stats(signals: list[TradingSignal]) -> SignalStats:
    counts = Counter(s.signal_type for s in signals)
    return SignalStats(
        total=len(signals),
        strong_buy=counts[SignalType.STRONG_BUY],
        buy=counts[SignalType.BUY],
        hold=counts[SignalType.HOLD],
        sell=counts[SignalType.SELL],
        strong_sell=counts[SignalType.STRONG_SELL],
        avg_confidence=round(sum(s.confidence for s in signals) / len(signals), 1) if signals else 0.0,
    )


def _reasoning(indicators: Indicators, flow: WhaleFlow | None) -> list[str]:
    rsi = indicators.rsi
    rsi_note = "oversold" if rsi < 30 else "overbought" if rsi > 70 else "neutral"
    position = indicators.bollinger_position
    band_note = "near lower band" if position < 0.2 else "near upper band" if position > 0.8 else "mid-range"
    lines = [
        f"RSI {rsi:.1f} ({rsi_note})",
        f"MACD {indicators.macd:+.2f} ({'bullish' if indicators.macd > 0 else 'bearish'} momentum)",
        f"Price {band_note} of 24h range ({position:.0%})",
        f"24h turnover {indicators.volume_ratio:.1f}% of market cap",
    ]
    if flow is not None:
        lines.append(f"Whales: {flow.buys} buys vs {flow.sells} sells")
    return lines
