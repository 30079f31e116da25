"""Tests for indicators, scoring, whale-flow signals and the signal service."""
import math
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi import HTTPException

from smartwhale.db import Severity, TxType, WhaleActivity
from smartwhale.providers.coingecko import MarketSnapshot
from smartwhale.schemas import Indicators, SignalType, WhaleFlow
from smartwhale.services import MarketService, SignalService
from smartwhale.services.signals import (build_signals, signal_stats,
                                         whale_flow_signals)
from smartwhale.services.signals import scoring
from smartwhale.services.signals.indicators import (bollinger_position,
                                                    compute_indicators,
                                                    pseudo_macd, pseudo_rsi,
                                                    volume_ratio)
from smartwhale.services.signals.whale_flow import classify_flow

from conftest import MARKET_ROWS, coingecko_handler, make_coingecko

NOW = datetime(2026, 1, 1, 12, 30, tzinfo=timezone.utc)


def make_row(index: int, token: str, tx_type: TxType, amount_usd: float,
             whale: str = "0xaaaa", timestamp: datetime = NOW) -> WhaleActivity:
    return WhaleActivity(
        whale_address=whale,
        whale_label="Test Whale",
        tx_hash=f"0x{token.lower()}{index}",
        tx_type=tx_type,
        token_symbol=token,
        amount=1.0,
        amount_usd=amount_usd,
        severity=Severity.MEDIUM,
        timestamp=timestamp,
    )


@pytest.fixture
def snapshot():
    return [MarketSnapshot.model_validate(row) for row in MARKET_ROWS]


class StaticFlows:
    """Whale flow source returning fixed counts."""

    def __init__(self, flows):
        self.flows = flows

    async def whale_flow_by_token(self):
        return self.flows


class FailingFlows:
    """Whale flow source whose upstream is down."""

    def __init__(self, exc):
        self.exc = exc

    async def whale_flow_by_token(self):
        raise self.exc


class TestIndicators:
    def test_rsi_scale_and_clamp(self):
        assert pseudo_rsi(0) == 50
        assert pseudo_rsi(5) == 65
        assert pseudo_rsi(-30) == 0
        assert pseudo_rsi(30) == 100

    def test_macd_against_weekly_average(self):
        assert pseudo_macd(8, 14) == 6
        assert pseudo_macd(7, None) == 3.5

    def test_bollinger_position(self):
        assert bollinger_position(105, 100, 110) == 0.5
        assert bollinger_position(120, 100, 110) == 1.0
        assert bollinger_position(100, None, 110) == 0.5
        assert bollinger_position(100, 110, 110) == 0.5

    def test_volume_ratio(self):
        assert volume_ratio(50, 1000) == 5
        assert volume_ratio(None, 1000) == 0
        assert volume_ratio(50, 0) == 0

    def test_missing_price_yields_none(self, snapshot):
        cardano = next(s for s in snapshot if s.id == "cardano")
        assert compute_indicators(cardano) is None


class TestScoring:
    @pytest.mark.parametrize(
        "score, expected",
        [
            (1.2, SignalType.STRONG_BUY),
            (0.4, SignalType.BUY),
            (0.0, SignalType.HOLD),
            (-0.39, SignalType.HOLD),
            (-0.4, SignalType.SELL),
            (-1.2, SignalType.STRONG_SELL),
        ],
    )
    def test_classify_thresholds(self, score, expected):
        assert scoring.classify(score) is expected

    def test_confidence_is_capped(self):
        assert scoring.confidence(0) == 50
        assert scoring.confidence(1.6) == 86
        assert scoring.confidence(-2) == 95

    def test_technical_score_all_bullish(self):
        indicators = Indicators(rsi=20, macd=3, bollinger_position=0.1, volume_ratio=15)
        assert scoring.technical_score(indicators, change_24h=4) == pytest.approx(1.8)

    def test_volume_confirms_direction_only_when_high(self):
        assert scoring.volume_score(15, -3) == -1
        assert scoring.volume_score(5, -3) == 0

    def test_whale_score_and_blend(self):
        assert scoring.whale_score(None) is None
        assert scoring.whale_score(WhaleFlow()) is None
        whale = scoring.whale_score(WhaleFlow(buys=3, sells=1))
        assert whale == pytest.approx(1.0)
        assert scoring.blend(1.6, whale) == pytest.approx(1.45)
        assert scoring.blend(1.6, None) == 1.6

    def test_price_levels_order(self):
        target, stop = scoring.price_levels(SignalType.BUY, 100)
        assert target == pytest.approx(110)
        assert stop == pytest.approx(95)
        target, stop = scoring.price_levels(SignalType.STRONG_SELL, 100)
        assert target == pytest.approx(87)
        assert stop == pytest.approx(107)

    def test_prices_are_valid(self):
        assert scoring.prices_are_valid(SignalType.BUY, 100, 110, 95)
        assert scoring.prices_are_valid(SignalType.SELL, 100, 93, 107)
        assert not scoring.prices_are_valid(SignalType.BUY, 100, 93, 107)
        assert not scoring.prices_are_valid(SignalType.SELL, 100, 110, 95)
        assert not scoring.prices_are_valid(SignalType.BUY, math.nan, 110, 95)
        assert not scoring.prices_are_valid(SignalType.BUY, 0, 0, 0)


class TestBuildSignals:
    def test_stablecoins_and_bad_rows_are_skipped(self, snapshot):
        signals = build_signals(snapshot, {}, now=NOW)
        assert [s.token for s in signals] == ["BTC", "ETH", "SOL"]

    def test_oversold_coin_is_strong_buy(self, snapshot):
        btc = build_signals(snapshot, {}, now=NOW)[0]
        assert btc.id == "technical-bitcoin-2026010112"
        assert btc.signal_type is SignalType.STRONG_BUY
        assert btc.confidence == 86
        assert btc.target_price == pytest.approx(115_000)
        assert btc.stop_loss == pytest.approx(95_000)
        assert btc.time_horizon == "short"
        assert btc.source == "technical"
        assert btc.whale_flow is None
        assert btc.reasoning[0].startswith("RSI 26.0 (oversold)")

    def test_overbought_coin_is_strong_sell(self, snapshot):
        eth = build_signals(snapshot, {}, now=NOW)[1]
        assert eth.signal_type is SignalType.STRONG_SELL
        assert eth.target_price < eth.entry_price < eth.stop_loss

    def test_whale_flow_moves_a_neutral_coin(self, snapshot):
        flows = {"SOL": WhaleFlow(buys=4, sells=0, volume_usd=5_000_000)}
        sol = build_signals(snapshot, flows, now=NOW)[2]
        assert sol.signal_type is SignalType.BUY
        assert sol.score == pytest.approx(0.5)
        assert sol.whale_flow.buys == 4
        assert sol.reasoning[-1] == "Whales: 4 buys vs 0 sells"

    def test_stats(self, snapshot):
        stats = signal_stats(build_signals(snapshot, {}, now=NOW))
        assert stats.total == 3
        assert (stats.strong_buy, stats.hold, stats.strong_sell) == (1, 1, 1)
        assert stats.avg_confidence == pytest.approx(74.0)
        assert signal_stats([]).avg_confidence == 0.0


class TestWhaleFlowSignals:
    def test_classify_flow(self):
        assert classify_flow(0.9, buys=4, sells=0) == (SignalType.STRONG_BUY, 93)
        assert classify_flow(0.7, buys=2, sells=0) == (SignalType.BUY, 76)
        assert classify_flow(0.1, buys=1, sells=1) == (SignalType.HOLD, 55)
        assert classify_flow(-0.9, buys=0, sells=3) == (SignalType.STRONG_SELL, 91)
        assert classify_flow(-0.7, buys=0, sells=2) == (SignalType.SELL, 76)
        assert classify_flow(-0.7, buys=0, sells=1) == (SignalType.HOLD, 55)

    def test_accumulation(self):
        rows = [make_row(i, "ETH", TxType.BUY, 1_000_000, whale=f"0x{i}") for i in range(3)]
        (signal,) = whale_flow_signals(rows, {"ETH": 3000.0}, now=NOW)
        assert signal.id == "whale-eth-2026010112"
        assert signal.signal_type is SignalType.STRONG_BUY
        assert signal.confidence == 91
        assert signal.score == pytest.approx(2.0)
        assert signal.time_horizon == "medium"
        assert signal.source == "whale_flow"
        assert signal.target_price == pytest.approx(3450)
        assert signal.reasoning[-1] == "3 unique whales"

    def test_distribution(self):
        rows = [make_row(i, "BTC", TxType.SELL, 1_000_000) for i in range(2)]
        (signal,) = whale_flow_signals(rows, {"BTC": 100_000.0}, now=NOW)
        assert signal.signal_type is SignalType.SELL
        assert signal.confidence == 76
        assert signal.description.startswith("0 buys ($0) vs 2 sells ($2.00M)")

    def test_thin_or_unpriced_tokens_are_skipped(self):
        rows = [
            make_row(1, "LINK", TxType.BUY, 30_000),
            make_row(2, "LINK", TxType.BUY, 30_000),
            make_row(3, "UNI", TxType.BUY, 500_000),
            make_row(4, "UNI", TxType.BUY, 500_000),
            make_row(5, "SOL", TxType.BUY, 5_000_000),
        ]
        assert whale_flow_signals(rows, {"LINK": 15.0, "SOL": 150.0}, now=NOW) == []


class TestSignalService:
    @pytest.fixture
    def coingecko(self):
        return make_coingecko()

    async def test_technical_only_when_whale_source_fails(self, coingecko):
        service = SignalService(coingecko, MarketService(coingecko),
                                whale_flow=FailingFlows(httpx.ConnectError("down")))
        signals, whale_data = await service.generate()
        assert whale_data is False
        assert [s.token for s in signals] == ["BTC", "ETH", "SOL"]

    async def test_arithmetic_errors_also_fall_back(self, coingecko):
        service = SignalService(coingecko, MarketService(coingecko),
                                whale_flow=FailingFlows(ZeroDivisionError()))
        signals, whale_data = await service.generate()
        assert whale_data is False
        assert len(signals) == 3

    async def test_whale_blending(self, coingecko):
        flows = StaticFlows({"SOL": WhaleFlow(buys=4, sells=0)})
        service = SignalService(coingecko, MarketService(coingecko), whale_flow=flows)
        signals, whale_data = await service.generate()
        assert whale_data is True
        assert signals[2].signal_type is SignalType.BUY

        signals, whale_data = await service.generate(use_whale_data=False)
        assert whale_data is False
        assert signals[2].signal_type is SignalType.HOLD

    async def test_snapshot_is_cached(self):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            return coingecko_handler(request)

        coingecko = make_coingecko(handler)
        service = SignalService(coingecko, MarketService(coingecko))
        await service.get_snapshot()
        await service.get_snapshot()
        assert len(calls) == 1

    async def test_snapshot_rate_limit_maps_to_429(self):
        coingecko = make_coingecko(lambda request: httpx.Response(429))
        service = SignalService(coingecko, MarketService(coingecko))
        with pytest.raises(HTTPException) as exc_info:
            await service.get_snapshot()
        assert exc_info.value.status_code == 429

    async def test_feed_merges_stored_whale_activity(self, coingecko, session):
        recent = datetime.now(timezone.utc) - timedelta(hours=1)
        for i in range(3):
            session.add(make_row(i, "ETH", TxType.BUY, 1_000_000, timestamp=recent))
        session.add(make_row(9, "ETH", TxType.SELL, 9_000_000,
                             timestamp=datetime.now(timezone.utc) - timedelta(days=3)))
        session.commit()

        service = SignalService(coingecko, MarketService(coingecko))
        feed = await service.get_feed(session, token="eth")
        assert [s.source for s in feed.signals] == ["whale_flow", "technical"]
        assert feed.signals[0].signal_type is SignalType.STRONG_BUY
        assert feed.signals[0].entry_price == 3000.0
        assert feed.stats.total == 2

    async def test_feed_filters_and_limit(self, coingecko, session):
        service = SignalService(coingecko, MarketService(coingecko))
        feed = await service.get_feed(session, signal_type=SignalType.HOLD)
        assert [s.token for s in feed.signals] == ["SOL"]
        feed = await service.get_feed(session, limit=1)
        assert [s.token for s in feed.signals] == ["BTC"]


class TestSignalRoutes:
    def test_get_signals(self, client):
        response = client.get("/api/signals")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["whale_data"] is False
        assert [s["token"] for s in body["data"]["signals"]] == ["BTC", "ETH", "SOL"]

    def test_filter_by_type(self, client):
        response = client.get("/api/signals", params={"type": "HOLD"})
        assert [s["token"] for s in response.json()["data"]["signals"]] == ["SOL"]

    def test_invalid_type_is_rejected(self, client):
        response = client.get("/api/signals", params={"type": "MOON"})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_actions_require_auth(self, client, auth):
        auth["user"] = None
        assert client.get("/api/signals/actions").status_code == 401

    def test_action_upsert(self, client):
        body = {"signal_id": "technical-bitcoin-2026010112", "action": "followed"}
        assert client.post("/api/signals/actions", json=body).status_code == 200
        body["action"] = "closed"
        client.post("/api/signals/actions", json=body)
        actions = client.get("/api/signals/actions").json()["data"]
        assert len(actions) == 1
        assert actions[0]["action"] == "closed"
