"""Tests for whale balances, balance history, the activity feed and custom whales."""
from datetime import datetime, timezone

import httpx
import pytest

from smartwhale.db import Severity, TxType
from smartwhale.providers import EtherscanProvider
from smartwhale.providers.etherscan import EtherscanTx
from smartwhale.schemas import WatchlistCreate
from smartwhale.services import ActivityService, WatchlistService, WhaleService
from smartwhale.services.known_whales import KNOWN_WHALE_ADDRESSES
from smartwhale.services.whales import balance_history

WHALE = "0x1111111111111111111111111111111111111111"
BINANCE = "0x28C6c06298d514Db089934071355E5743bf21d60"
ETH = 10**18


def ts(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def tx_row(tx_hash, from_address, to_address, value_wei, time_stamp, is_error="0"):
    return {
        "hash": tx_hash,
        "blockNumber": "19000000",
        "timeStamp": str(time_stamp),
        "from": from_address,
        "to": to_address,
        "value": str(value_wei),
        "isError": is_error,
    }


def etherscan_handler(balances=None, txlist=None, tokentx=None):
    """Mock Etherscan v2: balance, balancemulti, txlist, tokentx and the nonce proxy."""
    balances = {k.lower(): v for k, v in (balances or {}).items()}

    def ok(result):
        return httpx.Response(200, json={"status": "1", "message": "OK", "result": result})

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        action = params["action"]
        if action == "balancemulti":
            addresses = params["address"].split(",")
            return ok([{"account": a, "balance": str(balances.get(a.lower(), 0))} for a in addresses])
        if action == "balance":
            return ok(str(balances.get(params["address"].lower(), 0)))
        if action == "eth_getTransactionCount":
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x10"})
        if action == "txlist" and txlist:
            return ok(txlist)
        if action == "tokentx" and tokentx:
            return ok(tokentx)
        return httpx.Response(
            200, json={"status": "0", "message": "No transactions found", "result": []}
        )

    return handler


def make_etherscan(handler) -> EtherscanProvider:
    client = httpx.AsyncClient(
        base_url=EtherscanProvider.BASE_URL, transport=httpx.MockTransport(handler)
    )
    return EtherscanProvider(api_key="test-key", client=client)


class TestBalanceHistory:
    """End-of-day balances reconstructed backwards from the current balance."""

    @pytest.fixture
    def txs(self):
        rows = [
            tx_row("0x1", BINANCE, WHALE, 2 * ETH, ts(2026, 1, 9, 10)),
            tx_row("0x3", BINANCE, WHALE, 100 * ETH, ts(2026, 1, 9, 8), is_error="1"),
            tx_row("0x2", WHALE, BINANCE, 1 * ETH, ts(2026, 1, 8, 12)),
            tx_row("0x4", WHALE, BINANCE, 50 * ETH, ts(2025, 12, 1, 12)),
        ]
        return [EtherscanTx.model_validate(r) for r in rows]

    def test_walks_back_from_current_balance(self, txs):
        history = balance_history(WHALE, 10.0, txs, period=30, today=datetime(2026, 1, 10, 12))
        assert [(p.time, p.balance) for p in history] == [
            ("2026-01-08", pytest.approx(8.0)),
            ("2026-01-09", pytest.approx(10.0)),
        ]

    def test_address_case_is_ignored(self, txs):
        history = balance_history(WHALE.upper().replace("0X", "0x"), 10.0, txs, period=30,
                                  today=datetime(2026, 1, 10, 12))
        assert history[0].balance == pytest.approx(8.0)

    def test_period_cuts_older_days(self, txs):
        history = balance_history(WHALE, 10.0, txs, period=1, today=datetime(2026, 1, 10, 12))
        assert [p.time for p in history] == ["2026-01-09"]

    def test_no_transactions(self):
        assert balance_history(WHALE, 10.0, [], period=30) == []


class TestWhaleService:
    async def test_top_whales_are_ranked_by_balance(self, market):
        first, second, third = KNOWN_WHALE_ADDRESSES[:3]
        etherscan = make_etherscan(
            etherscan_handler(balances={first: 1 * ETH, second: 3 * ETH, third: 2 * ETH})
        )
        whales, eth_price = await WhaleService(etherscan, market).get_top(limit=3)
        assert eth_price == 3000.0
        assert [w.address for w in whales] == [second, third, first]
        assert [w.rank for w in whales] == [1, 2, 3]
        assert whales[0].usd_value == pytest.approx(9000.0)
        assert whales[0].transactions == 16

    async def test_overview_falls_back_to_mock(self, market):
        etherscan = EtherscanProvider(client=httpx.AsyncClient())
        overview, mock = await WhaleService(etherscan, market).get_overview()
        assert mock is True
        assert overview.whale_count == len(overview.whales)
        assert overview.total_eth == pytest.approx(sum(w.balance for w in overview.whales))


class TestActivityService:
    @pytest.fixture
    def etherscan(self):
        txlist = [
            tx_row("0xsell", WHALE, BINANCE, 5000 * ETH, ts(2026, 1, 9, 10)),
            tx_row("0xzero", WHALE, BINANCE, 0, ts(2026, 1, 9, 9)),
        ]
        tokentx = [
            {
                "hash": "0xbuy",
                "timeStamp": str(ts(2026, 1, 9, 11)),
                "from": BINANCE,
                "to": WHALE,
                "contractAddress": "0xdac17f958d2ee523a2206206994597c13d831ec7",
                "tokenName": "Tether USD",
                "tokenSymbol": "USDT",
                "tokenDecimal": "6",
                "value": str(2_000_000 * 10**6),
            }
        ]
        return make_etherscan(etherscan_handler(txlist=txlist, tokentx=tokentx))

    async def test_live_feed_is_classified(self, etherscan, market):
        service = ActivityService(etherscan, market, whales=[WHALE])
        feed, mock = await service.get_feed()
        assert mock is False
        assert [a.tx_hash for a in feed.activities] == ["0xbuy", "0xsell"]
        buy, sell = feed.activities
        assert (buy.tx_type, buy.token_symbol, buy.severity) == (TxType.BUY, "USDT", Severity.MEDIUM)
        assert buy.amount_usd == pytest.approx(2_000_000)
        assert (sell.tx_type, sell.severity) == (TxType.SELL, Severity.HIGH)
        assert sell.amount_usd == pytest.approx(15_000_000)
        assert feed.stats.total == 2

    async def test_whale_flow_by_token(self, etherscan, market):
        flows = await ActivityService(etherscan, market, whales=[WHALE]).whale_flow_by_token()
        assert (flows["ETH"].buys, flows["ETH"].sells) == (0, 1)
        assert (flows["USDT"].buys, flows["USDT"].sells) == (1, 0)

    async def test_unconfigured_etherscan_serves_mock(self, market):
        etherscan = EtherscanProvider(client=httpx.AsyncClient())
        feed, mock = await ActivityService(etherscan, market).get_feed(tx_type="sell")
        assert mock is True
        assert feed.activities
        assert all(a.tx_type is TxType.SELL for a in feed.activities)


class TestWhaleRoutes:
    def test_overview_is_flagged_as_mock(self, client):
        body = client.get("/api/whales").json()
        assert body["success"] is True
        assert body["mock"] is True
        assert body["data"]["whale_count"] > 0

    def test_activity_feed_mock(self, client):
        body = client.get("/api/whales/activity", params={"severity": "HIGH", "limit": 2}).json()
        assert body["mock"] is True
        assert len(body["data"]["activities"]) <= 2
        assert all(a["severity"] == "HIGH" for a in body["data"]["activities"])

    def test_invalid_address_is_rejected(self, client):
        response = client.get("/api/whales/not-an-address")
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid Ethereum address format"}

    def test_unconfigured_etherscan_is_a_server_error(self, client):
        response = client.get(f"/api/whales/{WHALE}")
        assert response.status_code == 500
        assert "ETHERSCAN_API_KEY" in response.json()["error"]

    def test_failed_balance_lookup_is_not_found(self, app, client, market):
        def handler(request):
            return httpx.Response(200, json={"status": "0", "message": "NOTOK", "result": "Max rate limit reached"})

        app.state.whale_service = WhaleService(make_etherscan(handler), market)
        response = client.get(f"/api/whales/{WHALE}")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": f"Whale '{WHALE}' not found"}

    def test_export_csv(self, app, client, market):
        txlist = [tx_row("0xsell", WHALE, BINANCE, 5 * ETH, int(datetime.now(timezone.utc).timestamp()))]
        etherscan = make_etherscan(etherscan_handler(balances={WHALE: 10 * ETH}, txlist=txlist))
        app.state.whale_service = WhaleService(etherscan, market, token_request_delay=0)

        response = client.get(f"/api/whales/{WHALE}/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.splitlines()
        assert lines[0] == "Address,Label,Balance (ETH),Value (USD),Transactions"
        assert lines[1].startswith(f"{WHALE},Whale 0x1111...,10.000000,30000.00,16")
        assert any(line.startswith("0xsell,") for line in lines)


class TestCustomWhales:
    def test_add_list_delete(self, client):
        response = client.post("/api/whales/custom", json={"address": WHALE.upper().replace("0X", "0x")})
        assert response.status_code == 201
        whale = response.json()["data"]
        assert whale["address"] == WHALE
        assert whale["name"] == "Whale 0x1111..."

        assert [w["id"] for w in client.get("/api/whales/custom").json()["data"]] == [whale["id"]]
        assert client.delete("/api/whales/custom", params={"id": whale["id"]}).status_code == 200
        assert client.get("/api/whales/custom").json()["data"] == []

    def test_duplicate_is_rejected(self, client):
        client.post("/api/whales/custom", json={"address": WHALE, "name": "Mine"})
        response = client.post("/api/whales/custom", json={"address": WHALE})
        assert response.status_code == 400

    def test_invalid_address(self, client):
        response = client.post("/api/whales/custom", json={"address": "0x123"})
        assert response.status_code == 422

    def test_delete_needs_id_or_address(self, client):
        assert client.delete("/api/whales/custom").status_code == 400

    def test_delete_by_address_of_other_user(self, client, auth):
        client.post("/api/whales/custom", json={"address": WHALE})
        auth["user"] = auth["user"].model_copy(update={"id": "user-2"})
        response = client.delete("/api/whales/custom", params={"address": WHALE})
        assert response.status_code == 404

    def test_requires_auth(self, client, auth):
        auth["user"] = None
        assert client.get("/api/whales/custom").status_code == 401


class TestWatchlist:
    def test_follow_and_unfollow(self, client):
        response = client.post("/api/watchlist", json={"whale_address": BINANCE})
        assert response.status_code == 201
        assert response.json()["data"]["whale_label"] == "Binance Cold Wallet 2"

        items = client.get("/api/watchlist").json()["data"]
        assert [i["whale_address"] for i in items] == [BINANCE.lower()]
        assert items[0]["balance"] is None

        assert client.delete("/api/watchlist", params={"address": BINANCE}).status_code == 200
        assert client.get("/api/watchlist").json()["data"] == []

    def test_duplicate_follow(self, client):
        client.post("/api/watchlist", json={"whale_address": BINANCE})
        assert client.post("/api/watchlist", json={"whale_address": BINANCE}).status_code == 400

    def test_unfollow_unknown(self, client):
        assert client.delete("/api/watchlist", params={"address": WHALE}).status_code == 404
        assert client.delete("/api/watchlist", params={"address": "nope"}).status_code == 400

    async def test_balances_are_enriched(self, session, market):
        etherscan = make_etherscan(etherscan_handler(balances={WHALE: 2 * ETH}))
        service = WatchlistService(etherscan, market)
        service.add(session, "user-1", WatchlistCreate(whale_address=WHALE))
        (item,) = await service.list_items(session, "user-1")
        assert item.balance == pytest.approx(2.0)
        assert item.balance_usd == pytest.approx(6000.0)
