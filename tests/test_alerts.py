"""Tests for alert CRUD routes, notification history and the alert checker."""
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy import DateTime
from sqlmodel import SQLModel

from smartwhale.db import Alert, AlertType, Notification, User
from smartwhale.providers.etherscan import EtherscanTx
from smartwhale.services import AlertChecker
from smartwhale.utils import as_utc

BINANCE = "0x28C6c06298d514Db089934071355E5743bf21d60"
WHALE = "0x1111111111111111111111111111111111111111"
ETH = 10**18
NOW = datetime(2026, 1, 10, 12, tzinfo=timezone.utc)
# 2026-01-10 12:00 UTC as a Unix timestamp.
NOW_EPOCH = 1_768_046_400


class FakeEtherscan:
    """Balances keyed by block tag ("latest" or the block number string)."""

    BLOCK_24H_AGO = 19_000_000

    def __init__(self, balances=None, txs=None, error=None):
        self.balances = balances or {}
        self.txs = txs or []
        self.error = error
        self.block_requests = []

    async def get_balance(self, address, tag="latest"):
        if self.error:
            raise self.error
        return self.balances.get(tag, 0)

    async def get_block_by_time(self, timestamp, closest="before"):
        self.block_requests.append(timestamp)
        return self.BLOCK_24H_AGO

    async def get_transactions(self, address, limit=20):
        return self.txs


class FakeMarket:
    def __init__(self, prices=None, live=True):
        self.prices = prices or {}
        self.live = live

    async def get_usd_prices(self, symbols):
        return {s: self.prices[s] for s in symbols if s in self.prices}, self.live


class FakeEmail:
    configured = True

    def __init__(self):
        self.sent = []

    async def send_quietly(self, to, template, data=None):
        self.sent.append((to, template, data))
        return True


def balances(current_eth, previous_eth):
    return {"latest": int(current_eth * ETH), str(FakeEtherscan.BLOCK_24H_AGO): int(previous_eth * ETH)}


def add_alert(session, alert_type, threshold, **fields) -> Alert:
    alert = Alert(user_id="user-1", alert_type=alert_type, threshold_value=threshold, **fields)
    session.add(alert)
    session.commit()
    session.refresh(alert)
    return alert


@pytest.fixture
def new_york_tz(monkeypatch):
    """Run with a server clock west of UTC."""
    with monkeypatch.context() as patch:
        patch.setenv("TZ", "America/New_York")
        time.tzset()
        yield
    time.tzset()


class TestAlertChecker:
    async def test_balance_increase_triggers(self, session):
        alert = add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE,
                          whale_label="Test Whale")
        checker = AlertChecker(FakeEtherscan(balances(110, 100)), FakeMarket())

        result = await checker.check_all(session, now=NOW)

        assert (result.checked, result.triggered, result.errors) == (1, 1, 0)
        notification = result.notifications[0]
        assert notification.message == "Test Whale balance increased by 10.00%"
        assert notification.notification_type == "balance_increase"
        assert notification.data["previous_balance"] == pytest.approx(100)
        session.refresh(alert)
        assert as_utc(alert.last_triggered_at) == NOW

    async def test_balance_decrease(self, session):
        add_alert(session, AlertType.BALANCE_DECREASE, 10, whale_address=WHALE)
        checker = AlertChecker(FakeEtherscan(balances(80, 100)), FakeMarket())
        result = await checker.check_all(session, now=NOW)
        assert result.triggered == 1
        assert "decreased by 20.00%" in result.notifications[0].message

    async def test_change_below_threshold(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 15, whale_address=WHALE)
        checker = AlertChecker(FakeEtherscan(balances(110, 100)), FakeMarket())
        result = await checker.check_all(session, now=NOW)
        assert result.triggered == 0

    async def test_empty_previous_balance_never_triggers(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE)
        checker = AlertChecker(FakeEtherscan(balances(110, 0)), FakeMarket())
        result = await checker.check_all(session, now=NOW)
        assert result.triggered == 0

    async def test_cooldown_skips_recent_triggers(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE,
                  last_triggered_at=NOW - timedelta(minutes=30))
        checker = AlertChecker(FakeEtherscan(balances(110, 100)), FakeMarket(), cooldown_minutes=60)
        result = await checker.check_all(session, now=NOW)
        assert (result.skipped, result.triggered) == (1, 0)

    async def test_inactive_alerts_are_ignored(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE, is_active=False)
        checker = AlertChecker(FakeEtherscan(balances(110, 100)), FakeMarket())
        result = await checker.check_all(session, now=NOW)
        assert result.checked == 0

    async def test_large_transaction(self, session):
        recent = EtherscanTx(hash="0xbig", block_number=1, time_stamp=int((NOW - timedelta(minutes=10)).timestamp()),
                             from_address=WHALE, to_address=BINANCE, value=6 * ETH)
        old = EtherscanTx(hash="0xold", block_number=1, time_stamp=int((NOW - timedelta(hours=3)).timestamp()),
                          from_address=WHALE, to_address=BINANCE, value=60 * ETH)
        add_alert(session, AlertType.LARGE_TRANSACTION, 5, whale_address=WHALE)
        checker = AlertChecker(FakeEtherscan({"latest": 100 * ETH}, txs=[old, recent]), FakeMarket())

        result = await checker.check_all(session, now=NOW)

        assert result.triggered == 1
        assert result.notifications[0].data["tx_hash"] == "0xbig"

    async def test_lookback_block_uses_utc_epoch(self, session, new_york_tz):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE)
        etherscan = FakeEtherscan(balances(110, 100))
        await AlertChecker(etherscan, FakeMarket()).check_all(session, now=NOW)
        assert etherscan.block_requests == [NOW_EPOCH - 24 * 3600]

    async def test_large_transaction_window_in_utc(self, session, new_york_tz):
        recent = EtherscanTx(hash="0xbig", block_number=1, time_stamp=NOW_EPOCH - 600,
                             from_address=WHALE, to_address=BINANCE, value=6 * ETH)
        stale = EtherscanTx(hash="0xstale", block_number=1, time_stamp=NOW_EPOCH - 2 * 3600,
                            from_address=WHALE, to_address=BINANCE, value=60 * ETH)
        add_alert(session, AlertType.LARGE_TRANSACTION, 5, whale_address=WHALE)
        checker = AlertChecker(FakeEtherscan({"latest": 100 * ETH}, txs=[stale, recent]), FakeMarket())

        result = await checker.check_all(session, now=NOW)

        assert result.triggered == 1
        assert result.notifications[0].data["tx_hash"] == "0xbig"

    async def test_cooldown_with_stored_timestamp(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE,
                  last_triggered_at=NOW - timedelta(minutes=90))
        checker = AlertChecker(FakeEtherscan(balances(110, 100)), FakeMarket(), cooldown_minutes=60)
        result = await checker.check_all(session, now=NOW)
        assert (result.skipped, result.triggered) == (0, 1)

    async def test_price_alerts(self, session):
        add_alert(session, AlertType.PRICE_ABOVE, 3000, token_symbol="ETH")
        add_alert(session, AlertType.PRICE_BELOW, 2000, token_symbol="ETH")
        checker = AlertChecker(FakeEtherscan(), FakeMarket({"ETH": 3100.0}))
        result = await checker.check_all(session, now=NOW)
        assert result.triggered == 1
        assert result.notifications[0].message == "ETH rose above $3,000.00 (now $3,100.00)"

    async def test_fallback_prices_do_not_trigger(self, session):
        add_alert(session, AlertType.PRICE_ABOVE, 3000, token_symbol="ETH")
        checker = AlertChecker(FakeEtherscan(), FakeMarket({"ETH": 3575.0}, live=False))
        result = await checker.check_all(session, now=NOW)
        assert result.triggered == 0

    async def test_provider_failure_is_counted(self, session):
        add_alert(session, AlertType.BALANCE_INCREASE, 5, whale_address=WHALE)
        add_alert(session, AlertType.PRICE_ABOVE, 3000, token_symbol="ETH")
        checker = AlertChecker(FakeEtherscan(error=httpx.ConnectError("down")),
                               FakeMarket({"ETH": 3100.0}))
        result = await checker.check_all(session, now=NOW)
        assert (result.checked, result.errors, result.triggered) == (2, 1, 1)

    async def test_owner_is_emailed(self, session):
        session.add(User(id="user-1", email="alice@example.com"))
        add_alert(session, AlertType.PRICE_ABOVE, 3000, token_symbol="ETH")
        email = FakeEmail()
        checker = AlertChecker(FakeEtherscan(), FakeMarket({"ETH": 3100.0}), email)

        await checker.check_all(session, now=NOW)

        (to, template, data) = email.sent[0]
        assert (to, template) == ("alice@example.com", "alert")
        assert data["action"] == "crossed above"

    def test_cooldown_from_environment(self, monkeypatch):
        monkeypatch.setenv("ALERT_COOLDOWN_MINUTES", "15")
        checker = AlertChecker(FakeEtherscan(), FakeMarket())
        assert checker._cooldown == timedelta(minutes=15)


class TestAlertRoutes:
    @pytest.fixture
    def whale_alert(self):
        return {"alert_type": "balance_increase", "threshold_value": 10, "whale_address": BINANCE}

    def test_requires_auth(self, client, auth):
        auth["user"] = None
        response = client.get("/api/alerts")
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Unauthorized"}

    def test_create_and_list(self, client, whale_alert):
        response = client.post("/api/alerts", json=whale_alert)
        assert response.status_code == 201
        alert = response.json()["data"]
        assert alert["whale_address"] == BINANCE.lower()
        assert alert["whale_label"] == "Binance Cold Wallet 2"
        assert alert["is_active"] is True

        alerts = client.get("/api/alerts").json()["data"]
        assert [a["id"] for a in alerts] == [alert["id"]]

    def test_price_alert_needs_token(self, client):
        response = client.post("/api/alerts", json={"alert_type": "price_above", "threshold_value": 3000})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_whale_alert_needs_valid_address(self, client):
        body = {"alert_type": "balance_decrease", "threshold_value": 5, "whale_address": "0xabc"}
        assert client.post("/api/alerts", json=body).status_code == 422

    def test_threshold_must_be_positive(self, client, whale_alert):
        whale_alert["threshold_value"] = 0
        assert client.post("/api/alerts", json=whale_alert).status_code == 422

    def test_update_and_delete(self, client, whale_alert):
        alert_id = client.post("/api/alerts", json=whale_alert).json()["data"]["id"]

        response = client.patch(f"/api/alerts/{alert_id}", json={"is_active": False})
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False
        assert response.json()["data"]["threshold_value"] == 10

        assert client.delete(f"/api/alerts/{alert_id}").status_code == 200
        assert client.delete(f"/api/alerts/{alert_id}").status_code == 404

    def test_other_users_alerts_are_hidden(self, client, auth, whale_alert):
        alert_id = client.post("/api/alerts", json=whale_alert).json()["data"]["id"]
        auth["user"] = auth["user"].model_copy(update={"id": "user-2"})

        assert client.get("/api/alerts").json()["data"] == []
        assert client.patch(f"/api/alerts/{alert_id}", json={"is_active": False}).status_code == 404
        assert client.delete(f"/api/alerts/{alert_id}").status_code == 404

    def test_history_and_read(self, client, session):
        for i in range(3):
            session.add(Notification(user_id="user-1", notification_type="price_above",
                                     message=f"alert {i}", created_at=NOW + timedelta(minutes=i)))
        session.add(Notification(user_id="user-2", notification_type="price_above", message="other"))
        session.commit()

        history = client.get("/api/alerts/history").json()["data"]
        assert [n["message"] for n in history] == ["alert 2", "alert 1", "alert 0"]

        response = client.post(f"/api/alerts/history/{history[0]['id']}/read")
        assert response.json()["data"]["is_read"] is True
        assert client.post("/api/alerts/history/read-all").json()["data"] == {"updated": 2}
        assert client.post("/api/alerts/history/9999/read").status_code == 404


class TestCheckAlertsCron:
    def test_secret_required_when_configured(self, client, monkeypatch):
        monkeypatch.setenv("CRON_SECRET", "s3cret")
        assert client.post("/api/cron/check-alerts").status_code == 401
        wrong = {"Authorization": "Bearer nope"}
        assert client.get("/api/cron/check-alerts", headers=wrong).status_code == 401

        response = client.post("/api/cron/check-alerts", headers={"Authorization": "Bearer s3cret"})
        assert response.status_code == 200
        assert response.json()["data"]["checked"] == 0

    def test_open_without_secret(self, client):
        assert client.get("/api/cron/check-alerts").status_code == 200


class TestTimestampColumns:
    def test_datetime_columns_are_timezone_aware(self):
        columns = [
            column
            for table in SQLModel.metadata.tables.values()
            for column in table.columns
            if isinstance(column.type, DateTime)
        ]
        assert columns
        assert all(column.type.timezone for column in columns)

    def test_stored_timestamp_reads_back_in_utc(self, session):
        alert = Alert(user_id="user-1", alert_type=AlertType.PRICE_ABOVE, token_symbol="ETH",
                      threshold_value=1, last_triggered_at=NOW)
        session.add(alert)
        session.commit()
        session.expire_all()
        assert as_utc(session.get(Alert, alert.id).last_triggered_at) == NOW
