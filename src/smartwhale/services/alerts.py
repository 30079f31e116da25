"""Alert CRUD, notification history and the periodic alert checker."""
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta

from fastapi import HTTPException
from sqlmodel import Session, col, select

from smartwhale.db import Alert, AlertType, Notification, User
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, wei_to_eth
from smartwhale.providers.etherscan import EtherscanProvider
from smartwhale.schemas import (AlertCheckResult, AlertCreate, AlertUpdate,
                                NotificationOut)
from smartwhale.services.email import EmailService
from smartwhale.services.known_whales import whale_label
from smartwhale.services.market_service import MarketService
from smartwhale.utils import as_utc, utc_now

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50
LARGE_TX_WINDOW = timedelta(hours=1)
BALANCE_LOOKBACK = timedelta(hours=24)


def list_alerts(session: Session, user_id: str) -> list[Alert]:
    statement = (
        select(Alert).where(Alert.user_id == user_id).order_by(col(Alert.created_at).desc())
    )
    return list(session.exec(statement).all())


def create_alert(session: Session, user_id: str, body: AlertCreate) -> Alert:
    label = body.whale_label
    if body.whale_address and not label:
        label = whale_label(body.whale_address)
    alert = Alert(
        user_id=user_id,
        alert_type=body.alert_type,
        whale_address=body.whale_address,
        whale_label=label,
        token_symbol=body.token_symbol,
        threshold_value=body.threshold_value,
    )
    session.add(alert)
    session.commit()
    session.refresh(alert)
    return alert


def get_owned_alert(session: Session, user_id: str, alert_id: int) -> Alert:
    """Alert by id owned by the user. Raises HTTPException(404) otherwise."""
    alert = session.get(Alert, alert_id)
    if alert is None or alert.user_id != user_id:
        raise HTTPException(status_code=404, detail="Alert not found")
    return alert


def update_alert(session: Session, user_id: str, alert_id: int, body: AlertUpdate) -> Alert:
    alert = get_owned_alert(session, user_id, alert_id)
    for field, value in body.model_dump(exclude_none=True).items():
        setattr(alert, field, value)
    session.add(alert)
    session.commit()
    session.refresh(alert)
    return alert


def delete_alert(session: Session, user_id: str, alert_id: int) -> None:
    alert = get_owned_alert(session, user_id, alert_id)
    session.delete(alert)
    session.commit()


def list_notifications(session: Session, user_id: str, limit: int = HISTORY_LIMIT) -> list[Notification]:
    statement = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(col(Notification.created_at).desc())
        .limit(limit)
    )
    return list(session.exec(statement).all())


def mark_read(session: Session, user_id: str, notification_id: int) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.is_read = True
    session.add(notification)
    session.commit()
    session.refresh(notification)
    return notification


def mark_all_read(session: Session, user_id: str) -> int:
    """Mark every unread notification of the user as read; returns how many changed."""
    unread = session.exec(
        select(Notification).where(
            Notification.user_id == user_id, col(Notification.is_read).is_(False)
        )
    ).all()
    for notification in unread:
        notification.is_read = True
        session.add(notification)
    session.commit()
    return len(unread)


@dataclass
class Trigger:
    """A met alert condition, before it is stored as a notification."""

    message: str
    data: dict
    email_action: str
    email_coin: str
    email_amount: str


class AlertChecker:
    """Evaluates every active alert against Etherscan balances and CoinGecko prices."""

    def __init__(
        self,
        etherscan: EtherscanProvider,
        market: MarketService,
        email: EmailService | None = None,
        *,
        cooldown_minutes: int | None = None,
    ) -> None:
        """Initialize with providers.

        Args:
            etherscan: Balance and transaction lookups for whale alerts.
            market: Prices for price alerts.
            email: Optional alert email sender (best-effort).
            cooldown_minutes: Minimum minutes between two triggers of one alert.
                Defaults to ALERT_COOLDOWN_MINUTES env var, else 60.
        """
        self._etherscan = etherscan
        self._market = market
        self._email = email
        if cooldown_minutes is None:
            cooldown_minutes = int(os.getenv("ALERT_COOLDOWN_MINUTES", "60"))
        self._cooldown = timedelta(minutes=cooldown_minutes)

    async def check_all(self, session: Session, now: datetime | None = None) -> AlertCheckResult:
        """Check every active alert once.

        Alerts inside their cooldown are skipped. A failing alert is logged
        and counted in ``errors``; the run continues with the next one.
        """
        now = as_utc(now) if now else utc_now()
        alerts = session.exec(select(Alert).where(col(Alert.is_active).is_(True))).all()
        result = AlertCheckResult(checked=len(alerts), triggered=0)

        for alert in alerts:
            if alert.last_triggered_at and now - as_utc(alert.last_triggered_at) < self._cooldown:
                result.skipped += 1
                continue
            try:
                trigger = await self.evaluate(alert, now)
            except PROVIDER_EXCEPTIONS as exc:
                logger.warning("Alert %s check failed: %s", alert.id, exc)
                result.errors += 1
                continue
            if trigger is None:
                continue

            notification = Notification(
                user_id=alert.user_id,
                alert_id=alert.id,
                whale_address=alert.whale_address,
                whale_label=alert.whale_label,
                notification_type=alert.alert_type.value,
                message=trigger.message,
                data=trigger.data,
                created_at=now,
            )
            alert.last_triggered_at = now
            session.add(notification)
            session.add(alert)
            session.commit()
            session.refresh(notification)
            result.triggered += 1
            result.notifications.append(NotificationOut.model_validate(notification))
            logger.info("Alert %s triggered: %s", alert.id, trigger.message)
            await self._notify_by_email(session, alert, trigger)
        return result

    async def evaluate(self, alert: Alert, now: datetime) -> Trigger | None:
        """Return the trigger when the alert condition holds, else None."""
        now = as_utc(now)
        if alert.alert_type in (AlertType.PRICE_ABOVE, AlertType.PRICE_BELOW):
            return await self._check_price(alert)
        if alert.alert_type == AlertType.LARGE_TRANSACTION:
            return await self._check_large_transaction(alert, now)
        return await self._check_balance_change(alert, now)

    async def _check_balance_change(self, alert: Alert, now: datetime) -> Trigger | None:
        address = alert.whale_address or ""
        current = wei_to_eth(await self._etherscan.get_balance(address))
        block = await self._etherscan.get_block_by_time(int((now - BALANCE_LOOKBACK).timestamp()))
        previous = wei_to_eth(await self._etherscan.get_balance(address, tag=str(block)))
        if previous <= 0:
            return None

        change = (current - previous) / previous * 100
        label = alert.whale_label or whale_label(address)
        data = {"current_balance": current, "previous_balance": previous, "change_percent": change}
        if alert.alert_type == AlertType.BALANCE_INCREASE and change >= alert.threshold_value:
            return Trigger(f"{label} balance increased by {change:.2f}%", data,
                           "accumulated", "ETH", f"{current - previous:,.2f}")
        if alert.alert_type == AlertType.BALANCE_DECREASE and change <= -alert.threshold_value:
            return Trigger(f"{label} balance decreased by {abs(change):.2f}%", data,
                           "moved out", "ETH", f"{previous - current:,.2f}")
        return None

    async def _check_large_transaction(self, alert: Alert, now: datetime) -> Trigger | None:
        address = alert.whale_address or ""
        current = wei_to_eth(await self._etherscan.get_balance(address))
        txs = await self._etherscan.get_transactions(address, limit=10)
        since = int((now - LARGE_TX_WINDOW).timestamp())
        limit_eth = current * alert.threshold_value / 100
        for tx in txs:
            value = wei_to_eth(tx.value)
            if tx.time_stamp > since and value > limit_eth:
                label = alert.whale_label or whale_label(address)
                return Trigger(
                    f"{label} made a large transaction: {value:.2f} ETH",
                    {"tx_hash": tx.hash, "tx_value": value, "current_balance": current},
                    "transferred", "ETH", f"{value:,.2f}",
                )
        return None

    async def _check_price(self, alert: Alert) -> Trigger | None:
        symbol = (alert.token_symbol or "").upper()
        prices, live = await self._market.get_usd_prices([symbol])
        price = prices.get(symbol)
        if price is None or not live:
            return None
        data = {"token_symbol": symbol, "price": price, "threshold": alert.threshold_value}
        if alert.alert_type == AlertType.PRICE_ABOVE and price >= alert.threshold_value:
            return Trigger(f"{symbol} rose above ${alert.threshold_value:,.2f} (now ${price:,.2f})",
                           data, "crossed above", symbol, f"${price:,.2f}")
        if alert.alert_type == AlertType.PRICE_BELOW and price <= alert.threshold_value:
            return Trigger(f"{symbol} fell below ${alert.threshold_value:,.2f} (now ${price:,.2f})",
                           data, "crossed below", symbol, f"${price:,.2f}")
        return None

    async def _notify_by_email(self, session: Session, alert: Alert, trigger: Trigger) -> None:
        if self._email is None or not self._email.configured:
            return
        user = session.get(User, alert.user_id)
        if user is None:
            return
        await self._email.send_quietly(
            user.email,
            "alert",
            {
                "whale": alert.whale_label or alert.token_symbol or "Market",
                "action": trigger.email_action,
                "coin": trigger.email_coin,
                "amount": trigger.email_amount,
            },
        )
