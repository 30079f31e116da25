"""Stripe subscription checkout and webhook handling."""
import logging
import os
from typing import Any

from sqlmodel import Session, select

from smartwhale.db import Subscription
from smartwhale.providers.stripe import StripeProvider
from smartwhale.schemas import AuthUser, CheckoutSession, WebhookResult
from smartwhale.services.email import DEFAULT_APP_URL
from smartwhale.utils import utc_now

logger = logging.getLogger(__name__)


class BillingService:
    """Creates checkout sessions and applies webhook events to the subscription table."""

    def __init__(self, stripe: StripeProvider, app_url: str | None = None) -> None:
        self._stripe = stripe
        self._app_url = (app_url or os.getenv("APP_URL") or DEFAULT_APP_URL).rstrip("/")
        self._handlers = {
            "checkout.session.completed": self._checkout_completed,
            "customer.subscription.updated": self._subscription_updated,
            "customer.subscription.deleted": self._subscription_deleted,
        }

    async def create_checkout(self, user: AuthUser, plan: str) -> CheckoutSession:
        """Checkout Session for the plan; Stripe errors propagate to the caller."""
        session = await self._stripe.create_checkout_session(
            plan=plan,
            user_id=user.id,
            success_url=f"{self._app_url}/dashboard?checkout=success",
            cancel_url=f"{self._app_url}/pricing?checkout=cancelled",
            customer_email=user.email,
        )
        return CheckoutSession(session_id=session["id"], url=session.get("url") or "")

    def handle_webhook(
        self, session: Session, payload: bytes, signature: str | None
    ) -> WebhookResult:
        """Verify and apply a webhook delivery.

        Raises:
            WebhookSignatureError: Signature missing or invalid (rendered as 400).
        """
        event = self._stripe.construct_event(payload, signature)
        event_type = event.get("type", "")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug("Ignoring Stripe event %s", event_type)
            return WebhookResult(event_type=event_type, handled=False)
        obj = event.get("data", {}).get("object", {})
        handled = handler(session, obj)
        session.commit()
        return WebhookResult(event_type=event_type, handled=handled)

    @staticmethod
    def _checkout_completed(session: Session, obj: dict[str, Any]) -> bool:
        metadata = obj.get("metadata") or {}
        user_id = metadata.get("userId") or obj.get("client_reference_id")
        if not user_id:
            logger.warning("checkout.session.completed %s without a user id", obj.get("id"))
            return False
        subscription = session.exec(
            select(Subscription).where(Subscription.user_id == user_id)
        ).first() or Subscription(user_id=user_id)
        subscription.stripe_customer_id = obj.get("customer")
        subscription.stripe_subscription_id = obj.get("subscription")
        subscription.status = "active"
        subscription.plan = metadata.get("plan") or "pro"
        subscription.updated_at = utc_now()
        session.add(subscription)
        logger.info("Subscription activated for user %s (%s)", user_id, subscription.plan)
        return True

    @staticmethod
    def _subscription_updated(session: Session, obj: dict[str, Any]) -> bool:
        subscription = _by_stripe_id(session, obj.get("id"))
        if subscription is None:
            return False
        subscription.status = obj.get("status") or subscription.status
        subscription.updated_at = utc_now()
        session.add(subscription)
        return True

    @staticmethod
    def _subscription_deleted(session: Session, obj: dict[str, Any]) -> bool:
        subscription = _by_stripe_id(session, obj.get("id"))
        if subscription is None:
            return False
        subscription.status = "cancelled"
        subscription.updated_at = utc_now()
        session.add(subscription)
        logger.info("Subscription %s cancelled", obj.get("id"))
        return True


def _by_stripe_id(session: Session, stripe_subscription_id: str | None) -> Subscription | None:
    if not stripe_subscription_id:
        return None
    return session.exec(
        select(Subscription).where(Subscription.stripe_subscription_id == stripe_subscription_id)
    ).first()
