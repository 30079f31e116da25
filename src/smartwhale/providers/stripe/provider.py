"""Stripe REST provider: subscription checkout sessions and webhook verification."""
import hashlib
import hmac
import json
import os
import time
from typing import Any

import httpx

from smartwhale.providers.core import (DEFAULT_TIMEOUT, HttpProviderABC,
                                       ProviderNotConfiguredError)

SIGNATURE_TOLERANCE_SECONDS = 300


class WebhookSignatureError(ValueError):
    """Stripe-Signature header missing, malformed, stale or not matching."""


class StripeProvider(HttpProviderABC):
    """Minimal Stripe client over the form-encoded REST API (api.stripe.com/v1)."""

    api_name = "Stripe"
    BASE_URL = "https://api.stripe.com/v1"

    def __init__(
        self,
        secret_key: str | None = None,
        webhook_secret: str | None = None,
        price_ids: dict[str, str] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Stripe provider.

        Args:
            secret_key: Defaults to STRIPE_SECRET_KEY env var.
            webhook_secret: Endpoint signing secret. Defaults to STRIPE_WEBHOOK_SECRET.
            price_ids: Plan -> price id. Defaults to STRIPE_PRICE_ID_PRO / _ENTERPRISE.
            client: Preconfigured client (tests); built from the settings otherwise.
        """
        self._secret_key = secret_key or os.getenv("STRIPE_SECRET_KEY", "")
        self._webhook_secret = webhook_secret or os.getenv("STRIPE_WEBHOOK_SECRET", "")
        self._price_ids = price_ids or {
            "pro": os.getenv("STRIPE_PRICE_ID_PRO", ""),
            "enterprise": os.getenv("STRIPE_PRICE_ID_ENTERPRISE", ""),
        }
        if client is None:
            client = httpx.AsyncClient(base_url=self.BASE_URL, timeout=DEFAULT_TIMEOUT)
        super().__init__(client)

    @property
    def configured(self) -> bool:
        return bool(self._secret_key)

    def price_id_for(self, plan: str) -> str:
        """Price id configured for a plan. Raises ProviderNotConfiguredError if missing."""
        price_id = self._price_ids.get(plan)
        if not price_id:
            raise ProviderNotConfiguredError(self.api_name, f"price id for plan '{plan}'")
        return price_id

    async def create_checkout_session(
        self,
        *,
        plan: str,
        user_id: str,
        success_url: str,
        cancel_url: str,
        customer_email: str | None = None,
    ) -> dict[str, Any]:
        """Create a subscription Checkout Session for a plan.

        The user id travels in metadata and client_reference_id so the
        webhook can attach the subscription to the account.

        Returns:
            The Checkout Session object (id, url, ...).
        """
        self.require_configured("STRIPE_SECRET_KEY")
        form = {
            "mode": "subscription",
            "line_items[0][price]": self.price_id_for(plan),
            "line_items[0][quantity]": "1",
            "success_url": success_url,
            "cancel_url": cancel_url,
            "client_reference_id": user_id,
            "metadata[userId]": user_id,
            "metadata[plan]": plan,
            "subscription_data[metadata][userId]": user_id,
        }
        if customer_email:
            form["customer_email"] = customer_email
        response = await self._client.post(
            "/checkout/sessions",
            data=form,
            headers={"Authorization": f"Bearer {self._secret_key}"},
        )
        response.raise_for_status()
        return response.json()

    def construct_event(
        self,
        payload: bytes,
        signature_header: str | None,
        *,
        now: float | None = None,
    ) -> dict[str, Any]:
        """Verify a webhook payload against its Stripe-Signature header and parse it.

        The header carries ``t=<unix time>`` and one or more ``v1=<hex>``
        entries; each v1 is HMAC-SHA256 of ``"<t>.<payload>"`` with the
        endpoint secret.

        Raises:
            ProviderNotConfiguredError: STRIPE_WEBHOOK_SECRET is missing.
            WebhookSignatureError: Header missing, malformed, stale or wrong.
        """
        if not self._webhook_secret:
            raise ProviderNotConfiguredError(self.api_name, "STRIPE_WEBHOOK_SECRET")
        if not signature_header:
            raise WebhookSignatureError("Missing Stripe-Signature header")

        timestamp: int | None = None
        signatures: list[str] = []
        for item in signature_header.split(","):
            key, _, value = item.strip().partition("=")
            if key == "t" and value.isdigit():
                timestamp = int(value)
            elif key == "v1":
                signatures.append(value)
        if timestamp is None or not signatures:
            raise WebhookSignatureError("Malformed Stripe-Signature header")

        current = time.time() if now is None else now
        if abs(current - timestamp) > SIGNATURE_TOLERANCE_SECONDS:
            raise WebhookSignatureError("Timestamp outside the tolerance zone")

        expected = sign_payload(self._webhook_secret, timestamp, payload)
        if not any(hmac.compare_digest(expected, sig) for sig in signatures):
            raise WebhookSignatureError("No signatures found matching the expected signature")
        return json.loads(payload)


def sign_payload(secret: str, timestamp: int, payload: bytes) -> str:
    """Hex HMAC-SHA256 signature Stripe computes for a webhook payload."""
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
