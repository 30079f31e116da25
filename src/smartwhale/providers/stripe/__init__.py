"""Stripe provider."""
from smartwhale.providers.stripe.provider import (StripeProvider,
                                                  WebhookSignatureError,
                                                  sign_payload)

__all__ = ["StripeProvider", "WebhookSignatureError", "sign_payload"]
