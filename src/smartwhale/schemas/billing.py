"""Stripe billing and transactional email schemas."""
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from smartwhale.schemas.auth import EMAIL_PATTERN

Plan = Literal["pro", "enterprise"]


class CheckoutRequest(BaseModel):
    plan: Plan


class CheckoutSession(BaseModel):
    session_id: str
    url: str


class WebhookResult(BaseModel):
    received: bool = True
    event_type: str
    handled: bool


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    plan: str
    stripe_customer_id: str | None
    stripe_subscription_id: str | None


class EmailRequest(BaseModel):
    """Body of POST /api/email/send; data carries the template parameters."""

    to: str | None = Field(default=None, pattern=EMAIL_PATTERN)  # must be the caller's own address
    type: str = Field(min_length=1, max_length=50)  # welcome | alert | password_reset
    data: dict = {}
