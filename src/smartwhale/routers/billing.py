"""Stripe billing routes."""
from fastapi import APIRouter, HTTPException, Request

from smartwhale.deps import BillingServiceDep, CurrentUser, DbSession
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.providers.stripe import WebhookSignatureError
from smartwhale.schemas import (ApiResponse, CheckoutRequest, CheckoutSession,
                                WebhookResult)

router = APIRouter(prefix="/billing", tags=["billing"])

_errors = ProviderErrorMapper("Checkout session", "Stripe")


@router.post("/checkout", response_model=ApiResponse[CheckoutSession])
async def create_checkout(
    body: CheckoutRequest, user: CurrentUser, service: BillingServiceDep
) -> ApiResponse[CheckoutSession]:
    """Stripe Checkout URL for the pro or enterprise plan."""
    try:
        return ApiResponse(data=await service.create_checkout(user, body.plan))
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)


@router.post("/webhook", response_model=ApiResponse[WebhookResult])
async def stripe_webhook(
    request: Request, session: DbSession, service: BillingServiceDep
) -> ApiResponse[WebhookResult]:
    """Stripe webhook endpoint. Invalid Stripe-Signature -> 400."""
    payload = await request.body()
    try:
        result = service.handle_webhook(session, payload, request.headers.get("stripe-signature"))
    except WebhookSignatureError as e:
        raise HTTPException(status_code=400, detail=f"Webhook error: {e}") from e
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)
    return ApiResponse(data=result)
