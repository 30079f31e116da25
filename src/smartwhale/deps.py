"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

Lifespan (main.py) creates providers and services once and attaches them to
app.state; these getters are used by Depends(). Auth dependencies resolve the
caller from a Supabase access token.
"""
import hmac
import logging
import os
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, WebSocket
from sqlmodel import Session

from smartwhale.db.sessions import get_db
from smartwhale.providers import ProviderErrorMapper, SupabaseAuthProvider
from smartwhale.providers.core import PROVIDER_EXCEPTIONS
from smartwhale.providers.supabase import SupabaseAuthError
from smartwhale.schemas import AuthUser
from smartwhale.services import (AccountService, ActivityService, AlertChecker,
                                 BillingService, EmailService, MarketService,
                                 PortfolioService, SignalService,
                                 WatchlistService, WhaleService,
                                 WhaleSyncService)

logger = logging.getLogger(__name__)

_auth_errors = ProviderErrorMapper("User", "Supabase Auth")


def get_market_service(request: Request) -> MarketService:
    """Resolve MarketService from app.state (created at startup)."""
    return request.app.state.market_service


def get_market_service_ws(websocket: WebSocket) -> MarketService:
    """Resolve MarketService for WebSocket routes."""
    return websocket.scope["app"].state.market_service


def get_whale_service(request: Request) -> WhaleService:
    return request.app.state.whale_service


def get_activity_service(request: Request) -> ActivityService:
    return request.app.state.activity_service


def get_signal_service(request: Request) -> SignalService:
    return request.app.state.signal_service


def get_portfolio_service(request: Request) -> PortfolioService:
    return request.app.state.portfolio_service


def get_watchlist_service(request: Request) -> WatchlistService:
    return request.app.state.watchlist_service


def get_alert_checker(request: Request) -> AlertChecker:
    return request.app.state.alert_checker


def get_sync_service(request: Request) -> WhaleSyncService:
    return request.app.state.sync_service


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_billing_service(request: Request) -> BillingService:
    return request.app.state.billing_service


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_supabase(request: Request) -> SupabaseAuthProvider:
    return request.app.state.supabase


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_optional_user(
    supabase: Annotated[SupabaseAuthProvider, Depends(get_supabase)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthUser | None:
    """Caller identity when a valid Bearer token is sent, else None."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        return await supabase.get_user(token)
    except SupabaseAuthError as exc:
        logger.debug("Rejected access token: %s", exc.message)
        return None
    except PROVIDER_EXCEPTIONS as e:
        _auth_errors.raise_http(e)


async def get_current_user(
    user: Annotated[AuthUser | None, Depends(get_optional_user)],
) -> AuthUser:
    """Caller identity; 401 without a valid Bearer token."""
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def verify_cron_secret(authorization: Annotated[str | None, Header()] = None) -> None:
    """When CRON_SECRET is set, require ``Authorization: Bearer <CRON_SECRET>``."""
    secret = os.getenv("CRON_SECRET")
    if not secret:
        return
    token = _bearer_token(authorization) or ""
    if not hmac.compare_digest(token.encode(), secret.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized - Invalid token")


# Type aliases for route injection
DbSession = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
OptionalUser = Annotated[AuthUser | None, Depends(get_optional_user)]
MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
MarketServiceWs = Annotated[MarketService, Depends(get_market_service_ws)]
WhaleServiceDep = Annotated[WhaleService, Depends(get_whale_service)]
ActivityServiceDep = Annotated[ActivityService, Depends(get_activity_service)]
SignalServiceDep = Annotated[SignalService, Depends(get_signal_service)]
PortfolioServiceDep = Annotated[PortfolioService, Depends(get_portfolio_service)]
WatchlistServiceDep = Annotated[WatchlistService, Depends(get_watchlist_service)]
AlertCheckerDep = Annotated[AlertChecker, Depends(get_alert_checker)]
SyncServiceDep = Annotated[WhaleSyncService, Depends(get_sync_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
CronAuth = Depends(verify_cron_secret)
