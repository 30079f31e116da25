"""Main module for the SmartWhale API."""
import logging
import os
import subprocess
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smartwhale.providers import (AlchemyProvider, CoinGeckoProvider,
                                  EtherscanProvider, SendGridProvider,
                                  StripeProvider, SupabaseAuthProvider)
from smartwhale.routers import (alerts_router, analytics_router, auth_router,
                                billing_router, cron_router, email_router,
                                market_router, portfolio_router,
                                signals_router, watchlist_router,
                                whales_router)
from smartwhale.schemas import ErrorResponse
from smartwhale.services import (AccountService, ActivityService, AlertChecker,
                                 BillingService, EmailService, MarketService,
                                 PortfolioService, SignalService,
                                 WatchlistService, WhaleService,
                                 WhaleSyncService)

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create providers and services at startup; close providers on shutdown."""
    # Providers (singletons)
    coingecko = CoinGeckoProvider(poll_interval=10.0)
    etherscan = EtherscanProvider()
    alchemy = AlchemyProvider()
    supabase = SupabaseAuthProvider()
    stripe = StripeProvider()
    sendgrid = SendGridProvider()

    market_service = MarketService(coingecko)
    activity_service = ActivityService(etherscan, market_service)
    email_service = EmailService(sendgrid)

    fastapi_app.state.supabase = supabase
    fastapi_app.state.market_service = market_service
    fastapi_app.state.activity_service = activity_service
    fastapi_app.state.email_service = email_service
    fastapi_app.state.whale_service = WhaleService(etherscan, market_service)
    fastapi_app.state.signal_service = SignalService(
        coingecko, market_service, whale_flow=activity_service
    )
    fastapi_app.state.portfolio_service = PortfolioService(market_service)
    fastapi_app.state.watchlist_service = WatchlistService(etherscan, market_service)
    fastapi_app.state.alert_checker = AlertChecker(etherscan, market_service, email_service)
    fastapi_app.state.sync_service = WhaleSyncService(alchemy, market_service)
    fastapi_app.state.account_service = AccountService(supabase, email_service)
    fastapi_app.state.billing_service = BillingService(stripe)

    # Keep provider refs for clean shutdown
    fastapi_app.state.providers_to_close = [
        coingecko,
        etherscan,
        alchemy,
        supabase,
        stripe,
        sendgrid,
    ]
    for provider in fastapi_app.state.providers_to_close:
        if not provider.configured:
            logger.warning("%s is not configured; dependent routes will fail or serve mock data",
                           provider.api_name)

    yield

    # Close provider resources (httpx clients)
    for provider in fastapi_app.state.providers_to_close:
        try:
            await provider.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing provider %s: %s", type(provider).__name__, exc)


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException in the error envelope."""
    body = ErrorResponse(error=str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation errors (422) in the error envelope."""
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")} for err in exc.errors()
    ]
    first = details[0] if details else {"loc": [], "msg": "Invalid request"}
    field = ".".join(str(part) for part in first["loc"][1:]) or "request"
    body = ErrorResponse(error=f"{field}: {first['msg']}", details=details)
    return JSONResponse(status_code=422, content=body.model_dump())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def create_app() -> FastAPI:
    """Build the FastAPI app: routers under /api, envelope error handlers, CORS."""
    fastapi_app = FastAPI(
        title="SmartWhale API",
        description="Whale tracking, alerts, portfolio and trading signals for crypto markets",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[os.getenv("APP_URL", "http://localhost:3000")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    fastapi_app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    fastapi_app.add_exception_handler(RequestValidationError, validation_exception_handler)
    fastapi_app.add_exception_handler(Exception, unhandled_exception_handler)

    for router in (
        whales_router,
        watchlist_router,
        alerts_router,
        portfolio_router,
        market_router,
        signals_router,
        auth_router,
        billing_router,
        email_router,
        analytics_router,
        cron_router,
    ):
        fastapi_app.include_router(router, prefix=API_PREFIX)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    _configure_logging()
    uvicorn.run("smartwhale.main:app", host="127.0.0.1", port=8001)


def run_dev():
    """Run the development server with Postgres running via Docker."""
    _configure_logging()
    project_root = Path(__file__).resolve().parent.parent.parent
    try:
        subprocess.run(
            ["docker", "compose", "up", "-d", "postgres"],
            cwd=project_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        print("Failed to start Postgres:", e.stderr or e.stdout, file=sys.stderr)
        sys.exit(1)
    uvicorn.run("smartwhale.main:app", host="0.0.0.0", port=8000, reload=True)
