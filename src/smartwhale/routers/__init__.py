"""API routers, all mounted under /api.

Includes routes for:
- /whales - Whale overview, ranking, activity feed, custom whales, wallet detail
- /watchlist, /alerts, /portfolio - Per-user state (Bearer auth)
- /market, /prices - CoinGecko prices, charts and the /market/stream WebSocket
- /signals - Trading signals and signal actions
- /auth, /billing, /email - Supabase Auth, Stripe and SendGrid
- /analytics, /cron - Stored activity stats and scheduled jobs
"""
from smartwhale.routers.alerts import router as alerts_router
from smartwhale.routers.analytics import router as analytics_router
from smartwhale.routers.auth import router as auth_router
from smartwhale.routers.billing import router as billing_router
from smartwhale.routers.cron import router as cron_router
from smartwhale.routers.email import router as email_router
from smartwhale.routers.market import router as market_router
from smartwhale.routers.portfolio import router as portfolio_router
from smartwhale.routers.signals import router as signals_router
from smartwhale.routers.watchlist import router as watchlist_router
from smartwhale.routers.whales import router as whales_router

__all__ = [
    "alerts_router",
    "analytics_router",
    "auth_router",
    "billing_router",
    "cron_router",
    "email_router",
    "market_router",
    "portfolio_router",
    "signals_router",
    "watchlist_router",
    "whales_router",
]
