"""Service layer: provider orchestration, persistence and exception-to-HTTP mapping."""
from smartwhale.services.accounts import AccountService
from smartwhale.services.activity import ActivityService
from smartwhale.services.alerts import AlertChecker
from smartwhale.services.billing import BillingService
from smartwhale.services.email import EmailService
from smartwhale.services.market_service import MarketService
from smartwhale.services.portfolio import PortfolioService
from smartwhale.services.signals import SignalService
from smartwhale.services.sync import WhaleSyncService
from smartwhale.services.watchlist import WatchlistService
from smartwhale.services.whales import WhaleService

__all__ = [
    "AccountService",
    "ActivityService",
    "AlertChecker",
    "BillingService",
    "EmailService",
    "MarketService",
    "PortfolioService",
    "SignalService",
    "WatchlistService",
    "WhaleService",
    "WhaleSyncService",
]
