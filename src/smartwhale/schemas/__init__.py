"""Pydantic schemas for API and runtime use. Not persisted to DB."""
from smartwhale.schemas.alerts import (AlertCheckResult, AlertCreate, AlertOut,
                                       AlertUpdate, NotificationOut)
from smartwhale.schemas.auth import (AuthSession, AuthUser, LoginRequest,
                                     ProfileUpdate, RegisterRequest, UserOut)
from smartwhale.schemas.billing import (CheckoutRequest, CheckoutSession,
                                        EmailRequest, SubscriptionOut,
                                        WebhookResult)
from smartwhale.schemas.common import ApiResponse, ErrorResponse
from smartwhale.schemas.market import (PricePoint, PriceQuote, PricesRequest,
                                       TokenPrice)
from smartwhale.schemas.portfolio import (AssetCreate, AssetUpdate,
                                          PortfolioToken, PortfolioView)
from smartwhale.schemas.signals import (Indicators, SignalActionCreate,
                                        SignalActionOut, SignalFeed,
                                        SignalStats, SignalType, TradingSignal,
                                        WhaleFlow)
from smartwhale.schemas.whales import (ActivityFeed, ActivityOut,
                                       ActivityStats, AnalyticsStats,
                                       BalancePoint, CustomWhaleCreate,
                                       CustomWhaleOut, RankedWhale, SyncStats,
                                       TokenHolding, TopWhales, WatchlistCreate,
                                       WatchlistItem, WhaleDetail,
                                       WhalesOverview, WhaleSummary,
                                       WhaleTransaction)

__all__ = [
    "ActivityFeed",
    "ActivityOut",
    "ActivityStats",
    "AlertCheckResult",
    "AlertCreate",
    "AlertOut",
    "AlertUpdate",
    "AnalyticsStats",
    "ApiResponse",
    "AssetCreate",
    "AssetUpdate",
    "AuthSession",
    "AuthUser",
    "BalancePoint",
    "CheckoutRequest",
    "CheckoutSession",
    "CustomWhaleCreate",
    "CustomWhaleOut",
    "EmailRequest",
    "ErrorResponse",
    "Indicators",
    "LoginRequest",
    "NotificationOut",
    "PortfolioToken",
    "PortfolioView",
    "PricePoint",
    "PriceQuote",
    "PricesRequest",
    "ProfileUpdate",
    "RankedWhale",
    "RegisterRequest",
    "SignalActionCreate",
    "SignalActionOut",
    "SignalFeed",
    "SignalStats",
    "SignalType",
    "SubscriptionOut",
    "SyncStats",
    "TokenHolding",
    "TokenPrice",
    "TopWhales",
    "TradingSignal",
    "UserOut",
    "WatchlistCreate",
    "WatchlistItem",
    "WebhookResult",
    "WhaleDetail",
    "WhaleFlow",
    "WhaleSummary",
    "WhaleTransaction",
    "WhalesOverview",
]
