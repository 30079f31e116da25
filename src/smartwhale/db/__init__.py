"""Database package: models and session management."""
from smartwhale.db.models import (Alert, AlertType, CustomWhale, Notification,
                                  Portfolio, PortfolioAsset, Severity,
                                  SignalAction, Subscription, TxType, User,
                                  WatchlistEntry, WhaleActivity)

__all__ = [
    "Alert",
    "AlertType",
    "CustomWhale",
    "Notification",
    "Portfolio",
    "PortfolioAsset",
    "Severity",
    "SignalAction",
    "Subscription",
    "TxType",
    "User",
    "WatchlistEntry",
    "WhaleActivity",
]
