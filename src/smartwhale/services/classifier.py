"""Whale transaction classifier: direction label and USD severity tier."""
from collections.abc import Iterable

from smartwhale.db import Severity, TxType
from smartwhale.schemas import ActivityOut, ActivityStats
from smartwhale.services.known_whales import is_exchange

HIGH_SEVERITY_USD = 10_000_000
MEDIUM_SEVERITY_USD = 1_000_000


def classify_transaction(from_address: str | None, to_address: str | None) -> TxType:
    """Label a transfer by exchange involvement.

    Sending to an exchange is a sell, withdrawing from one is a buy; any other
    counterparty (whale to individual, individual to whale) is a transfer.
    """
    if is_exchange(to_address):
        return TxType.SELL
    if is_exchange(from_address):
        return TxType.BUY
    return TxType.TRANSFER


def severity_for(amount_usd: float) -> Severity:
    """HIGH from $10M, MEDIUM from $1M, LOW below."""
    if amount_usd >= HIGH_SEVERITY_USD:
        return Severity.HIGH
    if amount_usd >= MEDIUM_SEVERITY_USD:
        return Severity.MEDIUM
    return Severity.LOW


def filter_activities(
    activities: Iterable[ActivityOut],
    tx_type: str = "all",
    blockchain: str = "all",
    severity: str = "all",
) -> list[ActivityOut]:
    """Apply the feed filters; "all" (or empty) disables a filter."""
    result = list(activities)
    if tx_type and tx_type != "all":
        result = [a for a in result if a.tx_type.value == tx_type]
    if blockchain and blockchain != "all":
        result = [a for a in result if a.blockchain == blockchain]
    if severity and severity != "all":
        result = [a for a in result if a.severity.value == severity.upper()]
    return result


def summarize(activities: Iterable[ActivityOut]) -> ActivityStats:
    """Counts and USD total of an activity list."""
    stats = ActivityStats()
    for activity in activities:
        stats.total += 1
        stats.total_value_usd += activity.amount_usd
        if activity.severity is Severity.HIGH:
            stats.high_severity += 1
        elif activity.severity is Severity.MEDIUM:
            stats.medium_severity += 1
        else:
            stats.low_severity += 1
    return stats
