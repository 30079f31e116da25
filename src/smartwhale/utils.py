"""Shared utilities for the SmartWhale API."""

import re
from datetime import datetime, timezone

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def from_unix(ts: float) -> datetime:
    """Aware UTC datetime for a Unix timestamp in seconds."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Aware UTC view of a datetime; naive values (SQLite reads) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(ts: float | str | None) -> datetime:
    """Convert optional Unix timestamp (seconds) to datetime; fallback to now."""
    return from_unix(int(ts)) if ts is not None else utc_now()


def is_valid_address(address: str | None) -> bool:
    """True for a 0x-prefixed, 40 hex digit Ethereum address."""
    return bool(address) and ADDRESS_RE.match(address) is not None


def short_address(address: str) -> str:
    """Display form used for unlabelled wallets: 0x1234..."""
    return f"{address[:6]}..."


def format_usd(value: float) -> str:
    """Compact USD amount: $1.25B, $3.40M, $12.0K, $950."""
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    if value >= 1e3:
        return f"${value / 1e3:.1f}K"
    return f"${value:.0f}"
