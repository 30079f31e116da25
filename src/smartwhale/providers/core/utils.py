"""Shared utilities for upstream providers."""

DECIMALS = 2
WEI_PER_ETH = 10**18


def normalize_address(address: str) -> str:
    """Normalize an Ethereum address for comparisons and storage (lowercase)."""
    return address.strip().lower()


def normalize_coin_id(coin_id: str) -> str:
    """Normalize a CoinGecko id (lowercase)."""
    return coin_id.strip().lower()


def wei_to_eth(wei: int | str | None) -> float:
    """Convert a wei amount (int or decimal string) to ETH."""
    if wei in (None, ""):
        return 0.0
    return int(wei) / WEI_PER_ETH


def hex_to_int(value: str | None) -> int:
    """Parse a 0x-prefixed JSON-RPC quantity; empty/None is 0."""
    if not value:
        return 0
    return int(value, 16)


def round2(x: float | None) -> float | None:
    """Round a value to 2 decimal places; preserve None."""
    if x is None:
        return None
    return round(float(x), DECIMALS)
