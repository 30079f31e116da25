"""Static datasets served when upstream APIs are unavailable or unconfigured.

Responses built from these carry ``mock: true`` (or ``prices_live: false``).
"""
from datetime import datetime, timedelta

from smartwhale.db import Severity, TxType
from smartwhale.schemas import ActivityOut, WhalesOverview, WhaleSummary
from smartwhale.utils import utc_now

# USD prices used when CoinGecko cannot be reached.
FALLBACK_PRICES: dict[str, float] = {
    "BTC": 106089.0,
    "ETH": 3575.0,
    "SOL": 167.0,
    "BNB": 991.0,
    "ADA": 0.67,
    "DOT": 8.1,
    "AVAX": 43.0,
    "MATIC": 0.98,
    "USDT": 1.0,
    "USDC": 1.0,
    "DAI": 1.0,
}

# Circulating ETH used for the overview's market impact percentage.
ETH_CIRCULATING_SUPPLY = 120_000_000

_MOCK_WHALES = [
    ("0x00000000219ab540356cBB839Cbe05303d7705Fa", "ETH 2.0 Staking Contract", 34_200_000, 2.3),
    ("0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "Wrapped ETH (WETH)", 3_150_000, 0.5),
    ("0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf", "Kraken Exchange", 1_520_000, -1.2),
    ("0xBE0eB53F46cd790Cd13851d5EFf43D12404d33E8", "Binance Hot Wallet", 620_000, 1.8),
    ("0x28C6c06298d514Db089934071355E5743bf21d60", "Binance Cold Storage", 510_000, 0.1),
    ("0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549", "Bitfinex Wallet", 385_000, -0.5),
    ("0x742d35Cc6634C0532925a3b844Bc454e4438f44e", "Kraken Cold Storage", 320_000, 0.8),
]
_MOCK_ETH_PRICE = 3500.0


def mock_whales_overview() -> WhalesOverview:
    whales = [
        WhaleSummary(
            address=address,
            label=label,
            balance=balance,
            balance_usd=balance * _MOCK_ETH_PRICE,
            percent_change_24h=change,
        )
        for address, label, balance, change in _MOCK_WHALES
    ]
    total_eth = sum(w.balance for w in whales)
    return WhalesOverview(
        whales=whales,
        total_value=total_eth * _MOCK_ETH_PRICE,
        total_eth=total_eth,
        whale_count=len(whales),
        market_impact=round(total_eth / ETH_CIRCULATING_SUPPLY * 100, 2),
        eth_price=_MOCK_ETH_PRICE,
    )


_MOCK_ACTIVITIES = [
    # (minutes ago, whale, label, tx type, token, amount, usd, from, to, chain, severity)
    (10, "0xF977814e90dA44bFA03b6295A0616a897441aceC", "Binance Cold Wallet 5", TxType.SELL,
     "BTC", 500, 51_500_000, "0xF977814e90dA44bFA03b6295A0616a897441aceC",
     "0x28C6c06298d514Db089934071355E5743bf21d60", "ethereum", Severity.HIGH),
    (25, "0x28C6c06298d514Db089934071355E5743bf21d60", "Binance Cold Wallet 2", TxType.BUY,
     "ETH", 10_000, 35_000_000, "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
     "0x28C6c06298d514Db089934071355E5743bf21d60", "ethereum", Severity.HIGH),
    (45, "0x742d35Cc6634C0532925a3b844Bc454e4438f44e", "Whale 0x742d...", TxType.TRANSFER,
     "ETH", 5_000, 17_500_000, "0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
     "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549", "ethereum", Severity.MEDIUM),
    (60, "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549", "Whale 0x21a3...", TxType.BUY,
     "SOL", 50_000, 8_150_000, "0x2FAF487A4414Fe77e2327F0bf4AE2a264a776046",
     "0x21a31Ee1afC51d94C2eFcCAa2092aD1028285549", "solana", Severity.MEDIUM),
    (120, "0x2FAF487A4414Fe77e2327F0bf4AE2a264a776046", "Whale 0x2FAF...", TxType.SELL,
     "BNB", 1_000, 645_000, "0x2FAF487A4414Fe77e2327F0bf4AE2a264a776046",
     "0xF977814e90dA44bFA03b6295A0616a897441aceC", "binance", Severity.LOW),
    (180, "0xF977814e90dA44bFA03b6295A0616a897441aceC", "Binance Cold Wallet 5", TxType.TRANSFER,
     "USDT", 10_000_000, 10_000_000, "0xF977814e90dA44bFA03b6295A0616a897441aceC",
     "0x28C6c06298d514Db089934071355E5743bf21d60", "ethereum", Severity.HIGH),
]


def mock_activities(now: datetime | None = None) -> list[ActivityOut]:
    """Six sample whale moves, newest first, timestamped relative to now."""
    now = now or utc_now()
    return [
        ActivityOut(
            id=str(index),
            whale_address=whale,
            whale_label=label,
            tx_hash=f"0xmock{index:060x}",
            tx_type=tx_type,
            token_symbol=token,
            amount=amount,
            amount_usd=usd,
            from_address=from_address,
            to_address=to_address,
            blockchain=chain,
            severity=severity,
            timestamp=now - timedelta(minutes=minutes),
        )
        for index, (minutes, whale, label, tx_type, token, amount, usd,
                    from_address, to_address, chain, severity)
        in enumerate(_MOCK_ACTIVITIES, start=1)
    ]


# Demo holdings shown to visitors without an account: symbol -> (amount, avg buy price, days held)
DEMO_PORTFOLIO: dict[str, tuple[float, float, int]] = {
    "BTC": (0.5, 62_000.0, 240),
    "ETH": (4.2, 2_450.0, 180),
    "SOL": (35.0, 98.0, 90),
    "ADA": (2_500.0, 0.45, 45),
}
