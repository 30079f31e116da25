"""CoinGecko provider and ticker-to-id mapping."""
from smartwhale.providers.coingecko.models import MarketSnapshot
from smartwhale.providers.coingecko.provider import CoinGeckoProvider

# Ticker symbol -> CoinGecko id for the tokens the app prices by symbol.
COIN_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "WETH": "weth",
    "USDT": "tether",
    "USDC": "usd-coin",
    "DAI": "dai",
    "BNB": "binancecoin",
    "SOL": "solana",
    "XRP": "ripple",
    "ADA": "cardano",
    "DOGE": "dogecoin",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "LTC": "litecoin",
    "TRX": "tron",
    "SHIB": "shiba-inu",
    "ARB": "arbitrum",
    "ATOM": "cosmos",
}

STABLECOINS = frozenset({"USDT", "USDC", "DAI", "BUSD", "TUSD", "USDE", "FDUSD", "USDS"})

__all__ = ["COIN_IDS", "STABLECOINS", "CoinGeckoProvider", "MarketSnapshot"]
