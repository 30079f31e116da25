"""Upstream API providers (one httpx.AsyncClient each)."""
from smartwhale.providers.alchemy import AlchemyProvider
from smartwhale.providers.coingecko import COIN_IDS, CoinGeckoProvider
from smartwhale.providers.core import HttpProviderABC, ProviderErrorMapper
from smartwhale.providers.etherscan import EtherscanProvider
from smartwhale.providers.sendgrid import SendGridProvider
from smartwhale.providers.stripe import StripeProvider
from smartwhale.providers.supabase import SupabaseAuthProvider

__all__ = [
    "AlchemyProvider",
    "COIN_IDS",
    "CoinGeckoProvider",
    "EtherscanProvider",
    "HttpProviderABC",
    "ProviderErrorMapper",
    "SendGridProvider",
    "StripeProvider",
    "SupabaseAuthProvider",
]
