"""Price service over CoinGecko.

MarketService wraps the CoinGecko provider with error mapping (for the market
routes) and a symbol-keyed, cached, fallback-capable price lookup (for
portfolio valuation, whale USD values and the sync job).
"""
import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import WebSocket

from smartwhale.providers.coingecko import COIN_IDS, CoinGeckoProvider
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.schemas import PricePoint, PriceQuote, TokenPrice
from smartwhale.services.fallbacks import FALLBACK_PRICES
from smartwhale.services.utils import (TTLCache, handle_websocket_stream,
                                       parse_symbols_param)

logger = logging.getLogger(__name__)

# Coins shown on the dashboard ticker.
OVERVIEW_COIN_IDS = ["bitcoin", "ethereum", "solana", "binancecoin", "cardano"]

SYMBOLS_BY_COIN_ID = {coin_id: symbol for symbol, coin_id in COIN_IDS.items()}

PRICE_CACHE_TTL_SECONDS = 300


class MarketService:
    """Prices and charts from CoinGecko; maps provider errors to HTTP."""

    def __init__(
        self,
        provider: CoinGeckoProvider,
        error_mapper: ProviderErrorMapper | None = None,
        *,
        cache_ttl_seconds: float = PRICE_CACHE_TTL_SECONDS,
    ) -> None:
        """Initialize with provider and error mapping config.

        Args:
            provider: CoinGecko provider (shared, closed by the app lifespan).
            error_mapper: Maps provider exceptions to HTTP.
            cache_ttl_seconds: Lifetime of cached symbol prices.
        """
        self._provider = provider
        self._error_mapper = error_mapper or ProviderErrorMapper("Coin", "CoinGecko")
        self._price_cache: TTLCache[float] = TTLCache(cache_ttl_seconds)

    @property
    def provider(self) -> CoinGeckoProvider:
        return self._provider

    async def get_quotes(self, coin_ids: list[str]) -> dict[str, PriceQuote]:
        """Current quotes keyed by coin id. Raises HTTPException on provider errors."""
        try:
            return await self._provider.get_simple_prices(coin_ids)
        except PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e)

    async def get_overview(self) -> list[PriceQuote]:
        """Dashboard ticker quotes (BTC, ETH, SOL, BNB, ADA) in display order."""
        quotes = await self.get_quotes(OVERVIEW_COIN_IDS)
        return [quotes[c] for c in OVERVIEW_COIN_IDS if c in quotes]

    async def get_chart(self, coin_id: str, days: int) -> list[PricePoint]:
        """Price history. Raises HTTPException on provider errors."""
        try:
            return await self._provider.get_market_chart(coin_id, days)
        except PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e, identifier=coin_id)

    async def get_token_prices(self, coin_ids: list[str]) -> dict[str, TokenPrice]:
        """Quotes for supported coins keyed by lowercase ticker (btc, eth, ...).

        Raises ValueError when none of the ids is supported.
        """
        supported = [c for c in dict.fromkeys(coin_ids) if c in SYMBOLS_BY_COIN_ID]
        if not supported:
            raise ValueError("Invalid tokens. Use CoinGecko IDs like: bitcoin,ethereum,solana")
        quotes = await self.get_quotes(supported)
        return {
            SYMBOLS_BY_COIN_ID[coin_id].lower(): TokenPrice(
                symbol=SYMBOLS_BY_COIN_ID[coin_id],
                coin_id=coin_id,
                price=quote.price,
                market_cap=quote.market_cap,
                volume_24h=quote.volume_24h,
                change_24h=quote.change_24h,
            )
            for coin_id, quote in quotes.items()
        }

    async def get_usd_prices(self, symbols: list[str]) -> tuple[dict[str, float], bool]:
        """USD prices keyed by uppercase ticker, served from cache when fresh.

        Unknown tickers are omitted. On CoinGecko failure the static fallback
        table is used.

        Returns:
            (prices, live) where live is False if any price came from the fallback.
        """
        wanted = {s.upper() for s in symbols}
        prices: dict[str, float] = {}
        missing: list[str] = []
        for symbol in wanted:
            cached = self._price_cache.get(symbol)
            if cached is not None:
                prices[symbol] = cached
            elif symbol in COIN_IDS:
                missing.append(symbol)
        if not missing:
            return prices, True

        try:
            quotes = await self._provider.get_simple_prices([COIN_IDS[s] for s in missing])
        except PROVIDER_EXCEPTIONS as exc:
            logger.warning("CoinGecko price lookup failed, using fallback prices: %s", exc)
            for symbol in missing:
                if symbol in FALLBACK_PRICES:
                    prices[symbol] = FALLBACK_PRICES[symbol]
            return prices, False

        for symbol in missing:
            quote = quotes.get(COIN_IDS[symbol])
            if quote is not None:
                prices[symbol] = quote.price
                self._price_cache.set(symbol, quote.price)
        return prices, True

    async def get_eth_price(self) -> float:
        """ETH/USD, falling back to the static table."""
        prices, _ = await self.get_usd_prices(["ETH"])
        return prices.get("ETH", FALLBACK_PRICES["ETH"])

    async def stream(
        self,
        coin_ids: list[str],
        *,
        stop_event: asyncio.Event,
    ) -> AsyncIterator[PriceQuote]:
        """Stream price changes for the given coins until stop_event is set."""
        async for quote in self._provider.stream(coin_ids, stop_event=stop_event):
            yield quote

    async def handle_websocket_stream(self, websocket: WebSocket) -> None:
        """Accept WebSocket, parse ?symbols= (coin ids or tickers) and stream quotes."""
        coin_ids = parse_symbols_param(websocket.query_params, normalizer=to_coin_id)
        await handle_websocket_stream(
            websocket,
            self,
            coin_ids,
            "Query param 'symbols' required (e.g. ?symbols=bitcoin,ethereum)",
        )


def to_coin_id(symbol: str) -> str:
    """Map a ticker (BTC) to its CoinGecko id; other input is taken as an id."""
    return COIN_IDS.get(symbol.upper(), symbol.lower())
