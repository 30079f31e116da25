"""CoinGecko market data provider for cryptocurrencies."""
import asyncio
import os
from collections.abc import AsyncIterator

import httpx

from smartwhale.providers.coingecko.models import (CoinGeckoChartParams,
                                                   CoinGeckoMarketsParams,
                                                   CoinGeckoSimplePriceParams,
                                                   MarketSnapshot)
from smartwhale.providers.core import (DEFAULT_TIMEOUT, HttpProviderABC,
                                       normalize_coin_id, round2)
from smartwhale.providers.core.stream_helpers import stream_by_polling
from smartwhale.schemas import PricePoint, PriceQuote
from smartwhale.utils import from_unix, parse_timestamp


class CoinGeckoProvider(HttpProviderABC):
    """Price provider for cryptocurrencies via CoinGecko API.

    Uses CoinGecko IDs (e.g., "bitcoin", "ethereum", "solana") rather than
    ticker symbols; callers map tickers through COIN_IDS.

    The public API needs no key; when COINGECKO_API_KEY is set the Pro
    endpoint is used instead.
    """

    api_name = "CoinGecko"
    BASE_URL = "https://api.coingecko.com/api/v3"
    PRO_BASE_URL = "https://pro-api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str | None = None,
        poll_interval: float = 10.0,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the CoinGecko provider.

        Args:
            api_key: CoinGecko API key. Defaults to COINGECKO_API_KEY env var.
            poll_interval: Interval in seconds for polling-based streaming.
            client: Preconfigured client (tests); built from the settings otherwise.
        """
        self._api_key = api_key or os.getenv("COINGECKO_API_KEY")
        self._poll_interval = poll_interval

        if client is None:
            headers: dict[str, str] = {"Accept": "application/json"}
            if self._api_key:
                headers["x-cg-pro-api-key"] = self._api_key
            base = self.PRO_BASE_URL if self._api_key else self.BASE_URL
            client = httpx.AsyncClient(base_url=base, headers=headers, timeout=DEFAULT_TIMEOUT)
        super().__init__(client)

    @property
    def configured(self) -> bool:
        return True

    async def get_simple_prices(self, coin_ids: list[str]) -> dict[str, PriceQuote]:
        """Fetch current prices for several coins in one call.

        Args:
            coin_ids: CoinGecko IDs (e.g., ["bitcoin", "ethereum"]).

        Returns:
            PriceQuotes keyed by coin id; ids CoinGecko does not know are omitted.
        """
        ids = sorted({normalize_coin_id(c) for c in coin_ids})
        if not ids:
            return {}
        params = CoinGeckoSimplePriceParams().model_dump() | {"ids": ",".join(ids)}
        response = await self._client.get("/simple/price", params=params)
        response.raise_for_status()
        data = response.json()
        return {
            cid: self._quote_from_simple_price(cid, row)
            for cid, row in data.items()
            if row and row.get("usd") is not None
        }

    async def get_price(self, coin_id: str) -> float:
        """Fetch the USD price of one coin. Raises ValueError when unknown."""
        coin_id = normalize_coin_id(coin_id)
        quotes = await self.get_simple_prices([coin_id])
        if coin_id not in quotes:
            raise ValueError(f"Coin '{coin_id}' not found")
        return quotes[coin_id].price

    async def get_markets(self, per_page: int = 20, page: int = 1) -> list[MarketSnapshot]:
        """Fetch top coins by market cap with 24h and 7d change (single API call)."""
        params = CoinGeckoMarketsParams(per_page=per_page, page=page).model_dump()
        response = await self._client.get("/coins/markets", params=params)
        response.raise_for_status()
        return [MarketSnapshot.model_validate(item) for item in response.json()]

    async def get_market_chart(self, coin_id: str, days: int = 7) -> list[PricePoint]:
        """Fetch price history for a coin.

        Args:
            coin_id: CoinGecko ID.
            days: Days of history; CoinGecko picks the granularity.

        Returns:
            PricePoints ordered by timestamp.
        """
        coin_id = normalize_coin_id(coin_id)
        params = CoinGeckoChartParams(days=days).model_dump()
        response = await self._client.get(f"/coins/{coin_id}/market_chart", params=params)
        response.raise_for_status()
        prices = response.json().get("prices", [])
        return [
            PricePoint(timestamp=from_unix(ts_ms / 1000), price=float(price))
            for ts_ms, price in (p[:2] for p in prices)
        ]

    async def stream(
        self, coin_ids: list[str], *, stop_event: asyncio.Event
    ) -> AsyncIterator[PriceQuote]:
        """Stream price updates via polling.

        CoinGecko WebSocket requires a paid plan, so this implementation
        polls /simple/price at regular intervals.

        Args:
            coin_ids: CoinGecko IDs to stream.
            stop_event: Set by the caller to end this stream.

        Yields:
            PriceQuote objects whenever a price changes.
        """
        async def fetch_batch(ids: list[str]) -> list[PriceQuote]:
            return list((await self.get_simple_prices(ids)).values())

        async for quote in stream_by_polling(
            self,
            [normalize_coin_id(c) for c in coin_ids],
            self._poll_interval,
            fetch_batch,
            stop_event=stop_event,
        ):
            yield quote

    def _quote_from_simple_price(self, coin_id: str, row: dict) -> PriceQuote:
        """Build a PriceQuote from a /simple/price response row."""
        return PriceQuote(
            coin_id=coin_id,
            price=float(row["usd"]),
            change_24h=round2(row.get("usd_24h_change")),
            market_cap=round2(row.get("usd_market_cap")),
            volume_24h=round2(row.get("usd_24h_vol")),
            timestamp=parse_timestamp(row.get("last_updated_at")),
        )
