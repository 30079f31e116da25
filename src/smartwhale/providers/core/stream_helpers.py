"""Shared polling-based stream helper for price providers."""
import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable

from smartwhale.providers.core.protocols import PollingStreamable
from smartwhale.schemas import PriceQuote


async def stream_by_polling(
    provider: PollingStreamable,
    coin_ids: list[str],
    poll_interval_seconds: float,
    fetch_quotes: Callable[[list[str]], Awaitable[list[PriceQuote]]],
    *,
    stop_event: asyncio.Event,
    dedup_by_price: bool = True,
) -> AsyncIterator[PriceQuote]:
    """Poll at interval, fetch quotes via fetch_quotes(coin_ids), yield changed prices.

    The loop ends when stop_event is set (one per WebSocket connection, so a
    disconnect never stops other clients) or when the provider is closed.

    Args:
        provider: Object implementing PollingStreamable (streaming property).
        coin_ids: CoinGecko ids to poll.
        poll_interval_seconds: Seconds to sleep between poll rounds.
        fetch_quotes: Async callable(coin_ids) -> list[PriceQuote].
        stop_event: Per-stream cancellation flag.
        dedup_by_price: If True, skip yielding when the price is unchanged.
    """
    if not coin_ids:
        return
    provider.streaming = True
    last_prices: dict[str, float] = {}
    while not stop_event.is_set() and provider.streaming:
        for quote in await fetch_quotes(coin_ids):
            if dedup_by_price and last_prices.get(quote.coin_id) == quote.price:
                continue
            last_prices[quote.coin_id] = quote.price
            yield quote
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=poll_interval_seconds)
        except asyncio.TimeoutError:
            continue
