"""Protocols for service dependencies."""
import asyncio
from collections.abc import AsyncIterator
from typing import Protocol

from smartwhale.schemas import PriceQuote, WhaleFlow


class QuoteStreamable(Protocol):
    """Protocol for anything that can stream price quotes (e.g. MarketService)."""

    def stream(
        self,
        coin_ids: list[str],
        *,
        stop_event: asyncio.Event,
    ) -> AsyncIterator[PriceQuote]:
        """Stream quotes until stop_event is set."""
        ...


class WhaleFlowSource(Protocol):
    """Provides whale buy/sell counts per token ticker for signal blending."""

    async def whale_flow_by_token(self) -> dict[str, WhaleFlow]:
        """Counts keyed by uppercase ticker. May raise on upstream failure."""
        ...
