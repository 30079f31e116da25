"""WebSocket stream handling: parse symbols and stream PriceQuotes from a service."""
import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from smartwhale.schemas import PriceQuote
from smartwhale.services.protocols import QuoteStreamable

logger = logging.getLogger(__name__)

MAX_STREAM_SYMBOLS = 25


def parse_symbols_param(
    query_params: Any,
    normalizer: Callable[[str], str] | None = None,
) -> list[str]:
    """Parse comma-separated 'symbols' query param into a de-duplicated list."""
    raw = (query_params.get("symbols") or "").strip()
    parts = [s.strip() for s in raw.split(",") if s.strip()]
    if normalizer is not None:
        parts = [normalizer(s) for s in parts]
    return list(dict.fromkeys(parts))[:MAX_STREAM_SYMBOLS]


async def handle_websocket_stream(
    websocket: WebSocket,
    stream_source: QuoteStreamable,
    coin_ids: list[str],
    symbols_required_message: str,
) -> None:
    """Accept WebSocket, validate symbols, then stream PriceQuotes as JSON.

    Uses a per-connection stop_event so one client disconnect does not stop
    other clients (safe with the singleton provider).
    """
    await websocket.accept()
    if not coin_ids:
        await websocket.close(code=4000, reason=symbols_required_message)
        return
    stop_event = asyncio.Event()
    try:
        async for quote in stream_source.stream(coin_ids, stop_event=stop_event):
            if isinstance(quote, PriceQuote):
                await websocket.send_json(quote.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.debug("Price stream client disconnected")
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Price stream error: %s", exc)
        try:
            await websocket.close(code=1011, reason="Stream error")
        except RuntimeError:
            logger.debug("WebSocket already closed")
    finally:
        stop_event.set()
