"""Market data routes (CoinGecko): ticker prices, charts, token prices and a live stream."""
from fastapi import APIRouter, HTTPException, Query, WebSocket

from smartwhale.deps import MarketServiceDep, MarketServiceWs
from smartwhale.schemas import (ApiResponse, PricePoint, PriceQuote,
                                PricesRequest, TokenPrice)
from smartwhale.services.market_service import MarketService, to_coin_id

router = APIRouter(tags=["market"])


@router.get("/market/prices", response_model=ApiResponse[list[PriceQuote]])
async def get_market_prices(service: MarketServiceDep) -> ApiResponse[list[PriceQuote]]:
    """BTC, ETH, SOL, BNB and ADA quotes with 24h change."""
    return ApiResponse(data=await service.get_overview())


@router.get("/market/chart", response_model=ApiResponse[list[PricePoint]])
async def get_market_chart(
    service: MarketServiceDep,
    coin_id: str = Query(default="bitcoin", alias="id", min_length=1, max_length=100),
    days: int = Query(default=7, ge=1, le=365),
) -> ApiResponse[list[PricePoint]]:
    """Price history points for a CoinGecko id."""
    return ApiResponse(data=await service.get_chart(coin_id.strip().lower(), days))


@router.get("/prices", response_model=ApiResponse[dict[str, TokenPrice]])
async def get_prices(
    service: MarketServiceDep,
    tokens: str = Query(default="", description="Comma-separated CoinGecko ids"),
) -> ApiResponse[dict[str, TokenPrice]]:
    """Prices keyed by lowercase ticker. Unknown ids -> 400, upstream rate limit -> 429."""
    coin_ids = [t.strip().lower() for t in tokens.split(",") if t.strip()]
    return ApiResponse(data=await _token_prices(service, coin_ids))


@router.post("/prices", response_model=ApiResponse[dict[str, TokenPrice]])
async def post_prices(
    body: PricesRequest, service: MarketServiceDep
) -> ApiResponse[dict[str, TokenPrice]]:
    """Same as GET /prices with ids (or tickers) in the body."""
    coin_ids = [to_coin_id(t.strip()) for t in body.tokens]
    return ApiResponse(data=await _token_prices(service, coin_ids))


@router.websocket("/market/stream")
async def stream_market(websocket: WebSocket, service: MarketServiceWs) -> None:
    """Stream live price updates over WebSocket.

    Query: ?symbols=bitcoin,ethereum (or BTC,ETH).
    """
    await service.handle_websocket_stream(websocket)


async def _token_prices(service: MarketService, coin_ids: list[str]) -> dict[str, TokenPrice]:
    if not coin_ids:
        raise HTTPException(
            status_code=400,
            detail="Query param 'tokens' required (e.g. ?tokens=bitcoin,ethereum)",
        )
    try:
        return await service.get_token_prices(coin_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
