"""Whale routes: overview, ranking, activity feed, custom whales and wallet detail."""
from typing import Literal

from fastapi import APIRouter, Query
from fastapi.responses import Response

from smartwhale.deps import (ActivityServiceDep, CurrentUser, DbSession,
                             WhaleServiceDep)
from smartwhale.routers._validation import require_address
from smartwhale.schemas import (ActivityFeed, ApiResponse, CustomWhaleCreate,
                                CustomWhaleOut, TopWhales, WhaleDetail,
                                WhalesOverview, WhaleTransaction)
from smartwhale.services.custom_whales import (add_custom_whale,
                                               delete_custom_whale,
                                               list_custom_whales)

router = APIRouter(prefix="/whales", tags=["whales"])

# Route order: fixed paths (/top, /activity, /custom) before /{address}.


@router.get("", response_model=ApiResponse[WhalesOverview])
async def get_whales_overview(service: WhaleServiceDep) -> ApiResponse[WhalesOverview]:
    """Balances and totals of the known whales (mock data when Etherscan is unavailable)."""
    overview, mock = await service.get_overview()
    return ApiResponse(data=overview, mock=mock)


@router.get("/top", response_model=ApiResponse[TopWhales])
async def get_top_whales(
    service: WhaleServiceDep,
    limit: int = Query(default=50, ge=1, le=50, description="Max whales"),
) -> ApiResponse[TopWhales]:
    """Known whales ranked by ETH balance."""
    whales, eth_price = await service.get_top(limit)
    return ApiResponse(data=TopWhales(whales=whales, eth_price=eth_price))


@router.get("/activity", response_model=ApiResponse[ActivityFeed])
async def get_whale_activity(
    service: ActivityServiceDep,
    tx_type: Literal["all", "buy", "sell", "transfer"] = Query(default="all", alias="type"),
    blockchain: str = Query(default="all", max_length=30),
    severity: Literal["all", "HIGH", "MEDIUM", "LOW", "high", "medium", "low"] = Query(default="all"),
    limit: int = Query(default=50, ge=1, le=200),
) -> ApiResponse[ActivityFeed]:
    """Classified whale transfers with stats, newest first."""
    feed, mock = await service.get_feed(tx_type, blockchain, severity, limit)
    return ApiResponse(data=feed, mock=mock)


@router.get("/custom", response_model=ApiResponse[list[CustomWhaleOut]])
def get_custom_whales(user: CurrentUser, session: DbSession) -> ApiResponse[list[CustomWhaleOut]]:
    whales = list_custom_whales(session, user.id)
    return ApiResponse(data=[CustomWhaleOut.model_validate(w) for w in whales])


@router.post("/custom", response_model=ApiResponse[CustomWhaleOut], status_code=201)
def create_custom_whale(
    body: CustomWhaleCreate, user: CurrentUser, session: DbSession
) -> ApiResponse[CustomWhaleOut]:
    """Add a custom whale; the address is stored lowercased. Duplicate -> 400."""
    whale = add_custom_whale(session, user.id, body)
    return ApiResponse(data=CustomWhaleOut.model_validate(whale))


@router.delete("/custom", response_model=ApiResponse[dict])
def remove_custom_whale(
    user: CurrentUser,
    session: DbSession,
    whale_id: int | None = Query(default=None, alias="id"),
    address: str | None = Query(default=None),
) -> ApiResponse[dict]:
    """Delete a custom whale by ?id= or ?address=."""
    delete_custom_whale(session, user.id, whale_id=whale_id, address=address)
    return ApiResponse(data={"deleted": True})


@router.get("/{address}", response_model=ApiResponse[WhaleDetail])
async def get_whale_detail(
    address: str,
    service: WhaleServiceDep,
    period: int = Query(default=30, ge=1, le=365, description="Days of balance history"),
) -> ApiResponse[WhaleDetail]:
    """Balance, holdings, balance history and recent transactions of a wallet."""
    detail = await service.get_detail(require_address(address), period)
    return ApiResponse(data=detail)


@router.get("/{address}/transactions", response_model=ApiResponse[list[WhaleTransaction]])
async def get_whale_transactions(
    address: str,
    service: WhaleServiceDep,
    limit: int = Query(default=20, ge=1, le=100),
) -> ApiResponse[list[WhaleTransaction]]:
    txs = await service.get_transactions(require_address(address), limit)
    return ApiResponse(data=txs)


@router.get("/{address}/export")
async def export_whale(
    address: str,
    service: WhaleServiceDep,
    period: int = Query(default=30, ge=1, le=365),
) -> Response:
    """CSV report of the wallet detail view."""
    address = require_address(address)
    report = await service.export_csv(address, period)
    return Response(
        content=report,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="whale-{address[:10]}.csv"'},
    )
