"""Watchlist routes (per-user followed whales)."""
from fastapi import APIRouter, Query

from smartwhale.deps import CurrentUser, DbSession, WatchlistServiceDep
from smartwhale.routers._validation import require_address
from smartwhale.schemas import ApiResponse, WatchlistCreate, WatchlistItem

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=ApiResponse[list[WatchlistItem]])
async def get_watchlist(
    user: CurrentUser, session: DbSession, service: WatchlistServiceDep
) -> ApiResponse[list[WatchlistItem]]:
    """Followed whales with live ETH balance and USD value."""
    return ApiResponse(data=await service.list_items(session, user.id))


@router.post("", response_model=ApiResponse[WatchlistItem], status_code=201)
def add_to_watchlist(
    body: WatchlistCreate, user: CurrentUser, session: DbSession, service: WatchlistServiceDep
) -> ApiResponse[WatchlistItem]:
    entry = service.add(session, user.id, body)
    return ApiResponse(data=WatchlistItem.model_validate(entry))


@router.delete("", response_model=ApiResponse[dict])
def remove_from_watchlist(
    user: CurrentUser,
    session: DbSession,
    service: WatchlistServiceDep,
    address: str = Query(..., description="Whale address to unfollow"),
) -> ApiResponse[dict]:
    service.remove(session, user.id, require_address(address))
    return ApiResponse(data={"deleted": True})
