"""Portfolio routes."""
from fastapi import APIRouter

from smartwhale.deps import (CurrentUser, DbSession, OptionalUser,
                             PortfolioServiceDep)
from smartwhale.schemas import (ApiResponse, AssetCreate, AssetUpdate,
                                PortfolioView)

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("", response_model=ApiResponse[PortfolioView])
async def get_portfolio(
    user: OptionalUser, session: DbSession, service: PortfolioServiceDep
) -> ApiResponse[PortfolioView]:
    """Holdings valued at live prices; anonymous callers get the demo portfolio."""
    view = await service.get_view(session, user.id if user else None)
    return ApiResponse(data=view, mock=view.demo)


@router.post("/assets", response_model=ApiResponse[dict], status_code=201)
def add_asset(
    body: AssetCreate, user: CurrentUser, session: DbSession, service: PortfolioServiceDep
) -> ApiResponse[dict]:
    """Add a holding. Duplicate symbol -> 400."""
    asset = service.add_asset(session, user.id, body)
    return ApiResponse(data=asset.model_dump(mode="json"))


@router.put("/assets/{symbol}", response_model=ApiResponse[dict])
def update_asset(
    symbol: str,
    body: AssetUpdate,
    user: CurrentUser,
    session: DbSession,
    service: PortfolioServiceDep,
) -> ApiResponse[dict]:
    """Update a holding, creating it when missing."""
    asset = service.upsert_asset(session, user.id, symbol, body)
    return ApiResponse(data=asset.model_dump(mode="json"))


@router.delete("/assets/{symbol}", response_model=ApiResponse[dict])
def delete_asset(
    symbol: str, user: CurrentUser, session: DbSession, service: PortfolioServiceDep
) -> ApiResponse[dict]:
    service.delete_asset(session, user.id, symbol)
    return ApiResponse(data={"deleted": True})
