"""Trading signal routes and per-user signal actions."""
from fastapi import APIRouter, Query

from smartwhale.deps import CurrentUser, DbSession, SignalServiceDep
from smartwhale.schemas import (ApiResponse, SignalActionCreate,
                                SignalActionOut, SignalFeed, SignalType)
from smartwhale.services.signal_actions import list_actions, upsert_action

router = APIRouter(prefix="/signals", tags=["signals"])


@router.get("", response_model=ApiResponse[SignalFeed])
async def get_signals(
    service: SignalServiceDep,
    session: DbSession,
    token: str | None = Query(default=None, max_length=20, description="Ticker filter, e.g. ETH"),
    signal_type: SignalType | None = Query(default=None, alias="type"),
    limit: int = Query(default=10, ge=1, le=50),
    whales: bool = Query(default=True, description="Blend whale buy/sell flow into scores"),
) -> ApiResponse[SignalFeed]:
    """Technical and whale-flow signals, highest confidence first."""
    feed = await service.get_feed(
        session, token=token, signal_type=signal_type, limit=limit, use_whale_data=whales
    )
    return ApiResponse(data=feed)


@router.get("/actions", response_model=ApiResponse[list[SignalActionOut]])
def get_signal_actions(
    user: CurrentUser,
    session: DbSession,
    signal_id: str | None = Query(default=None, max_length=200),
) -> ApiResponse[list[SignalActionOut]]:
    actions = list_actions(session, user.id, signal_id)
    return ApiResponse(data=[SignalActionOut.model_validate(a) for a in actions])


@router.post("/actions", response_model=ApiResponse[SignalActionOut])
def record_signal_action(
    body: SignalActionCreate, user: CurrentUser, session: DbSession
) -> ApiResponse[SignalActionOut]:
    """Create or replace the caller's action on a signal."""
    action = upsert_action(session, user.id, body)
    return ApiResponse(data=SignalActionOut.model_validate(action))
