"""Analytics routes over stored whale activity."""
from typing import Literal

from fastapi import APIRouter, Query

from smartwhale.deps import DbSession
from smartwhale.schemas import AnalyticsStats, ApiResponse
from smartwhale.services.analytics import activity_stats

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/stats", response_model=ApiResponse[AnalyticsStats])
def get_stats(
    session: DbSession,
    period: Literal["24h", "7d", "30d"] = Query(default="24h"),
) -> ApiResponse[AnalyticsStats]:
    """Transaction count, USD volume, active whales and severity split for the period."""
    return ApiResponse(data=activity_stats(session, period))
