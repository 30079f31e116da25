"""Scheduled jobs triggered over HTTP (Bearer CRON_SECRET)."""
import logging

from fastapi import APIRouter

from smartwhale.deps import AlertCheckerDep, CronAuth, DbSession, SyncServiceDep
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.schemas import AlertCheckResult, ApiResponse, SyncStats

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[CronAuth])

_sync_errors = ProviderErrorMapper("Block", "Alchemy")


@router.api_route("/sync-whales", methods=["GET", "POST"], response_model=ApiResponse[SyncStats])
async def sync_whales(session: DbSession, service: SyncServiceDep) -> ApiResponse[SyncStats]:
    """Store the tracked whales' transfers of the last ~24h."""
    try:
        stats = await service.sync(session)
    except PROVIDER_EXCEPTIONS as e:
        logger.warning("Whale sync aborted: %s", e)
        _sync_errors.raise_http(e)
    return ApiResponse(data=stats)


@router.api_route(
    "/check-alerts", methods=["GET", "POST"], response_model=ApiResponse[AlertCheckResult]
)
async def check_alerts(session: DbSession, checker: AlertCheckerDep) -> ApiResponse[AlertCheckResult]:
    """Evaluate every active alert once."""
    return ApiResponse(data=await checker.check_all(session))
