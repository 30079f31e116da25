"""Alert routes: CRUD and notification history, scoped to the caller."""
from fastapi import APIRouter

from smartwhale.deps import CurrentUser, DbSession
from smartwhale.schemas import (AlertCreate, AlertOut, AlertUpdate,
                                ApiResponse, NotificationOut)
from smartwhale.services import alerts as alert_store

router = APIRouter(prefix="/alerts", tags=["alerts"])

# Route order: /history before /{alert_id}.


@router.get("", response_model=ApiResponse[list[AlertOut]])
def list_alerts(user: CurrentUser, session: DbSession) -> ApiResponse[list[AlertOut]]:
    alerts = alert_store.list_alerts(session, user.id)
    return ApiResponse(data=[AlertOut.model_validate(a) for a in alerts])


@router.post("", response_model=ApiResponse[AlertOut], status_code=201)
def create_alert(body: AlertCreate, user: CurrentUser, session: DbSession) -> ApiResponse[AlertOut]:
    """Create a whale or price alert (see AlertCreate for the required fields per type)."""
    alert = alert_store.create_alert(session, user.id, body)
    return ApiResponse(data=AlertOut.model_validate(alert))


@router.get("/history", response_model=ApiResponse[list[NotificationOut]])
def get_alert_history(user: CurrentUser, session: DbSession) -> ApiResponse[list[NotificationOut]]:
    """Latest 50 notifications, newest first."""
    notifications = alert_store.list_notifications(session, user.id)
    return ApiResponse(data=[NotificationOut.model_validate(n) for n in notifications])


@router.post("/history/read-all", response_model=ApiResponse[dict])
def mark_all_notifications_read(user: CurrentUser, session: DbSession) -> ApiResponse[dict]:
    return ApiResponse(data={"updated": alert_store.mark_all_read(session, user.id)})


@router.post("/history/{notification_id}/read", response_model=ApiResponse[NotificationOut])
def mark_notification_read(
    notification_id: int, user: CurrentUser, session: DbSession
) -> ApiResponse[NotificationOut]:
    notification = alert_store.mark_read(session, user.id, notification_id)
    return ApiResponse(data=NotificationOut.model_validate(notification))


@router.patch("/{alert_id}", response_model=ApiResponse[AlertOut])
def update_alert(
    alert_id: int, body: AlertUpdate, user: CurrentUser, session: DbSession
) -> ApiResponse[AlertOut]:
    """Toggle an alert or change its threshold."""
    alert = alert_store.update_alert(session, user.id, alert_id, body)
    return ApiResponse(data=AlertOut.model_validate(alert))


@router.delete("/{alert_id}", response_model=ApiResponse[dict])
def delete_alert(alert_id: int, user: CurrentUser, session: DbSession) -> ApiResponse[dict]:
    alert_store.delete_alert(session, user.id, alert_id)
    return ApiResponse(data={"deleted": True})
