"""Transactional email route (SendGrid)."""
from fastapi import APIRouter, HTTPException

from smartwhale.deps import CurrentUser, EmailServiceDep
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.schemas import ApiResponse, EmailRequest

router = APIRouter(prefix="/email", tags=["email"])

_errors = ProviderErrorMapper("Email", "SendGrid")


@router.post("/send", response_model=ApiResponse[dict])
async def send_email(
    body: EmailRequest, user: CurrentUser, service: EmailServiceDep
) -> ApiResponse[dict]:
    """Send a templated email (welcome, alert, password_reset) to the caller.

    Unknown type -> 400, another recipient -> 403, off-site reset link -> 400.
    """
    if body.type not in service.TEMPLATES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid email type. Use one of: {', '.join(service.TEMPLATES)}",
        )
    if not user.email:
        raise HTTPException(status_code=400, detail="Account has no email address")
    if body.to and body.to.strip().lower() != user.email.lower():
        raise HTTPException(status_code=403, detail="Emails can only be sent to your own address")
    reset_link = body.data.get("reset_link")
    if reset_link is not None and not service.is_app_link(str(reset_link)):
        raise HTTPException(status_code=400, detail="reset_link must point to the SmartWhale app")
    try:
        await service.send(user.email, body.type, body.data)
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)
    return ApiResponse(data={"sent": True, "type": body.type})
