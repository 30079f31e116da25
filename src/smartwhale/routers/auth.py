"""Account routes over Supabase Auth."""
from fastapi import APIRouter

from smartwhale.deps import AccountServiceDep, CurrentUser, DbSession
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, ProviderErrorMapper
from smartwhale.schemas import (ApiResponse, AuthSession, LoginRequest,
                                ProfileUpdate, RegisterRequest, UserOut)

router = APIRouter(prefix="/auth", tags=["auth"])

_errors = ProviderErrorMapper("User", "Supabase Auth")


@router.post("/register", response_model=ApiResponse[AuthSession], status_code=201)
async def register(
    body: RegisterRequest, session: DbSession, service: AccountServiceDep
) -> ApiResponse[AuthSession]:
    """Create an account. Rejected sign-up (e.g. email taken) -> 400."""
    try:
        return ApiResponse(data=await service.register(session, body))
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)


@router.post("/login", response_model=ApiResponse[AuthSession])
async def login(
    body: LoginRequest, session: DbSession, service: AccountServiceDep
) -> ApiResponse[AuthSession]:
    """Email/password sign-in. Wrong credentials -> 401."""
    try:
        return ApiResponse(data=await service.login(session, body))
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)


@router.get("/me", response_model=ApiResponse[UserOut])
def get_me(user: CurrentUser, session: DbSession, service: AccountServiceDep) -> ApiResponse[UserOut]:
    return ApiResponse(data=UserOut.model_validate(service.get_profile(session, user)))


@router.patch("/me", response_model=ApiResponse[UserOut])
def update_me(
    body: ProfileUpdate, user: CurrentUser, session: DbSession, service: AccountServiceDep
) -> ApiResponse[UserOut]:
    return ApiResponse(data=UserOut.model_validate(service.update_profile(session, user, body)))


@router.post("/delete-account", response_model=ApiResponse[dict])
async def delete_account(
    user: CurrentUser, session: DbSession, service: AccountServiceDep
) -> ApiResponse[dict]:
    """Delete the Supabase user and every row it owns."""
    try:
        await service.delete_account(session, user)
    except PROVIDER_EXCEPTIONS as e:
        _errors.raise_http(e)
    return ApiResponse(data={"deleted": True})
