"""Supabase Auth provider over supabase-py: sign-up, sign-in, token checks, admin delete."""
import os
from typing import Any

import httpx
from supabase import (AsyncClient, AsyncClientOptions, AuthApiError,
                      AuthError, acreate_client)

from smartwhale.providers.core import (DEFAULT_TIMEOUT, HttpProviderABC,
                                       ProviderNotConfiguredError,
                                       UpstreamError)
from smartwhale.schemas import AuthUser


class SupabaseAuthError(UpstreamError):
    """GoTrue rejected the request (bad credentials, duplicate email, expired token)."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__("Supabase Auth", message)
        self.status_code = status_code


class SupabaseAuthProvider(HttpProviderABC):
    """Supabase Auth through ``supabase.acreate_client``.

    Public calls go through a client built with the anon key; the admin
    delete uses a second client built with the service role key. Both share
    this provider's httpx client, so sessions are never persisted or refreshed
    server-side.
    """

    api_name = "Supabase Auth"

    def __init__(
        self,
        url: str | None = None,
        anon_key: str | None = None,
        service_role_key: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Supabase Auth provider.

        Args:
            url: Project URL. Defaults to SUPABASE_URL env var.
            anon_key: Public key. Defaults to SUPABASE_ANON_KEY env var.
            service_role_key: Admin key. Defaults to SUPABASE_SERVICE_ROLE_KEY env var.
            client: httpx client handed to supabase-py (tests inject a mock transport).
        """
        self._url = (url or os.getenv("SUPABASE_URL", "")).rstrip("/")
        self._anon_key = anon_key or os.getenv("SUPABASE_ANON_KEY", "")
        self._service_role_key = service_role_key or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        super().__init__(client or httpx.AsyncClient(timeout=DEFAULT_TIMEOUT))
        self._public: AsyncClient | None = None
        self._admin: AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self._url and self._anon_key)

    async def sign_up(
        self, email: str, password: str, full_name: str | None = None
    ) -> dict[str, Any]:
        """Create an account.

        Returns:
            The session as a dict (with ``user``) when email confirmation is
            disabled, otherwise ``{"user": ...}`` alone.
        """
        auth = (await self._public_client()).auth
        try:
            response = await auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name}},
            })
        except AuthError as e:
            raise self._translate(e) from e
        return _auth_payload(response)

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        """Exchange email/password for a session (access_token, refresh_token, user)."""
        auth = (await self._public_client()).auth
        try:
            response = await auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise self._translate(e) from e
        return _auth_payload(response)

    async def get_user(self, access_token: str) -> AuthUser:
        """Resolve the user behind an access token. Raises SupabaseAuthError if invalid."""
        auth = (await self._public_client()).auth
        try:
            response = await auth.get_user(access_token)
        except AuthError as e:
            raise self._translate(e) from e
        if response is None or response.user is None:
            raise SupabaseAuthError(401, "Invalid access token")
        user = response.user
        return AuthUser(id=user.id, email=user.email, role=user.role or "authenticated")

    async def delete_user(self, user_id: str) -> None:
        """Delete an auth user (admin API, service role key)."""
        if not self._url or not self._service_role_key:
            raise ProviderNotConfiguredError(self.api_name, "SUPABASE_SERVICE_ROLE_KEY")
        if self._admin is None:
            self._admin = await self._create(self._service_role_key)
        try:
            await self._admin.auth.admin.delete_user(user_id)
        except AuthError as e:
            raise self._translate(e) from e

    async def _public_client(self) -> AsyncClient:
        self.require_configured("SUPABASE_URL/SUPABASE_ANON_KEY")
        if self._public is None:
            self._public = await self._create(self._anon_key)
        return self._public

    async def _create(self, key: str) -> AsyncClient:
        options = AsyncClientOptions(
            headers={"X-Client-Info": "smartwhale-api"},
            auto_refresh_token=False,
            persist_session=False,
            flow_type="implicit",
            httpx_client=self._client,
        )
        return await acreate_client(self._url, key, options=options)

    def _translate(self, error: AuthError) -> UpstreamError:
        # Retryable errors carry status 0 (network failure) or a 5xx gateway code.
        if isinstance(error, AuthApiError):
            return SupabaseAuthError(error.status, error.message)
        return UpstreamError(self.api_name, error.message)


def _auth_payload(response: Any) -> dict[str, Any]:
    if response.session is not None:
        return response.session.model_dump()
    return {"user": response.user.model_dump() if response.user else None}
