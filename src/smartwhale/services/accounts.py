"""Accounts over Supabase Auth with a local profile row per user."""
import logging
from typing import Any

from fastapi import HTTPException
from sqlmodel import Session, select

from smartwhale.db import (Alert, CustomWhale, Notification, Portfolio,
                           PortfolioAsset, SignalAction, Subscription, User,
                           WatchlistEntry)
from smartwhale.providers.supabase import SupabaseAuthError, SupabaseAuthProvider
from smartwhale.schemas import (AuthSession, AuthUser, LoginRequest,
                                ProfileUpdate, RegisterRequest, UserOut)
from smartwhale.services.email import EmailService

logger = logging.getLogger(__name__)

# Per-user tables cleared when an account is deleted.
_USER_TABLES = (Alert, Notification, WatchlistEntry, CustomWhale, SignalAction, Subscription)


class AccountService:
    """Registration, login, profile and account deletion."""

    def __init__(self, supabase: SupabaseAuthProvider, email: EmailService | None = None) -> None:
        self._supabase = supabase
        self._email = email

    async def register(self, session: Session, body: RegisterRequest) -> AuthSession:
        """Create the auth user and its profile row; a welcome email is sent best-effort.

        Raises:
            HTTPException: 400 when Supabase rejects the sign-up.
        """
        try:
            payload = await self._supabase.sign_up(body.email, body.password, body.full_name)
        except SupabaseAuthError as exc:
            raise HTTPException(status_code=400, detail=exc.message) from exc
        auth_user = payload.get("user") or payload
        user = self._upsert_user(session, auth_user, full_name=body.full_name)
        if self._email is not None:
            await self._email.send_quietly(user.email, "welcome", {"name": user.full_name})
        return _session_from(payload, user)

    async def login(self, session: Session, body: LoginRequest) -> AuthSession:
        """Password sign-in. Wrong credentials -> 401."""
        try:
            payload = await self._supabase.sign_in(body.email, body.password)
        except SupabaseAuthError as exc:
            status = 401 if exc.status_code in (400, 401) else 502
            raise HTTPException(status_code=status, detail=exc.message) from exc
        user = self._upsert_user(session, payload.get("user") or {})
        return _session_from(payload, user)

    def get_profile(self, session: Session, auth_user: AuthUser) -> User:
        """Profile row of the caller, created on first access."""
        user = session.get(User, auth_user.id)
        if user is None:
            user = self._upsert_user(session, {"id": auth_user.id, "email": auth_user.email or ""})
        return user

    def update_profile(self, session: Session, auth_user: AuthUser, body: ProfileUpdate) -> User:
        user = self.get_profile(session, auth_user)
        user.full_name = body.full_name.strip()
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    async def delete_account(self, session: Session, auth_user: AuthUser) -> None:
        """Delete the Supabase user, then every local row owned by it."""
        await self._supabase.delete_user(auth_user.id)
        portfolio = session.exec(select(Portfolio).where(Portfolio.user_id == auth_user.id)).first()
        if portfolio is not None:
            for asset in session.exec(
                select(PortfolioAsset).where(PortfolioAsset.portfolio_id == portfolio.id)
            ).all():
                session.delete(asset)
            session.flush()
            session.delete(portfolio)
        for model in _USER_TABLES:
            for row in session.exec(select(model).where(model.user_id == auth_user.id)).all():
                session.delete(row)
        user = session.get(User, auth_user.id)
        if user is not None:
            session.delete(user)
        session.commit()
        logger.info("Deleted account %s", auth_user.id)

    @staticmethod
    def _upsert_user(session: Session, auth_user: dict[str, Any], full_name: str | None = None) -> User:
        user_id = auth_user.get("id")
        if not user_id:
            raise HTTPException(status_code=502, detail="Supabase Auth returned no user")
        metadata = auth_user.get("user_metadata") or {}
        user = session.get(User, user_id) or User(id=user_id, email=auth_user.get("email") or "")
        user.full_name = full_name or user.full_name or metadata.get("full_name")
        session.add(user)
        session.commit()
        session.refresh(user)
        return user


def _session_from(payload: dict[str, Any], user: User) -> AuthSession:
    return AuthSession(
        access_token=payload.get("access_token"),
        refresh_token=payload.get("refresh_token"),
        expires_in=payload.get("expires_in"),
        user=UserOut.model_validate(user),
    )
