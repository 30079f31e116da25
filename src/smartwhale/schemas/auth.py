"""Account schemas (Supabase Auth)."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class AuthUser(BaseModel):
    """Caller identity resolved from a Supabase access token."""

    id: str
    email: str | None = None
    role: str = "authenticated"


class RegisterRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=128)
    full_name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None
    role: str
    created_at: datetime


class AuthSession(BaseModel):
    """Tokens returned by sign-in (and sign-up when email confirmation is off)."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_in: int | None = None
    user: UserOut
