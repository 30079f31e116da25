"""Response envelope shared by every JSON route."""
from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from smartwhale.utils import utc_now

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """{"success": true, "data": ...} on success, {"success": false, "error": ...} otherwise."""

    success: bool = True
    data: T | None = None
    error: str | None = None
    mock: bool = False  # data came from the static fallback dataset
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorResponse(BaseModel):
    """Body rendered by the central exception handlers."""

    success: bool = False
    error: str
    details: list[dict] | None = None
