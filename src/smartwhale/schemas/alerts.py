"""Alert and notification schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from smartwhale.db import AlertType
from smartwhale.utils import is_valid_address


class AlertCreate(BaseModel):
    """Body of POST /api/alerts.

    Whale alerts (balance_increase, balance_decrease, large_transaction) need a
    whale address; price alerts (price_above, price_below) need a token symbol.
    Thresholds are percentages for whale alerts and USD prices for price alerts.
    """

    alert_type: AlertType
    threshold_value: float = Field(gt=0)
    whale_address: str | None = None
    whale_label: str | None = Field(default=None, max_length=100)
    token_symbol: str | None = Field(default=None, max_length=20)

    @model_validator(mode="after")
    def _check_target(self) -> "AlertCreate":
        if self.alert_type.is_whale_alert:
            if not is_valid_address(self.whale_address):
                raise ValueError("whale_address must be a valid Ethereum address")
            self.whale_address = self.whale_address.lower()
        elif not self.token_symbol:
            raise ValueError("token_symbol is required for price alerts")
        if self.token_symbol:
            self.token_symbol = self.token_symbol.upper()
        return self


class AlertUpdate(BaseModel):
    """Body of PATCH /api/alerts/{id}; omitted fields are left unchanged."""

    is_active: bool | None = None
    threshold_value: float | None = Field(default=None, gt=0)


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    alert_type: AlertType
    whale_address: str | None
    whale_label: str | None
    token_symbol: str | None
    threshold_value: float
    is_active: bool
    last_triggered_at: datetime | None
    created_at: datetime


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    alert_id: int | None
    whale_address: str | None
    whale_label: str | None
    notification_type: str
    message: str
    data: dict
    is_read: bool
    created_at: datetime


class AlertCheckResult(BaseModel):
    """Result of one alert-checking run."""

    checked: int
    triggered: int
    skipped: int = 0
    errors: int = 0
    notifications: list[NotificationOut] = []
