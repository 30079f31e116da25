"""Transactional email templates sent through SendGrid."""
import logging
import os
from dataclasses import dataclass
from html import escape

from smartwhale.providers.core import PROVIDER_EXCEPTIONS
from smartwhale.providers.sendgrid import SendGridProvider

logger = logging.getLogger(__name__)

DEFAULT_APP_URL = "http://localhost:3000"


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str


def _layout(title: str, body: str, cta_label: str, cta_url: str) -> str:
    return (
        '<div style="font-family:Arial,sans-serif;max-width:600px;margin:0 auto">'
        f'<h1 style="color:#0ea5e9">{title}</h1>'
        f"{body}"
        f'<p><a href="{escape(cta_url, quote=True)}" '
        'style="background:#0ea5e9;color:#fff;padding:12px 24px;'
        f'border-radius:6px;text-decoration:none">{cta_label}</a></p>'
        '<p style="color:#94a3b8;font-size:12px">SmartWhale - follow the smart money</p>'
        "</div>"
    )


class EmailService:
    """Renders the welcome, alert and password-reset templates and sends them."""

    TEMPLATES = ("welcome", "alert", "password_reset")

    def __init__(self, sendgrid: SendGridProvider, app_url: str | None = None) -> None:
        self._sendgrid = sendgrid
        self._app_url = (app_url or os.getenv("APP_URL") or DEFAULT_APP_URL).rstrip("/")

    @property
    def configured(self) -> bool:
        return self._sendgrid.configured

    def is_app_link(self, url: str) -> bool:
        """True for links under APP_URL."""
        return url == self._app_url or url.startswith(f"{self._app_url}/")

    def render(self, template: str, data: dict) -> EmailMessage:
        """Build subject and HTML for a template.

        Args:
            template: One of welcome, alert, password_reset.
            data: Template parameters (name; whale, action, coin, amount; reset_link).

        Raises:
            ValueError: Unknown template.
        """
        if template == "welcome":
            name = escape(str(data.get("name") or "there"))
            return EmailMessage(
                subject="Welcome to SmartWhale",
                html=_layout(
                    f"Welcome, {name}!",
                    "<p>Track whale wallets, set alerts and get trading "
                    "signals from on-chain flows.</p>",
                    "Open dashboard",
                    f"{self._app_url}/dashboard",
                ),
            )
        if template == "alert":
            whale = escape(str(data.get("whale") or "A tracked whale"))
            action = escape(str(data.get("action") or "moved"))
            coin = escape(str(data.get("coin") or ""))
            amount = escape(str(data.get("amount") or ""))
            return EmailMessage(
                subject=f"Whale alert: {whale} {action} {coin}".strip(),
                html=_layout(
                    "Whale alert",
                    f"<p><strong>{whale}</strong> {action} {amount} {coin}.</p>",
                    "View alerts",
                    f"{self._app_url}/alerts",
                ),
            )
        if template == "password_reset":
            link = str(data.get("reset_link") or "")
            if not self.is_app_link(link):
                link = f"{self._app_url}/reset-password"
            return EmailMessage(
                subject="Reset your SmartWhale password",
                html=_layout(
                    "Password reset",
                    "<p>Someone asked to reset your password. If it was not you, "
                    "ignore this email.</p>",
                    "Reset password",
                    link,
                ),
            )
        raise ValueError(f"Unknown email type '{template}'. Use one of: {', '.join(self.TEMPLATES)}")

    async def send(self, to: str, template: str, data: dict | None = None) -> None:
        """Render and send. Raises ValueError for unknown templates and provider errors as-is."""
        message = self.render(template, data or {})
        await self._sendgrid.send(to, message.subject, message.html)
        logger.info("Sent %s email to %s", template, to)

    async def send_quietly(self, to: str | None, template: str, data: dict | None = None) -> bool:
        """Best-effort send: skipped when unconfigured, failures logged. Returns True if sent."""
        if not to or not self.configured:
            return False
        try:
            await self.send(to, template, data)
        except PROVIDER_EXCEPTIONS as exc:
            logger.warning("Sending %s email to %s failed: %s", template, to, exc)
            return False
        return True
