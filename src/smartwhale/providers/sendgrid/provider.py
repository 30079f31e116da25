"""SendGrid v3 mail-send provider."""
import os

import httpx

from smartwhale.providers.core import DEFAULT_TIMEOUT, HttpProviderABC

DEFAULT_FROM_EMAIL = "noreply@smartwhale.app"


class SendGridProvider(HttpProviderABC):
    """Sends single HTML emails through POST /v3/mail/send."""

    api_name = "SendGrid"
    BASE_URL = "https://api.sendgrid.com/v3"

    def __init__(
        self,
        api_key: str | None = None,
        from_email: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the SendGrid provider.

        Args:
            api_key: Defaults to SENDGRID_API_KEY env var.
            from_email: Sender. Defaults to SENDGRID_FROM_EMAIL, else noreply@smartwhale.app.
            client: Preconfigured client (tests); built from the settings otherwise.
        """
        self._api_key = api_key or os.getenv("SENDGRID_API_KEY", "")
        self.from_email = from_email or os.getenv("SENDGRID_FROM_EMAIL") or DEFAULT_FROM_EMAIL
        if client is None:
            client = httpx.AsyncClient(base_url=self.BASE_URL, timeout=DEFAULT_TIMEOUT)
        super().__init__(client)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def send(self, to: str, subject: str, html: str) -> None:
        """Send one email. SendGrid answers 202 Accepted with an empty body."""
        self.require_configured("SENDGRID_API_KEY")
        body = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        response = await self._client.post(
            "/mail/send",
            json=body,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        response.raise_for_status()
