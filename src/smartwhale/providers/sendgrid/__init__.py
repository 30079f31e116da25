"""SendGrid provider."""
from smartwhale.providers.sendgrid.provider import SendGridProvider

__all__ = ["SendGridProvider"]
