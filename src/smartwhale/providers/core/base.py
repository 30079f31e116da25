"""Abstract base class for upstream HTTP API providers."""
from abc import ABC, abstractmethod

import httpx

from smartwhale.providers.core.exceptions import ProviderNotConfiguredError

DEFAULT_TIMEOUT = httpx.Timeout(15.0, connect=5.0)


class HttpProviderABC(ABC):
    """Base interface for providers that own a single httpx.AsyncClient.

    Providers are created once in the application lifespan and shared by all
    requests; close() releases the client on shutdown. Subclasses pass the
    client (tests inject one built on httpx.MockTransport).
    """

    api_name: str = "API"

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize provider. Subclasses should call super().__init__(client)."""
        self._client = client
        self._streaming = False

    @property
    def streaming(self) -> bool:
        """Flag used by stream_by_polling to control the polling loop."""
        return getattr(self, "_streaming", False)

    @streaming.setter
    def streaming(self, value: bool) -> None:
        self._streaming = value

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when the credentials this provider needs are present."""

    def require_configured(self, setting: str = "API key") -> None:
        """Raise ProviderNotConfiguredError unless configured."""
        if not self.configured:
            raise ProviderNotConfiguredError(self.api_name, setting)

    async def close(self) -> None:
        """Close the HTTP client."""
        self.streaming = False
        await self._client.aclose()

    async def __aenter__(self) -> "HttpProviderABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
