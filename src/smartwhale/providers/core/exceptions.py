"""Exceptions raised by upstream API providers."""


class UpstreamError(Exception):
    """The upstream API answered, but with an error payload.

    Etherscan reports failures as HTTP 200 with ``status: "0"``; JSON-RPC
    endpoints (Alchemy) return an ``error`` object. Both surface as this.
    """

    def __init__(self, api_name: str, message: str) -> None:
        super().__init__(f"{api_name}: {message}")
        self.api_name = api_name
        self.message = message


class ProviderNotConfiguredError(UpstreamError):
    """Required credentials (API key, URL) are missing from the environment."""

    def __init__(self, api_name: str, setting: str) -> None:
        super().__init__(api_name, f"{setting} not configured")
        self.setting = setting
