"""Alchemy JSON-RPC provider for asset transfer history."""
import itertools
import os
from datetime import datetime
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from smartwhale.providers.core import (DEFAULT_TIMEOUT, HttpProviderABC,
                                       UpstreamError, hex_to_int)
from smartwhale.utils import as_utc, utc_now

TRANSFER_CATEGORIES = ["external", "erc20"]


class AssetTransfer(BaseModel):
    """One row of alchemy_getAssetTransfers."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hash: str | None = None
    from_address: str = Field(alias="from")
    to_address: str | None = Field(default=None, alias="to")
    value: float | None = None
    asset: str | None = None
    category: str = "external"
    block_num: str = Field(default="0x0", alias="blockNum")
    metadata: dict = {}

    @property
    def block_timestamp(self) -> datetime:
        """Block time from the transfer metadata; now when Alchemy omits it."""
        raw = self.metadata.get("blockTimestamp")
        if not raw:
            return utc_now()
        return as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


class AlchemyProvider(HttpProviderABC):
    """Ethereum JSON-RPC (with Alchemy enhanced methods) over HTTP POST.

    ALCHEMY_HTTP_URL is the full app URL including the key
    (https://eth-mainnet.g.alchemy.com/v2/<key>).
    """

    api_name = "Alchemy"

    def __init__(
        self,
        http_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Alchemy provider.

        Args:
            http_url: JSON-RPC URL. Defaults to ALCHEMY_HTTP_URL env var.
            client: Preconfigured client (tests); built from the settings otherwise.
        """
        self._url = http_url or os.getenv("ALCHEMY_HTTP_URL", "")
        self._ids = itertools.count(1)
        if client is None:
            client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=DEFAULT_TIMEOUT,
            )
        super().__init__(client)

    @property
    def configured(self) -> bool:
        return bool(self._url)

    async def get_block_number(self) -> int:
        """Fetch the latest block number."""
        return hex_to_int(await self._rpc("eth_blockNumber", []))

    async def get_asset_transfers(
        self,
        address: str,
        from_block: int,
        *,
        outgoing: bool = True,
        max_count: int = 20,
    ) -> list[AssetTransfer]:
        """Fetch the newest transfers sent from (or received by) an address.

        Args:
            address: Wallet address.
            from_block: First block to include.
            outgoing: True for transfers from the address, False for transfers to it.
            max_count: Maximum number of transfers returned.

        Returns:
            Transfers, newest first.
        """
        query: dict[str, Any] = {
            "fromBlock": hex(max(from_block, 0)),
            "toBlock": "latest",
            "category": TRANSFER_CATEGORIES,
            "maxCount": hex(max_count),
            "excludeZeroValue": True,
            "withMetadata": True,
            "order": "desc",
        }
        query["fromAddress" if outgoing else "toAddress"] = address
        result = await self._rpc("alchemy_getAssetTransfers", [query])
        return [AssetTransfer.model_validate(row) for row in result.get("transfers", [])]

    async def _rpc(self, method: str, params: list) -> Any:
        """POST one JSON-RPC request and return its result; errors raise UpstreamError."""
        self.require_configured("ALCHEMY_HTTP_URL")
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        response = await self._client.post(self._url, json=body)
        response.raise_for_status()
        payload = response.json()
        if payload.get("error"):
            raise UpstreamError(self.api_name, str(payload["error"].get("message")))
        return payload.get("result")
