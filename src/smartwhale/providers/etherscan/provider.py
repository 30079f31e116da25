"""Etherscan (API v2) provider for Ethereum balances and transactions."""
import asyncio
import logging
import os
from typing import Any

import httpx

from smartwhale.providers.core import (DEFAULT_TIMEOUT, HttpProviderABC,
                                       UpstreamError, hex_to_int,
                                       normalize_address)
from smartwhale.providers.etherscan.models import (EtherscanTokenTransfer,
                                                   EtherscanTx,
                                                   EtherscanTxListParams)

logger = logging.getLogger(__name__)

# Etherscan answers "status 0" with these messages for empty, not failed, lookups.
_EMPTY_RESULT_MESSAGES = ("No transactions found", "No records found")


class EtherscanProvider(HttpProviderABC):
    """Ethereum account data via the Etherscan v2 multichain API.

    Every call goes to one endpoint with module/action query parameters and
    the chain id. Etherscan signals most failures in the body (HTTP 200 with
    ``status: "0"``); those are raised as UpstreamError.
    """

    api_name = "Etherscan"
    BASE_URL = "https://api.etherscan.io"
    API_PATH = "/v2/api"
    BALANCEMULTI_LIMIT = 20

    def __init__(
        self,
        api_key: str | None = None,
        chain_id: int | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Etherscan provider.

        Args:
            api_key: Etherscan API key. Defaults to ETHERSCAN_API_KEY env var.
            chain_id: EVM chain id. Defaults to ETHERSCAN_CHAIN_ID env var, else 1.
            client: Preconfigured client (tests); built from the settings otherwise.
        """
        self._api_key = api_key or os.getenv("ETHERSCAN_API_KEY")
        self._chain_id = chain_id or int(os.getenv("ETHERSCAN_CHAIN_ID", "1"))
        if client is None:
            client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                headers={"Accept": "application/json"},
                timeout=DEFAULT_TIMEOUT,
            )
        super().__init__(client)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def get_balance(self, address: str, tag: str = "latest") -> int:
        """Fetch the ETH balance (wei) of an address at a block tag.

        Args:
            address: Wallet address.
            tag: "latest" or a block number (decimal or 0x hex).

        Returns:
            Balance in wei.
        """
        result = await self._call("account", "balance", address=address, tag=tag)
        return int(result)

    async def get_balances(self, addresses: list[str]) -> dict[str, int]:
        """Fetch balances (wei) for many addresses, 20 per request, concurrently.

        Returns:
            Balances keyed by lowercased address.
        """
        chunks = [
            addresses[i:i + self.BALANCEMULTI_LIMIT]
            for i in range(0, len(addresses), self.BALANCEMULTI_LIMIT)
        ]
        results = await asyncio.gather(
            *(
                self._call("account", "balancemulti", address=",".join(chunk), tag="latest")
                for chunk in chunks
            )
        )
        return {
            normalize_address(row["account"]): int(row["balance"])
            for rows in results
            for row in rows
        }

    async def get_transaction_count(self, address: str) -> int:
        """Fetch the nonce (number of sent transactions) of an address."""
        result = await self._call(
            "proxy", "eth_getTransactionCount", address=address, tag="latest"
        )
        return hex_to_int(result)

    async def get_transactions(self, address: str, limit: int = 20) -> list[EtherscanTx]:
        """Fetch the most recent normal transactions of an address (newest first)."""
        params = EtherscanTxListParams(offset=limit).model_dump()
        rows = await self._call("account", "txlist", address=address, **params)
        return [EtherscanTx.model_validate(row) for row in rows]

    async def get_token_transfers(
        self, address: str, limit: int = 100
    ) -> list[EtherscanTokenTransfer]:
        """Fetch the most recent ERC-20 transfers of an address (newest first)."""
        params = EtherscanTxListParams(offset=limit).model_dump()
        rows = await self._call("account", "tokentx", address=address, **params)
        return [EtherscanTokenTransfer.model_validate(row) for row in rows]

    async def get_token_balance(self, address: str, contract_address: str) -> int:
        """Fetch the raw ERC-20 balance (smallest unit) of an address."""
        result = await self._call(
            "account",
            "tokenbalance",
            address=address,
            contractaddress=contract_address,
            tag="latest",
        )
        return int(result)

    async def get_block_by_time(self, timestamp: int, closest: str = "before") -> int:
        """Fetch the block number mined closest to a Unix timestamp."""
        result = await self._call(
            "block", "getblocknobytime", timestamp=timestamp, closest=closest
        )
        return int(result)

    async def _call(self, module: str, action: str, **params: Any) -> Any:
        """Call one module/action and return its ``result``.

        Raises:
            ProviderNotConfiguredError: ETHERSCAN_API_KEY is missing.
            httpx.HTTPStatusError: Non-2xx response.
            UpstreamError: Error payload (status "0" or JSON-RPC error).
        """
        self.require_configured("ETHERSCAN_API_KEY")
        query = {
            "chainid": self._chain_id,
            "module": module,
            "action": action,
            **params,
            "apikey": self._api_key,
        }
        response = await self._client.get(self.API_PATH, params=query)
        response.raise_for_status()
        payload = response.json()

        if module == "proxy":
            if "error" in payload:
                raise UpstreamError(self.api_name, str(payload["error"].get("message")))
            return payload.get("result")

        if payload.get("status") == "1":
            return payload["result"]
        message = payload.get("message") or ""
        if message.startswith(_EMPTY_RESULT_MESSAGES):
            return []
        detail = payload.get("result") or message or "unknown error"
        logger.warning("Etherscan %s/%s failed: %s", module, action, detail)
        raise UpstreamError(self.api_name, str(detail))
