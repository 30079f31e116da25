"""Whale activity feed: fetch recent whale transfers and classify them."""
import asyncio
import logging
from collections import defaultdict

from smartwhale.providers.coingecko import STABLECOINS
from smartwhale.providers.core import (PROVIDER_EXCEPTIONS, normalize_address,
                                       wei_to_eth)
from smartwhale.providers.etherscan import (EtherscanProvider,
                                            EtherscanTokenTransfer,
                                            EtherscanTx)
from smartwhale.schemas import ActivityFeed, ActivityOut, WhaleFlow
from smartwhale.services.classifier import (classify_transaction,
                                            filter_activities, severity_for,
                                            summarize)
from smartwhale.services.fallbacks import mock_activities
from smartwhale.services.known_whales import ACTIVITY_WHALES, whale_label
from smartwhale.services.market_service import MarketService
from smartwhale.utils import from_unix

logger = logging.getLogger(__name__)


class ActivityService:
    """Builds the classified whale activity feed from Etherscan.

    Nothing is retained between calls: each request fetches, classifies and
    returns. Whales whose lookups fail are skipped; if every lookup fails (or
    Etherscan is not configured) the feed is served from the mock dataset.
    """

    def __init__(
        self,
        etherscan: EtherscanProvider,
        market: MarketService,
        *,
        whales: list[str] | None = None,
        per_whale: int = 20,
    ) -> None:
        self._etherscan = etherscan
        self._market = market
        self._whales = whales or ACTIVITY_WHALES
        self._per_whale = per_whale

    async def recent_activities(self) -> list[ActivityOut]:
        """Classified ETH and ERC-20 transfers of the tracked whales, newest first.

        Raises:
            ProviderNotConfiguredError: Etherscan key missing.
            UpstreamError: Every whale lookup failed.
        """
        self._etherscan.require_configured("ETHERSCAN_API_KEY")
        results = await asyncio.gather(
            *(self._fetch_whale(address) for address in self._whales),
            return_exceptions=True,
        )

        fetched: list[tuple[str, list[EtherscanTx], list[EtherscanTokenTransfer]]] = []
        for address, result in zip(self._whales, results):
            if isinstance(result, BaseException):
                if not isinstance(result, PROVIDER_EXCEPTIONS):
                    raise result
                logger.warning("Activity lookup failed for %s: %s", address, result)
                continue
            fetched.append((address, *result))
        if not fetched:
            raise results[0]

        symbols = {"ETH"} | {
            t.token_symbol.upper() for _, _, transfers in fetched for t in transfers
        }
        prices, _ = await self._market.get_usd_prices(sorted(symbols))

        activities: list[ActivityOut] = []
        for address, txs, transfers in fetched:
            label = whale_label(address)
            for tx in txs:
                if tx.value == 0 or tx.is_error == "1":
                    continue
                amount = wei_to_eth(tx.value)
                activities.append(
                    self._activity(address, label, tx.hash, "ETH", amount,
                                   amount * prices.get("ETH", 0.0),
                                   tx.from_address, tx.to_address, tx.time_stamp)
                )
            for transfer in transfers:
                symbol = transfer.token_symbol.upper()
                amount = transfer.value / 10**transfer.token_decimal
                price = prices.get(symbol, 1.0 if symbol in STABLECOINS else 0.0)
                activities.append(
                    self._activity(address, label, transfer.hash, symbol, amount,
                                   amount * price, transfer.from_address,
                                   transfer.to_address, transfer.time_stamp)
                )

        # A transfer between two tracked whales shows up in both histories.
        unique = {a.id: a for a in reversed(activities)}
        return sorted(unique.values(), key=lambda a: a.timestamp, reverse=True)

    async def get_feed(
        self,
        tx_type: str = "all",
        blockchain: str = "all",
        severity: str = "all",
        limit: int = 50,
    ) -> tuple[ActivityFeed, bool]:
        """Filtered feed with stats.

        Returns:
            (feed, mock) where mock is True when served from the fallback dataset.
        """
        mock = False
        try:
            activities = await self.recent_activities()
        except PROVIDER_EXCEPTIONS as exc:
            logger.warning("Whale activity unavailable, serving mock data: %s", exc)
            activities = mock_activities()
            mock = True
        filtered = filter_activities(activities, tx_type, blockchain, severity)
        return ActivityFeed(activities=filtered[:limit], stats=summarize(filtered)), mock

    async def whale_flow_by_token(self) -> dict[str, WhaleFlow]:
        """Buy/sell counts and USD volume per ticker from the live feed."""
        flows: dict[str, WhaleFlow] = defaultdict(WhaleFlow)
        for activity in await self.recent_activities():
            flow = flows[activity.token_symbol]
            if activity.tx_type.value == "buy":
                flow.buys += 1
            elif activity.tx_type.value == "sell":
                flow.sells += 1
            flow.volume_usd += activity.amount_usd
        return dict(flows)

    async def _fetch_whale(
        self, address: str
    ) -> tuple[list[EtherscanTx], list[EtherscanTokenTransfer]]:
        txs, transfers = await asyncio.gather(
            self._etherscan.get_transactions(address, limit=self._per_whale),
            self._etherscan.get_token_transfers(address, limit=self._per_whale),
        )
        return txs, transfers

    @staticmethod
    def _activity(
        whale: str,
        label: str,
        tx_hash: str,
        symbol: str,
        amount: float,
        amount_usd: float,
        from_address: str,
        to_address: str | None,
        timestamp: int,
    ) -> ActivityOut:
        return ActivityOut(
            id=f"{tx_hash}:{symbol}",
            whale_address=normalize_address(whale),
            whale_label=label,
            tx_hash=tx_hash,
            tx_type=classify_transaction(from_address, to_address),
            token_symbol=symbol,
            amount=amount,
            amount_usd=round(amount_usd, 2),
            from_address=from_address,
            to_address=to_address or None,
            blockchain="ethereum",
            severity=severity_for(amount_usd),
            timestamp=from_unix(timestamp),
        )
