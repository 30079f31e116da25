"""Whale sync job: store recent Alchemy transfers of the tracked whales."""
import logging
import time

from sqlmodel import Session, select

from smartwhale.db import TxType, WhaleActivity
from smartwhale.providers.alchemy import AlchemyProvider, AssetTransfer
from smartwhale.providers.core import PROVIDER_EXCEPTIONS, normalize_address
from smartwhale.schemas import SyncStats
from smartwhale.services.classifier import severity_for
from smartwhale.services.known_whales import ACTIVITY_WHALES, whale_label
from smartwhale.services.market_service import MarketService

logger = logging.getLogger(__name__)

# About 24h of Ethereum blocks at 12-13s each.
BLOCKS_PER_DAY = 6500
TRANSFERS_PER_WHALE = 20


class WhaleSyncService:
    """Pulls transfers from Alchemy into ``whale_activity``.

    Outgoing transfers are stored as sells and incoming ones as buys. Rows are
    insert-or-ignore on the transaction hash; a whale whose lookup fails is
    recorded in ``error_details`` and the run continues.
    """

    def __init__(
        self,
        alchemy: AlchemyProvider,
        market: MarketService,
        *,
        whales: list[str] | None = None,
        per_whale: int = TRANSFERS_PER_WHALE,
    ) -> None:
        self._alchemy = alchemy
        self._market = market
        self._whales = whales or ACTIVITY_WHALES
        self._per_whale = per_whale

    async def sync(self, session: Session) -> SyncStats:
        """Run one sync.

        Raises:
            ProviderNotConfiguredError: ALCHEMY_HTTP_URL missing.
            UpstreamError / httpx errors: The latest block could not be read.
        """
        started = time.monotonic()
        self._alchemy.require_configured("ALCHEMY_HTTP_URL")
        from_block = max(await self._alchemy.get_block_number() - BLOCKS_PER_DAY, 0)
        logger.info("Starting whale sync from block %s", from_block)

        stats = SyncStats(whales_tracked=len(self._whales))
        seen: set[str] = set()
        for address in self._whales:
            label = whale_label(address)
            try:
                transfers = await self._fetch(address, from_block)
                prices, _ = await self._market.get_usd_prices(
                    sorted({(t.asset or "ETH").upper() for _, t in transfers})
                )
            except PROVIDER_EXCEPTIONS as exc:
                logger.warning("Sync failed for %s: %s", label, exc)
                stats.errors += 1
                stats.error_details.append({"whale": label, "error": str(exc)})
                continue

            for tx_type, transfer in transfers:
                if not transfer.hash:
                    continue
                if transfer.hash in seen or self._exists(session, transfer.hash):
                    stats.skipped_duplicates += 1
                    continue
                seen.add(transfer.hash)
                session.add(self._to_activity(address, label, tx_type, transfer, prices))
                stats.activities_found += 1
            session.commit()

        stats.execution_time_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Whale sync completed: %s new, %s duplicates, %s errors",
            stats.activities_found, stats.skipped_duplicates, stats.errors,
        )
        return stats

    async def _fetch(self, address: str, from_block: int) -> list[tuple[TxType, AssetTransfer]]:
        outgoing = await self._alchemy.get_asset_transfers(
            address, from_block, outgoing=True, max_count=self._per_whale
        )
        incoming = await self._alchemy.get_asset_transfers(
            address, from_block, outgoing=False, max_count=self._per_whale
        )
        return [(TxType.SELL, t) for t in outgoing] + [(TxType.BUY, t) for t in incoming]

    @staticmethod
    def _exists(session: Session, tx_hash: str) -> bool:
        return session.exec(
            select(WhaleActivity.id).where(WhaleActivity.tx_hash == tx_hash)
        ).first() is not None

    @staticmethod
    def _to_activity(
        address: str,
        label: str,
        tx_type: TxType,
        transfer: AssetTransfer,
        prices: dict[str, float],
    ) -> WhaleActivity:
        symbol = (transfer.asset or "ETH").upper()
        amount = transfer.value or 0.0
        amount_usd = amount * prices.get(symbol, 0.0)
        return WhaleActivity(
            whale_address=normalize_address(address),
            whale_label=label,
            tx_hash=transfer.hash,
            tx_type=tx_type,
            token_symbol=symbol,
            amount=amount,
            amount_usd=amount_usd,
            from_address=transfer.from_address,
            to_address=transfer.to_address,
            severity=severity_for(amount_usd),
            timestamp=transfer.block_timestamp,
        )
