"""Per-user whale watchlist enriched with live balances."""
import logging

from fastapi import HTTPException
from sqlmodel import Session, col, select

from smartwhale.db import WatchlistEntry
from smartwhale.providers.core import (PROVIDER_EXCEPTIONS, normalize_address,
                                       wei_to_eth)
from smartwhale.providers.etherscan import EtherscanProvider
from smartwhale.schemas import WatchlistCreate, WatchlistItem
from smartwhale.services.known_whales import whale_label
from smartwhale.services.market_service import MarketService

logger = logging.getLogger(__name__)


class WatchlistService:
    def __init__(self, etherscan: EtherscanProvider, market: MarketService) -> None:
        self._etherscan = etherscan
        self._market = market

    async def list_items(self, session: Session, user_id: str) -> list[WatchlistItem]:
        """Entries newest first; balance fields stay None when Etherscan fails."""
        entries = session.exec(
            select(WatchlistEntry)
            .where(WatchlistEntry.user_id == user_id)
            .order_by(col(WatchlistEntry.added_at).desc())
        ).all()
        items = [WatchlistItem.model_validate(e) for e in entries]
        if not items:
            return items

        try:
            balances = await self._etherscan.get_balances([i.whale_address for i in items])
            eth_price = await self._market.get_eth_price()
        except PROVIDER_EXCEPTIONS as exc:
            logger.warning("Watchlist balances unavailable: %s", exc)
            return items
        for item in items:
            wei = balances.get(normalize_address(item.whale_address))
            if wei is not None:
                item.balance = wei_to_eth(wei)
                item.balance_usd = item.balance * eth_price
        return items

    def add(self, session: Session, user_id: str, body: WatchlistCreate) -> WatchlistEntry:
        """Follow a whale. Already followed -> 400."""
        existing = session.exec(
            select(WatchlistEntry).where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.whale_address == body.whale_address,
            )
        ).first()
        if existing is not None:
            raise HTTPException(status_code=400, detail="Whale already in watchlist")
        entry = WatchlistEntry(
            user_id=user_id,
            whale_address=body.whale_address,
            whale_label=body.whale_label or whale_label(body.whale_address),
        )
        session.add(entry)
        session.commit()
        session.refresh(entry)
        return entry

    def remove(self, session: Session, user_id: str, whale_address: str) -> None:
        entry = session.exec(
            select(WatchlistEntry).where(
                WatchlistEntry.user_id == user_id,
                WatchlistEntry.whale_address == normalize_address(whale_address),
            )
        ).first()
        if entry is None:
            raise HTTPException(status_code=404, detail="Whale not in watchlist")
        session.delete(entry)
        session.commit()
