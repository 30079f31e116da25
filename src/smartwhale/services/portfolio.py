"""User portfolio: stored holdings valued at live prices."""
import logging

from fastapi import HTTPException
from sqlmodel import Session, select

from smartwhale.db import Portfolio, PortfolioAsset
from smartwhale.schemas import (AssetCreate, AssetUpdate, PortfolioToken,
                                PortfolioView)
from smartwhale.services.fallbacks import DEMO_PORTFOLIO
from smartwhale.services.market_service import MarketService
from smartwhale.utils import as_utc, utc_now

logger = logging.getLogger(__name__)


class PortfolioService:
    """Reads and edits a user's portfolio; values it through MarketService."""

    def __init__(self, market: MarketService) -> None:
        self._market = market

    async def get_view(self, session: Session, user_id: str | None) -> PortfolioView:
        """Valued portfolio of the user, or the demo portfolio for anonymous callers."""
        if user_id is None:
            return await self.demo_view()
        portfolio = self._get_portfolio(session, user_id)
        if portfolio is None:
            return PortfolioView(tokens=[], total_value_usd=0.0, total_invested_usd=0.0,
                                 total_pnl_usd=0.0)
        assets = session.exec(
            select(PortfolioAsset).where(PortfolioAsset.portfolio_id == portfolio.id)
        ).all()
        prices, live = await self._market.get_usd_prices([a.symbol for a in assets])
        now = utc_now()
        tokens = [
            _valued(a.symbol, a.name, a.amount, a.avg_buy_price,
                    prices.get(a.symbol.upper(), 0.0), (now - as_utc(a.created_at)).days)
            for a in assets
        ]
        return _view(tokens, portfolio_id=portfolio.id, prices_live=live)

    async def demo_view(self) -> PortfolioView:
        prices, live = await self._market.get_usd_prices(list(DEMO_PORTFOLIO))
        tokens = [
            _valued(symbol, symbol, amount, avg_buy, prices.get(symbol, 0.0), days)
            for symbol, (amount, avg_buy, days) in DEMO_PORTFOLIO.items()
        ]
        return _view(tokens, demo=True, prices_live=live)

    def add_asset(self, session: Session, user_id: str, body: AssetCreate) -> PortfolioAsset:
        """Add a holding, creating the portfolio on first use. Duplicate symbol -> 400."""
        portfolio = self._get_or_create_portfolio(session, user_id)
        if self._get_asset(session, portfolio.id, body.symbol) is not None:
            raise HTTPException(
                status_code=400,
                detail=f"{body.symbol} already exists in portfolio. Use update instead.",
            )
        asset = PortfolioAsset(
            portfolio_id=portfolio.id,
            symbol=body.symbol,
            name=body.name or body.symbol,
            amount=body.amount,
            avg_buy_price=body.avg_buy_price,
        )
        session.add(asset)
        session.commit()
        session.refresh(asset)
        return asset

    def upsert_asset(
        self, session: Session, user_id: str, symbol: str, body: AssetUpdate
    ) -> PortfolioAsset:
        """Update a holding, or create it when the symbol is not held yet."""
        symbol = symbol.strip().upper()
        portfolio = self._get_or_create_portfolio(session, user_id)
        asset = self._get_asset(session, portfolio.id, symbol)
        if asset is None:
            asset = PortfolioAsset(portfolio_id=portfolio.id, symbol=symbol, name=body.name or symbol)
        asset.amount = body.amount
        if body.avg_buy_price is not None:
            asset.avg_buy_price = body.avg_buy_price
        if body.name:
            asset.name = body.name
        asset.updated_at = utc_now()
        session.add(asset)
        session.commit()
        session.refresh(asset)
        return asset

    def delete_asset(self, session: Session, user_id: str, symbol: str) -> None:
        """Remove a holding. Missing portfolio or symbol -> 404."""
        portfolio = self._get_portfolio(session, user_id)
        if portfolio is None:
            raise HTTPException(status_code=404, detail="Portfolio not found")
        asset = self._get_asset(session, portfolio.id, symbol.strip().upper())
        if asset is None:
            raise HTTPException(status_code=404, detail=f"{symbol.upper()} not found in portfolio")
        session.delete(asset)
        session.commit()

    @staticmethod
    def _get_portfolio(session: Session, user_id: str) -> Portfolio | None:
        return session.exec(select(Portfolio).where(Portfolio.user_id == user_id)).first()

    def _get_or_create_portfolio(self, session: Session, user_id: str) -> Portfolio:
        portfolio = self._get_portfolio(session, user_id)
        if portfolio is None:
            portfolio = Portfolio(user_id=user_id)
            session.add(portfolio)
            session.commit()
            session.refresh(portfolio)
            logger.info("Created portfolio %s for user %s", portfolio.id, user_id)
        return portfolio

    @staticmethod
    def _get_asset(session: Session, portfolio_id: int, symbol: str) -> PortfolioAsset | None:
        return session.exec(
            select(PortfolioAsset).where(
                PortfolioAsset.portfolio_id == portfolio_id, PortfolioAsset.symbol == symbol
            )
        ).first()


def _valued(
    symbol: str, name: str, amount: float, avg_buy: float, price: float, days: int
) -> PortfolioToken:
    value = amount * price
    return PortfolioToken(
        token_id=symbol,
        name=name,
        balance=amount,
        price_usd=price,
        value_usd=value,
        avg_buy_price=avg_buy,
        pnl_usd=value - amount * avg_buy,
        holding_time_days=max(days, 0),
    )


def _view(
    tokens: list[PortfolioToken],
    *,
    portfolio_id: int | None = None,
    demo: bool = False,
    prices_live: bool = True,
) -> PortfolioView:
    total_value = sum(t.value_usd for t in tokens)
    total_invested = sum(t.balance * t.avg_buy_price for t in tokens)
    return PortfolioView(
        portfolio_id=portfolio_id,
        tokens=sorted(tokens, key=lambda t: t.value_usd, reverse=True),
        total_value_usd=total_value,
        total_invested_usd=total_invested,
        total_pnl_usd=total_value - total_invested,
        demo=demo,
        prices_live=prices_live,
    )
