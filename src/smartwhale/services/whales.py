"""Whale balances, rankings and wallet detail over Etherscan."""
import asyncio
import csv
import io
import logging
from datetime import datetime, timedelta

from fastapi import HTTPException

from smartwhale.providers.coingecko import STABLECOINS
from smartwhale.providers.core import (PROVIDER_EXCEPTIONS,
                                       ProviderErrorMapper,
                                       ProviderNotConfiguredError,
                                       normalize_address, wei_to_eth)
from smartwhale.providers.etherscan import EtherscanProvider, EtherscanTx
from smartwhale.schemas import (BalancePoint, RankedWhale, TokenHolding,
                                WhaleDetail, WhalesOverview, WhaleSummary,
                                WhaleTransaction)
from smartwhale.services.classifier import classify_transaction, severity_for
from smartwhale.services.fallbacks import (ETH_CIRCULATING_SUPPLY,
                                           mock_whales_overview)
from smartwhale.services.known_whales import KNOWN_WHALE_ADDRESSES, whale_label
from smartwhale.services.market_service import MarketService
from smartwhale.utils import from_unix, utc_now

logger = logging.getLogger(__name__)

MAX_TOKEN_CONTRACTS = 15
TOP_HOLDINGS = 10
RECENT_TRANSACTIONS = 20
HISTORY_TRANSACTIONS = 100


class WhaleService:
    """Reads whale wallets from Etherscan and values them with CoinGecko prices."""

    def __init__(
        self,
        etherscan: EtherscanProvider,
        market: MarketService,
        error_mapper: ProviderErrorMapper | None = None,
        *,
        token_request_delay: float = 0.2,
    ) -> None:
        """Initialize with providers.

        Args:
            etherscan: Etherscan provider.
            market: Price service (ETH and token prices).
            error_mapper: Maps provider exceptions to HTTP.
            token_request_delay: Seconds between sequential tokenbalance calls
                (Etherscan free tier allows 5 calls/second).
        """
        self._etherscan = etherscan
        self._market = market
        self._error_mapper = error_mapper or ProviderErrorMapper("Whale", "Etherscan")
        self._token_request_delay = token_request_delay

    async def get_overview(self) -> tuple[WhalesOverview, bool]:
        """Balances and totals for the known whale list.

        Returns:
            (overview, mock) where mock is True when served from the fallback dataset.
        """
        try:
            balances, eth_price = await asyncio.gather(
                self._etherscan.get_balances(KNOWN_WHALE_ADDRESSES),
                self._market.get_eth_price(),
            )
        except PROVIDER_EXCEPTIONS as exc:
            logger.warning("Whale overview unavailable, serving mock data: %s", exc)
            return mock_whales_overview(), True

        whales = [
            WhaleSummary(
                address=address,
                label=whale_label(address),
                balance=wei_to_eth(balances.get(normalize_address(address), 0)),
                balance_usd=wei_to_eth(balances.get(normalize_address(address), 0)) * eth_price,
            )
            for address in KNOWN_WHALE_ADDRESSES
        ]
        whales.sort(key=lambda w: w.balance, reverse=True)
        total_eth = sum(w.balance for w in whales)
        overview = WhalesOverview(
            whales=whales,
            total_value=total_eth * eth_price,
            total_eth=total_eth,
            whale_count=len(whales),
            market_impact=round(total_eth / ETH_CIRCULATING_SUPPLY * 100, 2),
            eth_price=eth_price,
        )
        return overview, False

    async def get_top(self, limit: int = 50) -> tuple[list[RankedWhale], float]:
        """Known whales ranked by ETH balance (rank 1 = largest).

        Returns:
            (whales, eth_price). Raises HTTPException on provider errors.
        """
        addresses = KNOWN_WHALE_ADDRESSES[:limit]
        try:
            balances, eth_price = await asyncio.gather(
                self._etherscan.get_balances(addresses),
                self._market.get_eth_price(),
            )
        except PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e)
        counts = await asyncio.gather(
            *(self._etherscan.get_transaction_count(a) for a in addresses),
            return_exceptions=True,
        )

        whales = []
        for address, count in zip(addresses, counts):
            balance = wei_to_eth(balances.get(normalize_address(address), 0))
            whales.append(
                RankedWhale(
                    address=address,
                    label=whale_label(address),
                    balance=balance,
                    usd_value=balance * eth_price,
                    transactions=0 if isinstance(count, BaseException) else count,
                )
            )
        whales.sort(key=lambda w: w.balance, reverse=True)
        for rank, whale in enumerate(whales, start=1):
            whale.rank = rank
        return whales, eth_price

    async def get_transactions(
        self, address: str, limit: int = RECENT_TRANSACTIONS
    ) -> list[WhaleTransaction]:
        """Latest normal transactions, classified. Raises HTTPException on provider errors."""
        try:
            txs, eth_price = await asyncio.gather(
                self._etherscan.get_transactions(address, limit=limit),
                self._market.get_eth_price(),
            )
        except PROVIDER_EXCEPTIONS as e:
            self._error_mapper.raise_http(e, identifier=address)
        return [_to_transaction(tx, eth_price) for tx in txs[:limit]]

    async def get_detail(self, address: str, period: int = 30) -> WhaleDetail:
        """Balance, holdings, balance history and recent transactions of one wallet.

        Args:
            address: Wallet address (already validated).
            period: Days of balance history.

        Raises:
            HTTPException: 500 when Etherscan is not configured, 404 when the
                balance itself could not be fetched.
        """
        eth_price = await self._market.get_eth_price()
        try:
            balance_wei = await self._etherscan.get_balance(address)
        except ProviderNotConfiguredError as e:
            self._error_mapper.raise_http(e)
        except PROVIDER_EXCEPTIONS as e:
            logger.warning("Balance lookup failed for %s: %s", address, e)
            raise HTTPException(status_code=404, detail=f"Whale '{address}' not found") from e
        balance = wei_to_eth(balance_wei)

        tx_count, txs, holdings = await asyncio.gather(
            self._etherscan.get_transaction_count(address),
            self._etherscan.get_transactions(address, limit=HISTORY_TRANSACTIONS),
            self._token_holdings(address),
            return_exceptions=True,
        )
        for name, result in (("tx count", tx_count), ("txlist", txs), ("holdings", holdings)):
            if isinstance(result, BaseException):
                if not isinstance(result, PROVIDER_EXCEPTIONS):
                    raise result
                logger.warning("Whale detail %s failed for %s: %s", name, address, result)
        if isinstance(tx_count, BaseException):
            tx_count = 0
        if isinstance(txs, BaseException):
            txs = []
        if isinstance(holdings, BaseException):
            holdings = []

        usd_value = balance * eth_price
        history = balance_history(address, balance, txs, period)
        return WhaleDetail(
            address=address,
            label=whale_label(address),
            rank=0,
            balance=balance,
            usd_value=usd_value,
            transactions=tx_count,
            portfolio_breakdown=holdings or [
                TokenHolding(token="ETH", symbol="ETH", balance=balance, usd_value=usd_value)
            ],
            balance_history=history or _synthetic_history(balance),
            recent_transactions=[_to_transaction(tx, eth_price) for tx in txs[:RECENT_TRANSACTIONS]],
        )

    async def export_csv(self, address: str, period: int = 30) -> str:
        """CSV report of the detail view (summary, holdings, history, transactions)."""
        detail = await self.get_detail(address, period)
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["Address", "Label", "Balance (ETH)", "Value (USD)", "Transactions"])
        writer.writerow([detail.address, detail.label, f"{detail.balance:.6f}",
                         f"{detail.usd_value:.2f}", detail.transactions])
        writer.writerow([])
        writer.writerow(["Token", "Symbol", "Balance", "Value (USD)", "Contract"])
        for h in detail.portfolio_breakdown:
            value = "" if h.usd_value is None else f"{h.usd_value:.2f}"
            writer.writerow([h.token, h.symbol, f"{h.balance:.6f}", value, h.contract_address])
        writer.writerow([])
        writer.writerow(["Date", "Balance (ETH)"])
        for point in detail.balance_history:
            writer.writerow([point.time, f"{point.balance:.6f}"])
        writer.writerow([])
        writer.writerow(["Hash", "Time", "Type", "From", "To", "Value (ETH)", "Value (USD)", "Severity"])
        for tx in detail.recent_transactions:
            writer.writerow([tx.hash, tx.timestamp.isoformat(), tx.tx_type.value, tx.from_address,
                             tx.to_address or "", f"{tx.value_eth:.6f}", f"{tx.value_usd:.2f}",
                             tx.severity.value])
        return buffer.getvalue()

    async def _token_holdings(self, address: str) -> list[TokenHolding]:
        """Current ERC-20 balances of the contracts seen in recent transfers, top 10 by value."""
        transfers = await self._etherscan.get_token_transfers(address, limit=100)
        contracts: dict[str, tuple[str, str, int]] = {}
        for t in transfers:
            contracts.setdefault(t.contract_address, (t.token_name, t.token_symbol, t.token_decimal))
        selected = list(contracts.items())[:MAX_TOKEN_CONTRACTS]

        holdings: list[TokenHolding] = []
        for index, (contract, (name, symbol, decimals)) in enumerate(selected):
            if index:
                await asyncio.sleep(self._token_request_delay)
            try:
                raw = await self._etherscan.get_token_balance(address, contract)
            except PROVIDER_EXCEPTIONS as exc:
                logger.debug("tokenbalance %s failed for %s: %s", symbol, address, exc)
                continue
            amount = raw / 10**decimals
            if amount > 0:
                holdings.append(
                    TokenHolding(token=name, symbol=symbol, balance=amount,
                                 contract_address=contract, decimals=decimals)
                )

        prices, _ = await self._market.get_usd_prices([h.symbol for h in holdings])
        for h in holdings:
            symbol = h.symbol.upper()
            if symbol in prices:
                h.usd_value = h.balance * prices[symbol]
            elif symbol in STABLECOINS:
                h.usd_value = h.balance
        holdings.sort(key=lambda h: (h.usd_value or 0.0, h.balance), reverse=True)
        return holdings[:TOP_HOLDINGS]


def balance_history(
    address: str,
    current_balance: float,
    txs: list[EtherscanTx],
    period: int,
    today: datetime | None = None,
) -> list[BalancePoint]:
    """End-of-day ETH balances reconstructed backwards from the current balance.

    Walks transactions newest first, undoing each one, so every day with
    activity gets the balance it closed at. Gas fees are ignored.
    """
    me = normalize_address(address)
    today = today or utc_now()
    cutoff = (today - timedelta(days=period)).date()

    running = current_balance
    by_day: dict[str, float] = {}
    for tx in sorted(txs, key=lambda t: t.time_stamp, reverse=True):
        day = from_unix(tx.time_stamp).date()
        if day < cutoff:
            break
        by_day.setdefault(day.isoformat(), running)
        if tx.is_error == "1":
            continue
        value = wei_to_eth(tx.value)
        if normalize_address(tx.to_address or "") == me:
            running -= value
        elif normalize_address(tx.from_address) == me:
            running += value
    return [BalancePoint(time=day, balance=bal) for day, bal in sorted(by_day.items())]


def _synthetic_history(balance: float) -> list[BalancePoint]:
    now = utc_now()
    return [
        BalancePoint(time=(now - timedelta(days=30)).date().isoformat(), balance=balance * 0.9),
        BalancePoint(time=(now - timedelta(days=15)).date().isoformat(), balance=balance * 1.1),
        BalancePoint(time=now.date().isoformat(), balance=balance),
    ]


def _to_transaction(tx: EtherscanTx, eth_price: float) -> WhaleTransaction:
    value_eth = wei_to_eth(tx.value)
    value_usd = value_eth * eth_price
    return WhaleTransaction(
        hash=tx.hash,
        from_address=tx.from_address,
        to_address=tx.to_address or None,
        value_eth=value_eth,
        value_usd=value_usd,
        timestamp=from_unix(tx.time_stamp),
        block_number=tx.block_number,
        tx_type=classify_transaction(tx.from_address, tx.to_address),
        severity=severity_for(value_usd),
        is_error=tx.is_error == "1",
    )
