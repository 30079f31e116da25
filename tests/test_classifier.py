"""Tests for whale transaction classification, severity tiers and feed filters."""
from datetime import datetime

import pytest

from smartwhale.db import Severity, TxType
from smartwhale.schemas import ActivityOut
from smartwhale.services.classifier import (classify_transaction,
                                            filter_activities, severity_for,
                                            summarize)
from smartwhale.services.known_whales import is_exchange, whale_label

BINANCE = "0x28C6c06298d514Db089934071355E5743bf21d60"
KRAKEN = "0xDA9dfA130Df4dE4673b89022EE50ff26f6EA73Cf"
WALLET = "0x1111111111111111111111111111111111111111"
OTHER_WALLET = "0x2222222222222222222222222222222222222222"


def make_activity(index: int, tx_type: TxType, amount_usd: float, blockchain: str = "ethereum") -> ActivityOut:
    return ActivityOut(
        id=str(index),
        whale_address=WALLET,
        whale_label="Whale 0x1111...",
        tx_hash=f"0x{index:064x}",
        tx_type=tx_type,
        token_symbol="ETH",
        amount=amount_usd / 3000,
        amount_usd=amount_usd,
        blockchain=blockchain,
        severity=severity_for(amount_usd),
        timestamp=datetime(2026, 1, 1, 12, index),
    )


@pytest.fixture
def activities():
    return [
        make_activity(1, TxType.BUY, 25_000_000),
        make_activity(2, TxType.SELL, 2_500_000),
        make_activity(3, TxType.SELL, 50_000, blockchain="solana"),
        make_activity(4, TxType.TRANSFER, 10_000_000),
    ]


class TestClassifyTransaction:
    """Direction labels by exchange involvement."""

    def test_deposit_to_exchange_is_sell(self):
        assert classify_transaction(WALLET, BINANCE) is TxType.SELL

    def test_withdrawal_from_exchange_is_buy(self):
        assert classify_transaction(BINANCE, WALLET) is TxType.BUY

    def test_wallet_to_wallet_is_transfer(self):
        assert classify_transaction(WALLET, OTHER_WALLET) is TxType.TRANSFER

    def test_exchange_to_exchange_counts_as_sell(self):
        """The receiving side wins when both ends are exchanges."""
        assert classify_transaction(KRAKEN, BINANCE) is TxType.SELL

    def test_comparison_ignores_case(self):
        assert classify_transaction(WALLET, BINANCE.lower()) is TxType.SELL
        assert classify_transaction(BINANCE.upper().replace("0X", "0x"), WALLET) is TxType.BUY

    def test_contract_creation_has_no_recipient(self):
        assert classify_transaction(WALLET, None) is TxType.TRANSFER
        assert classify_transaction(WALLET, "") is TxType.TRANSFER
        assert not is_exchange(None)


class TestSeverity:
    """USD tiers: HIGH from $10M, MEDIUM from $1M."""

    @pytest.mark.parametrize(
        "amount_usd, expected",
        [
            (10_000_000, Severity.HIGH),
            (50_000_000, Severity.HIGH),
            (9_999_999.99, Severity.MEDIUM),
            (1_000_000, Severity.MEDIUM),
            (999_999, Severity.LOW),
            (0, Severity.LOW),
        ],
    )
    def test_thresholds(self, amount_usd, expected):
        assert severity_for(amount_usd) is expected


class TestFeedFilters:
    """filter_activities and summarize over a small feed."""

    def test_all_filters_disabled(self, activities):
        assert filter_activities(activities) == activities

    def test_filter_by_type(self, activities):
        result = filter_activities(activities, tx_type="sell")
        assert [a.id for a in result] == ["2", "3"]

    def test_filter_by_severity_is_case_insensitive(self, activities):
        result = filter_activities(activities, severity="high")
        assert [a.id for a in result] == ["1", "4"]

    def test_filters_combine(self, activities):
        result = filter_activities(activities, tx_type="sell", blockchain="ethereum")
        assert [a.id for a in result] == ["2"]

    def test_summarize_counts_and_total(self, activities):
        stats = summarize(activities)
        assert stats.total == 4
        assert stats.total_value_usd == pytest.approx(37_550_000)
        assert stats.high_severity == 2
        assert stats.medium_severity == 1
        assert stats.low_severity == 1

    def test_summarize_empty(self):
        stats = summarize([])
        assert stats.total == 0
        assert stats.total_value_usd == 0


class TestWhaleLabel:
    def test_known_address_any_case(self):
        assert whale_label(BINANCE.lower()) == "Binance Cold Wallet 2"

    def test_unknown_address_is_shortened(self):
        assert whale_label(WALLET) == "Whale 0x1111..."
