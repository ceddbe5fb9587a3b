"""Unit tests for behavioral wallet categories."""

from datetime import timedelta
from typing import Optional

import pytest

from solana_holders.services.classification.models import (
    AccountClassification,
    AccountType,
    ClassificationContext,
    Confidence,
    WalletCategory,
    WalletHistorySummary,
)
from solana_holders.services.classification.wallet_categorizer import (
    categorize,
    is_diamond_hand,
    is_long_term_no_outflow,
)
from tests.fixtures.common import NOW, SUPPLY


def history(age_days: float = 0, tx_count: int = 0, has_sold: bool = False, net_flow: float = 0.0,
            outflow_days_ago: Optional[float] = None) -> WalletHistorySummary:
    last_outflow_at = NOW - timedelta(days=outflow_days_ago) if outflow_days_ago is not None else None
    return WalletHistorySummary(
        first_tx=NOW - timedelta(days=age_days),
        last_tx=NOW,
        tx_count=tx_count,
        has_sold=has_sold,
        net_flow=net_flow,
        last_outflow_at=last_outflow_at,
    )


def context(account_type: AccountType, confidence: Confidence) -> ClassificationContext:
    return ClassificationContext.from_classification(AccountClassification(account_type, confidence))


def run(balance: int, summary: WalletHistorySummary,
        ctx: Optional[ClassificationContext] = None) -> WalletCategory:
    return categorize(float(balance), balance, SUPPLY, summary, ctx, now=NOW)


def test_large_holder_that_never_sold_is_foundation():
    assert run(60_000, WalletHistorySummary.empty(NOW)) is WalletCategory.FOUNDATION


def test_large_holder_that_sold_is_not_foundation():
    assert run(60_000, history(has_sold=True, tx_count=3)) is WalletCategory.COMMUNITY


def test_old_quiet_holder_is_investor():
    assert run(30_000, history(age_days=200, tx_count=10)) is WalletCategory.INVESTOR


def test_young_holder_is_not_investor():
    assert run(30_000, history(age_days=100, tx_count=10)) is WalletCategory.COMMUNITY


def test_mid_size_holder_that_never_sold_is_team():
    assert run(5_000, history(age_days=10, tx_count=10)) is WalletCategory.TEAM


def test_high_activity_is_exchange():
    assert run(500, history(tx_count=1500, has_sold=True)) is WalletCategory.EXCHANGE


def test_large_net_flow_is_exchange():
    assert run(500, history(tx_count=5, net_flow=-20_000_000, has_sold=True)) is WalletCategory.EXCHANGE


def test_balanced_active_wallet_is_market_maker():
    summary = history(age_days=60, tx_count=150, has_sold=True, net_flow=10)

    assert run(500, summary) is WalletCategory.MARKET_MAKER


@pytest.mark.parametrize("account_type,expected", [
    (AccountType.CEX, WalletCategory.EXCHANGE),
    (AccountType.DEX, WalletCategory.DEX),
    (AccountType.BRIDGE, WalletCategory.INFRASTRUCTURE),
    (AccountType.STAKING, WalletCategory.INFRASTRUCTURE),
    (AccountType.PROGRAM_AUTHORITY, WalletCategory.INFRASTRUCTURE),
    (AccountType.VALIDATOR, WalletCategory.INFRASTRUCTURE),
    (AccountType.MARKET_MAKER, WalletCategory.MARKET_MAKER),
])
def test_high_confidence_labels_decide_the_category(account_type, expected):
    # Balance and history alone would make this a foundation wallet
    ctx = context(account_type, Confidence.HIGH)

    assert run(60_000, WalletHistorySummary.empty(NOW), ctx) is expected


def test_high_confidence_cex_ignores_any_behavior():
    ctx = context(AccountType.CEX, Confidence.HIGH)

    for summary in (history(age_days=200, tx_count=10), history(tx_count=5000, net_flow=1e9)):
        for balance in (0, 5_000, 30_000, 600_000):
            assert run(balance, summary, ctx) is WalletCategory.EXCHANGE


def test_medium_staking_falls_through_to_behavior():
    ctx = context(AccountType.STAKING, Confidence.MEDIUM)

    assert run(60_000, WalletHistorySummary.empty(NOW), ctx) is WalletCategory.FOUNDATION


def test_legacy_exchange_flag():
    assert run(60_000, WalletHistorySummary.empty(NOW), ClassificationContext(is_cex=True)) is WalletCategory.EXCHANGE
    assert run(60_000, WalletHistorySummary.empty(NOW), ClassificationContext(is_dex=True)) is WalletCategory.DEX


def test_medium_whale_tiebreaker():
    ctx = context(AccountType.WHALE, Confidence.MEDIUM)
    sold = history(tx_count=5, has_sold=True)

    assert run(6_000, sold, ctx) is WalletCategory.INVESTOR
    assert run(2_000, sold, ctx) is WalletCategory.COMMUNITY


@pytest.mark.parametrize("account_type", [AccountType.BOT_TRADER, AccountType.INSTITUTIONAL])
def test_medium_bot_or_institution_is_market_maker(account_type):
    ctx = context(account_type, Confidence.MEDIUM)

    assert run(200, history(tx_count=5, has_sold=True), ctx) is WalletCategory.MARKET_MAKER


def test_small_holder_is_community():
    assert run(10, history(age_days=5, tx_count=2)) is WalletCategory.COMMUNITY


@pytest.mark.parametrize("summary,expected", [
    (history(age_days=100), True),
    (history(age_days=90), True),
    (history(age_days=30), False),
    (history(age_days=400, has_sold=True), False),
])
def test_diamond_hand(summary, expected):
    assert is_diamond_hand(summary, NOW) is expected


@pytest.mark.parametrize("summary,expected", [
    (history(age_days=200), True),
    (history(age_days=200, has_sold=True, outflow_days_ago=190), True),
    (history(age_days=200, has_sold=True, outflow_days_ago=10), False),
    (history(age_days=100), False),
])
def test_long_term_no_outflow(summary, expected):
    assert is_long_term_no_outflow(summary, NOW) is expected
