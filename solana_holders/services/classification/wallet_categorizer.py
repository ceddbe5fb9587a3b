"""Behavioral wallet category rules."""

from datetime import datetime, timedelta
from typing import Optional

from solana_holders.services.classification.helpers import get_supply_pct, utc_now, wallet_age_days
from solana_holders.services.classification.models import (
    AccountType,
    ClassificationContext,
    Confidence,
    WalletCategory,
    WalletHistorySummary,
)

# High-confidence account types that decide the category outright
HIGH_CONFIDENCE_CATEGORIES = {
    AccountType.CEX: WalletCategory.EXCHANGE,
    AccountType.DEX: WalletCategory.DEX,
    AccountType.BRIDGE: WalletCategory.INFRASTRUCTURE,
    AccountType.STAKING: WalletCategory.INFRASTRUCTURE,
    AccountType.PROGRAM_AUTHORITY: WalletCategory.INFRASTRUCTURE,
    AccountType.VALIDATOR: WalletCategory.INFRASTRUCTURE,
    AccountType.MARKET_MAKER: WalletCategory.MARKET_MAKER,
}

# Behavioral thresholds (pct is percent of supply, ages in days)
FOUNDATION_MIN_PCT = 5.0
INVESTOR_MIN_PCT = 1.0
INVESTOR_MAX_TX = 20
INVESTOR_MIN_AGE_DAYS = 180
TEAM_MIN_PCT = 0.1
TEAM_MAX_TX = 50
EXCHANGE_MIN_TX = 1000
EXCHANGE_MIN_NET_FLOW = 10_000_000
MARKET_MAKER_MIN_TX = 100
MARKET_MAKER_MAX_FLOW_RATIO = 0.1
MARKET_MAKER_MIN_AGE_DAYS = 30
WHALE_INVESTOR_MIN_PCT = 0.5

DIAMOND_HAND_MIN_DAYS = 90
LONG_TERM_MIN_DAYS = 180


def categorize(
    balance: float,
    balance_raw: int,
    supply_raw: int,
    history: WalletHistorySummary,
    context: Optional[ClassificationContext] = None,
    now: Optional[datetime] = None
) -> WalletCategory:
    """Assign a behavioral category to a holder.

    Rules are evaluated in order and the first match wins:

    1. High-confidence labels (exchange, DEX, infrastructure, market maker).
    2. Legacy ``is_cex`` / ``is_dex`` flags.
    3. Supply share and history thresholds.
    4. Medium-confidence whale, institutional and bot labels as tiebreakers.
    5. Community.

    Args:
        balance: UI balance
        balance_raw: Raw balance
        supply_raw: Raw mint supply
        history: Transfer history summary of the owner
        context: Label-derived signals, if any
        now: Reference time for wallet age

    Returns:
        The wallet category
    """
    context = context or ClassificationContext()

    if context.confidence is Confidence.HIGH and context.account_type in HIGH_CONFIDENCE_CATEGORIES:
        return HIGH_CONFIDENCE_CATEGORIES[context.account_type]

    if context.is_cex:
        return WalletCategory.EXCHANGE
    if context.is_dex:
        return WalletCategory.DEX

    pct = get_supply_pct(balance_raw, supply_raw)
    age_days = wallet_age_days(history.first_tx, now)

    if pct >= FOUNDATION_MIN_PCT and not history.has_sold:
        return WalletCategory.FOUNDATION

    if (INVESTOR_MIN_PCT <= pct < FOUNDATION_MIN_PCT
            and history.tx_count < INVESTOR_MAX_TX
            and age_days > INVESTOR_MIN_AGE_DAYS):
        return WalletCategory.INVESTOR

    if TEAM_MIN_PCT <= pct < INVESTOR_MIN_PCT and not history.has_sold and history.tx_count < TEAM_MAX_TX:
        return WalletCategory.TEAM

    if history.tx_count > EXCHANGE_MIN_TX or abs(history.net_flow) > EXCHANGE_MIN_NET_FLOW:
        return WalletCategory.EXCHANGE

    if (history.tx_count > MARKET_MAKER_MIN_TX
            and abs(history.net_flow) < balance * MARKET_MAKER_MAX_FLOW_RATIO
            and age_days > MARKET_MAKER_MIN_AGE_DAYS):
        return WalletCategory.MARKET_MAKER

    if context.confidence is Confidence.MEDIUM:
        if context.account_type is AccountType.WHALE:
            return WalletCategory.INVESTOR if pct >= WHALE_INVESTOR_MIN_PCT else WalletCategory.COMMUNITY
        if context.account_type in (AccountType.INSTITUTIONAL, AccountType.BOT_TRADER):
            return WalletCategory.MARKET_MAKER

    return WalletCategory.COMMUNITY


def is_diamond_hand(history: WalletHistorySummary, now: Optional[datetime] = None) -> bool:
    """Never sold and first seen at least 90 days ago."""
    return not history.has_sold and wallet_age_days(history.first_tx, now) >= DIAMOND_HAND_MIN_DAYS


def is_long_term_no_outflow(history: WalletHistorySummary, now: Optional[datetime] = None) -> bool:
    """At least 180 days old with no outflow in the last 180 days."""
    now = now or utc_now()
    if wallet_age_days(history.first_tx, now) < LONG_TERM_MIN_DAYS:
        return False
    if history.last_outflow_at is None:
        return True
    return now - history.last_outflow_at >= timedelta(days=LONG_TERM_MIN_DAYS)
