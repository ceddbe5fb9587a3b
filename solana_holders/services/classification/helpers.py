"""Helper functions for holder classification."""

import re
from datetime import datetime, timezone
from functools import lru_cache
from typing import Iterable, Optional, Pattern

from solana_holders.constants import BPS_PER_WHOLE, SECONDS_PER_DAY


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_supply_pct(balance_raw: int, supply_raw: int) -> float:
    """Share of supply in percent, truncated to two decimals.

    The ratio is taken on integers scaled by 10,000 so the result never
    drifts at the integer boundary: ``get_supply_pct(x, x) == 100.0``.

    Args:
        balance_raw: Raw holder balance
        supply_raw: Raw mint supply

    Returns:
        Percentage in [0, 100] for balances within supply; 0.0 when supply is zero
    """
    if supply_raw <= 0:
        return 0.0
    return (balance_raw * BPS_PER_WHOLE // supply_raw) / 100


def meets_min_balance(balance_raw: int, supply_raw: int, min_bps: float) -> bool:
    """True when a balance is at least ``min_bps`` basis points of supply."""
    return balance_raw * BPS_PER_WHOLE >= supply_raw * min_bps


def wallet_age_days(first_tx: datetime, now: Optional[datetime] = None) -> float:
    """Days elapsed since the first observed transaction."""
    now = now or utc_now()
    return (now - first_tx).total_seconds() / SECONDS_PER_DAY


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str, whole_word: bool = True) -> Pattern[str]:
    # The keyword must start a word; with whole_word it must also end one
    pattern = r"(?<![a-z0-9])" + re.escape(keyword)
    if whole_word:
        pattern += r"(?![a-z0-9])"
    return re.compile(pattern)


def contains_keyword(text: str, keyword: str, whole_word: bool = True) -> bool:
    """Case-insensitive keyword test.

    By default the keyword must appear as a whole word. With
    ``whole_word=False`` it only has to start a word, so inflections match.

    >>> contains_keyword("binance hot wallet 3", "binance")
    True
    >>> contains_keyword("community fund", "mm")
    False
    >>> contains_keyword("uncx locker", "lock", whole_word=False)
    True
    """
    if not text or not keyword:
        return False
    return _keyword_pattern(keyword.lower(), whole_word).search(text.lower()) is not None


def first_keyword_match(text: str, keywords: Iterable[str], whole_word: bool = True) -> Optional[str]:
    """Return the first keyword (in list order) contained in ``text``."""
    for keyword in keywords:
        if contains_keyword(text, keyword, whole_word):
            return keyword
    return None
