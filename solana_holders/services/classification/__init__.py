"""Holder classification: account types, wallet history and wallet categories."""

from solana_holders.services.classification.account_classifier import (
    classify,
    describe_account_type,
    is_exchange,
)
from solana_holders.services.classification.models import (
    AccountClassification,
    AccountType,
    ClassificationContext,
    ClassificationMetadata,
    Confidence,
    WalletCategory,
    WalletClassification,
    WalletHistorySummary,
)
from solana_holders.services.classification.wallet_categorizer import categorize
from solana_holders.services.classification.wallet_history import WalletHistoryAnalyzer

__all__ = [
    "AccountClassification",
    "AccountType",
    "ClassificationContext",
    "ClassificationMetadata",
    "Confidence",
    "WalletCategory",
    "WalletClassification",
    "WalletHistoryAnalyzer",
    "WalletHistorySummary",
    "categorize",
    "classify",
    "describe_account_type",
    "is_exchange",
]
