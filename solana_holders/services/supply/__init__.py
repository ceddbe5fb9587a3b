"""Supply decomposition and lock estimation."""

from solana_holders.services.supply.analysis import SupplyAnalyzer
from solana_holders.services.supply.lock import LockEstimator
from solana_holders.services.supply.models import (
    FrozenAccountEntry,
    LabeledOwnerEntry,
    LockBreakdown,
    SupplyAnalysis,
    SupplySplit,
    SupplySummary,
)
from solana_holders.services.supply.split import SupplySplitter

__all__ = [
    "FrozenAccountEntry",
    "LabeledOwnerEntry",
    "LockBreakdown",
    "LockEstimator",
    "SupplyAnalysis",
    "SupplyAnalyzer",
    "SupplySplit",
    "SupplySplitter",
    "SupplySummary",
]
