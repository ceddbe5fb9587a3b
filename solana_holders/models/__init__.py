"""Data models for Solana Holders."""

from solana_holders.models.chain import (
    HolderRecord,
    LargestTokenAccount,
    MintInfo,
    TokenAccountRecord,
    TransferRecord,
    to_ui_amount,
)
from solana_holders.models.metadata import AccountMetadata, FundedBy, TransferActivity

__all__ = [
    "AccountMetadata",
    "FundedBy",
    "HolderRecord",
    "LargestTokenAccount",
    "MintInfo",
    "TokenAccountRecord",
    "TransferActivity",
    "TransferRecord",
    "to_ui_amount",
]
