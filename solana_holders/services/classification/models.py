"""Data models for holder classification."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from solana_holders.models.metadata import FundedBy


class AccountType(str, Enum):
    """What kind of entity controls an address, judged from its labels and tags."""

    CEX = "cex"
    DEX = "dex"
    DEFI_PROTOCOL = "defi_protocol"
    BRIDGE = "bridge"
    STAKING = "staking"
    NFT_MARKETPLACE = "nft_marketplace"
    VALIDATOR = "validator"
    PROGRAM_AUTHORITY = "program_authority"
    MARKET_MAKER = "market_maker"
    WHALE = "whale"
    BOT_TRADER = "bot_trader"
    INSTITUTIONAL = "institutional"
    UNKNOWN = "unknown"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WalletCategory(str, Enum):
    """Behavioral role of a holder with respect to one token."""

    EXCHANGE = "exchange"
    FOUNDATION = "foundation"
    INVESTOR = "investor"
    TEAM = "team"
    COMMUNITY = "community"
    DEX = "dex"
    INFRASTRUCTURE = "infrastructure"
    MARKET_MAKER = "market_maker"


@dataclass(frozen=True)
class AccountClassification:
    """Result of classifying one address from its off-chain metadata."""

    account_type: AccountType
    confidence: Confidence
    sub_type: Optional[str] = None
    reasoning: Tuple[str, ...] = ()

    @property
    def is_cex(self) -> bool:
        return self.account_type is AccountType.CEX

    @property
    def is_dex(self) -> bool:
        return self.account_type is AccountType.DEX


@dataclass(frozen=True)
class WalletHistorySummary:
    """Behavioral summary of an owner's sampled transfer history."""

    first_tx: datetime
    last_tx: datetime
    tx_count: int
    has_sold: bool
    net_flow: float  # inflow - outflow, UI units
    last_outflow_at: Optional[datetime] = None

    @classmethod
    def empty(cls, now: Optional[datetime] = None) -> "WalletHistorySummary":
        """Zero-value summary used when no history is available."""
        now = now or datetime.now(timezone.utc)
        return cls(first_tx=now, last_tx=now, tx_count=0, has_sold=False, net_flow=0.0)


@dataclass(frozen=True)
class ClassificationContext:
    """Label-derived signals passed to the wallet category rules."""

    account_type: Optional[AccountType] = None
    sub_type: Optional[str] = None
    confidence: Optional[Confidence] = None
    is_dex: bool = False
    is_cex: bool = False

    @classmethod
    def from_classification(cls, classification: AccountClassification) -> "ClassificationContext":
        return cls(
            account_type=classification.account_type,
            sub_type=classification.sub_type,
            confidence=classification.confidence,
            is_dex=classification.is_dex,
            is_cex=classification.is_cex,
        )


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class ClassificationMetadata:
    """Provenance attached to a wallet classification."""

    owner: str
    token_account: str
    account_type: AccountType
    confidence: Confidence
    sub_type: Optional[str] = None
    reasoning: List[str] = field(default_factory=list)
    label: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    active_age_days: Optional[int] = None
    funded_by: Optional[FundedBy] = None
    is_dex: bool = False
    is_cex: bool = False
    source: str = "automated_classification"

    def to_dict(self) -> Dict[str, Any]:
        funded_by = None
        if self.funded_by is not None:
            funded_by = {
                "address": self.funded_by.address,
                "tx_hash": self.funded_by.tx_hash,
                "funded_at": _iso(self.funded_by.funded_at),
            }
        return {
            "owner": self.owner,
            "token_account": self.token_account,
            "source": self.source,
            "account_type": self.account_type.value,
            "sub_type": self.sub_type,
            "confidence": self.confidence.value,
            "reasoning": list(self.reasoning),
            "label": self.label,
            "tags": list(self.tags),
            "active_age_days": self.active_age_days,
            "funded_by": funded_by,
            "is_dex": self.is_dex,
            "is_cex": self.is_cex,
        }


@dataclass
class WalletClassification:
    """Category, history statistics and provenance for one top holder."""

    address: str
    category: WalletCategory
    balance: float
    balance_raw: int
    first_transaction_date: datetime
    last_transaction_date: datetime
    transaction_count: int
    has_sold: bool
    is_diamond_hand: bool
    is_long_term_no_outflow_180: bool
    metadata: ClassificationMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "category": self.category.value,
            "balance": self.balance,
            "balance_raw": str(self.balance_raw),
            "first_transaction_date": _iso(self.first_transaction_date),
            "last_transaction_date": _iso(self.last_transaction_date),
            "transaction_count": self.transaction_count,
            "has_sold": self.has_sold,
            "is_diamond_hand": self.is_diamond_hand,
            "is_long_term_no_outflow_180": self.is_long_term_no_outflow_180,
            "metadata": self.metadata.to_dict(),
        }
