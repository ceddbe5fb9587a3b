"""Data models for supply decomposition and lock estimation."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from solana_holders.models.chain import to_ui_amount
from solana_holders.services.classification.helpers import get_supply_pct

BASIS_TOP = "top"
BASIS_FULL = "full"


@dataclass
class SupplySplit:
    """Supply divided into CEX, DEX and other on-chain holdings.

    Amounts are kept raw; UI amounts and percentages derive from them, so
    the buckets always add up exactly.
    """

    basis: str
    decimals: int
    total_supply_raw: int
    cex_raw: int = 0
    dex_raw: int = 0
    onchain_raw: int = 0
    unknown_remainder_raw: Optional[int] = None  # bounded split only
    breakdown_by_exchange_raw: Dict[str, int] = field(default_factory=dict)
    dex_name: Optional[str] = None
    owner_count: Optional[int] = None  # exhaustive split only
    metadata_checks: Optional[int] = None  # exhaustive split only

    def _ui(self, raw: int) -> float:
        return to_ui_amount(raw, self.decimals)

    def _pct(self, raw: int) -> float:
        return get_supply_pct(raw, self.total_supply_raw)

    @property
    def total_supply(self) -> float:
        return self._ui(self.total_supply_raw)

    @property
    def cex(self) -> float:
        return self._ui(self.cex_raw)

    @property
    def dex(self) -> float:
        return self._ui(self.dex_raw)

    @property
    def onchain_non_cex_dex(self) -> float:
        return self._ui(self.onchain_raw)

    @property
    def unknown_remainder(self) -> Optional[float]:
        if self.unknown_remainder_raw is None:
            return None
        return self._ui(self.unknown_remainder_raw)

    @property
    def cex_pct_of_total(self) -> float:
        return self._pct(self.cex_raw)

    @property
    def dex_pct_of_total(self) -> float:
        return self._pct(self.dex_raw)

    @property
    def onchain_non_cex_dex_pct_of_total(self) -> float:
        return self._pct(self.onchain_raw)

    @property
    def unknown_pct_of_total(self) -> Optional[float]:
        if self.unknown_remainder_raw is None:
            return None
        return self._pct(self.unknown_remainder_raw)

    @property
    def breakdown_by_exchange(self) -> Dict[str, float]:
        """Per-venue CEX amounts (UI), largest first."""
        ordered = sorted(self.breakdown_by_exchange_raw.items(), key=lambda item: item[1], reverse=True)
        return {name: self._ui(raw) for name, raw in ordered}

    def breakdown_pct(self, name: str) -> float:
        return self._pct(self.breakdown_by_exchange_raw.get(name, 0))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "basis": self.basis,
            "total_supply": self.total_supply,
            "cex": self.cex,
            "dex": self.dex,
            "onchain_non_cex_dex": self.onchain_non_cex_dex,
            "cex_pct_of_total": self.cex_pct_of_total,
            "dex_pct_of_total": self.dex_pct_of_total,
            "onchain_non_cex_dex_pct_of_total": self.onchain_non_cex_dex_pct_of_total,
            "breakdown_by_exchange": self.breakdown_by_exchange,
            "dex_name": self.dex_name,
        }
        if self.unknown_remainder_raw is not None:
            data["unknown_remainder"] = self.unknown_remainder
            data["unknown_pct_of_total"] = self.unknown_pct_of_total
        if self.owner_count is not None:
            data["owner_count"] = self.owner_count
        if self.metadata_checks is not None:
            data["metadata_checks"] = self.metadata_checks
        return data


@dataclass(frozen=True)
class FrozenAccountEntry:
    """A token account whose on-chain state is frozen."""

    token_account: str
    owner: str
    balance_raw: int
    decimals: int

    @property
    def balance(self) -> float:
        return to_ui_amount(self.balance_raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token_account": self.token_account,
            "owner": self.owner,
            "balance": self.balance,
            "balance_raw": str(self.balance_raw),
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class LabeledOwnerEntry:
    """An owner whose label or tags match a lock keyword.

    ``effective_locked`` excludes the part of the balance already counted
    as frozen, and is always within ``[0, balance]``.
    """

    owner: str
    label: Optional[str]
    tags: List[str]
    balance_raw: int
    frozen_portion_raw: int
    matched_by: str
    decimals: int

    @property
    def effective_locked_raw(self) -> int:
        return max(0, self.balance_raw - self.frozen_portion_raw)

    @property
    def balance(self) -> float:
        return to_ui_amount(self.balance_raw, self.decimals)

    @property
    def frozen_portion(self) -> float:
        return to_ui_amount(self.frozen_portion_raw, self.decimals)

    @property
    def effective_locked(self) -> float:
        return to_ui_amount(self.effective_locked_raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "label": self.label,
            "tags": list(self.tags),
            "balance": self.balance,
            "frozen_portion": self.frozen_portion,
            "effective_locked": self.effective_locked,
            "matched_by": self.matched_by,
        }


@dataclass
class LockBreakdown:
    """Frozen plus label-matched vesting supply, without double counting."""

    decimals: int
    total_supply_raw: int
    frozen_raw: int
    labeled_vesting_raw: int
    frozen_accounts: List[FrozenAccountEntry] = field(default_factory=list)
    labeled_owners: List[LabeledOwnerEntry] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def locked_total_raw(self) -> int:
        return self.frozen_raw + self.labeled_vesting_raw

    @property
    def circulating_raw(self) -> int:
        return max(0, self.total_supply_raw - self.locked_total_raw)

    @property
    def total_supply(self) -> float:
        return to_ui_amount(self.total_supply_raw, self.decimals)

    @property
    def locked_total(self) -> float:
        return to_ui_amount(self.locked_total_raw, self.decimals)

    @property
    def circulating(self) -> float:
        return to_ui_amount(self.circulating_raw, self.decimals)

    @property
    def frozen(self) -> float:
        return to_ui_amount(self.frozen_raw, self.decimals)

    @property
    def labeled_vesting(self) -> float:
        return to_ui_amount(self.labeled_vesting_raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_supply": self.total_supply,
            "locked_total": self.locked_total,
            "circulating": self.circulating,
            "components": {
                "frozen": self.frozen,
                "labeled_vesting": self.labeled_vesting,
            },
            "details": {
                "frozen_accounts": [entry.to_dict() for entry in self.frozen_accounts],
                "labeled_owners": [entry.to_dict() for entry in self.labeled_owners],
            },
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class SupplySummary:
    total_holders: int
    concentration_risk: str
    exchange_exposure: str
    decentralization_score: int
    primary_dex: Optional[str] = None


@dataclass
class SupplyAnalysis:
    """Both splits of one mint plus headline risk figures."""

    top: SupplySplit
    full: SupplySplit
    summary: SupplySummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top": self.top.to_dict(),
            "full": self.full.to_dict(),
            "summary": vars(self.summary).copy(),
        }
