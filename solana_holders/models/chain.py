"""Chain-level data records returned by the providers."""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def to_ui_amount(raw: int, decimals: int) -> float:
    """Convert a raw integer amount to its UI value (raw / 10^decimals)."""
    return raw / (10 ** decimals)


@dataclass(frozen=True)
class MintInfo:
    """Mint account state, fetched once per analysis run."""

    address: str
    decimals: int
    supply_raw: int
    mint_authority: Optional[str] = None
    freeze_authority: Optional[str] = None

    @property
    def supply(self) -> float:
        """UI supply."""
        return to_ui_amount(self.supply_raw, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["supply"] = self.supply
        return data


@dataclass(frozen=True)
class LargestTokenAccount:
    """One entry of ``getTokenLargestAccounts``."""

    token_account: str
    amount_raw: int
    decimals: int


@dataclass(frozen=True)
class HolderRecord:
    """A top holder: token account plus its resolved owner."""

    token_account: str
    owner: str
    balance_raw: int
    decimals: int

    @property
    def balance(self) -> float:
        """UI balance."""
        return to_ui_amount(self.balance_raw, self.decimals)


@dataclass(frozen=True)
class TokenAccountRecord:
    """A validated token account from a program account enumeration."""

    address: str
    owner: str
    mint: str
    amount_raw: int
    decimals: int
    state: str
    program_id: Optional[str] = None

    @property
    def balance(self) -> float:
        """UI balance."""
        return to_ui_amount(self.amount_raw, self.decimals)

    @property
    def is_frozen(self) -> bool:
        return self.state.lower() == "frozen"


@dataclass(frozen=True)
class TransferRecord:
    """One transfer activity touching an owner."""

    flow: str  # "in" or "out"
    amount_raw: int
    decimals: int
    block_time: int  # unix seconds

    @property
    def amount(self) -> float:
        """UI amount."""
        return to_ui_amount(self.amount_raw, self.decimals)

    @property
    def timestamp(self) -> datetime:
        return datetime.fromtimestamp(self.block_time, tz=timezone.utc)
