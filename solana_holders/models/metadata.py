"""
Off-chain account metadata models.

The metadata provider returns, per owner address, an optional label, a set
of free-text tags, an optional "funded-by" provenance record and an optional
account age. These models hold that payload in a provider-neutral shape.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FundedBy(BaseModel):
    """Provenance of the first funding transfer into an account."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = Field(alias="funded_by")
    tx_hash: Optional[str] = None
    block_time: Optional[int] = None

    @property
    def funded_at(self) -> Optional[datetime]:
        """Funding time as an aware UTC datetime."""
        if self.block_time is None:
            return None
        return datetime.fromtimestamp(self.block_time, tz=timezone.utc)


class AccountMetadata(BaseModel):
    """Labels and tags attached to an owner address."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    label: Optional[str] = Field(default=None, alias="account_label")
    tags: List[str] = Field(default_factory=list, alias="account_tags")
    funded_by: Optional[FundedBy] = None
    active_age_days: Optional[int] = Field(default=None, alias="active_age")

    @field_validator("tags", mode="before")
    @classmethod
    def drop_empty_tags(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("account_tags must be a list")
        return [str(tag) for tag in value if tag]

    @field_validator("label", mode="before")
    @classmethod
    def blank_label_is_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def has_identity(self) -> bool:
        """True when the account carries a label or at least one tag."""
        return bool(self.label or self.tags)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "AccountMetadata":
        """Build from a Solscan ``/account/metadata`` ``data`` object."""
        return cls.model_validate(data)


class TransferActivity(BaseModel):
    """One item of the Solscan ``/account/transfer`` ``data`` list."""

    model_config = ConfigDict(extra="ignore")

    flow: str
    amount: int = 0
    token_decimals: int = Field(default=0, ge=0)
    block_time: int

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> int:
        # Solscan reports integer raw amounts, sometimes as floats or strings
        if value is None:
            return 0
        if isinstance(value, bool):
            raise ValueError("amount must be numeric")
        try:
            number = int(Decimal(str(value)))
        except (InvalidOperation, ValueError, OverflowError):
            raise ValueError(f"amount is not numeric: {value!r}")
        if number < 0:
            raise ValueError("amount must be non-negative")
        return number

    @field_validator("flow", mode="before")
    @classmethod
    def normalize_flow(cls, value: Any) -> str:
        return str(value).lower() if value is not None else ""

    @field_validator("token_decimals", mode="before")
    @classmethod
    def default_decimals(cls, value: Any) -> Any:
        return 0 if value is None else value
