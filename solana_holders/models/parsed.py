"""
Validated models for ``jsonParsed`` chain payloads.

Program account enumeration and owner resolution return loosely typed
parsed account data. These Pydantic models check the expected shape; any
payload that does not validate is treated as "not a token account" and
skipped by the callers.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from solana_holders.constants import PARSED_TOKEN_PROGRAMS
from solana_holders.logging_config import get_logger
from solana_holders.models.chain import MintInfo, TokenAccountRecord

logger = get_logger(__name__)


def _to_non_negative_int(value: Any, name: str) -> int:
    # Raw amounts arrive as decimal strings to survive JSON number limits
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"{name} must be an integer or integer string")
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} is not an integer: {value!r}")
    if number < 0:
        raise ValueError(f"{name} must be non-negative")
    return number


class TokenAmount(BaseModel):
    """The ``tokenAmount`` object of a parsed token account."""

    model_config = ConfigDict(extra="ignore")

    amount: int
    decimals: int = Field(ge=0)

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> int:
        return _to_non_negative_int(value, "amount")


class TokenAccountInfo(BaseModel):
    """``parsed.info`` of an SPL token account."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    mint: str
    owner: str = Field(min_length=1)
    state: str = "initialized"
    token_amount: TokenAmount = Field(alias="tokenAmount")


class ParsedTokenAccountBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["account"]
    info: TokenAccountInfo


class ParsedTokenAccountData(BaseModel):
    """``account.data`` of a jsonParsed token account."""

    model_config = ConfigDict(extra="ignore")

    program: str
    parsed: ParsedTokenAccountBody

    @field_validator("program")
    @classmethod
    def check_program(cls, value: str) -> str:
        if value not in PARSED_TOKEN_PROGRAMS:
            raise ValueError(f"not a token program: {value}")
        return value


class MintAccountInfo(BaseModel):
    """``parsed.info`` of an SPL mint account."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    supply: int
    decimals: int = Field(ge=0)
    mint_authority: Optional[str] = Field(default=None, alias="mintAuthority")
    freeze_authority: Optional[str] = Field(default=None, alias="freezeAuthority")

    @field_validator("supply", mode="before")
    @classmethod
    def parse_supply(cls, value: Any) -> int:
        return _to_non_negative_int(value, "supply")


class ParsedMintBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["mint"]
    info: MintAccountInfo


class ParsedMintData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    program: str
    parsed: ParsedMintBody

    @field_validator("program")
    @classmethod
    def check_program(cls, value: str) -> str:
        if value not in PARSED_TOKEN_PROGRAMS:
            raise ValueError(f"not a token program: {value}")
        return value


def parse_token_account_data(data: Any) -> Optional[TokenAccountInfo]:
    """Validate ``account.data`` and return the token account info.

    Returns:
        TokenAccountInfo, or None when the data is not a parsed SPL token account
    """
    if not isinstance(data, dict):
        return None
    try:
        return ParsedTokenAccountData.model_validate(data).parsed.info
    except ValidationError as e:
        logger.debug(f"Rejected parsed account data: {e.error_count()} validation error(s)")
        return None


def parse_program_account(entry: Dict[str, Any], program_id: Optional[str] = None) -> Optional[TokenAccountRecord]:
    """Convert one ``getProgramAccounts`` entry into a TokenAccountRecord.

    Args:
        entry: ``{"pubkey": ..., "account": {"data": {...}}}``
        program_id: Program the account was enumerated under

    Returns:
        TokenAccountRecord, or None when the entry does not validate
    """
    if not isinstance(entry, dict):
        return None
    pubkey = entry.get("pubkey")
    account = entry.get("account")
    if not pubkey or not isinstance(account, dict):
        return None

    info = parse_token_account_data(account.get("data"))
    if info is None:
        return None

    return TokenAccountRecord(
        address=pubkey,
        owner=info.owner,
        mint=info.mint,
        amount_raw=info.token_amount.amount,
        decimals=info.token_amount.decimals,
        state=info.state,
        program_id=program_id,
    )


def parse_mint_account(address: str, data: Any) -> Optional[MintInfo]:
    """Validate the parsed data of a mint account.

    Returns:
        MintInfo, or None when the data is not a parsed SPL mint
    """
    if not isinstance(data, dict):
        return None
    try:
        info = ParsedMintData.model_validate(data).parsed.info
    except ValidationError as e:
        logger.debug(f"Rejected parsed mint data for {address}: {e.error_count()} validation error(s)")
        return None

    return MintInfo(
        address=address,
        decimals=info.decimals,
        supply_raw=info.supply,
        mint_authority=info.mint_authority,
        freeze_authority=info.freeze_authority,
    )
