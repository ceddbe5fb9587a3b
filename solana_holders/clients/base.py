"""
Abstract interfaces of the external data providers.

Services depend on these interfaces only, so any concrete chain, metadata or
transfer-history source can be injected (and mocked in tests).
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from solana_holders.models.chain import (
    LargestTokenAccount,
    MintInfo,
    TokenAccountRecord,
    TransferRecord,
)
from solana_holders.models.metadata import AccountMetadata


class ChainProvider(ABC):
    """On-chain reads needed by the holder and supply analyses."""

    @abstractmethod
    async def get_mint_info(self, mint: str) -> MintInfo:
        """Fetch mint supply, decimals and authorities.

        Raises:
            ChainQueryError: If the mint account does not exist or is not a mint
        """

    @abstractmethod
    async def get_largest_token_accounts(self, mint: str) -> List[LargestTokenAccount]:
        """Return the largest token accounts of a mint (at most 20)."""

    @abstractmethod
    async def get_owner_of_token_account(self, token_account: str) -> str:
        """Resolve the owner of a token account.

        Returns the input unchanged when it is not a recognizable token account.
        """

    @abstractmethod
    async def get_program_token_accounts(
        self,
        program_id: str,
        mint: str,
        data_size: Optional[int] = None
    ) -> List[TokenAccountRecord]:
        """Enumerate the token accounts of ``mint`` owned by ``program_id``."""


class MetadataProvider(ABC):
    """Off-chain labels and tags for owner addresses."""

    @abstractmethod
    async def get_account_metadata(self, address: str) -> Optional[AccountMetadata]:
        """Return metadata for ``address``, or None when unavailable.

        Implementations must not raise for provider failures.
        """


class TransferHistoryProvider(ABC):
    """Paginated transfer activity of an owner."""

    @abstractmethod
    async def get_transfer_history(
        self,
        address: str,
        token: Optional[str] = None,
        activity_types: Optional[Sequence[str]] = None,
        page: int = 1,
        page_size: int = 100,
        sort_order: str = "desc"
    ) -> List[TransferRecord]:
        """Return one page of transfers sorted by block time.

        Raises:
            ProviderError: On network errors or a non-success response
        """
