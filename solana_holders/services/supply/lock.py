"""Locked versus circulating supply estimation."""

import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from solana_holders.clients.base import ChainProvider, MetadataProvider
from solana_holders.config import AnalysisConfig
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import MintInfo, TokenAccountRecord
from solana_holders.models.metadata import AccountMetadata
from solana_holders.services.classification.helpers import first_keyword_match, meets_min_balance
from solana_holders.services.supply.helpers import aggregate_owner_balances, collect_token_accounts
from solana_holders.services.supply.models import FrozenAccountEntry, LabeledOwnerEntry, LockBreakdown
from solana_holders.utils.rate_limiter import RateLimiter

logger = get_logger(__name__)

LOCK_NOTES = (
    "Frozen = token accounts with state=frozen (on-chain enforced).",
    "LabeledVesting = owners whose label/tags match vesting/lock keywords; "
    "frozen portion excluded to prevent double-count.",
    "This heuristic will miss bespoke vesting contracts unless their owners are labeled "
    "(configure LOCK_LABEL_KEYWORDS or add program-specific parsers).",
)


def scan_frozen_accounts(
    accounts: Sequence[TokenAccountRecord]
) -> Tuple[int, List[FrozenAccountEntry], Dict[str, int]]:
    """Collect non-empty frozen token accounts.

    Returns:
        Total frozen raw amount, entries largest first, and frozen raw amount per owner
    """
    total = 0
    entries: List[FrozenAccountEntry] = []
    per_owner: Dict[str, int] = defaultdict(int)

    for account in accounts:
        if not account.is_frozen or account.amount_raw <= 0:
            continue
        total += account.amount_raw
        per_owner[account.owner] += account.amount_raw
        entries.append(FrozenAccountEntry(
            token_account=account.address,
            owner=account.owner,
            balance_raw=account.amount_raw,
            decimals=account.decimals,
        ))

    entries.sort(key=lambda entry: entry.balance_raw, reverse=True)
    return total, entries, dict(per_owner)


def match_lock_keyword(metadata: Optional[AccountMetadata], keywords: Sequence[str]) -> Optional[str]:
    """First lock keyword found in the owner's label or tags.

    Keywords only have to start a word, so "Locked" and "Locker" match "lock"
    while "Blocked" does not.
    """
    if metadata is None:
        return None
    haystack = " ".join([(metadata.label or "").lower()] + [tag.lower() for tag in metadata.tags])
    return first_keyword_match(haystack, [keyword.lower() for keyword in keywords], whole_word=False)


class LockEstimator:
    """Reconciles frozen balances with label-matched vesting owners."""

    def __init__(
        self,
        chain: ChainProvider,
        metadata_provider: MetadataProvider,
        config: AnalysisConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.chain = chain
        self.metadata_provider = metadata_provider
        self.config = config
        self._sleep = sleep

    async def find_labeled_owners(
        self,
        accounts: Sequence[TokenAccountRecord],
        frozen_per_owner: Dict[str, int],
        mint_info: MintInfo
    ) -> List[LabeledOwnerEntry]:
        """Owners whose metadata matches a lock keyword, largest effective lock first.

        Lookups stop at the first owner below the minimum balance or once
        the lookup cap is reached.
        """
        limiter = RateLimiter(every=self.config.metadata_batch_size,
                              delay=self.config.metadata_batch_delay, sleep=self._sleep)
        labeled: List[LabeledOwnerEntry] = []

        for owner, balance_raw in aggregate_owner_balances(accounts):
            if limiter.count >= self.config.metadata_max_checks:
                break
            if not meets_min_balance(balance_raw, mint_info.supply_raw, self.config.metadata_min_balance_bps):
                break

            metadata = await self.metadata_provider.get_account_metadata(owner)
            await limiter.tick()

            matched = match_lock_keyword(metadata, self.config.lock_keywords)
            if matched is None:
                continue

            labeled.append(LabeledOwnerEntry(
                owner=owner,
                label=metadata.label,
                tags=list(metadata.tags),
                balance_raw=balance_raw,
                frozen_portion_raw=frozen_per_owner.get(owner, 0),
                matched_by=matched,
                decimals=mint_info.decimals,
            ))

        labeled.sort(key=lambda entry: entry.effective_locked_raw, reverse=True)
        return labeled

    async def get_lock_breakdown(
        self,
        mint: str,
        mint_info: Optional[MintInfo] = None,
        accounts: Optional[List[TokenAccountRecord]] = None
    ) -> LockBreakdown:
        """Estimate locked and circulating supply.

        ``locked_total = frozen + sum(effective_locked)`` and
        ``circulating = max(0, total_supply - locked_total)``.

        Args:
            mint: Mint address
            mint_info: Already fetched mint info, if any
            accounts: Already enumerated token accounts, if any

        Returns:
            LockBreakdown with details and notes

        Raises:
            ChainQueryError: If the token accounts cannot be enumerated
        """
        if mint_info is None:
            mint_info = await self.chain.get_mint_info(mint)
        if accounts is None:
            accounts = await collect_token_accounts(self.chain, mint, self.config.extra_token_program_ids)

        frozen_raw, frozen_entries, frozen_per_owner = scan_frozen_accounts(accounts)
        labeled = await self.find_labeled_owners(accounts, frozen_per_owner, mint_info)

        breakdown = LockBreakdown(
            decimals=mint_info.decimals,
            total_supply_raw=mint_info.supply_raw,
            frozen_raw=frozen_raw,
            labeled_vesting_raw=sum(entry.effective_locked_raw for entry in labeled),
            frozen_accounts=frozen_entries,
            labeled_owners=labeled,
            notes=list(LOCK_NOTES),
        )
        log_with_context(logger, "info", "Lock breakdown computed", mint=mint,
                         frozen=breakdown.frozen, labeled_vesting=breakdown.labeled_vesting,
                         circulating=breakdown.circulating)
        return breakdown
