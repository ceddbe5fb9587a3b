"""
Supply decomposition into CEX, DEX and other on-chain holdings.

Two algorithms are provided. The bounded split only looks at the largest
holders and leaves the rest of supply in an unknown remainder; it is a fast
lower bound. The full split enumerates every token account of the mint, so
every unit of supply lands in exactly one bucket.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional

from solana_holders.clients.base import ChainProvider, MetadataProvider
from solana_holders.config import AnalysisConfig
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import MintInfo, TokenAccountRecord
from solana_holders.models.metadata import AccountMetadata
from solana_holders.services.classification.account_classifier import classify
from solana_holders.services.classification.helpers import get_supply_pct, meets_min_balance
from solana_holders.services.classification.models import (
    AccountClassification,
    AccountType,
    Confidence,
    WalletCategory,
    WalletClassification,
)
from solana_holders.services.holders import HolderClassifier
from solana_holders.services.supply.helpers import aggregate_owner_balances, collect_token_accounts
from solana_holders.services.supply.models import BASIS_FULL, BASIS_TOP, SupplySplit
from solana_holders.utils.rate_limiter import RateLimiter

logger = get_logger(__name__)

UNKNOWN_EXCHANGE = "exchange (unknown)"
BEHAVIORAL_EXCHANGE = "exchange (behavioral)"
UNKNOWN_DEX = "dex (unknown)"
BEHAVIORAL_DEX = "dex (behavioral)"

# Types whose bucket in the bounded split follows the behavioral wallet category
BEHAVIOR_ROUTED_TYPES = {
    AccountType.BRIDGE,
    AccountType.STAKING,
    AccountType.VALIDATOR,
    AccountType.PROGRAM_AUTHORITY,
    AccountType.UNKNOWN,
}


def venue_key(label: Optional[str], sub_type: Optional[str], confidence: Confidence, fallback: str) -> str:
    """Breakdown key: lowercased label, else sub-type, annotated unless high confidence."""
    key = (label or "").lower() or sub_type or fallback
    if confidence is not Confidence.HIGH:
        key = f"{key} [{confidence.value}]"
    return key


class _SplitAccumulator:
    def __init__(self, basis: str, mint_info: MintInfo):
        self.split = SupplySplit(
            basis=basis,
            decimals=mint_info.decimals,
            total_supply_raw=mint_info.supply_raw,
        )
        self._largest_dex_raw = 0

    def add_cex(self, amount_raw: int, key: str) -> None:
        self.split.cex_raw += amount_raw
        breakdown = self.split.breakdown_by_exchange_raw
        breakdown[key] = breakdown.get(key, 0) + amount_raw

    def add_dex(self, amount_raw: int, name: str) -> None:
        self.split.dex_raw += amount_raw
        if amount_raw > self._largest_dex_raw:
            self._largest_dex_raw = amount_raw
            self.split.dex_name = name

    def add_onchain(self, amount_raw: int) -> None:
        self.split.onchain_raw += amount_raw


def build_top_holders_split(classifications: Iterable[WalletClassification], mint_info: MintInfo) -> SupplySplit:
    """Aggregate classified top holders into a bounded split.

    CEX and DEX account types go to their buckets. Infrastructure and unknown
    types follow the behavioral category (exchange, DEX, else on-chain). All
    other types are on-chain. Supply outside the sample is the unknown
    remainder.
    """
    acc = _SplitAccumulator(BASIS_TOP, mint_info)

    for classification in classifications:
        meta = classification.metadata
        amount_raw = classification.balance_raw

        if meta.account_type is AccountType.CEX:
            acc.add_cex(amount_raw, venue_key(meta.label, meta.sub_type, meta.confidence, UNKNOWN_EXCHANGE))
        elif meta.account_type is AccountType.DEX:
            acc.add_dex(amount_raw, (meta.label or "").lower() or meta.sub_type or UNKNOWN_DEX)
        elif meta.account_type in BEHAVIOR_ROUTED_TYPES and classification.category is WalletCategory.EXCHANGE:
            acc.add_cex(amount_raw, BEHAVIORAL_EXCHANGE)
        elif meta.account_type in BEHAVIOR_ROUTED_TYPES and classification.category is WalletCategory.DEX:
            acc.add_dex(amount_raw, BEHAVIORAL_DEX)
        else:
            acc.add_onchain(amount_raw)

    split = acc.split
    covered = split.cex_raw + split.dex_raw + split.onchain_raw
    split.unknown_remainder_raw = max(split.total_supply_raw - covered, 0)
    return split


def add_full_split_owner(acc: _SplitAccumulator, amount_raw: int,
                         metadata: Optional[AccountMetadata],
                         classification: AccountClassification) -> None:
    label = metadata.label if metadata else None
    if classification.account_type is AccountType.CEX:
        acc.add_cex(amount_raw, venue_key(label, classification.sub_type, classification.confidence,
                                          UNKNOWN_EXCHANGE))
    elif classification.account_type is AccountType.DEX:
        acc.add_dex(amount_raw, (label or "").lower() or classification.sub_type or UNKNOWN_DEX)
    else:
        acc.add_onchain(amount_raw)


def log_split(split: SupplySplit) -> None:
    message = (f"Supply split ({split.basis}): CEX {split.cex_pct_of_total:.2f}%, "
               f"DEX {split.dex_pct_of_total:.2f}%, "
               f"On-chain {split.onchain_non_cex_dex_pct_of_total:.2f}%")
    if split.unknown_pct_of_total is not None:
        message += f", Unknown {split.unknown_pct_of_total:.2f}%"
    logger.info(message)


class SupplySplitter:
    """Computes the bounded and exhaustive supply splits of a mint."""

    def __init__(
        self,
        chain: ChainProvider,
        metadata_provider: MetadataProvider,
        holder_classifier: HolderClassifier,
        config: AnalysisConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.chain = chain
        self.metadata_provider = metadata_provider
        self.holder_classifier = holder_classifier
        self.config = config
        self._sleep = sleep

    async def top_holders_split(
        self,
        mint: str,
        mint_info: Optional[MintInfo] = None,
        classifications: Optional[List[WalletClassification]] = None
    ) -> SupplySplit:
        """Lower-bound split over the classified top holders.

        Args:
            mint: Mint address
            mint_info: Already fetched mint info, if any
            classifications: Already classified top holders, if any

        Returns:
            SupplySplit with basis "top" and an unknown remainder
        """
        if mint_info is None:
            mint_info = await self.chain.get_mint_info(mint)
        if classifications is None:
            classifications = await self.holder_classifier.classify_token_holders(mint, mint_info=mint_info)

        logger.info(f"Processing {len(classifications)} classified holders")
        split = build_top_holders_split(classifications, mint_info)
        log_split(split)
        return split

    async def full_split(
        self,
        mint: str,
        mint_info: Optional[MintInfo] = None,
        accounts: Optional[List[TokenAccountRecord]] = None
    ) -> SupplySplit:
        """Exhaustive split over every owner of the mint.

        Owners are visited largest first. Metadata is looked up for at most
        ``metadata_max_checks`` owners holding at least
        ``metadata_min_balance_bps`` of supply; the rest are classified
        without metadata and land in the on-chain bucket.

        Args:
            mint: Mint address
            mint_info: Already fetched mint info, if any
            accounts: Already enumerated token accounts, if any

        Returns:
            SupplySplit with basis "full", owner count and lookups performed

        Raises:
            ChainQueryError: If the token accounts cannot be enumerated
        """
        if mint_info is None:
            mint_info = await self.chain.get_mint_info(mint)
        if accounts is None:
            accounts = await collect_token_accounts(self.chain, mint, self.config.extra_token_program_ids)

        owners = aggregate_owner_balances(accounts)
        log_with_context(logger, "info", "Processing unique owners",
                         mint=mint, accounts=len(accounts), owners=len(owners))

        acc = _SplitAccumulator(BASIS_FULL, mint_info)
        limiter = RateLimiter(every=self.config.metadata_batch_size,
                              delay=self.config.metadata_batch_delay, sleep=self._sleep)
        supply_raw = mint_info.supply_raw

        for owner, balance_raw in owners:
            metadata = None
            should_check = (limiter.count < self.config.metadata_max_checks
                            and meets_min_balance(balance_raw, supply_raw, self.config.metadata_min_balance_bps))
            if should_check:
                metadata = await self.metadata_provider.get_account_metadata(owner)
                await limiter.tick()
            else:
                logger.debug(f"Skipping metadata lookup for {owner}")

            classification = classify(metadata)
            add_full_split_owner(acc, balance_raw, metadata, classification)

            pct = get_supply_pct(balance_raw, supply_raw)
            if pct >= self.config.large_holder_log_pct:
                logger.info(f"Large holder: {owner} | {pct:.2f}% | "
                            f"{classification.account_type.value} ({classification.confidence.value})")

        split = acc.split
        split.owner_count = len(owners)
        split.metadata_checks = limiter.count
        logger.info(f"Metadata checks performed: {limiter.count}/{len(owners)}")
        log_split(split)
        return split
