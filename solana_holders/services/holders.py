"""Top-holder enumeration and the bounded classification run."""

import asyncio
from collections import Counter
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from solana_holders.clients.base import ChainProvider, MetadataProvider
from solana_holders.config import AnalysisConfig
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import HolderRecord, MintInfo
from solana_holders.services.classification.account_classifier import classify
from solana_holders.services.classification.helpers import utc_now
from solana_holders.services.classification.models import (
    ClassificationContext,
    ClassificationMetadata,
    WalletClassification,
)
from solana_holders.services.classification.wallet_categorizer import (
    categorize,
    is_diamond_hand,
    is_long_term_no_outflow,
)
from solana_holders.services.classification.wallet_history import WalletHistoryAnalyzer
from solana_holders.utils.rate_limiter import RateLimiter

logger = get_logger(__name__)


class HolderClassifier:
    """Classifies the largest holders of a mint one owner at a time."""

    def __init__(
        self,
        chain: ChainProvider,
        metadata_provider: MetadataProvider,
        history_analyzer: WalletHistoryAnalyzer,
        config: AnalysisConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now
    ):
        """Initialize the classifier.

        Args:
            chain: Chain data provider
            metadata_provider: Off-chain label/tag provider
            history_analyzer: Transfer history analyzer
            config: Analysis limits and delays
            sleep: Awaitable sleep used for throttling
            clock: Source of the current UTC time
        """
        self.chain = chain
        self.metadata_provider = metadata_provider
        self.history_analyzer = history_analyzer
        self.config = config
        self._sleep = sleep
        self._clock = clock

    async def get_top_holders(self, mint: str) -> List[HolderRecord]:
        """Largest non-empty token accounts of a mint with resolved owners.

        Returns:
            Holder records in provider order; empty when no account holds a balance
        """
        largest = await self.chain.get_largest_token_accounts(mint)
        non_empty = [entry for entry in largest if entry.amount_raw > 0][:self.config.top_holders_limit]

        holders = []
        for entry in non_empty:
            owner = await self.chain.get_owner_of_token_account(entry.token_account)
            holders.append(HolderRecord(
                token_account=entry.token_account,
                owner=owner,
                balance_raw=entry.amount_raw,
                decimals=entry.decimals,
            ))
        return holders

    async def classify_holder(self, holder: HolderRecord, mint_info: MintInfo) -> WalletClassification:
        """Run history, metadata and category rules for one holder."""
        owner = holder.owner or await self.chain.get_owner_of_token_account(holder.token_account)

        history = await self.history_analyzer.analyze(owner, mint_info.address)
        logger.debug(f"Wallet {owner}: {history.tx_count} transactions, has_sold: {history.has_sold}")

        metadata = await self.metadata_provider.get_account_metadata(owner)
        if metadata is not None and metadata.has_identity:
            logger.debug(f"Metadata found for {owner} - Label: {metadata.label}, Tags: {', '.join(metadata.tags)}")

        classification = classify(metadata)
        now = self._clock()
        category = categorize(
            holder.balance,
            holder.balance_raw,
            mint_info.supply_raw,
            history,
            ClassificationContext.from_classification(classification),
            now=now,
        )

        return WalletClassification(
            address=owner,
            category=category,
            balance=holder.balance,
            balance_raw=holder.balance_raw,
            first_transaction_date=history.first_tx,
            last_transaction_date=history.last_tx,
            transaction_count=history.tx_count,
            has_sold=history.has_sold,
            is_diamond_hand=is_diamond_hand(history, now),
            is_long_term_no_outflow_180=is_long_term_no_outflow(history, now),
            metadata=ClassificationMetadata(
                owner=owner,
                token_account=holder.token_account,
                account_type=classification.account_type,
                confidence=classification.confidence,
                sub_type=classification.sub_type,
                reasoning=list(classification.reasoning),
                label=metadata.label if metadata else None,
                tags=list(metadata.tags) if metadata else [],
                active_age_days=metadata.active_age_days if metadata else None,
                funded_by=metadata.funded_by if metadata else None,
                is_dex=classification.is_dex,
                is_cex=classification.is_cex,
            ),
        )

    async def classify_token_holders(
        self,
        mint: str,
        mint_info: Optional[MintInfo] = None,
        holders: Optional[List[HolderRecord]] = None
    ) -> List[WalletClassification]:
        """Classify the top holders of a mint.

        Holders are processed sequentially with ``holder_delay`` between
        them. A failure while processing one holder is logged and that holder
        is skipped.

        Args:
            mint: Mint address
            mint_info: Already fetched mint info, if any
            holders: Already fetched top holders, if any

        Returns:
            Classifications of the holders that were processed successfully

        Raises:
            ChainQueryError: If mint info or the holder list cannot be fetched
        """
        if mint_info is None:
            mint_info = await self.chain.get_mint_info(mint)
        log_with_context(logger, "info", "Classifying token holders",
                         mint=mint_info.address, supply=mint_info.supply, decimals=mint_info.decimals)

        if holders is None:
            holders = await self.get_top_holders(mint)
        if not holders:
            logger.error(f"No token holders found for mint {mint}")
            return []

        logger.info(f"Found {len(holders)} token holders to classify")
        limiter = RateLimiter(every=1, delay=self.config.holder_delay, sleep=self._sleep)
        classifications: List[WalletClassification] = []

        for index, holder in enumerate(holders, start=1):
            logger.debug(f"Processing holder {index}/{len(holders)}...")
            try:
                result = await self.classify_holder(holder, mint_info)
            except Exception as e:
                log_with_context(logger, "error", f"Error processing holder: {str(e)}",
                                 token_account=holder.token_account, owner=holder.owner)
                continue

            classifications.append(result)
            logger.info(f"Classified {result.address} as {result.category.value} "
                        f"({result.metadata.account_type.value}, {result.metadata.confidence.value})")
            await limiter.tick()

        logger.info(f"Successfully classified {len(classifications)}/{len(holders)} token holders")
        counts = Counter(c.category.value for c in classifications)
        logger.info(f"Classification summary: {dict(counts)}")
        return classifications
