"""Transfer history sampling and reduction for a single owner."""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from solana_holders.clients.base import TransferHistoryProvider
from solana_holders.config import AnalysisConfig
from solana_holders.constants import SPL_TRANSFER_ACTIVITY_TYPES
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import TransferRecord
from solana_holders.services.classification.helpers import utc_now
from solana_holders.services.classification.models import WalletHistorySummary
from solana_holders.utils.error_handling import HolderAnalysisError
from solana_holders.utils.rate_limiter import RateLimiter

logger = get_logger(__name__)


def summarize_transfers(transfers: Sequence[TransferRecord],
                        now: Optional[datetime] = None) -> WalletHistorySummary:
    """Reduce transfer records to a WalletHistorySummary.

    Records are ordered by block time to find the first and last
    transaction. ``in`` records add to inflow and ``out`` records to
    outflow; anything else only counts towards the transaction count.
    """
    if not transfers:
        return WalletHistorySummary.empty(now or utc_now())

    ordered = sorted(transfers, key=lambda t: t.block_time)

    inflow = 0.0
    outflow = 0.0
    last_outflow_at = None
    for transfer in ordered:
        if transfer.flow == "out":
            outflow += transfer.amount
            if last_outflow_at is None or transfer.timestamp > last_outflow_at:
                last_outflow_at = transfer.timestamp
        elif transfer.flow == "in":
            inflow += transfer.amount

    return WalletHistorySummary(
        first_tx=ordered[0].timestamp,
        last_tx=ordered[-1].timestamp,
        tx_count=len(ordered),
        has_sold=outflow > 0,
        net_flow=inflow - outflow,
        last_outflow_at=last_outflow_at,
    )


class WalletHistoryAnalyzer:
    """Samples an owner's transfer history and summarizes its behavior.

    Pages are requested newest first. Collection stops at the first empty
    or short page, or once ``history_max_records`` records are held; this is
    a sampling bound, not a guarantee of complete history.
    """

    def __init__(
        self,
        provider: TransferHistoryProvider,
        config: AnalysisConfig,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utc_now
    ):
        self.provider = provider
        self.config = config
        self._sleep = sleep
        self._clock = clock

    async def fetch_transfers(self, owner: str, token_mint: Optional[str] = None) -> List[TransferRecord]:
        """Page through the provider until a stop condition is hit.

        Raises:
            HolderAnalysisError: Whatever the provider raised
        """
        page_size = self.config.history_page_size
        max_records = self.config.history_max_records
        limiter = RateLimiter(every=1, delay=self.config.history_page_delay, sleep=self._sleep)

        transfers: List[TransferRecord] = []
        page = 1
        while True:
            items = await self.provider.get_transfer_history(
                owner,
                token=token_mint,
                activity_types=SPL_TRANSFER_ACTIVITY_TYPES,
                page=page,
                page_size=page_size,
                sort_order="desc",
            )
            if not items:
                break

            transfers.extend(items)
            if len(items) < page_size or len(transfers) >= max_records:
                break

            page += 1
            await limiter.tick()

        return transfers[:max_records]

    async def analyze(self, owner: str, token_mint: Optional[str] = None) -> WalletHistorySummary:
        """Summarize an owner's history for one token.

        Provider failures are absorbed: the owner gets a zero-value summary
        so that one failing lookup never aborts a batch.
        """
        try:
            transfers = await self.fetch_transfers(owner, token_mint)
        except HolderAnalysisError as e:
            log_with_context(logger, "error", f"Error analyzing wallet history: {e.message}",
                             owner=owner, mint=token_mint)
            return WalletHistorySummary.empty(self._clock())

        return summarize_transfers(transfers, self._clock())
