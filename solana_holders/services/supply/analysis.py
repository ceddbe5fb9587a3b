"""Combined supply analysis: both splits plus concentration figures."""

import asyncio

from solana_holders.clients.base import ChainProvider
from solana_holders.logging_config import get_logger
from solana_holders.services.supply.models import SupplyAnalysis, SupplySplit, SupplySummary
from solana_holders.services.supply.split import SupplySplitter

logger = get_logger(__name__)


def risk_level(pct: float, high_above: float, medium_above: float) -> str:
    if pct > high_above:
        return "high"
    if pct > medium_above:
        return "medium"
    return "low"


def summarize_splits(full: SupplySplit) -> SupplySummary:
    """Headline figures derived from the exhaustive split."""
    cex_pct = full.cex_pct_of_total
    exchange_pct = full.cex_pct_of_total + full.dex_pct_of_total
    return SupplySummary(
        total_holders=full.owner_count or 0,
        concentration_risk=risk_level(cex_pct, 50, 25),
        exchange_exposure=risk_level(exchange_pct, 60, 30),
        decentralization_score=round(max(0.0, min(100.0, 100 - cex_pct))),
        primary_dex=full.dex_name,
    )


class SupplyAnalyzer:
    """Runs the bounded and exhaustive splits of a mint concurrently."""

    def __init__(self, chain: ChainProvider, splitter: SupplySplitter):
        self.chain = chain
        self.splitter = splitter

    async def analyze(self, mint: str) -> SupplyAnalysis:
        """Compute both splits and summarize them.

        Raises:
            ChainQueryError: If mint info cannot be fetched
        """
        logger.info(f"Starting comprehensive supply analysis for {mint}")
        mint_info = await self.chain.get_mint_info(mint)

        top, full = await asyncio.gather(
            self.splitter.top_holders_split(mint, mint_info=mint_info),
            self.splitter.full_split(mint, mint_info=mint_info),
        )
        return SupplyAnalysis(top=top, full=full, summary=summarize_splits(full))
