"""
Service construction for Solana Holders.

Clients and services are built once from an AppConfig and wired together
explicitly; nothing reads process-wide settings after this point.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional

from solana_holders.clients.base import ChainProvider, MetadataProvider, TransferHistoryProvider
from solana_holders.clients.rpc_client import SolanaRpcClient
from solana_holders.clients.solscan_client import SolscanClient
from solana_holders.config import AppConfig
from solana_holders.logging_config import get_logger
from solana_holders.report import ReportGenerator
from solana_holders.services.classification.wallet_history import WalletHistoryAnalyzer
from solana_holders.services.holders import HolderClassifier
from solana_holders.services.supply.analysis import SupplyAnalyzer
from solana_holders.services.supply.lock import LockEstimator
from solana_holders.services.supply.split import SupplySplitter

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """All services of one analysis run."""

    config: AppConfig
    chain: ChainProvider
    metadata_provider: MetadataProvider
    history_provider: TransferHistoryProvider
    holder_classifier: HolderClassifier
    splitter: SupplySplitter
    lock_estimator: LockEstimator
    supply_analyzer: SupplyAnalyzer
    report_generator: ReportGenerator


def build_services(
    config: AppConfig,
    chain: ChainProvider,
    metadata_provider: MetadataProvider,
    history_provider: TransferHistoryProvider,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> ServiceContainer:
    """Wire services on top of the given providers."""
    analysis = config.analysis
    history_analyzer = WalletHistoryAnalyzer(history_provider, analysis, sleep=sleep)
    holder_classifier = HolderClassifier(chain, metadata_provider, history_analyzer, analysis, sleep=sleep)
    splitter = SupplySplitter(chain, metadata_provider, holder_classifier, analysis, sleep=sleep)
    lock_estimator = LockEstimator(chain, metadata_provider, analysis, sleep=sleep)

    return ServiceContainer(
        config=config,
        chain=chain,
        metadata_provider=metadata_provider,
        history_provider=history_provider,
        holder_classifier=holder_classifier,
        splitter=splitter,
        lock_estimator=lock_estimator,
        supply_analyzer=SupplyAnalyzer(chain, splitter),
        report_generator=ReportGenerator(
            chain, holder_classifier, splitter, lock_estimator, analysis, config.report
        ),
    )


@asynccontextmanager
async def open_services(config: AppConfig,
                        rpc_client: Optional[SolanaRpcClient] = None,
                        solscan_client: Optional[SolscanClient] = None) -> AsyncIterator[ServiceContainer]:
    """Create the HTTP clients, yield the wired services and close the clients on exit."""
    rpc_client = rpc_client or SolanaRpcClient(config.solana)
    solscan_client = solscan_client or SolscanClient(config.solscan)
    logger.debug(f"Using Solana RPC endpoint {config.solana.rpc_url}")

    async with rpc_client, solscan_client:
        yield build_services(config, rpc_client, solscan_client, solscan_client)
