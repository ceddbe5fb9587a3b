"""Common test fixtures for Solana Holders tests.

This module provides fixtures and builders that can be reused across
different test modules.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

from solana_holders.clients.base import ChainProvider, MetadataProvider, TransferHistoryProvider
from solana_holders.config import AnalysisConfig
from solana_holders.models.chain import MintInfo, TokenAccountRecord, TransferRecord
from solana_holders.models.metadata import AccountMetadata
from solana_holders.services.classification.models import (
    AccountType,
    ClassificationMetadata,
    Confidence,
    WalletCategory,
    WalletClassification,
)
from solana_holders.services.classification.wallet_history import WalletHistoryAnalyzer
from solana_holders.services.holders import HolderClassifier
from solana_holders.services.supply.lock import LockEstimator
from solana_holders.services.supply.split import SupplySplitter

# Real, well-formed public keys (valid base58, 32 bytes)
MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
WSOL_MINT = "So11111111111111111111111111111111111111112"
SYSTEM_PROGRAM = "11111111111111111111111111111111"

SUPPLY = 1_000_000
NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_mint_info(supply_raw: int = SUPPLY, decimals: int = 0, address: str = MINT) -> MintInfo:
    return MintInfo(address=address, decimals=decimals, supply_raw=supply_raw)


def make_metadata(label: Optional[str] = None, tags: Sequence[str] = ()) -> AccountMetadata:
    return AccountMetadata(label=label, tags=list(tags))


def make_token_account(address: str, owner: str, amount_raw: int, state: str = "initialized",
                       mint: str = MINT, decimals: int = 0) -> TokenAccountRecord:
    return TokenAccountRecord(
        address=address,
        owner=owner,
        mint=mint,
        amount_raw=amount_raw,
        decimals=decimals,
        state=state,
    )


def make_transfer(flow: str, amount_raw: int, days_ago: float, now: datetime = NOW,
                  decimals: int = 0) -> TransferRecord:
    block_time = int((now - timedelta(days=days_ago)).timestamp())
    return TransferRecord(flow=flow, amount_raw=amount_raw, decimals=decimals, block_time=block_time)


def make_transfers(count: int, flow: str = "in", amount_raw: int = 1) -> List[TransferRecord]:
    return [make_transfer(flow, amount_raw, days_ago=i + 1) for i in range(count)]


def make_classification(
    owner: str,
    balance_raw: int,
    account_type: AccountType = AccountType.UNKNOWN,
    category: WalletCategory = WalletCategory.COMMUNITY,
    confidence: Confidence = Confidence.HIGH,
    label: Optional[str] = None,
    sub_type: Optional[str] = None,
    decimals: int = 0
) -> WalletClassification:
    """A finished classification as produced by HolderClassifier."""
    return WalletClassification(
        address=owner,
        category=category,
        balance=balance_raw / (10 ** decimals),
        balance_raw=balance_raw,
        first_transaction_date=NOW,
        last_transaction_date=NOW,
        transaction_count=0,
        has_sold=False,
        is_diamond_hand=False,
        is_long_term_no_outflow_180=False,
        metadata=ClassificationMetadata(
            owner=owner,
            token_account=f"{owner}-ata",
            account_type=account_type,
            confidence=confidence,
            sub_type=sub_type,
            label=label,
            is_cex=account_type is AccountType.CEX,
            is_dex=account_type is AccountType.DEX,
        ),
    )


@pytest.fixture
def analysis_config():
    """Default analysis settings without any throttling delay."""
    return AnalysisConfig(history_page_delay=0, holder_delay=0, metadata_batch_delay=0)


@pytest.fixture
def mint_info():
    return make_mint_info()


@pytest.fixture
def fake_sleep():
    """Awaitable stand-in for asyncio.sleep that records delays."""
    return AsyncMock()


@pytest.fixture
def mock_chain(mint_info):
    """Create a mock chain provider."""
    chain = AsyncMock(spec=ChainProvider)
    chain.get_mint_info.return_value = mint_info
    chain.get_largest_token_accounts.return_value = []
    chain.get_owner_of_token_account.side_effect = lambda token_account: f"owner-of-{token_account}"
    chain.get_program_token_accounts.return_value = []
    return chain


@pytest.fixture
def mock_metadata_provider():
    """Create a mock metadata provider that knows no labels."""
    provider = AsyncMock(spec=MetadataProvider)
    provider.get_account_metadata.return_value = None
    return provider


@pytest.fixture
def mock_history_provider():
    """Create a mock transfer history provider with no transfers."""
    provider = AsyncMock(spec=TransferHistoryProvider)
    provider.get_transfer_history.return_value = []
    return provider


@pytest.fixture
def history_analyzer(mock_history_provider, analysis_config, fake_sleep):
    return WalletHistoryAnalyzer(mock_history_provider, analysis_config, sleep=fake_sleep, clock=lambda: NOW)


@pytest.fixture
def holder_classifier(mock_chain, mock_metadata_provider, history_analyzer, analysis_config, fake_sleep):
    """Create a HolderClassifier with mock dependencies."""
    return HolderClassifier(
        mock_chain,
        mock_metadata_provider,
        history_analyzer,
        analysis_config,
        sleep=fake_sleep,
        clock=lambda: NOW,
    )


@pytest.fixture
def splitter(mock_chain, mock_metadata_provider, holder_classifier, analysis_config, fake_sleep):
    """Create a SupplySplitter with mock dependencies."""
    return SupplySplitter(mock_chain, mock_metadata_provider, holder_classifier, analysis_config, sleep=fake_sleep)


@pytest.fixture
def lock_estimator(mock_chain, mock_metadata_provider, analysis_config, fake_sleep):
    """Create a LockEstimator with mock dependencies."""
    return LockEstimator(mock_chain, mock_metadata_provider, analysis_config, sleep=fake_sleep)
