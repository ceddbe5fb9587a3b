"""Unit tests for locked and circulating supply estimation."""

from dataclasses import replace

import pytest

from solana_holders.services.supply.lock import LOCK_NOTES, LockEstimator, match_lock_keyword, scan_frozen_accounts
from solana_holders.services.supply.models import LabeledOwnerEntry, LockBreakdown
from solana_holders.utils.error_handling import ChainQueryError
from tests.fixtures.common import MINT, SUPPLY, make_metadata, make_mint_info, make_token_account


@pytest.fixture
def accounts():
    return [
        make_token_account("frozen-1", "team", 50_000, state="frozen"),
        make_token_account("stream-frozen", "streamflow", 5_000, state="frozen"),
        make_token_account("stream-free", "streamflow", 15_000),
        make_token_account("frozen-empty", "someone", 0, state="frozen"),
        make_token_account("market", "trader", 100_000),
        make_token_account("dust", "dust", 10),
    ]


@pytest.fixture
def labels():
    return {
        "streamflow": make_metadata("Streamflow Vesting"),
        "trader": make_metadata("Jupiter Aggregator"),
    }


def test_scan_frozen_accounts(accounts):
    total, entries, per_owner = scan_frozen_accounts(accounts)

    assert total == 55_000
    assert [e.token_account for e in entries] == ["frozen-1", "stream-frozen"]
    assert entries[0].balance_raw == 50_000
    assert per_owner == {"team": 50_000, "streamflow": 5_000}


@pytest.mark.parametrize("label,tags,expected", [
    ("Streamflow Vesting", [], "streamflow"),
    ("Team Tokens", ["vesting"], "vesting"),
    ("Blockchain Escrow", [], "escrow"),
    ("Blocked Wallet", [], None),
    ("Team Tokens Locked", [], "lock"),
    ("UNCX Locker", [], "lock"),
    ("Unlocked Reserve", [], None),
    ("Treasury", ["timelocked"], "timelock"),
    (None, [], None),
])
def test_match_lock_keyword(label, tags, expected, analysis_config):
    assert match_lock_keyword(make_metadata(label, tags), analysis_config.lock_keywords) == expected


def test_match_lock_keyword_without_metadata(analysis_config):
    assert match_lock_keyword(None, analysis_config.lock_keywords) is None


@pytest.mark.asyncio
async def test_lock_breakdown(lock_estimator, mock_metadata_provider, mint_info, accounts, labels):
    mock_metadata_provider.get_account_metadata.side_effect = labels.get

    breakdown = await lock_estimator.get_lock_breakdown(MINT, mint_info=mint_info, accounts=accounts)

    assert breakdown.frozen_raw == 55_000
    assert len(breakdown.labeled_owners) == 1
    streamflow = breakdown.labeled_owners[0]
    assert streamflow.owner == "streamflow"
    assert streamflow.balance_raw == 20_000
    assert streamflow.frozen_portion_raw == 5_000
    assert streamflow.effective_locked_raw == 15_000
    assert streamflow.matched_by == "streamflow"

    assert breakdown.labeled_vesting_raw == 15_000
    assert breakdown.locked_total_raw == 70_000
    assert breakdown.circulating_raw == SUPPLY - 70_000
    assert breakdown.notes == list(LOCK_NOTES)


@pytest.mark.asyncio
async def test_lookups_stop_below_min_balance(lock_estimator, mock_metadata_provider, mint_info, accounts, labels):
    mock_metadata_provider.get_account_metadata.side_effect = labels.get

    await lock_estimator.get_lock_breakdown(MINT, mint_info=mint_info, accounts=accounts)

    looked_up = [c.args[0] for c in mock_metadata_provider.get_account_metadata.await_args_list]
    assert looked_up == ["trader", "team", "streamflow"]


@pytest.mark.asyncio
async def test_lookups_respect_check_cap(mock_chain, mock_metadata_provider, analysis_config, mint_info,
                                         accounts, labels):
    mock_metadata_provider.get_account_metadata.side_effect = labels.get
    # "team" has no metadata; its unanswered lookup still counts toward the cap
    estimator = LockEstimator(mock_chain, mock_metadata_provider, replace(analysis_config, metadata_max_checks=2))

    breakdown = await estimator.get_lock_breakdown(MINT, mint_info=mint_info, accounts=accounts)

    assert mock_metadata_provider.get_account_metadata.await_count == 2
    assert breakdown.labeled_owners == []
    assert breakdown.locked_total_raw == 55_000


@pytest.mark.asyncio
async def test_labeled_locker_counts_as_locked(lock_estimator, mock_metadata_provider, mint_info):
    accounts = [make_token_account("locker-ata", "uncx", 40_000)]
    mock_metadata_provider.get_account_metadata.return_value = make_metadata("UNCX Locker")

    breakdown = await lock_estimator.get_lock_breakdown(MINT, mint_info=mint_info, accounts=accounts)

    assert breakdown.labeled_owners[0].matched_by == "lock"
    assert breakdown.locked_total_raw == 40_000
    assert breakdown.circulating_raw == SUPPLY - 40_000


@pytest.mark.asyncio
async def test_enumeration_failure_is_fatal(lock_estimator, mock_chain, mock_metadata_provider, mint_info):
    mock_chain.get_program_token_accounts.side_effect = ChainQueryError("getProgramAccounts disabled")

    with pytest.raises(ChainQueryError):
        await lock_estimator.get_lock_breakdown(MINT, mint_info=mint_info)

    mock_metadata_provider.get_account_metadata.assert_not_awaited()


@pytest.mark.asyncio
async def test_circulating_never_negative(lock_estimator, mock_metadata_provider):
    accounts = [make_token_account("frozen", "vault", 900, state="frozen")]

    breakdown = await lock_estimator.get_lock_breakdown(MINT, mint_info=make_mint_info(supply_raw=500),
                                                        accounts=accounts)

    assert breakdown.locked_total_raw == 900
    assert breakdown.circulating_raw == 0


@pytest.mark.asyncio
async def test_enumerates_accounts_when_not_given(lock_estimator, mock_chain, mock_metadata_provider, accounts):
    mock_chain.get_program_token_accounts.side_effect = (
        lambda program_id, mint, data_size=None: accounts if data_size else []
    )

    breakdown = await lock_estimator.get_lock_breakdown(MINT)

    assert breakdown.frozen_raw == 55_000
    mock_chain.get_mint_info.assert_awaited_once_with(MINT)


@pytest.mark.parametrize("balance,frozen", [(20_000, 5_000), (5_000, 20_000), (0, 0), (7, 7)])
def test_effective_locked_within_balance(balance, frozen):
    entry = LabeledOwnerEntry(owner="o", label="Vesting", tags=[], balance_raw=balance,
                              frozen_portion_raw=frozen, matched_by="vesting", decimals=0)

    assert 0 <= entry.effective_locked_raw <= balance


def test_breakdown_to_dict():
    breakdown = LockBreakdown(decimals=2, total_supply_raw=100_000, frozen_raw=1_000, labeled_vesting_raw=500)

    data = breakdown.to_dict()

    assert data["total_supply"] == 1_000.0
    assert data["locked_total"] == 15.0
    assert data["circulating"] == 985.0
    assert data["components"] == {"frozen": 10.0, "labeled_vesting": 5.0}
