"""Unit tests for the command-line interface and service wiring."""

import argparse
from unittest.mock import AsyncMock, MagicMock

import pytest

from solana_holders import __main__ as cli
from solana_holders.config import AppConfig
from solana_holders.dependencies import ServiceContainer, build_services
from solana_holders.report import ReportGenerator
from solana_holders.services.holders import HolderClassifier
from solana_holders.services.supply.analysis import SupplyAnalyzer
from solana_holders.services.supply.lock import LockEstimator
from solana_holders.services.supply.split import SupplySplitter
from solana_holders.utils.error_handling import ChainQueryError
from tests.fixtures.common import MINT


def test_parser_commands():
    parser = cli.build_parser()

    args = parser.parse_args(["--log-level", "DEBUG", "report", MINT, "--full", "--out", "x.csv"])
    assert (args.command, args.mint, args.full, args.out, args.log_level) == ("report", MINT, True, "x.csv", "DEBUG")

    args = parser.parse_args(["split", MINT, "--both"])
    assert (args.command, args.both, args.full) == ("split", True, False)

    with pytest.raises(SystemExit):
        parser.parse_args(["split", MINT, "--both", "--full"])


@pytest.fixture
def services():
    container = MagicMock(spec=ServiceContainer)
    container.report_generator = AsyncMock(spec=ReportGenerator)
    container.holder_classifier = AsyncMock(spec=HolderClassifier)
    container.splitter = AsyncMock(spec=SupplySplitter)
    container.lock_estimator = AsyncMock(spec=LockEstimator)
    container.supply_analyzer = AsyncMock(spec=SupplyAnalyzer)
    return container


def namespace(**kwargs):
    defaults = {"mint": MINT, "full": False, "both": False, "out": None}
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


@pytest.mark.asyncio
async def test_report_command(services):
    services.report_generator.generate.return_value = "reports/x.csv"

    result = await cli.run_command(namespace(command="report", out="x.csv"), services)

    assert result == {"report": "reports/x.csv"}
    services.report_generator.generate.assert_awaited_once_with(MINT, out_path="x.csv", include_full_split=None)


@pytest.mark.asyncio
async def test_split_commands(services):
    await cli.run_command(namespace(command="split"), services)
    await cli.run_command(namespace(command="split", full=True), services)
    await cli.run_command(namespace(command="split", both=True), services)

    services.splitter.top_holders_split.assert_awaited_once_with(MINT)
    services.splitter.full_split.assert_awaited_once_with(MINT)
    services.supply_analyzer.analyze.assert_awaited_once_with(MINT)


@pytest.mark.asyncio
async def test_classify_and_locks_commands(services):
    services.holder_classifier.classify_token_holders.return_value = []

    assert await cli.run_command(namespace(command="classify"), services) == []
    await cli.run_command(namespace(command="locks"), services)

    services.lock_estimator.get_lock_breakdown.assert_awaited_once_with(MINT)


def test_main_reports_errors(monkeypatch, capsys):
    async def failing_run(args):
        raise ChainQueryError(f"Mint account not found: {args.mint}")

    monkeypatch.setattr(cli, "run", failing_run)

    assert cli.main(["locks", MINT]) == 1
    assert "Mint account not found" in capsys.readouterr().err


def test_build_services_wires_shared_providers(mock_chain, mock_metadata_provider, mock_history_provider):
    container = build_services(AppConfig(), mock_chain, mock_metadata_provider, mock_history_provider)

    assert container.splitter.holder_classifier is container.holder_classifier
    assert container.report_generator.lock_estimator is container.lock_estimator
    assert container.holder_classifier.history_analyzer.provider is mock_history_provider
    assert container.supply_analyzer.chain is mock_chain
