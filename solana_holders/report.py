"""CSV report generation for a single mint."""

# Standard library imports
import csv
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

# Internal imports
from solana_holders.clients.base import ChainProvider
from solana_holders.config import AnalysisConfig, ReportConfig
from solana_holders.logging_config import get_logger
from solana_holders.models.chain import HolderRecord, MintInfo, to_ui_amount
from solana_holders.services.classification.helpers import get_supply_pct, utc_now
from solana_holders.services.classification.models import AccountType, WalletCategory, WalletClassification
from solana_holders.services.holders import HolderClassifier
from solana_holders.services.supply.helpers import collect_token_accounts
from solana_holders.services.supply.lock import LockEstimator
from solana_holders.services.supply.models import LockBreakdown, SupplySplit
from solana_holders.services.supply.split import SupplySplitter
from solana_holders.utils.error_handling import NoHoldersError

# Get logger
logger = get_logger(__name__)

Row = List[Any]

HOLDER_COLUMNS = [
    "Section",
    "#",
    "TokenAccount",
    "Owner",
    "Category",
    "AccountType",
    "SubType",
    "Confidence",
    "Balance(UI)",
    "% of Total Supply",
    "TxCount",
    "FirstTx(UTC)",
    "LastTx(UTC)",
    "HasSold",
    "DiamondHand(>=90d & no sell)",
    "NoOutflow180d",
    "Label",
    "Tags",
    "ActiveAgeDays",
    "FundedBy",
    "isDEX",
    "isCEX",
]


def format_ui_amount(raw: int, decimals: int) -> str:
    """Exact UI amount of a raw integer, without trailing zeros."""
    text = f"{Decimal(raw).scaleb(-decimals):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_timestamp(value: Optional[datetime]) -> str:
    """ISO-8601 UTC without fractional seconds, or an empty cell."""
    if value is None:
        return ""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_bool(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "true" if value else "false"


def format_optional(value: Any) -> Any:
    return "" if value is None else value


@dataclass
class HolderReport:
    """Everything a report needs, gathered once per run."""

    mint_info: MintInfo
    holders: List[HolderRecord]
    classifications: List[WalletClassification]
    top_split: SupplySplit
    full_split: Optional[SupplySplit]
    lock: LockBreakdown
    generated_at: datetime


def mint_rows(report: HolderReport) -> List[Row]:
    mint = report.mint_info
    entries = [
        ("Mint Address", mint.address),
        ("Total Supply (UI)", format_ui_amount(mint.supply_raw, mint.decimals)),
        ("Decimals", mint.decimals),
        ("Mint Authority", format_optional(mint.mint_authority)),
        ("Freeze Authority", format_optional(mint.freeze_authority)),
        ("Generated At (UTC)", format_timestamp(report.generated_at)),
    ]
    return [["MintInfo", key, value] for key, value in entries]


def split_rows(section: str, split: SupplySplit) -> List[Row]:
    def amount_with_pct(raw: int) -> str:
        return f"{format_ui_amount(raw, split.decimals)} ({get_supply_pct(raw, split.total_supply_raw):.2f}%)"

    dex_cell = amount_with_pct(split.dex_raw)
    if split.dex_name:
        dex_cell += f" - {split.dex_name}"

    rows = [
        [section, "Total Supply (UI)", format_ui_amount(split.total_supply_raw, split.decimals)],
        [section, "CEX", amount_with_pct(split.cex_raw)],
        [section, "DEX", dex_cell],
        [section, "On-chain non-CEX/DEX", amount_with_pct(split.onchain_raw)],
    ]
    if split.unknown_remainder_raw is not None:
        rows.append([section, "Unknown Remainder", amount_with_pct(split.unknown_remainder_raw)])

    ordered = sorted(split.breakdown_by_exchange_raw.items(), key=lambda item: item[1], reverse=True)
    for name, raw in ordered:
        rows.append([f"{section}:BreakdownCEX", name, amount_with_pct(raw)])
    return rows


def lock_rows(lock: LockBreakdown, max_detail_rows: int) -> List[Row]:
    decimals = lock.decimals
    rows = [
        ["LockSummary", "Total Supply (UI)", format_ui_amount(lock.total_supply_raw, decimals)],
        ["LockSummary", "Locked (Total)", format_ui_amount(lock.locked_total_raw, decimals)],
        ["LockSummary", "Circulating (Est.)", format_ui_amount(lock.circulating_raw, decimals)],
        ["LockSummary", "Frozen (on-chain)", format_ui_amount(lock.frozen_raw, decimals)],
        ["LockSummary", "LabeledVesting (heuristic, excl. frozen)",
         format_ui_amount(lock.labeled_vesting_raw, decimals)],
    ]

    for entry in lock.frozen_accounts[:max_detail_rows]:
        rows.append([
            "LockSummary:FrozenAccounts",
            entry.token_account,
            entry.owner,
            format_ui_amount(entry.balance_raw, entry.decimals),
        ])

    for entry in lock.labeled_owners[:max_detail_rows]:
        rows.append([
            "LockSummary:LabeledOwners",
            entry.owner,
            entry.label or "",
            format_ui_amount(entry.balance_raw, entry.decimals),
            format_ui_amount(entry.frozen_portion_raw, entry.decimals),
            format_ui_amount(entry.effective_locked_raw, entry.decimals),
            entry.matched_by,
            "; ".join(entry.tags),
        ])

    for note in lock.notes:
        rows.append(["LockSummary:Notes", "", note])
    return rows


def holder_rows(report: HolderReport) -> List[Row]:
    """One row per top holder, largest balance first."""
    by_owner: Dict[str, WalletClassification] = {c.address: c for c in report.classifications}
    supply_raw = report.mint_info.supply_raw

    rows: List[Row] = [list(HOLDER_COLUMNS)]
    ordered = sorted(report.holders, key=lambda h: h.balance_raw, reverse=True)
    for index, holder in enumerate(ordered, start=1):
        cls = by_owner.get(holder.owner)
        meta = cls.metadata if cls else None
        rows.append([
            "Holders",
            str(index),
            holder.token_account,
            meta.owner if meta else holder.owner,
            cls.category.value if cls else WalletCategory.COMMUNITY.value,
            meta.account_type.value if meta else AccountType.UNKNOWN.value,
            format_optional(meta.sub_type) if meta else "",
            meta.confidence.value if meta else "",
            format_ui_amount(holder.balance_raw, holder.decimals),
            f"{get_supply_pct(holder.balance_raw, supply_raw):.2f}",
            cls.transaction_count if cls else "",
            format_timestamp(cls.first_transaction_date) if cls else "",
            format_timestamp(cls.last_transaction_date) if cls else "",
            format_bool(cls.has_sold) if cls else "",
            format_bool(cls.is_diamond_hand) if cls else "",
            format_bool(cls.is_long_term_no_outflow_180) if cls else "",
            format_optional(meta.label) if meta else "",
            "; ".join(meta.tags) if meta else "",
            format_optional(meta.active_age_days) if meta else "",
            meta.funded_by.address if meta and meta.funded_by else "",
            format_bool(meta.is_dex if meta else False),
            format_bool(meta.is_cex if meta else False),
        ])
    return rows


def _aggregate(classifications: List[WalletClassification],
               key: Callable[[WalletClassification], str]) -> List[Tuple[str, int, int]]:
    stats: Dict[str, List[int]] = {}
    for classification in classifications:
        entry = stats.setdefault(key(classification), [0, 0])
        entry[0] += 1
        entry[1] += classification.balance_raw
    return [(name, count, raw) for name, (count, raw) in stats.items()]


def summary_rows(classifications: List[WalletClassification], mint_info: MintInfo) -> List[Row]:
    """Counts, balances and supply share by category and by account type."""
    rows: List[Row] = [["ClassificationSummary", "Metric", "Count", "Total Balance", "% of Supply"]]

    def stat_row(metric: str, count: int, raw: int) -> Row:
        return [
            "ClassificationSummary",
            metric,
            count,
            f"{to_ui_amount(raw, mint_info.decimals):.6f}",
            f"{get_supply_pct(raw, mint_info.supply_raw):.2f}",
        ]

    for category, count, raw in _aggregate(classifications, lambda c: c.category.value):
        rows.append(stat_row(f"Category: {category}", count, raw))

    rows.append(["", "", "", "", ""])

    for account_type, count, raw in _aggregate(classifications, lambda c: c.metadata.account_type.value):
        rows.append(stat_row(f"AccountType: {account_type}", count, raw))
    return rows


def render_rows(report: HolderReport, max_detail_rows: int = 20) -> List[Row]:
    """Lay out every report section as CSV rows."""
    blank = ["", "", ""]
    rows: List[Row] = [["Section", "Key/Column", "Value/..."]]
    rows.extend(mint_rows(report))
    rows.append(blank)
    rows.extend(split_rows("SupplySplitTop", report.top_split))
    if report.full_split is not None:
        rows.append(blank)
        rows.extend(split_rows("SupplySplitFull", report.full_split))
    rows.append(blank)
    rows.extend(lock_rows(report.lock, max_detail_rows))
    rows.append(blank)
    rows.extend(holder_rows(report))
    rows.append(blank)
    rows.extend(summary_rows(report.classifications, report.mint_info))
    rows.append(blank)
    return rows


class ReportGenerator:
    """Gathers holder, split and lock data for a mint and writes it as CSV."""

    def __init__(
        self,
        chain: ChainProvider,
        holder_classifier: HolderClassifier,
        splitter: SupplySplitter,
        lock_estimator: LockEstimator,
        analysis_config: AnalysisConfig,
        report_config: ReportConfig,
        clock: Callable[[], datetime] = utc_now
    ):
        self.chain = chain
        self.holder_classifier = holder_classifier
        self.splitter = splitter
        self.lock_estimator = lock_estimator
        self.analysis_config = analysis_config
        self.report_config = report_config
        self._clock = clock

    async def build(self, mint: str, include_full_split: bool = False) -> HolderReport:
        """Collect report data. Holders are classified once and reused by the bounded split.

        Raises:
            ChainQueryError: If mint info or the token accounts cannot be fetched
            NoHoldersError: If the mint has no non-empty holder
        """
        mint_info = await self.chain.get_mint_info(mint)

        holders = await self.holder_classifier.get_top_holders(mint)
        if not holders:
            raise NoHoldersError(mint)

        classifications = await self.holder_classifier.classify_token_holders(
            mint, mint_info=mint_info, holders=holders
        )
        top_split = await self.splitter.top_holders_split(
            mint, mint_info=mint_info, classifications=classifications
        )

        accounts = await collect_token_accounts(self.chain, mint, self.analysis_config.extra_token_program_ids)
        full_split = None
        if include_full_split:
            full_split = await self.splitter.full_split(mint, mint_info=mint_info, accounts=accounts)
        lock = await self.lock_estimator.get_lock_breakdown(mint, mint_info=mint_info, accounts=accounts)

        return HolderReport(
            mint_info=mint_info,
            holders=holders,
            classifications=classifications,
            top_split=top_split,
            full_split=full_split,
            lock=lock,
            generated_at=self._clock(),
        )

    def default_path(self, mint: str, generated_at: datetime) -> str:
        stamp = generated_at.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%S")
        return os.path.join(self.report_config.output_dir, f"{mint}_{stamp}.csv")

    async def generate(
        self,
        mint: str,
        out_path: Optional[str] = None,
        include_full_split: Optional[bool] = None
    ) -> str:
        """Build the report for a mint and write it to disk.

        Args:
            mint: Mint address
            out_path: Target file; defaults to ``<output_dir>/<mint>_<timestamp>.csv``
            include_full_split: Add the exhaustive split; defaults to the report config

        Returns:
            Path of the written CSV file
        """
        if include_full_split is None:
            include_full_split = self.report_config.include_full_split

        logger.info(f"Starting report generation for token: {mint}")
        report = await self.build(mint, include_full_split=include_full_split)

        path = out_path or self.default_path(report.mint_info.address, report.generated_at)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(render_rows(report, self.report_config.max_detail_rows))

        logger.info(f"CSV report written to: {path}")
        logger.info(f"Report contains {len(report.classifications)} classified holders")
        return path
