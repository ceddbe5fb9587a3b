"""Command-line entry point for Solana Holders."""

import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional

from solana_holders.config import load_app_config
from solana_holders.dependencies import ServiceContainer, open_services
from solana_holders.logging_config import configure_logging, get_logger
from solana_holders.utils.error_handling import HolderAnalysisError

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solana-holders",
        description="Classify token holders and decompose supply for a Solana mint"
    )
    parser.add_argument("--log-level", default=None,
                        help="Log level (DEBUG, INFO, WARNING, ERROR); overrides LOG_LEVEL")
    parser.add_argument("--env-file", default=None, help="Path of a .env file to load")

    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Write the CSV holder report")
    report.add_argument("mint", help="Token mint address")
    report.add_argument("--full", action="store_true", help="Include the exhaustive supply split")
    report.add_argument("--out", default=None, help="Output CSV path")

    classify = subparsers.add_parser("classify", help="Classify the top holders")
    classify.add_argument("mint", help="Token mint address")

    split = subparsers.add_parser("split", help="Compute the supply split")
    split.add_argument("mint", help="Token mint address")
    mode = split.add_mutually_exclusive_group()
    mode.add_argument("--full", action="store_true", help="Exhaustive split over every owner")
    mode.add_argument("--both", action="store_true", help="Both splits plus a concentration summary")

    locks = subparsers.add_parser("locks", help="Estimate locked and circulating supply")
    locks.add_argument("mint", help="Token mint address")

    return parser


async def run_command(args: argparse.Namespace, services: ServiceContainer) -> Any:
    """Execute one sub-command and return its printable result."""
    if args.command == "report":
        path = await services.report_generator.generate(
            args.mint, out_path=args.out, include_full_split=True if args.full else None
        )
        return {"report": path}

    if args.command == "classify":
        classifications = await services.holder_classifier.classify_token_holders(args.mint)
        return [c.to_dict() for c in classifications]

    if args.command == "split":
        if args.both:
            return (await services.supply_analyzer.analyze(args.mint)).to_dict()
        if args.full:
            return (await services.splitter.full_split(args.mint)).to_dict()
        return (await services.splitter.top_holders_split(args.mint)).to_dict()

    if args.command == "locks":
        return (await services.lock_estimator.get_lock_breakdown(args.mint)).to_dict()

    raise ValueError(f"Unknown command: {args.command}")


async def run(args: argparse.Namespace) -> int:
    config = load_app_config(args.env_file)
    configure_logging(args.log_level or config.log_level)

    async with open_services(config) as services:
        result = await run_command(args, services)

    print(json.dumps(result, indent=2, default=str))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the Solana Holders CLI."""
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except HolderAnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
