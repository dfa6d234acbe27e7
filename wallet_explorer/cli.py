"""
Command-line entry point.

    python -m wallet_explorer 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045 --network base --csv out.csv
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from wallet_explorer.aggregator import summarize_balances
from wallet_explorer.classifier import classify, transaction_stats
from wallet_explorer.config import ExplorerConfig, get_config
from wallet_explorer.export import csv_filename, generate_transaction_csv
from wallet_explorer.networks import NETWORKS, get_network, list_network_ids
from wallet_explorer.registry import ClientRegistry
from wallet_explorer.validation import is_valid_address


logger = logging.getLogger(__name__)

EXIT_INVALID_ADDRESS = 2


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wallet-explorer",
        description="Explore an EVM wallet across Blockscout-backed networks",
    )
    parser.add_argument("address", help="0x-prefixed wallet address")
    parser.add_argument(
        "--network",
        choices=list_network_ids(),
        default=None,
        help="network for the transaction listing (default: first active)",
    )
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int, default=None)
    parser.add_argument("--csv", dest="csv_path", default=None,
                        help="write the transaction page to this CSV file ('-' for auto name)")
    parser.add_argument("--probe-only", action="store_true",
                        help="only report which networks show activity")
    parser.add_argument("--log-level", default=None)
    return parser


def print_banner(text: str) -> None:
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


async def run(args: argparse.Namespace, config: ExplorerConfig) -> int:
    async with ClientRegistry(config=config) as registry:
        active = await registry.active_networks(args.address)

        print_banner("Active networks")
        if not active:
            print("  (none)")
        for network_id in active:
            print(f"  {network_id}")

        if args.probe_only:
            return 0

        balances = await registry.fetch_balances_all(args.address)
        print_banner("Balances")
        for summary in summarize_balances(balances, NETWORKS):
            print(f"  {summary.network.name}: {summary.native_balance} {summary.network.native_symbol}")
            for token in summary.tokens:
                print(f"    {token.value} {token.token_symbol} ({token.token_name})")

        network_id = args.network or (active[0] if active else NETWORKS[0].id)
        network = get_network(network_id)
        client = registry.get_client(network_id)
        if network is None or client is None:
            logger.error(f"Network '{network_id}' is not enabled")
            return 1

        transactions, total = await client.fetch_transactions(args.address, args.page, args.page_size)
        print_banner(f"Transactions on {network.name} (page {args.page}, {total} total)")
        for tx in transactions:
            result = classify(tx)
            print(
                f"  {tx.hash[:12]}…  {result.transaction_type.value:<22} "
                f"risk={result.risk_level.value:<6} gas={result.gas_usage_level.value:<6} "
                f"{tx.value} {network.native_symbol}"
            )

        stats = transaction_stats(transactions)
        print_banner("Stats")
        for key, value in stats.to_dict().items():
            print(f"  {key}: {value}")

        if args.csv_path:
            path = Path(csv_filename(network) if args.csv_path == "-" else args.csv_path)
            path.write_text(generate_transaction_csv(transactions, network), encoding="utf-8")
            print(f"\nWrote {len(transactions)} rows to {path}")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(args.log_level or config.log_level)

    if not is_valid_address(args.address):
        print(f"Invalid EVM address: {args.address!r}", file=sys.stderr)
        return EXIT_INVALID_ADDRESS

    return asyncio.run(run(args, config))
