"""
Wallet Explorer Package - Multi-chain wallet activity for EVM addresses.

Fetches transactions, token balances and NFTs from Blockscout backends,
normalizes them into a canonical model, and labels each transaction with a
semantic category and static risk/gas levels.

Features:
- One client per network, fail-open on any backend error
- Exact base-unit to decimal conversion (no floats)
- Concurrent activity probing across all networks
- Deterministic, rule-ordered transaction classification
- CSV export of a transaction page

Quick Start:
    from wallet_explorer import ClientRegistry, classify, transaction_stats

    async def explore(address: str):
        async with ClientRegistry() as registry:
            active = await registry.probe_all(address)

            client = registry.get_client("ethereum")
            transactions, total = await client.fetch_transactions(address)

            for tx in transactions:
                print(tx.hash, classify(tx).transaction_type.value)

            print(transaction_stats(transactions).to_dict())

Failure policy:
    Public fetch/probe operations never raise. An invalid address, an
    unreachable backend or a malformed payload all yield the operation's
    empty value ([], an empty TransactionPage, False, or an empty set).
"""

from wallet_explorer.aggregator import (
    NetworkBalanceSummary,
    active_network_ids,
    balances_by_network,
    group_by_network,
    summarize_balances,
)
from wallet_explorer.base import BaseChainClient
from wallet_explorer.classifier import (
    TRANSACTION_METADATA,
    ClassificationResult,
    GasUsageLevel,
    RiskLevel,
    TransactionStats,
    TransactionType,
    categorize,
    classify,
    describe_types,
    gas_usage_level,
    risk_level,
    transaction_stats,
)
from wallet_explorer.config import ExplorerConfig, get_config, set_config
from wallet_explorer.exceptions import (
    ConfigurationError,
    ExplorerClientError,
    FetchError,
    PayloadError,
    RateLimitError,
)
from wallet_explorer.export import CSV_HEADERS, csv_filename, generate_transaction_csv
from wallet_explorer.models import (
    CONTRACT_CREATION,
    NATIVE_TOKEN,
    NFT,
    ClientHealth,
    ClientStatus,
    InternalTransaction,
    Network,
    TokenBalance,
    TokenTransfer,
    Transaction,
    TransactionPage,
)
from wallet_explorer.networks import NETWORKS, get_network, list_network_ids
from wallet_explorer.providers import BlockscoutClient
from wallet_explorer.registry import ClientRegistry
from wallet_explorer.units import format_units
from wallet_explorer.validation import is_valid_address


__version__ = "1.0.0"

__all__ = [
    # Models
    "Network",
    "Transaction",
    "TransactionPage",
    "TokenTransfer",
    "InternalTransaction",
    "TokenBalance",
    "NFT",
    "ClientHealth",
    "ClientStatus",
    "CONTRACT_CREATION",
    "NATIVE_TOKEN",

    # Networks
    "NETWORKS",
    "get_network",
    "list_network_ids",

    # Validation & units
    "is_valid_address",
    "format_units",

    # Clients
    "BaseChainClient",
    "BlockscoutClient",
    "ClientRegistry",

    # Aggregation
    "group_by_network",
    "balances_by_network",
    "active_network_ids",
    "summarize_balances",
    "NetworkBalanceSummary",

    # Classification
    "TransactionType",
    "RiskLevel",
    "GasUsageLevel",
    "ClassificationResult",
    "TRANSACTION_METADATA",
    "TransactionStats",
    "classify",
    "risk_level",
    "gas_usage_level",
    "categorize",
    "transaction_stats",
    "describe_types",

    # Export
    "CSV_HEADERS",
    "generate_transaction_csv",
    "csv_filename",

    # Config
    "ExplorerConfig",
    "get_config",
    "set_config",

    # Exceptions
    "ExplorerClientError",
    "FetchError",
    "RateLimitError",
    "PayloadError",
    "ConfigurationError",
]
