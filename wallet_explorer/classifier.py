"""
Transaction Classifier - Heuristic semantic labels for EVM transactions.

classify() is a pure, total function of a Transaction. Rules, first match wins:
1. Recipient is the contract-creation marker -> CONTRACT_DEPLOYMENT
2. No method name and a positive native value -> NATIVE_TRANSFER
3. Scan TRANSACTION_METADATA in declaration order; an entry matches when one
   of its method patterns is "*" or a case-insensitive substring of the
   method name
4. Otherwise UNKNOWN

Several categories share substrings ("mint", "deposit", "claim", ...), so the
table's declaration order decides ambiguous names. The CONTRACT_CALL wildcard
sits early in that order and absorbs every method not matched before it.

Risk and gas labels are static per category. They are never derived from the
transaction's value, gas or calldata.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from wallet_explorer.models import Transaction
from wallet_explorer.units import to_decimal


WILDCARD = "*"


class TransactionType(Enum):
    """Semantic transaction categories (declaration order is significant)."""

    # Basic transfers
    NATIVE_TRANSFER = "NATIVE_TRANSFER"
    TOKEN_TRANSFER = "TOKEN_TRANSFER"
    NFT_TRANSFER = "NFT_TRANSFER"
    BATCH_TRANSFER = "BATCH_TRANSFER"

    # DeFi
    SWAP = "SWAP"
    LIQUIDITY_PROVISION = "LIQUIDITY_PROVISION"
    LIQUIDITY_REMOVAL = "LIQUIDITY_REMOVAL"
    STAKING = "STAKING"
    UNSTAKING = "UNSTAKING"
    LENDING = "LENDING"
    BORROWING = "BORROWING"
    REPAYMENT = "REPAYMENT"
    YIELD_FARMING = "YIELD_FARMING"
    HARVEST = "HARVEST"

    # Contract interactions
    CONTRACT_DEPLOYMENT = "CONTRACT_DEPLOYMENT"
    CONTRACT_CALL = "CONTRACT_CALL"
    PROXY_UPGRADE = "PROXY_UPGRADE"
    DELEGATE_CALL = "DELEGATE_CALL"
    STATIC_CALL = "STATIC_CALL"

    # Governance
    PROPOSAL_CREATION = "PROPOSAL_CREATION"
    VOTE_CAST = "VOTE_CAST"
    DELEGATE = "DELEGATE"

    # NFT
    NFT_MINT = "NFT_MINT"
    NFT_BURN = "NFT_BURN"
    NFT_AUCTION_CREATE = "NFT_AUCTION_CREATE"
    NFT_BID = "NFT_BID"
    NFT_AUCTION_SETTLE = "NFT_AUCTION_SETTLE"

    # Token
    TOKEN_MINT = "TOKEN_MINT"
    TOKEN_BURN = "TOKEN_BURN"
    TOKEN_APPROVE = "TOKEN_APPROVE"
    TOKEN_PERMIT = "TOKEN_PERMIT"

    # Bridge
    BRIDGE_DEPOSIT = "BRIDGE_DEPOSIT"
    BRIDGE_WITHDRAWAL = "BRIDGE_WITHDRAWAL"
    BRIDGE_CLAIM = "BRIDGE_CLAIM"

    # Layer 2
    L2_DEPOSIT = "L2_DEPOSIT"
    L2_WITHDRAWAL = "L2_WITHDRAWAL"
    L2_BATCH_SUBMISSION = "L2_BATCH_SUBMISSION"

    # Multisig
    MULTISIG_SUBMISSION = "MULTISIG_SUBMISSION"
    MULTISIG_CONFIRMATION = "MULTISIG_CONFIRMATION"
    MULTISIG_EXECUTION = "MULTISIG_EXECUTION"

    # Other
    WRAP = "WRAP"
    UNWRAP = "UNWRAP"
    FLASH_LOAN = "FLASH_LOAN"
    REBASING = "REBASING"
    CLAIM_REWARDS = "CLAIM_REWARDS"

    # Fallback
    UNKNOWN = "UNKNOWN"


class RiskLevel(Enum):
    """Static risk label of a transaction category."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class GasUsageLevel(Enum):
    """Typical gas cost of a transaction category."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass(frozen=True)
class ClassificationResult:
    """Static metadata attached to a transaction category."""
    transaction_type: TransactionType
    description: str
    common_methods: tuple[str, ...]
    risk_level: RiskLevel
    gas_usage_level: GasUsageLevel

    def matches(self, method_name: str) -> bool:
        """True if any pattern is the wildcard or a substring of the method."""
        lowered = method_name.lower()
        return any(
            pattern == WILDCARD or pattern.lower() in lowered
            for pattern in self.common_methods
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.transaction_type.value,
            "description": self.description,
            "common_methods": list(self.common_methods),
            "risk_level": self.risk_level.value,
            "gas_usage_level": self.gas_usage_level.value,
        }


def _entry(
    transaction_type: TransactionType,
    description: str,
    methods: Iterable[str],
    risk: str,
    gas: str,
) -> ClassificationResult:
    return ClassificationResult(
        transaction_type=transaction_type,
        description=description,
        common_methods=tuple(methods),
        risk_level=RiskLevel(risk),
        gas_usage_level=GasUsageLevel(gas),
    )


_T = TransactionType

_ENTRIES: tuple[ClassificationResult, ...] = (
    _entry(_T.NATIVE_TRANSFER, "Direct transfer of native blockchain currency (ETH, MATIC, etc.)",
           ["transfer", "send"], "LOW", "LOW"),
    _entry(_T.TOKEN_TRANSFER, "Transfer of ERC20 tokens",
           ["transfer", "transferFrom"], "LOW", "MEDIUM"),
    _entry(_T.NFT_TRANSFER, "Transfer of ERC721 or ERC1155 tokens",
           ["transferFrom", "safeTransferFrom"], "MEDIUM", "MEDIUM"),
    _entry(_T.BATCH_TRANSFER, "Multiple token transfers in a single transaction",
           ["batchTransfer", "multiTransfer", "safeBatchTransferFrom"], "MEDIUM", "HIGH"),
    _entry(_T.SWAP, "Exchange of one token for another through DEX",
           ["swap", "swapExactTokensForTokens", "swapTokensForExactTokens"], "MEDIUM", "HIGH"),
    _entry(_T.LIQUIDITY_PROVISION, "Adding liquidity to DEX pools",
           ["addLiquidity", "mint", "join"], "MEDIUM", "HIGH"),
    _entry(_T.LIQUIDITY_REMOVAL, "Removing liquidity from DEX pools",
           ["removeLiquidity", "burn", "exit"], "MEDIUM", "HIGH"),
    _entry(_T.STAKING, "Locking tokens for rewards",
           ["stake", "deposit", "lock"], "MEDIUM", "MEDIUM"),
    _entry(_T.UNSTAKING, "Withdrawing staked tokens",
           ["unstake", "withdraw", "unlock"], "MEDIUM", "MEDIUM"),
    _entry(_T.LENDING, "Supplying assets to lending protocols",
           ["supply", "mint", "deposit"], "MEDIUM", "HIGH"),
    _entry(_T.BORROWING, "Borrowing assets from lending protocols",
           ["borrow", "draw"], "HIGH", "HIGH"),
    _entry(_T.REPAYMENT, "Repaying borrowed assets",
           ["repay", "repayBorrow"], "LOW", "HIGH"),
    _entry(_T.YIELD_FARMING, "Depositing tokens in yield farming protocols",
           ["farm", "deposit", "stake"], "HIGH", "HIGH"),
    _entry(_T.HARVEST, "Collecting farming rewards",
           ["harvest", "getReward", "claim"], "LOW", "HIGH"),
    _entry(_T.CONTRACT_DEPLOYMENT, "Deploying new smart contracts",
           ["constructor"], "HIGH", "HIGH"),
    _entry(_T.CONTRACT_CALL, "Standard interaction with smart contracts",
           [WILDCARD], "MEDIUM", "MEDIUM"),
    _entry(_T.PROXY_UPGRADE, "Upgrading proxy contract implementation",
           ["upgrade", "upgradeToAndCall"], "HIGH", "HIGH"),
    _entry(_T.DELEGATE_CALL, "Contract calls using delegatecall",
           ["delegatecall"], "HIGH", "HIGH"),
    _entry(_T.STATIC_CALL, "Read-only contract calls",
           ["staticcall"], "LOW", "LOW"),
    _entry(_T.PROPOSAL_CREATION, "Creating governance proposals",
           ["propose", "createProposal"], "MEDIUM", "HIGH"),
    _entry(_T.VOTE_CAST, "Voting on governance proposals",
           ["vote", "castVote"], "LOW", "MEDIUM"),
    _entry(_T.DELEGATE, "Delegating voting power",
           ["delegate"], "MEDIUM", "MEDIUM"),
    _entry(_T.NFT_MINT, "Creating new NFTs",
           ["mint", "safeMint"], "MEDIUM", "HIGH"),
    _entry(_T.NFT_BURN, "Destroying NFTs",
           ["burn"], "HIGH", "MEDIUM"),
    _entry(_T.NFT_AUCTION_CREATE, "Creating NFT auctions",
           ["createAuction", "list"], "MEDIUM", "HIGH"),
    _entry(_T.NFT_BID, "Bidding on NFT auctions",
           ["bid", "placeBid"], "MEDIUM", "MEDIUM"),
    _entry(_T.NFT_AUCTION_SETTLE, "Settling NFT auctions",
           ["settleAuction", "endAuction"], "LOW", "HIGH"),
    _entry(_T.TOKEN_MINT, "Creating new tokens",
           ["mint"], "HIGH", "MEDIUM"),
    _entry(_T.TOKEN_BURN, "Destroying tokens",
           ["burn"], "HIGH", "MEDIUM"),
    _entry(_T.TOKEN_APPROVE, "Approving token spending",
           ["approve"], "HIGH", "MEDIUM"),
    _entry(_T.TOKEN_PERMIT, "Gasless token approvals",
           ["permit"], "MEDIUM", "MEDIUM"),
    _entry(_T.BRIDGE_DEPOSIT, "Depositing assets to bridge",
           ["deposit", "bridge", "send"], "HIGH", "HIGH"),
    _entry(_T.BRIDGE_WITHDRAWAL, "Withdrawing assets from bridge",
           ["withdraw", "claim"], "MEDIUM", "HIGH"),
    _entry(_T.BRIDGE_CLAIM, "Claiming bridged assets",
           ["claim", "finalize"], "LOW", "HIGH"),
    _entry(_T.L2_DEPOSIT, "Depositing to Layer 2",
           ["deposit", "depositETH"], "MEDIUM", "HIGH"),
    _entry(_T.L2_WITHDRAWAL, "Withdrawing from Layer 2",
           ["withdraw", "withdrawETH"], "MEDIUM", "HIGH"),
    _entry(_T.L2_BATCH_SUBMISSION, "Submitting L2 transaction batch",
           ["submitBatch", "publishBatch"], "HIGH", "HIGH"),
    _entry(_T.MULTISIG_SUBMISSION, "Submitting multisig transaction",
           ["submitTransaction"], "MEDIUM", "MEDIUM"),
    _entry(_T.MULTISIG_CONFIRMATION, "Confirming multisig transaction",
           ["confirmTransaction"], "MEDIUM", "MEDIUM"),
    _entry(_T.MULTISIG_EXECUTION, "Executing confirmed multisig transaction",
           ["executeTransaction"], "HIGH", "HIGH"),
    _entry(_T.WRAP, "Wrapping native currency (ETH → WETH)",
           ["deposit", "wrap"], "LOW", "MEDIUM"),
    _entry(_T.UNWRAP, "Unwrapping wrapped native currency (WETH → ETH)",
           ["withdraw", "unwrap"], "LOW", "MEDIUM"),
    _entry(_T.FLASH_LOAN, "Flash loan transactions",
           ["flashLoan", "executeOperation"], "HIGH", "HIGH"),
    _entry(_T.REBASING, "Token rebase operations",
           ["rebase", "sync"], "MEDIUM", "HIGH"),
    _entry(_T.CLAIM_REWARDS, "Claiming protocol rewards",
           ["claim", "getReward", "harvest"], "LOW", "MEDIUM"),
    _entry(_T.UNKNOWN, "Unknown transaction type",
           ["unknown"], "HIGH", "MEDIUM"),
)


def _build_table(entries: Iterable[ClassificationResult]) -> dict[TransactionType, ClassificationResult]:
    """Index entries by type; every enum member must be present exactly once."""
    table: dict[TransactionType, ClassificationResult] = {}
    for entry in entries:
        if entry.transaction_type in table:
            raise RuntimeError(f"Duplicate metadata for {entry.transaction_type.value}")
        table[entry.transaction_type] = entry

    missing = [t.value for t in TransactionType if t not in table]
    if missing:
        raise RuntimeError(f"Missing transaction metadata for: {', '.join(missing)}")
    return table


# Declaration order == scan order
TRANSACTION_METADATA: dict[TransactionType, ClassificationResult] = _build_table(_ENTRIES)


def classify(tx: Transaction) -> ClassificationResult:
    """Classify a transaction. Always returns a result."""
    if tx.is_contract_creation:
        return TRANSACTION_METADATA[TransactionType.CONTRACT_DEPLOYMENT]

    method = tx.method or ""
    if not method and to_decimal(tx.value) > 0:
        return TRANSACTION_METADATA[TransactionType.NATIVE_TRANSFER]

    for metadata in TRANSACTION_METADATA.values():
        if metadata.matches(method):
            return metadata

    return TRANSACTION_METADATA[TransactionType.UNKNOWN]


def risk_level(tx: Transaction) -> RiskLevel:
    return classify(tx).risk_level


def gas_usage_level(tx: Transaction) -> GasUsageLevel:
    return classify(tx).gas_usage_level


def categorize(transactions: Iterable[Transaction]) -> dict[TransactionType, list[Transaction]]:
    """Bucket transactions by type; every type is present, possibly empty."""
    categorized: dict[TransactionType, list[Transaction]] = {t: [] for t in TransactionType}
    for tx in transactions:
        categorized[classify(tx).transaction_type].append(tx)
    return categorized


@dataclass
class TransactionStats:
    """Counts over a list of classified transactions; each sums to total."""
    total: int = 0
    risk_level_counts: dict[RiskLevel, int] = field(
        default_factory=lambda: {level: 0 for level in RiskLevel}
    )
    gas_usage_level_counts: dict[GasUsageLevel, int] = field(
        default_factory=lambda: {level: 0 for level in GasUsageLevel}
    )
    type_distribution: dict[TransactionType, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "risk_levels": {k.value: v for k, v in self.risk_level_counts.items()},
            "gas_usage_levels": {k.value: v for k, v in self.gas_usage_level_counts.items()},
            "type_distribution": {k.value: v for k, v in self.type_distribution.items()},
        }


def transaction_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    stats = TransactionStats()
    for tx in transactions:
        result = classify(tx)
        stats.total += 1
        stats.risk_level_counts[result.risk_level] += 1
        stats.gas_usage_level_counts[result.gas_usage_level] += 1
        stats.type_distribution[result.transaction_type] = (
            stats.type_distribution.get(result.transaction_type, 0) + 1
        )
    return stats


def describe_types() -> list[dict[str, Any]]:
    """Metadata for every category, in scan order."""
    return [metadata.to_dict() for metadata in TRANSACTION_METADATA.values()]
