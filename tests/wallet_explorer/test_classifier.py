"""
Tests for transaction classification.

============================================================
TEST SCENARIOS
============================================================
1. Metadata table covers every category exactly once
2. Contract creation wins over any method name
3. Empty method with positive value → native transfer
4. Table scan order decides overlapping method names
5. categorize/transaction_stats are consistent with classify
============================================================
"""

import pytest

from wallet_explorer.classifier import (
    TRANSACTION_METADATA,
    GasUsageLevel,
    RiskLevel,
    TransactionType,
    categorize,
    classify,
    describe_types,
    gas_usage_level,
    risk_level,
    transaction_stats,
)
from wallet_explorer.models import CONTRACT_CREATION, Transaction


def make_tx(method="", value="0", to_address="0x" + "b" * 40):
    return Transaction(
        hash="0x" + "1" * 64,
        from_address="0x" + "a" * 40,
        to_address=to_address,
        value=value,
        timestamp=None,
        block_number=1,
        gas_used=21000,
        succeeded=True,
        explorer_url="",
        method=method,
    )


# ============================================================
# TEST: METADATA TABLE
# ============================================================

class TestMetadataTable:

    def test_every_type_has_metadata(self):
        assert set(TRANSACTION_METADATA) == set(TransactionType)
        assert len(TRANSACTION_METADATA) == 46

    def test_scan_order_matches_declaration(self):
        assert list(TRANSACTION_METADATA) == list(TransactionType)

    def test_static_labels(self):
        deploy = TRANSACTION_METADATA[TransactionType.CONTRACT_DEPLOYMENT]
        assert deploy.risk_level == RiskLevel.HIGH
        assert deploy.gas_usage_level == GasUsageLevel.HIGH

        unknown = TRANSACTION_METADATA[TransactionType.UNKNOWN]
        assert unknown.risk_level == RiskLevel.HIGH
        assert unknown.gas_usage_level == GasUsageLevel.MEDIUM

    def test_label_enums_documented(self):
        assert RiskLevel.__doc__ == "Static risk label of a transaction category."
        assert GasUsageLevel.__doc__ == "Typical gas cost of a transaction category."

    def test_describe_types(self):
        described = describe_types()
        assert len(described) == 46
        assert described[0] == {
            "type": "NATIVE_TRANSFER",
            "description": "Direct transfer of native blockchain currency (ETH, MATIC, etc.)",
            "common_methods": ["transfer", "send"],
            "risk_level": "LOW",
            "gas_usage_level": "LOW",
        }


# ============================================================
# TEST: CLASSIFY
# ============================================================

class TestClassify:

    def test_contract_creation_beats_method(self):
        tx = make_tx(method="swapExactTokensForTokens", value="1", to_address=CONTRACT_CREATION)
        assert classify(tx).transaction_type == TransactionType.CONTRACT_DEPLOYMENT

    def test_plain_value_transfer(self):
        assert classify(make_tx(value="0.25")).transaction_type == TransactionType.NATIVE_TRANSFER

    def test_empty_method_zero_value_hits_wildcard(self):
        assert classify(make_tx()).transaction_type == TransactionType.CONTRACT_CALL

    @pytest.mark.parametrize("method, expected", [
        ("swapExactTokensForTokens", TransactionType.SWAP),
        ("SWAP", TransactionType.SWAP),
        ("addLiquidityETH", TransactionType.LIQUIDITY_PROVISION),
        # "mint" is listed by LIQUIDITY_PROVISION before NFT_MINT/TOKEN_MINT
        ("mint", TransactionType.LIQUIDITY_PROVISION),
        ("safeMint", TransactionType.LIQUIDITY_PROVISION),
        # "transfer" is a substring of "transferFrom"
        ("transferFrom", TransactionType.NATIVE_TRANSFER),
        ("safeBatchTransferFrom", TransactionType.NATIVE_TRANSFER),
        ("multicall", TransactionType.CONTRACT_CALL),
        ("deposit", TransactionType.STAKING),
        ("withdraw", TransactionType.UNSTAKING),
        ("borrow", TransactionType.BORROWING),
        ("repayBorrow", TransactionType.BORROWING),
        ("claim", TransactionType.HARVEST),
        ("constructor", TransactionType.CONTRACT_DEPLOYMENT),
        # Everything past CONTRACT_CALL is shadowed by its wildcard
        ("approve", TransactionType.CONTRACT_CALL),
        ("castVote", TransactionType.CONTRACT_CALL),
        ("someUnlistedMethod", TransactionType.CONTRACT_CALL),
    ])
    def test_table_scan(self, method, expected):
        assert classify(make_tx(method=method, value="1")).transaction_type == expected

    def test_risk_and_gas_helpers(self):
        tx = make_tx(method="swap")
        assert risk_level(tx) == RiskLevel.MEDIUM
        assert gas_usage_level(tx) == GasUsageLevel.HIGH

    def test_unparsable_value_is_not_positive(self):
        assert classify(make_tx(value="n/a")).transaction_type == TransactionType.CONTRACT_CALL


# ============================================================
# TEST: AGGREGATES
# ============================================================

class TestAggregates:

    @pytest.fixture
    def transactions(self):
        return [
            make_tx(value="1"),
            make_tx(method="swap"),
            make_tx(method="swapTokensForExactTokens"),
            make_tx(to_address=CONTRACT_CREATION),
            make_tx(method="approve"),
        ]

    def test_categorize_has_every_type(self, transactions):
        categorized = categorize(transactions)

        assert set(categorized) == set(TransactionType)
        assert len(categorized[TransactionType.SWAP]) == 2
        assert len(categorized[TransactionType.UNKNOWN]) == 0
        assert sum(len(v) for v in categorized.values()) == len(transactions)

    def test_stats_sum_to_total(self, transactions):
        stats = transaction_stats(transactions)

        assert stats.total == 5
        assert sum(stats.risk_level_counts.values()) == 5
        assert sum(stats.gas_usage_level_counts.values()) == 5
        assert sum(stats.type_distribution.values()) == 5
        assert stats.type_distribution[TransactionType.SWAP] == 2
        assert stats.risk_level_counts[RiskLevel.HIGH] == 1

    def test_stats_to_dict(self, transactions):
        data = transaction_stats(transactions).to_dict()

        assert data["total"] == 5
        assert data["risk_levels"] == {"LOW": 1, "MEDIUM": 3, "HIGH": 1}
        assert data["type_distribution"]["CONTRACT_CALL"] == 1

    def test_empty(self):
        stats = transaction_stats([])
        assert stats.total == 0
        assert stats.type_distribution == {}
        assert all(count == 0 for count in stats.risk_level_counts.values())
