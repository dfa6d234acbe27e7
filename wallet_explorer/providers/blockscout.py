"""
Blockscout Chain Client - Blockscout API v2 integration.

Public Blockscout instances need no API key. Endpoints used:
- /addresses/{address}/transactions?filter=to|from&page=&offset=
- /addresses/{address}/token-balances
- /addresses/{address}/nft-tokens
- /transactions/{hash}/internal-transactions
- /stats (health check)
"""

import logging
import re
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional

from wallet_explorer.base import BaseChainClient
from wallet_explorer.exceptions import ExplorerClientError, PayloadError
from wallet_explorer.models import (
    NFT,
    ClientHealth,
    ClientStatus,
    InternalTransaction,
    TokenBalance,
    TokenTransfer,
    Transaction,
    TransactionPage,
)
from wallet_explorer.schema import (
    INTERNAL_TRANSACTION_FIELDS,
    NFT_FIELDS,
    TOKEN_BALANCE_FIELDS,
    TOKEN_TRANSFER_FIELDS,
    TRANSACTION_FIELDS,
    decode,
    extract_items,
    extract_total_count,
)
from wallet_explorer.units import format_units, is_positive
from wallet_explorer.validation import is_valid_address


logger = logging.getLogger(__name__)

_TX_HASH = re.compile(r"^0x[0-9a-fA-F]{64}$")


class BlockscoutClient(BaseChainClient):
    """
    Chain client for one Blockscout-backed network.

    Every public operation validates its input, fetches, normalizes, and
    falls back to an empty value on any failure.
    """

    TRANSACTION_FILTER = "to|from"
    SUCCESS_STATUS = "ok"

    @property
    def name(self) -> str:
        """Unique identifier."""
        return f"blockscout:{self.network.id}"

    # ─────────────────────────────────────────────────────────────
    # Public operations
    # ─────────────────────────────────────────────────────────────

    async def fetch_transactions(
        self,
        address: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> TransactionPage:
        """
        Fetch one page of the address's transaction history.

        page_size defaults to config.default_page_size and is clamped to
        [1, config.max_page_size]; a larger request returns at most
        max_page_size transactions.
        """
        if not is_valid_address(address):
            return TransactionPage()

        try:
            page = max(1, int(page))
            requested = self._config.default_page_size if page_size is None else int(page_size)
        except (TypeError, ValueError):
            return TransactionPage()
        size = min(max(1, requested), self._config.max_page_size)
        if size != requested:
            logger.debug(f"[{self.name}] page_size {requested} clamped to {size}")

        return await self._guarded(
            "fetch_transactions",
            lambda: self._fetch_transaction_page(address, page, size),
            TransactionPage(),
        )

    async def fetch_token_balances(self, address: str) -> list[TokenBalance]:
        """Fetch all strictly positive token balances."""
        if not is_valid_address(address):
            return []

        return await self._guarded(
            "fetch_token_balances",
            lambda: self._fetch_token_balances(address),
            [],
        )

    async def fetch_nfts(self, address: str) -> list[NFT]:
        """Fetch NFT holdings."""
        if not is_valid_address(address):
            return []

        return await self._guarded(
            "fetch_nfts",
            lambda: self._fetch_nfts(address),
            [],
        )

    async def probe_activity(self, address: str) -> bool:
        """Minimal (page size 1) transaction query."""
        if not is_valid_address(address):
            return False

        return await self._guarded(
            "probe_activity",
            lambda: self._probe(address),
            False,
        )

    async def fetch_internal_transactions(self, tx_hash: str) -> list[InternalTransaction]:
        """Fetch internal calls for one transaction hash."""
        if not isinstance(tx_hash, str) or not _TX_HASH.match(tx_hash):
            return []

        return await self._guarded(
            "fetch_internal_transactions",
            lambda: self._fetch_internal_transactions(tx_hash),
            [],
        )

    async def with_internal_transactions(self, tx: Transaction) -> Transaction:
        """Copy of `tx` with its internal transactions attached."""
        internal = await self.fetch_internal_transactions(tx.hash)
        if not internal:
            return tx
        return replace(tx, internal_transactions=tuple(internal))

    async def health_check(self) -> ClientHealth:
        """Check Blockscout API health via the stats endpoint."""
        start_time = time.time()
        try:
            await self._make_request("GET", self._url("/stats"))
            self._health.status = ClientStatus.HEALTHY
            self._health.consecutive_failures = 0
            logger.debug(
                f"[{self.name}] Health check OK, "
                f"latency={(time.time() - start_time) * 1000:.1f}ms"
            )
        except Exception as e:
            self._health.status = ClientStatus.UNAVAILABLE
            self._health.last_error = str(e)
            if isinstance(e, ExplorerClientError):
                self._health.last_error_detail = e.to_dict()
            self._health.last_error_time = datetime.now(timezone.utc)
            logger.warning(f"[{self.name}] Health check FAILED: {e}")

        self._health.last_check = datetime.now(timezone.utc)
        self._health.latency_ms = (time.time() - start_time) * 1000
        return self._health

    # ─────────────────────────────────────────────────────────────
    # Raw fetchers
    # ─────────────────────────────────────────────────────────────

    async def _fetch_transaction_page(
        self,
        address: str,
        page: int,
        page_size: int,
    ) -> TransactionPage:
        payload = await self._get_json(
            f"/addresses/{address}/transactions",
            params={
                "filter": self.TRANSACTION_FILTER,
                "page": page,
                "offset": page_size,
            },
        )
        self._expect_object(payload, "transactions")

        transactions = [self.normalize_transaction(item) for item in extract_items(payload)]
        return TransactionPage(
            transactions=transactions,
            total_count=extract_total_count(payload, len(transactions)),
        )

    async def _fetch_token_balances(self, address: str) -> list[TokenBalance]:
        payload = await self._get_json(f"/addresses/{address}/token-balances")
        self._expect_object(payload, "token-balances")

        balances = []
        for item in extract_items(payload):
            balance = self.normalize_token_balance(item)
            if balance is not None:
                balances.append(balance)
        return balances

    async def _fetch_nfts(self, address: str) -> list[NFT]:
        payload = await self._get_json(f"/addresses/{address}/nft-tokens")
        self._expect_object(payload, "nft-tokens")

        nfts = []
        for item in extract_items(payload):
            nft = self.normalize_nft(item)
            if nft is not None:
                nfts.append(nft)
        return nfts

    async def _probe(self, address: str) -> bool:
        payload = await self._get_json(
            f"/addresses/{address}/transactions",
            params={"filter": self.TRANSACTION_FILTER, "page": 1, "offset": 1},
        )
        self._expect_object(payload, "transactions")
        return len(extract_items(payload)) > 0

    async def _fetch_internal_transactions(self, tx_hash: str) -> list[InternalTransaction]:
        payload = await self._get_json(f"/transactions/{tx_hash}/internal-transactions")
        self._expect_object(payload, "internal-transactions")
        return [self.normalize_internal_transaction(item) for item in extract_items(payload)]

    def _expect_object(self, payload: Any, resource: str) -> None:
        """Listings are JSON objects; anything else is API drift."""
        if not isinstance(payload, dict):
            raise PayloadError(
                message=f"Expected a JSON object for {resource}, got {type(payload).__name__}",
                client_name=self.name,
                network_id=self.network.id,
                raw_data=payload,
            )

    # ─────────────────────────────────────────────────────────────
    # Normalization
    # ─────────────────────────────────────────────────────────────

    def normalize_transaction(self, item: dict[str, Any]) -> Transaction:
        """Map one upstream transaction record to the canonical model."""
        fields = decode(item, TRANSACTION_FIELDS)

        return Transaction(
            hash=fields["hash"],
            from_address=fields["from_address"],
            to_address=fields["to_address"],
            value=format_units(fields["raw_value"], self.network.native_decimals),
            timestamp=fields["timestamp"],
            block_number=fields["block_number"],
            gas_used=fields["gas_used"],
            succeeded=fields["status"] == self.SUCCESS_STATUS,
            method=fields["method"],
            token_transfers=tuple(
                self.normalize_token_transfer(transfer)
                for transfer in fields["token_transfers"]
            ),
            explorer_url=self.network.tx_url(fields["hash"]),
            network_id=self.network.id,
        )

    def normalize_token_transfer(self, item: dict[str, Any]) -> TokenTransfer:
        fields = decode(item, TOKEN_TRANSFER_FIELDS)

        return TokenTransfer(
            token_address=fields["token_address"],
            token_symbol=fields["token_symbol"],
            token_name=fields["token_name"],
            token_decimals=fields["token_decimals"],
            from_address=fields["from_address"],
            to_address=fields["to_address"],
            value=format_units(fields["raw_value"], fields["token_decimals"]),
        )

    def normalize_internal_transaction(self, item: dict[str, Any]) -> InternalTransaction:
        fields = decode(item, INTERNAL_TRANSACTION_FIELDS)

        return InternalTransaction(
            from_address=fields["from_address"],
            to_address=fields["to_address"],
            value=format_units(fields["raw_value"], self.network.native_decimals),
            call_type=fields["call_type"],
        )

    def normalize_token_balance(self, item: dict[str, Any]) -> Optional[TokenBalance]:
        """Balance record, or None when the raw value is not strictly positive."""
        fields = decode(
            item,
            TOKEN_BALANCE_FIELDS,
            defaults={
                "token_name": self.network.name,
                "token_symbol": self.network.native_symbol,
            },
        )
        if not is_positive(fields["raw_value"]):
            return None

        return TokenBalance(
            network_id=self.network.id,
            token_address=fields["token_address"],
            token_name=fields["token_name"],
            token_symbol=fields["token_symbol"],
            token_decimals=fields["token_decimals"],
            token_type=fields["token_type"],
            value=format_units(fields["raw_value"], fields["token_decimals"]),
        )

    def normalize_nft(self, item: dict[str, Any]) -> Optional[NFT]:
        """NFT record, or None when the token id is missing."""
        fields = decode(item, NFT_FIELDS)
        token_id = fields["token_id"]
        if not token_id:
            return None

        return NFT(
            token_id=token_id,
            name=fields["name"] or f"#{token_id}",
            description=fields["description"],
            image_url=fields["image_url"],
            collection_name=fields["collection_name"],
            collection_address=fields["collection_address"],
            network_name=self.network.name,
        )
