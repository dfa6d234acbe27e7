"""
Wallet Explorer Models - Canonical shapes produced by chain clients.

Everything here is immutable once built. Numeric amounts are carried as
exact decimal strings, never floats.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional


# Recipient marker for transactions that deploy a contract
CONTRACT_CREATION = "Contract Creation"

# Token address marker for a network's base currency balance
NATIVE_TOKEN = "native"


class ClientStatus(Enum):
    """Health status of a chain client."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Network:
    """A Blockscout-compatible EVM network backend."""
    id: str
    name: str
    native_symbol: str
    api_base_url: str
    explorer_url: str
    explorer_url_template: str = "{explorer_url}/tx/{tx_hash}"
    native_decimals: int = 18

    def tx_url(self, tx_hash: str) -> str:
        """Explorer link for a transaction hash."""
        return self.explorer_url_template.format(
            explorer_url=self.explorer_url.rstrip("/"),
            tx_hash=tx_hash,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "native_symbol": self.native_symbol,
            "api_base_url": self.api_base_url,
            "explorer_url": self.explorer_url,
            "native_decimals": self.native_decimals,
        }


@dataclass(frozen=True)
class TokenTransfer:
    """A token movement recorded through a token contract's transfer log."""
    token_address: str
    token_symbol: str
    token_name: str
    token_decimals: int
    from_address: str
    to_address: str
    value: str  # decimals-adjusted

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": {
                "address": self.token_address,
                "symbol": self.token_symbol,
                "name": self.token_name,
                "decimals": self.token_decimals,
            },
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
        }


@dataclass(frozen=True)
class InternalTransaction:
    """A value-carrying call made by a contract during execution."""
    from_address: str
    to_address: str
    value: str
    call_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "type": self.call_type,
        }


@dataclass(frozen=True)
class Transaction:
    """
    Canonical transaction.

    `to_address` is CONTRACT_CREATION when the upstream record has no
    recipient. `value` is the native amount in whole units.
    """
    hash: str
    from_address: str
    to_address: str
    value: str
    timestamp: Optional[datetime]
    block_number: int
    gas_used: int
    succeeded: bool
    explorer_url: str
    method: str = ""
    token_transfers: tuple[TokenTransfer, ...] = ()
    internal_transactions: tuple[InternalTransaction, ...] = ()
    network_id: str = ""

    @property
    def is_contract_creation(self) -> bool:
        return self.to_address == CONTRACT_CREATION

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "hash": self.hash,
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "block_number": self.block_number,
            "gas_used": self.gas_used,
            "status": self.succeeded,
            "method": self.method,
            "token_transfers": [t.to_dict() for t in self.token_transfers],
            "internal_transactions": [t.to_dict() for t in self.internal_transactions],
            "explorer_url": self.explorer_url,
            "network_id": self.network_id,
        }


@dataclass(frozen=True)
class TransactionPage:
    """One page of transaction history plus the upstream total."""
    transactions: list[Transaction] = field(default_factory=list)
    total_count: int = 0

    def __iter__(self) -> Iterator[Any]:
        # Unpacks as (transactions, total_count)
        yield self.transactions
        yield self.total_count

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class TokenBalance:
    """A strictly positive token (or native) balance on one network."""
    network_id: str
    token_address: str
    token_name: str
    token_symbol: str
    token_decimals: int
    value: str
    token_type: str = NATIVE_TOKEN

    @property
    def is_native(self) -> bool:
        return self.token_address == NATIVE_TOKEN

    def to_dict(self) -> dict[str, Any]:
        return {
            "network_id": self.network_id,
            "token": {
                "address": self.token_address,
                "name": self.token_name,
                "symbol": self.token_symbol,
                "decimals": self.token_decimals,
                "type": self.token_type,
            },
            "value": self.value,
        }


@dataclass(frozen=True)
class NFT:
    """An NFT held by the wallet."""
    token_id: str
    name: str
    description: str
    collection_name: str
    collection_address: str
    network_name: str
    image_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "token_id": self.token_id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "collection": {
                "name": self.collection_name,
                "address": self.collection_address,
            },
            "network": self.network_name,
        }


@dataclass
class ClientHealth:
    """Health status of a chain client."""
    status: ClientStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    last_error_detail: Optional[dict[str, Any]] = None
    consecutive_failures: int = 0
    requests_made: int = 0
    retry_after_seconds: Optional[int] = None

    def is_healthy(self) -> bool:
        """Check if client is operational."""
        return self.status == ClientStatus.HEALTHY

    def is_usable(self) -> bool:
        """Check if client can still be used."""
        return self.status in (ClientStatus.HEALTHY, ClientStatus.DEGRADED, ClientStatus.UNKNOWN)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "last_error_detail": self.last_error_detail,
            "consecutive_failures": self.consecutive_failures,
            "requests_made": self.requests_made,
            "retry_after_seconds": self.retry_after_seconds,
        }
