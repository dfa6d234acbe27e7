"""
Aggregation of already-normalized client output by network.

Pure grouping over in-memory data: no I/O and no classification.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, TypeVar

from wallet_explorer.models import Network, TokenBalance
from wallet_explorer.networks import NETWORKS
from wallet_explorer.units import to_decimal


T = TypeVar("T")


def group_by_network(
    items: Iterable[T],
    key: Callable[[T], str] = lambda item: item.network_id,
) -> dict[str, list[T]]:
    """Group items by network id, keeping first-seen network order."""
    grouped: dict[str, list[T]] = {}
    for item in items:
        grouped.setdefault(key(item), []).append(item)
    return grouped


def balances_by_network(balances: Iterable[TokenBalance]) -> dict[str, list[TokenBalance]]:
    """Balances grouped per network, networks with no balance omitted."""
    return group_by_network(balances)


def active_network_ids(balances: Iterable[TokenBalance]) -> list[str]:
    """Networks holding at least one balance, in first-seen order."""
    return list(balances_by_network(balances))


@dataclass
class NetworkBalanceSummary:
    """Native balance plus token balances for one network."""
    network: Network
    native_balance: str = "0"
    tokens: list[TokenBalance] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return to_decimal(self.native_balance) <= 0 and not self.tokens

    def to_dict(self) -> dict[str, Any]:
        return {
            "network": self.network.to_dict(),
            "native_balance": self.native_balance,
            "tokens": [token.to_dict() for token in self.tokens],
        }


def summarize_balances(
    balances: Iterable[TokenBalance],
    networks: Optional[Iterable[Network]] = None,
) -> list[NetworkBalanceSummary]:
    """
    One summary per network that has balances.

    Output follows the order of `networks` (registry order by default);
    balances for networks not listed there are appended in first-seen order.
    """
    grouped = balances_by_network(balances)
    known = {network.id: network for network in (networks or NETWORKS)}

    ordered = [nid for nid in known if nid in grouped]
    ordered += [nid for nid in grouped if nid not in known]

    summaries = []
    for network_id in ordered:
        network = known.get(network_id) or Network(
            id=network_id,
            name=network_id,
            native_symbol="",
            api_base_url="",
            explorer_url="",
        )
        summary = NetworkBalanceSummary(network=network)
        for balance in grouped[network_id]:
            if balance.is_native:
                summary.native_balance = balance.value
            else:
                summary.tokens.append(balance)
        summaries.append(summary)
    return summaries
