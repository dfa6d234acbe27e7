"""
Network Registry - Static list of supported Blockscout backends.

Built once at import and shared read-only afterwards.
"""

from typing import Iterable, Optional

from wallet_explorer.exceptions import ConfigurationError
from wallet_explorer.models import Network


NETWORKS: tuple[Network, ...] = (
    Network(
        id="ethereum",
        name="Ethereum",
        native_symbol="ETH",
        api_base_url="https://eth.blockscout.com/api/v2",
        explorer_url="https://etherscan.io",
    ),
    Network(
        id="polygon",
        name="Polygon",
        native_symbol="MATIC",
        api_base_url="https://polygon.blockscout.com/api/v2",
        explorer_url="https://polygonscan.com",
    ),
    Network(
        id="optimism",
        name="Optimism",
        native_symbol="ETH",
        api_base_url="https://optimism.blockscout.com/api/v2",
        explorer_url="https://optimistic.etherscan.io",
    ),
    Network(
        id="base",
        name="Base",
        native_symbol="ETH",
        api_base_url="https://base.blockscout.com/api/v2",
        explorer_url="https://basescan.org",
    ),
    Network(
        id="zksync",
        name="zkSync Era",
        native_symbol="ETH",
        api_base_url="https://zksync.blockscout.com/api/v2",
        explorer_url="https://explorer.zksync.io",
    ),
    Network(
        id="arbitrum",
        name="Arbitrum One",
        native_symbol="ETH",
        api_base_url="https://arbitrum.blockscout.com/api/v2",
        explorer_url="https://arbiscan.io",
    ),
    Network(
        id="gnosis",
        name="Gnosis Chain",
        native_symbol="xDAI",
        api_base_url="https://gnosis.blockscout.com/api/v2",
        explorer_url="https://gnosisscan.io",
    ),
    Network(
        id="scroll",
        name="Scroll",
        native_symbol="ETH",
        api_base_url="https://scroll.blockscout.com/api/v2",
        explorer_url="https://scrollscan.com",
    ),
)


def check_unique_ids(networks: Iterable[Network]) -> None:
    """Raise ConfigurationError if two networks share an id."""
    seen: set[str] = set()
    for network in networks:
        if network.id in seen:
            raise ConfigurationError(
                message=f"Duplicate network id '{network.id}'",
                config_key="networks",
            )
        seen.add(network.id)


check_unique_ids(NETWORKS)

_BY_ID: dict[str, Network] = {network.id: network for network in NETWORKS}


def get_network(network_id: str) -> Optional[Network]:
    """Look up a registered network by id."""
    return _BY_ID.get(network_id)


def list_network_ids() -> list[str]:
    """Registered network ids in declaration order."""
    return [network.id for network in NETWORKS]


def select_networks(network_ids: Optional[Iterable[str]] = None) -> list[Network]:
    """
    Resolve ids to networks, keeping registry order.

    None selects every network. Unknown ids raise ConfigurationError.
    """
    if network_ids is None:
        return list(NETWORKS)

    wanted = list(network_ids)
    unknown = [nid for nid in wanted if nid not in _BY_ID]
    if unknown:
        raise ConfigurationError(
            message=f"Unknown network ids: {', '.join(unknown)}",
            config_key="enabled_networks",
            context={"known": list_network_ids()},
        )
    return [network for network in NETWORKS if network.id in wanted]
