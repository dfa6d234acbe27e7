"""
Chain Client Registry - One client per network, with concurrent fan-out.

Features:
- Client registration in network order
- Activity probing across every network at once
- Scatter/gather fetches with per-network timeouts
- Never raises to caller - a failed network contributes its empty value
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar

from wallet_explorer.base import BaseChainClient
from wallet_explorer.config import ExplorerConfig, get_config
from wallet_explorer.models import NFT, ClientHealth, Network, TokenBalance, TransactionPage
from wallet_explorer.networks import select_networks
from wallet_explorer.providers.blockscout import BlockscoutClient
from wallet_explorer.validation import is_valid_address


logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[Network, ExplorerConfig], BaseChainClient]


def _blockscout_factory(network: Network, config: ExplorerConfig) -> BaseChainClient:
    return BlockscoutClient(network, config=config)


class ClientRegistry:
    """
    Registry of chain clients keyed by network id.

    Every fan-out launches one task per network, awaits all of them, and
    combines results only after the gather. A slow or failing network never
    cancels the others; each task is bounded by its own timeout.

    Usage:
        async with ClientRegistry() as registry:
            active = await registry.probe_all(address)
            balances = await registry.fetch_balances_all(address)
    """

    def __init__(
        self,
        networks: Optional[Iterable[Network]] = None,
        config: Optional[ExplorerConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._config = config or get_config()
        self._clients: dict[str, BaseChainClient] = {}

        factory = client_factory or _blockscout_factory
        if networks is None:
            networks = select_networks(self._config.enabled_networks)
        for network in networks:
            self.register(factory(network, self._config))

    def register(self, client: BaseChainClient) -> None:
        """Register a client under its network id."""
        network_id = client.network.id
        if network_id in self._clients:
            logger.warning(f"Client for network '{network_id}' already registered, replacing")
        self._clients[network_id] = client
        logger.debug(f"Registered chain client '{client.name}'")

    def unregister(self, network_id: str) -> Optional[BaseChainClient]:
        """Unregister a client."""
        client = self._clients.pop(network_id, None)
        if client is not None:
            logger.info(f"Unregistered chain client '{client.name}'")
        return client

    def get_client(self, network_id: str) -> Optional[BaseChainClient]:
        return self._clients.get(network_id)

    def list_networks(self) -> list[str]:
        """Registered network ids in registration order."""
        return list(self._clients)

    def __contains__(self, network_id: str) -> bool:
        return network_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    # ─────────────────────────────────────────────────────────────
    # Fan-out operations
    # ─────────────────────────────────────────────────────────────

    async def probe_all(self, address: str) -> set[str]:
        """
        Network ids where the address shows any activity.

        A failed or timed-out probe is indistinguishable from "no activity".
        """
        if not is_valid_address(address):
            return set()

        results = await self._gather(
            "probe_activity",
            lambda client: client.probe_activity(address),
            empty=False,
            timeout=self._probe_timeout(),
        )
        return {network_id for network_id, active in results.items() if active}

    async def active_networks(self, address: str) -> list[str]:
        """Same as probe_all, in registration order."""
        active = await self.probe_all(address)
        return [network_id for network_id in self._clients if network_id in active]

    async def fetch_balances_all(self, address: str) -> list[TokenBalance]:
        """Token balances from every network, concatenated in network order."""
        if not is_valid_address(address):
            return []

        results = await self._gather(
            "fetch_token_balances",
            lambda client: client.fetch_token_balances(address),
            empty=[],
        )
        return [balance for balances in results.values() for balance in balances]

    async def fetch_nfts_all(self, address: str) -> list[NFT]:
        """NFT holdings from every network, concatenated in network order."""
        if not is_valid_address(address):
            return []

        results = await self._gather(
            "fetch_nfts",
            lambda client: client.fetch_nfts(address),
            empty=[],
        )
        return [nft for nfts in results.values() for nft in nfts]

    async def fetch_transactions_all(
        self,
        address: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> dict[str, TransactionPage]:
        """One transaction page per network."""
        if not is_valid_address(address):
            return {}

        return await self._gather(
            "fetch_transactions",
            lambda client: client.fetch_transactions(address, page, page_size),
            empty=TransactionPage(),
        )

    async def health_check_all(self) -> dict[str, ClientHealth]:
        """Run health check on all clients."""
        tasks = {
            network_id: asyncio.create_task(client.health_check())
            for network_id, client in self._clients.items()
        }

        results = {}
        for network_id, task in tasks.items():
            try:
                results[network_id] = await asyncio.wait_for(task, timeout=self._config.probe_timeout)
            except Exception as e:
                logger.warning(f"[{network_id}] Health check failed: {e}")
                results[network_id] = self._clients[network_id].get_health()
        return results

    def get_all_health(self) -> dict[str, ClientHealth]:
        """Get health for all clients."""
        return {network_id: client.get_health() for network_id, client in self._clients.items()}

    async def _gather(
        self,
        operation: str,
        call: Callable[[BaseChainClient], Awaitable[T]],
        empty: T,
        timeout: Optional[float] = None,
    ) -> dict[str, T]:
        """Launch `call` on every client, await all, key results by network."""
        network_ids = list(self._clients)
        limit = timeout if timeout is not None else self._operation_timeout()

        results = await asyncio.gather(*(
            self._bounded(network_id, operation, call(self._clients[network_id]), empty, limit)
            for network_id in network_ids
        ))
        return dict(zip(network_ids, results))

    async def _bounded(
        self,
        network_id: str,
        operation: str,
        call: Awaitable[T],
        empty: T,
        timeout: float,
    ) -> T:
        try:
            return await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[{network_id}] {operation} timed out after {timeout}s")
            return empty
        except Exception as e:
            logger.warning(f"[{network_id}] {operation} error: {e}")
            return empty

    def _operation_timeout(self) -> float:
        """Upper bound for one operation including retries and backoff."""
        attempts = self._config.max_retries
        backoff = sum(self._config.retry_backoff_base ** i for i in range(attempts - 1))
        return self._config.request_timeout * attempts + backoff

    def _probe_timeout(self) -> float:
        """probe_timeout, widened so a probe can finish its own retries."""
        return max(self._config.probe_timeout, self._operation_timeout())

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close all clients."""
        for client in self._clients.values():
            try:
                await client.close()
            except Exception as e:
                logger.error(f"Error closing client {client.name}: {e}")

    async def __aenter__(self) -> "ClientRegistry":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def get_stats(self) -> dict[str, Any]:
        """Registry statistics."""
        return {
            "total_clients": len(self._clients),
            "networks": self.list_networks(),
            "clients": {
                network_id: client.get_health().to_dict()
                for network_id, client in self._clients.items()
            },
        }
