"""
Tests for the client registry fan-out.

============================================================
TEST SCENARIOS
============================================================
1. probe_all returns exactly the networks whose probe is True
2. Completion order does not matter
3. A hanging network is cut off by the probe timeout
4. A raising network contributes its empty value
5. Balance/NFT/transaction fan-outs keep network order
============================================================
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, patch

from wallet_explorer.config import ExplorerConfig
from wallet_explorer.exceptions import ConfigurationError
from wallet_explorer.models import NFT, TokenBalance, TransactionPage
from wallet_explorer.networks import get_network, select_networks
from wallet_explorer.providers.blockscout import BlockscoutClient
from wallet_explorer.registry import ClientRegistry


def delayed(result, delay):
    """Async side effect that returns `result` after `delay` seconds."""
    async def _call(*args, **kwargs):
        await asyncio.sleep(delay)
        return result
    return _call


def balance(network_id, symbol="ETH", value="1", address="native"):
    return TokenBalance(
        network_id=network_id,
        token_address=address,
        token_name=symbol,
        token_symbol=symbol,
        token_decimals=18,
        value=value,
    )


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def registry(config):
    """Registry over three networks with lazily created sessions."""
    return ClientRegistry(
        networks=select_networks(["ethereum", "polygon", "base"]),
        config=config,
    )


# ============================================================
# TEST: REGISTRATION
# ============================================================

class TestRegistration:

    def test_default_covers_all_networks(self, config):
        registry = ClientRegistry(config=config)
        assert registry.list_networks() == [
            "ethereum", "polygon", "optimism", "base",
            "zksync", "arbitrum", "gnosis", "scroll",
        ]

    def test_enabled_networks_from_config(self):
        registry = ClientRegistry(config=ExplorerConfig(enabled_networks=["scroll", "gnosis"]))
        # Registry order, not config order
        assert registry.list_networks() == ["gnosis", "scroll"]

    def test_unknown_network_rejected(self):
        with pytest.raises(ConfigurationError):
            ClientRegistry(config=ExplorerConfig(enabled_networks=["solana"]))

    def test_client_factory(self, config):
        built = []

        def factory(network, cfg):
            built.append(network.id)
            return BlockscoutClient(network, config=cfg)

        registry = ClientRegistry(networks=select_networks(["base"]), config=config, client_factory=factory)

        assert built == ["base"]
        assert isinstance(registry.get_client("base"), BlockscoutClient)

    def test_register_replaces(self, registry, config):
        replacement = BlockscoutClient(get_network("polygon"), config=config)
        registry.register(replacement)

        assert registry.get_client("polygon") is replacement
        assert len(registry) == 3

    def test_unregister(self, registry):
        assert registry.unregister("base") is not None
        assert "base" not in registry
        assert registry.unregister("base") is None


# ============================================================
# TEST: PROBE ALL
# ============================================================

class TestProbeAll:

    @pytest.mark.asyncio
    async def test_only_active_networks(self, registry, address):
        outcomes = {"ethereum": True, "polygon": False, "base": True}
        for network_id, active in outcomes.items():
            client = registry.get_client(network_id)
            patch.object(client, "probe_activity", AsyncMock(return_value=active)).start()

        try:
            assert await registry.probe_all(address) == {"ethereum", "base"}
        finally:
            patch.stopall()

    @pytest.mark.asyncio
    async def test_completion_order_irrelevant(self, registry, address):
        # Slowest first, fastest last
        delays = {"ethereum": 0.05, "polygon": 0.02, "base": 0.0}
        with patch.object(registry.get_client("ethereum"), "probe_activity",
                          side_effect=delayed(True, delays["ethereum"])), \
             patch.object(registry.get_client("polygon"), "probe_activity",
                          side_effect=delayed(False, delays["polygon"])), \
             patch.object(registry.get_client("base"), "probe_activity",
                          side_effect=delayed(True, delays["base"])):
            active = await registry.probe_all(address)
            ordered = await registry.active_networks(address)

        assert active == {"ethereum", "base"}
        assert ordered == ["ethereum", "base"]

    @pytest.mark.asyncio
    async def test_hanging_network_times_out(self, registry, address, config):
        with patch.object(registry.get_client("ethereum"), "probe_activity",
                          side_effect=delayed(True, 0)), \
             patch.object(registry.get_client("polygon"), "probe_activity",
                          side_effect=delayed(True, config.probe_timeout * 20)), \
             patch.object(registry.get_client("base"), "probe_activity",
                          side_effect=delayed(True, 0)):
            active = await asyncio.wait_for(registry.probe_all(address), timeout=5)

        assert active == {"ethereum", "base"}

    @pytest.mark.asyncio
    async def test_probe_bound_covers_client_retries(self, make_client, fake_response, address):
        """A backend that times out once and answers on retry still counts as active."""
        cfg = ExplorerConfig(
            request_timeout=0.2,
            probe_timeout=0.5,
            max_retries=2,
            retry_backoff_base=1.0,
        )
        client = make_client(
            asyncio.TimeoutError(),
            fake_response(payload={"items": [{"hash": "0x" + "ab" * 32}]}),
            cfg=cfg,
        )
        registry = ClientRegistry(networks=[], config=cfg)
        registry.register(client)

        # 2 attempts of 0.2s plus a 1s backoff
        assert registry._probe_timeout() == pytest.approx(1.4)
        assert await registry.probe_all(address) == {"ethereum"}
        assert client.get_health().requests_made == 2
        assert client.get_health().error_count == 0

    def test_probe_timeout_kept_when_longer(self):
        registry = ClientRegistry(
            networks=[],
            config=ExplorerConfig(request_timeout=1, probe_timeout=20, max_retries=1),
        )
        assert registry._probe_timeout() == 20

    @pytest.mark.asyncio
    async def test_raising_network_is_inactive(self, registry, address):
        with patch.object(registry.get_client("ethereum"), "probe_activity",
                          AsyncMock(side_effect=RuntimeError("boom"))), \
             patch.object(registry.get_client("polygon"), "probe_activity",
                          AsyncMock(return_value=True)), \
             patch.object(registry.get_client("base"), "probe_activity",
                          AsyncMock(return_value=False)):
            assert await registry.probe_all(address) == {"polygon"}

    @pytest.mark.asyncio
    async def test_invalid_address_makes_no_calls(self, registry):
        mocks = []
        for network_id in registry.list_networks():
            mock = AsyncMock(return_value=True)
            patch.object(registry.get_client(network_id), "probe_activity", mock).start()
            mocks.append(mock)

        try:
            assert await registry.probe_all("0xnothex") == set()
            assert await registry.active_networks("0xnothex") == []
        finally:
            patch.stopall()

        for mock in mocks:
            mock.assert_not_called()


# ============================================================
# TEST: FETCH FAN-OUTS
# ============================================================

class TestFetchAll:

    @pytest.mark.asyncio
    async def test_balances_concatenated_in_network_order(self, registry, address):
        with patch.object(registry.get_client("ethereum"), "fetch_token_balances",
                          side_effect=delayed([balance("ethereum")], 0.03)), \
             patch.object(registry.get_client("polygon"), "fetch_token_balances",
                          AsyncMock(return_value=[])), \
             patch.object(registry.get_client("base"), "fetch_token_balances",
                          AsyncMock(return_value=[balance("base"), balance("base", "USDC", "5", "0xc0")])):
            balances = await registry.fetch_balances_all(address)

        assert [(b.network_id, b.token_symbol) for b in balances] == [
            ("ethereum", "ETH"),
            ("base", "ETH"),
            ("base", "USDC"),
        ]

    @pytest.mark.asyncio
    async def test_nfts(self, registry, address):
        nft = NFT(
            token_id="1",
            name="#1",
            description="",
            collection_name="Unknown Collection",
            collection_address="0xc0",
            network_name="Base",
        )
        with patch.object(registry.get_client("ethereum"), "fetch_nfts", AsyncMock(return_value=[])), \
             patch.object(registry.get_client("polygon"), "fetch_nfts", AsyncMock(side_effect=ValueError)), \
             patch.object(registry.get_client("base"), "fetch_nfts", AsyncMock(return_value=[nft])):
            assert await registry.fetch_nfts_all(address) == [nft]

    @pytest.mark.asyncio
    async def test_transactions_per_network(self, registry, address):
        page = TransactionPage(transactions=[], total_count=4)
        with patch.object(registry.get_client("ethereum"), "fetch_transactions",
                          AsyncMock(return_value=page)) as eth, \
             patch.object(registry.get_client("polygon"), "fetch_transactions",
                          AsyncMock(return_value=TransactionPage())), \
             patch.object(registry.get_client("base"), "fetch_transactions",
                          AsyncMock(return_value=TransactionPage())):
            pages = await registry.fetch_transactions_all(address, page=3, page_size=20)

        eth.assert_awaited_once_with(address, 3, 20)
        assert list(pages) == ["ethereum", "polygon", "base"]
        assert pages["ethereum"].total_count == 4

    @pytest.mark.asyncio
    async def test_invalid_address(self, registry):
        assert await registry.fetch_balances_all("bad") == []
        assert await registry.fetch_nfts_all("bad") == []
        assert await registry.fetch_transactions_all("bad") == {}


# ============================================================
# TEST: HEALTH / LIFECYCLE
# ============================================================

class TestHealthAndLifecycle:

    @pytest.mark.asyncio
    async def test_health_check_all(self, registry):
        for network_id in registry.list_networks():
            client = registry.get_client(network_id)
            patch.object(client, "health_check", AsyncMock(return_value=client.get_health())).start()

        try:
            health = await registry.health_check_all()
        finally:
            patch.stopall()

        assert set(health) == {"ethereum", "polygon", "base"}

    @pytest.mark.asyncio
    async def test_context_manager_closes_clients(self, config):
        registry = ClientRegistry(networks=select_networks(["base"]), config=config)
        client = registry.get_client("base")

        with patch.object(client, "close", new_callable=AsyncMock) as mock_close:
            async with registry:
                pass

        mock_close.assert_awaited_once()

    def test_stats(self, registry):
        stats = registry.get_stats()
        assert stats["total_clients"] == 3
        assert stats["clients"]["base"]["status"] == "unknown"

    def test_operation_timeout_covers_retries(self):
        registry = ClientRegistry(
            networks=[],
            config=ExplorerConfig(request_timeout=10, max_retries=3, retry_backoff_base=2),
        )
        # 3 attempts of 10s plus 1s and 2s backoff
        assert registry._operation_timeout() == 33
