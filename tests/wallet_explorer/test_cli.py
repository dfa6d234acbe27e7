"""
Tests for the command-line entry point.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from wallet_explorer import cli
from wallet_explorer.models import TokenBalance, Transaction, TransactionPage


class FakeRegistry:
    """Async context manager standing in for ClientRegistry."""

    def __init__(self, active, balances, page):
        self.client = MagicMock()
        self.client.fetch_transactions = AsyncMock(return_value=page)
        self.active_networks = AsyncMock(return_value=active)
        self.fetch_balances_all = AsyncMock(return_value=balances)

    def get_client(self, network_id):
        return self.client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def page():
    tx = Transaction(
        hash="0x" + "1" * 64,
        from_address="0xaaa",
        to_address="0xbbb",
        value="1",
        timestamp=None,
        block_number=1,
        gas_used=21000,
        succeeded=True,
        explorer_url="https://basescan.org/tx/0x1",
        method="swap",
    )
    return TransactionPage(transactions=[tx], total_count=1)


class TestMain:

    def test_invalid_address_exit_code(self, capsys, config):
        with patch.object(cli, "get_config", return_value=config):
            assert cli.main(["0x123"]) == cli.EXIT_INVALID_ADDRESS

        assert "Invalid EVM address" in capsys.readouterr().err

    def test_parser_rejects_unknown_network(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["0x" + "a" * 40, "--network", "solana"])


class TestRun:

    @pytest.mark.asyncio
    async def test_full_report_and_csv(self, tmp_path, capsys, config, address, page):
        balances = [TokenBalance("base", "native", "Base", "ETH", 18, "2")]
        registry = FakeRegistry(["base"], balances, page)
        target = tmp_path / "out.csv"
        args = cli.build_parser().parse_args([address, "--csv", str(target)])

        with patch.object(cli, "ClientRegistry", return_value=registry):
            assert await cli.run(args, config) == 0

        registry.client.fetch_transactions.assert_awaited_once_with(address, 1, None)
        output = capsys.readouterr().out
        assert "base" in output
        assert "SWAP" in output
        assert target.read_text(encoding="utf-8").startswith("Hash,Network,")

    @pytest.mark.asyncio
    async def test_probe_only(self, config, address, page):
        registry = FakeRegistry([], [], page)
        args = cli.build_parser().parse_args([address, "--probe-only"])

        with patch.object(cli, "ClientRegistry", return_value=registry):
            assert await cli.run(args, config) == 0

        registry.fetch_balances_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_csv_name(self, tmp_path, monkeypatch, config, address, page):
        monkeypatch.chdir(tmp_path)
        registry = FakeRegistry(["base"], [], page)
        args = cli.build_parser().parse_args([address, "--csv", "-"])

        with patch.object(cli, "ClientRegistry", return_value=registry):
            await cli.run(args, config)

        expected = f"transactions_base_{datetime.now(timezone.utc).strftime('%Y%m%d')}.csv"
        assert [p.name for p in tmp_path.iterdir()] == [expected]
