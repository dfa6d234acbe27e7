"""
Shared fixtures for wallet explorer tests.

No test touches the network: HTTP is replaced by FakeSession or by
patching client methods.
"""

from typing import Any, Optional

import pytest

from wallet_explorer.config import ExplorerConfig
from wallet_explorer.networks import get_network
from wallet_explorer.providers.blockscout import BlockscoutClient


# EIP-55 checksummed
CHECKSUM_ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

TX_HASH = "0x" + "ab" * 32
FROM_ADDRESS = "0x" + "a" * 40
TO_ADDRESS = "0x" + "b" * 40
TOKEN_ADDRESS = "0x" + "c" * 40


# ============================================================
# FAKE TRANSPORT
# ============================================================

class FakeResponse:
    """Stand-in for aiohttp.ClientResponse."""

    def __init__(
        self,
        status: int = 200,
        payload: Any = None,
        text: str = "",
        headers: Optional[dict[str, str]] = None,
        json_error: Optional[Exception] = None,
    ) -> None:
        self.status = status
        self._payload = payload
        self._text = text
        self.headers = headers or {}
        self._json_error = json_error

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def text(self) -> str:
        return self._text


class _RequestContext:
    def __init__(self, outcome: Any) -> None:
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False


class FakeSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, str, Optional[dict[str, Any]]]] = []
        self.closed = False

    def request(self, method: str, url: str, params: Optional[dict[str, Any]] = None) -> _RequestContext:
        self.calls.append((method, url, params))
        outcome = self._outcomes.pop(0) if self._outcomes else FakeResponse(payload={"items": []})
        return _RequestContext(outcome)

    async def close(self) -> None:
        self.closed = True


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def fake_response():
    """Factory for canned HTTP responses."""
    return FakeResponse


@pytest.fixture
def address():
    return CHECKSUM_ADDRESS


@pytest.fixture
def config():
    """Fast config: one attempt, no backoff, short timeouts."""
    return ExplorerConfig(
        request_timeout=0.2,
        probe_timeout=0.3,
        max_retries=1,
        retry_backoff_base=0.0,
    )


@pytest.fixture
def ethereum():
    return get_network("ethereum")


@pytest.fixture
def client(ethereum, config):
    return BlockscoutClient(ethereum, config=config, session=FakeSession())


@pytest.fixture
def make_client(ethereum, config):
    """Build a client around a FakeSession replaying `outcomes`."""
    def _make(*outcomes: Any, network=None, cfg=None) -> BlockscoutClient:
        return BlockscoutClient(
            network or ethereum,
            config=cfg or config,
            session=FakeSession(*outcomes),
        )
    return _make


@pytest.fixture
def tx_item():
    """A complete Blockscout v2 transaction record."""
    return {
        "hash": TX_HASH,
        "from": {"hash": FROM_ADDRESS},
        "to": {"hash": TO_ADDRESS},
        "value": "1500000000000000000",
        "timestamp": "2024-03-01T12:34:56.000000Z",
        "block_number": 19000000,
        "gas_used": "21000",
        "status": "ok",
        "method": "transfer",
        "token_transfers": [
            {
                "token": {
                    "address": TOKEN_ADDRESS,
                    "symbol": "USDC",
                    "name": "USD Coin",
                    "decimals": "6",
                },
                "from": {"hash": FROM_ADDRESS},
                "to": {"hash": TO_ADDRESS},
                "total": {"value": "3500000"},
            }
        ],
    }
