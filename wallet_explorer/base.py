"""
Base Chain Client - Abstract interface for one network's explorer backend.

All clients MUST:
- Validate the address before any network call
- Never raise from a public operation (fail open to an empty value)
- Bound every request with a timeout
- Keep retries few and fast
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar

import aiohttp

from wallet_explorer.config import ExplorerConfig, get_config
from wallet_explorer.exceptions import (
    ExplorerClientError,
    FetchError,
    PayloadError,
    RateLimitError,
)
from wallet_explorer.models import (
    NFT,
    ClientHealth,
    ClientStatus,
    InternalTransaction,
    Network,
    TokenBalance,
    TransactionPage,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseChainClient(ABC):
    """
    Abstract base class for per-network chain clients.

    Subclasses implement the public operations and normalization; this class
    provides the HTTP session, retry policy, the fail-open guard and health
    tracking.

    Failure policy: any transport failure, non-success status or malformed
    payload inside an operation is caught by _guarded(), logged, recorded in
    ClientHealth, and replaced by the operation's empty value. One network's
    outage must not abort a multi-network aggregation.
    """

    DEGRADED_THRESHOLD = 3
    UNAVAILABLE_THRESHOLD = 5

    def __init__(
        self,
        network: Network,
        config: Optional[ExplorerConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.network = network
        self._config = config or get_config()
        self._session = session
        self._owns_session = session is None

        self._health = ClientHealth(
            status=ClientStatus.UNKNOWN,
            last_check=datetime.now(timezone.utc),
        )

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this client."""
        pass

    @property
    def config(self) -> ExplorerConfig:
        return self._config

    # ─────────────────────────────────────────────────────────────
    # Public operations
    # ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def fetch_transactions(
        self,
        address: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> TransactionPage:
        """One page of sent and received transactions."""
        pass

    @abstractmethod
    async def fetch_token_balances(self, address: str) -> list[TokenBalance]:
        """Strictly positive token balances."""
        pass

    @abstractmethod
    async def fetch_nfts(self, address: str) -> list[NFT]:
        """NFT holdings."""
        pass

    @abstractmethod
    async def probe_activity(self, address: str) -> bool:
        """True iff the address has at least one transaction."""
        pass

    @abstractmethod
    async def fetch_internal_transactions(self, tx_hash: str) -> list[InternalTransaction]:
        """Internal calls made while executing a transaction."""
        pass

    @abstractmethod
    async def health_check(self) -> ClientHealth:
        """Check backend connectivity."""
        pass

    # ─────────────────────────────────────────────────────────────
    # Fail-open guard
    # ─────────────────────────────────────────────────────────────

    async def _guarded(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        empty: T,
    ) -> T:
        """Run an operation, degrading every failure to `empty`."""
        try:
            result = await call()
        except ExplorerClientError as e:
            self._on_error(e, operation)
            return empty
        except asyncio.TimeoutError as e:
            self._on_error(
                FetchError(
                    "Timeout",
                    client_name=self.name,
                    network_id=self.network.id,
                    original_error=e,
                ),
                operation,
            )
            return empty
        except Exception as e:
            self._on_error(
                ExplorerClientError(
                    message=f"Unexpected error: {e}",
                    client_name=self.name,
                    network_id=self.network.id,
                    original_error=e,
                ),
                operation,
            )
            return empty

        self._on_success()
        return result

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        headers = {
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }
        headers.update(self._config.extra_headers)
        return headers

    def _url(self, path: str) -> str:
        return f"{self.network.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """GET an API path with the retry policy applied."""
        return await self._fetch_with_retry("GET", self._url(path), params)

    async def _fetch_with_retry(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Fetch with limited retries."""
        attempts = self._config.max_retries
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                return await self._make_request(method, url, params=params)

            except RateLimitError as e:
                # Don't retry on rate limit - give up immediately
                self._health.status = ClientStatus.RATE_LIMITED
                self._health.retry_after_seconds = e.retry_after_seconds
                raise

            except FetchError as e:
                if e.is_client_error:
                    raise
                last_error = e
                if attempt + 1 < attempts:
                    wait_time = self._config.retry_backoff_base ** attempt
                    logger.warning(
                        f"[{self.name}] Retry {attempt + 1}/{attempts - 1} "
                        f"in {wait_time:.1f}s: {e}"
                    )
                    await asyncio.sleep(wait_time)

        raise FetchError(
            message=f"Failed after {attempts} attempts",
            client_name=self.name,
            network_id=self.network.id,
            request_url=url,
            original_error=last_error,
        )

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Make one HTTP request and decode its JSON body."""
        session = await self._get_session()

        start_time = time.time()
        self._health.requests_made += 1
        try:
            async with session.request(method, url, params=params) as response:
                self._health.latency_ms = (time.time() - start_time) * 1000

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After", "")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        client_name=self.name,
                        network_id=self.network.id,
                        retry_after_seconds=int(retry_after) if retry_after.isdigit() else 60,
                        request_url=url,
                    )

                if response.status >= 400:
                    body = await response.text()
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        client_name=self.name,
                        network_id=self.network.id,
                        status_code=response.status,
                        response_body=body[:500],
                        request_url=url,
                    )

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise PayloadError(
                        message="Response body is not valid JSON",
                        client_name=self.name,
                        network_id=self.network.id,
                        original_error=e,
                    )

        except aiohttp.ClientError as e:
            raise FetchError(
                message=f"Connection error: {e}",
                client_name=self.name,
                network_id=self.network.id,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise FetchError(
                message=f"Request timed out after {self._config.request_timeout}s",
                client_name=self.name,
                network_id=self.network.id,
                request_url=url,
                original_error=e,
            )

    # ─────────────────────────────────────────────────────────────
    # Health & Error Tracking
    # ─────────────────────────────────────────────────────────────

    def _on_success(self) -> None:
        """Handle successful request."""
        self._health.last_check = datetime.now(timezone.utc)
        self._health.consecutive_failures = 0
        self._health.retry_after_seconds = None

        if self._health.status != ClientStatus.HEALTHY:
            if self._health.status != ClientStatus.UNKNOWN:
                logger.info(f"[{self.name}] Recovered to HEALTHY status")
            self._health.status = ClientStatus.HEALTHY

    def _on_error(self, error: ExplorerClientError, operation: str) -> None:
        """Record a degraded operation."""
        now = datetime.now(timezone.utc)
        self._health.last_check = now
        self._health.error_count += 1
        self._health.consecutive_failures += 1
        self._health.last_error = str(error)
        self._health.last_error_detail = error.to_dict()
        self._health.last_error_time = now

        if isinstance(error, RateLimitError):
            self._health.status = ClientStatus.RATE_LIMITED
        elif self._health.consecutive_failures >= self.UNAVAILABLE_THRESHOLD:
            if self._health.status != ClientStatus.UNAVAILABLE:
                self._health.status = ClientStatus.UNAVAILABLE
                logger.error(f"[{self.name}] Marked UNAVAILABLE")
        elif self._health.consecutive_failures >= self.DEGRADED_THRESHOLD:
            if self._health.status != ClientStatus.DEGRADED:
                self._health.status = ClientStatus.DEGRADED
                logger.warning(f"[{self.name}] Marked DEGRADED")

        logger.warning(f"[{self.name}] {operation} degraded to empty result: {error}")
        logger.debug(f"[{self.name}] {operation} error detail: {self._health.last_error_detail}")

    def get_health(self) -> ClientHealth:
        """Get current health status."""
        return self._health

    def is_healthy(self) -> bool:
        return self._health.is_healthy()

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseChainClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, status={self._health.status.value})>"
