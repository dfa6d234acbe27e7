"""
Wallet Explorer Exceptions - Internal exception hierarchy.

Raised inside chain clients and caught at the public operation boundary.
Callers of fetch/probe operations never see these; they get empty values,
and the error's to_dict() is kept on the client's ClientHealth.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class ExplorerClientError(Exception):
    """Base exception for all explorer client errors."""

    def __init__(
        self,
        message: str,
        client_name: Optional[str] = None,
        network_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.client_name = client_name
        self.network_id = network_id
        self.original_error = original_error
        self.context = context or {}
        self.raised_at = datetime.now(timezone.utc)

    def _details(self) -> dict[str, Any]:
        """Subclass-specific fields merged into to_dict()."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        data = {
            "error_type": type(self).__name__,
            "message": self.message,
            "client_name": self.client_name,
            "network_id": self.network_id,
            "cause": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "raised_at": self.raised_at.isoformat(),
        }
        data.update(self._details())
        return data

    def __str__(self) -> str:
        text = f"{type(self).__name__}: {self.message}"
        tags = [
            f"{label}={value}"
            for label, value in (("client", self.client_name), ("network", self.network_id))
            if value
        ]
        if tags:
            text += " " + " ".join(f"[{tag}]" for tag in tags)
        if self.original_error:
            text += f" (caused by: {self.original_error})"
        return text


class FetchError(ExplorerClientError):
    """Transport failure or non-success HTTP status."""

    def __init__(
        self,
        message: str,
        client_name: Optional[str] = None,
        network_id: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, client_name, network_id, original_error)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    @property
    def is_client_error(self) -> bool:
        """4xx responses are not worth retrying."""
        return self.status_code is not None and 400 <= self.status_code < 500

    def _details(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_url": self.request_url,
        }


class RateLimitError(FetchError):
    """HTTP 429 from the explorer backend."""

    def __init__(
        self,
        message: str,
        client_name: Optional[str] = None,
        network_id: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        request_url: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            client_name=client_name,
            network_id=network_id,
            status_code=429,
            request_url=request_url,
        )
        self.retry_after_seconds = retry_after_seconds

    def _details(self) -> dict[str, Any]:
        return {**super()._details(), "retry_after_seconds": self.retry_after_seconds}


class PayloadError(ExplorerClientError):
    """Response body is not JSON or has the wrong shape."""

    def __init__(
        self,
        message: str,
        client_name: Optional[str] = None,
        network_id: Optional[str] = None,
        raw_data: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message, client_name, network_id, original_error)
        self.raw_data = raw_data

    def _details(self) -> dict[str, Any]:
        # Excerpt only; listings can be large
        return {"raw_excerpt": str(self.raw_data)[:200] if self.raw_data is not None else None}


class ConfigurationError(ExplorerClientError):
    """Invalid configuration or network registry definition."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, original_error=original_error, context=context)
        self.config_key = config_key

    def _details(self) -> dict[str, Any]:
        return {"config_key": self.config_key}
