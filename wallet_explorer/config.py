"""
Wallet Explorer Configuration - Timeouts, retries and network selection.

Values come from WALLET_EXPLORER_* environment variables (a .env file is
honored) with conservative defaults for public Blockscout instances.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv

from wallet_explorer.exceptions import ConfigurationError


ENV_PREFIX = "WALLET_EXPLORER_"


@dataclass
class ExplorerConfig:
    """Settings shared by every chain client."""

    # Per HTTP request; a stalled backend must not hold up the gather
    request_timeout: float = 15.0
    # Lower bound for a whole probe; widened to cover the retry policy
    probe_timeout: float = 20.0

    # Retry policy (few retries - never block)
    max_retries: int = 2
    retry_backoff_base: float = 1.5

    default_page_size: int = 10
    max_page_size: int = 100

    user_agent: str = "WalletExplorer/1.0"

    # None = every registered network
    enabled_networks: Optional[list[str]] = None

    log_level: str = "INFO"

    extra_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Reject values that would make clients misbehave."""
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive", config_key="request_timeout")
        if self.probe_timeout <= 0:
            raise ConfigurationError("probe_timeout must be positive", config_key="probe_timeout")
        if self.max_retries < 1:
            raise ConfigurationError("max_retries must be at least 1", config_key="max_retries")
        if self.retry_backoff_base < 0:
            raise ConfigurationError("retry_backoff_base must be >= 0", config_key="retry_backoff_base")
        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ConfigurationError(
                f"default_page_size must be between 1 and {self.max_page_size}",
                config_key="default_page_size",
            )

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "ExplorerConfig":
        """Build a config from the environment (after loading .env)."""
        if environ is None:
            load_dotenv()
            environ = dict(os.environ)

        kwargs: dict[str, Any] = {}
        for name, caster in (
            ("request_timeout", float),
            ("probe_timeout", float),
            ("max_retries", int),
            ("retry_backoff_base", float),
            ("default_page_size", int),
            ("max_page_size", int),
        ):
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}", "").strip()
            if not raw:
                continue
            try:
                kwargs[name] = caster(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}",
                    config_key=name,
                    original_error=e,
                )

        user_agent = environ.get(f"{ENV_PREFIX}USER_AGENT", "").strip()
        if user_agent:
            kwargs["user_agent"] = user_agent

        networks = environ.get(f"{ENV_PREFIX}NETWORKS", "").replace(" ", "")
        if networks:
            kwargs["enabled_networks"] = [n for n in networks.split(",") if n]

        log_level = environ.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip()
        if log_level:
            kwargs["log_level"] = log_level.upper()

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_timeout": self.request_timeout,
            "probe_timeout": self.probe_timeout,
            "max_retries": self.max_retries,
            "retry_backoff_base": self.retry_backoff_base,
            "default_page_size": self.default_page_size,
            "max_page_size": self.max_page_size,
            "user_agent": self.user_agent,
            "enabled_networks": self.enabled_networks,
            "log_level": self.log_level,
        }


# Default configuration instance
_default_config: Optional[ExplorerConfig] = None


def get_config() -> ExplorerConfig:
    """Get the default configuration."""
    global _default_config
    if _default_config is None:
        _default_config = ExplorerConfig.from_env()
    return _default_config


def set_config(config: Optional[ExplorerConfig]) -> None:
    """Replace (or with None, reset) the default configuration."""
    global _default_config
    _default_config = config
