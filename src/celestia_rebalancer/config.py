#!/usr/bin/env python3
"""Configuration management for the Celestia rebalancer.

Settings shared by all commands are loaded from environment variables (and
an optional .env file, loaded by the CLI) with sensible defaults. Command
line flags override the environment.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

# Get logger for this module
logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True, slots=True)
class RebalancerConfig:
    """Runtime configuration for the rebalancer commands.

    Attributes:
        rest_url: Cosmos SDK REST endpoint of a Celestia node
        request_timeout: HTTP request timeout in seconds
        retry_count: Retries per failed transaction query
        page_limit: Transactions requested per page
        denom: Denomination tag recorded on extracted routes
        gas_limit: Gas limit written into generated transactions
    """

    rest_url: str = "http://localhost:1317"
    request_timeout: int = 30
    retry_count: int = 3
    page_limit: int = 100
    denom: str = "utia"
    gas_limit: int = 200_000

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.rest_url:
            raise ValueError("REST URL is required (COSMOS_REST_URL)")

        parsed = urlparse(self.rest_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid REST URL scheme: {parsed.scheme}. Expected http or https"
            )

        # Trailing slashes would double up in request paths
        normalized = self.rest_url.rstrip('/')
        if normalized != self.rest_url:
            object.__setattr__(self, 'rest_url', normalized)

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")

        if self.retry_count < 0:
            raise ValueError(f"Retry count must be non-negative, got {self.retry_count}")
        if self.retry_count > 10:
            raise ValueError(f"Retry count too high (max 10), got {self.retry_count}")

        if not 1 <= self.page_limit <= 1000:
            raise ValueError(f"Page limit must be between 1 and 1000, got {self.page_limit}")

        if not self.denom:
            raise ValueError("Denomination is required (DENOM)")

        if self.gas_limit <= 0:
            raise ValueError(f"Gas limit must be positive, got {self.gas_limit}")

    @classmethod
    def from_env(cls, **overrides: Any) -> "RebalancerConfig":
        """Load configuration from environment variables.

        Args:
            **overrides: Field values taking precedence over the environment;
                None values are ignored so unset CLI flags can be passed through

        Returns:
            RebalancerConfig instance with loaded values

        Raises:
            ValueError: If a variable or override is invalid
        """
        values: dict[str, Any] = {
            "rest_url": os.environ.get("COSMOS_REST_URL", "http://localhost:1317"),
            "request_timeout": _env_int("REQUEST_TIMEOUT", 30),
            "retry_count": _env_int("RETRY_COUNT", 3),
            "page_limit": _env_int("TX_PAGE_LIMIT", 100),
            "denom": os.environ.get("DENOM", "utia"),
            "gas_limit": _env_int("GAS_LIMIT", 200_000),
        }

        for key, value in overrides.items():
            if key not in values:
                raise ValueError(f"Unknown configuration field: {key}")
            if value is not None:
                values[key] = value

        return cls(**values)

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Celestia Rebalancer Configuration")
        logger.info("=" * 60)
        logger.info(f"  REST URL: {self.rest_url}")
        logger.info(f"  Request Timeout: {self.request_timeout} seconds")
        logger.info(f"  Retry Count: {self.retry_count}")
        logger.info(f"  Page Limit: {self.page_limit}")
        logger.info(f"  Denom: {self.denom}")
        logger.info(f"  Gas Limit: {self.gas_limit}")
        logger.info("=" * 60)
