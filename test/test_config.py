#!/usr/bin/env python3
"""Tests for the configuration module."""

import logging
import os
from unittest.mock import patch

import pytest

from celestia_rebalancer.config import RebalancerConfig


class TestRebalancerConfig:
    """Tests for RebalancerConfig validation."""

    def test_defaults(self):
        config = RebalancerConfig()

        assert config.rest_url == "http://localhost:1317"
        assert config.request_timeout == 30
        assert config.retry_count == 3
        assert config.page_limit == 100
        assert config.denom == "utia"
        assert config.gas_limit == 200_000

    def test_trailing_slash_removed(self):
        config = RebalancerConfig(rest_url="https://celestia-rest.example.com/")
        assert config.rest_url == "https://celestia-rest.example.com"

    def test_invalid_url_scheme(self):
        with pytest.raises(ValueError, match="Invalid REST URL scheme"):
            RebalancerConfig(rest_url="grpc://localhost:9090")

    def test_missing_url(self):
        with pytest.raises(ValueError, match="REST URL is required"):
            RebalancerConfig(rest_url="")

    @pytest.mark.parametrize("kwargs, message", [
        ({"request_timeout": 0}, "Request timeout must be positive"),
        ({"request_timeout": 121}, "Request timeout too long"),
        ({"retry_count": -1}, "Retry count must be non-negative"),
        ({"retry_count": 11}, "Retry count too high"),
        ({"page_limit": 0}, "Page limit must be between"),
        ({"denom": ""}, "Denomination is required"),
        ({"gas_limit": 0}, "Gas limit must be positive"),
    ])
    def test_invalid_values(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            RebalancerConfig(**kwargs)

    def test_frozen(self):
        config = RebalancerConfig()
        with pytest.raises(AttributeError):
            config.denom = "other"


class TestFromEnv:
    """Tests for loading configuration from the environment."""

    @patch.dict(os.environ, {}, clear=True)
    def test_from_env_defaults(self):
        assert RebalancerConfig.from_env() == RebalancerConfig()

    @patch.dict(os.environ, {
        "COSMOS_REST_URL": "https://rest.celestia.example",
        "REQUEST_TIMEOUT": "10",
        "RETRY_COUNT": "5",
        "TX_PAGE_LIMIT": "50",
        "DENOM": "utia",
        "GAS_LIMIT": "400000",
    }, clear=True)
    def test_from_env_values(self):
        config = RebalancerConfig.from_env()

        assert config.rest_url == "https://rest.celestia.example"
        assert config.request_timeout == 10
        assert config.retry_count == 5
        assert config.page_limit == 50
        assert config.gas_limit == 400_000

    @patch.dict(os.environ, {"COSMOS_REST_URL": "https://from-env.example"}, clear=True)
    def test_overrides_take_precedence(self):
        config = RebalancerConfig.from_env(rest_url="https://from-flag.example", gas_limit=None)

        assert config.rest_url == "https://from-flag.example"
        assert config.gas_limit == 200_000

    @patch.dict(os.environ, {"RETRY_COUNT": "many"}, clear=True)
    def test_non_integer_env(self):
        with pytest.raises(ValueError, match="RETRY_COUNT must be an integer"):
            RebalancerConfig.from_env()

    @patch.dict(os.environ, {}, clear=True)
    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown configuration field"):
            RebalancerConfig.from_env(polling_interval=5)

    def test_log_config(self, caplog):
        with caplog.at_level(logging.INFO, logger="celestia_rebalancer.config"):
            RebalancerConfig().log_config()

        assert "REST URL: http://localhost:1317" in caplog.text
        assert "Gas Limit: 200000" in caplog.text
