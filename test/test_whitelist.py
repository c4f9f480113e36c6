#!/usr/bin/env python3
"""Tests for the recipient whitelist."""

import json

import pytest

from celestia_rebalancer.errors import ArtifactError, EmptyWhitelist, NotWhitelisted, UnknownDomain
from celestia_rebalancer.models import RouteInfo
from celestia_rebalancer.whitelist import Whitelist

from factories import TOKEN_ID


def _info(domain: int, recipient: str) -> RouteInfo:
    return RouteInfo(destination_domain=domain, recipient=recipient, token_id=TOKEN_ID)


class TestWhitelist:
    """Tests for Whitelist validation and loading."""

    @pytest.fixture
    def whitelist(self) -> Whitelist:
        return Whitelist.from_dict({
            "whitelist": {
                "domains": {
                    "2340": ["0xABCDEFabcdefABCDEFabcdefABCDEFabcdefABCD"],
                    "137": [],
                }
            }
        })

    def test_addresses_are_normalized(self, whitelist):
        assert whitelist.domains[2340] == ("0xabcdefabcdefabcdefabcdefabcdefabcdefabcd",)

    @pytest.mark.parametrize("recipient", [
        "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd",
        "0xABCDEFABCDEFABCDEFABCDEFABCDEFABCDEFABCD",
        "  0xAbCdEfabcdefabcdefabcdefabcdefabcdefabcd ",
    ])
    def test_validation_is_case_insensitive(self, whitelist, recipient):
        whitelist.validate(_info(2340, recipient))

    def test_unknown_domain(self, whitelist):
        with pytest.raises(UnknownDomain, match="not configured in whitelist"):
            whitelist.validate(_info(1, "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"))

    def test_empty_domain(self, whitelist):
        with pytest.raises(EmptyWhitelist, match="has no whitelisted addresses"):
            whitelist.validate(_info(137, "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"))

    def test_recipient_not_listed(self, whitelist):
        with pytest.raises(NotWhitelisted, match="not whitelisted for domain 2340"):
            whitelist.validate(_info(2340, "0x" + "11" * 20))

    def test_domain_names_accepted(self):
        whitelist = Whitelist.from_dict({"whitelist": {"domains": {"polygon": ["0x" + "22" * 20]}}})
        whitelist.validate(_info(137, "0x" + "22" * 20))

    def test_duplicate_domain_rejected(self):
        with pytest.raises(ArtifactError, match="more than once"):
            Whitelist.from_dict({"whitelist": {"domains": {"137": [], "polygon": []}}})

    @pytest.mark.parametrize("data", [
        [],
        {},
        {"whitelist": {"domains": []}},
        {"whitelist": {"domains": {"abc": []}}},
        {"whitelist": {"domains": {"1": "0xabc"}}},
        {"whitelist": {"domains": {"1": [1, 2]}}},
    ])
    def test_invalid_layout(self, data):
        with pytest.raises(ArtifactError):
            Whitelist.from_dict(data)

    def test_domains_are_read_only(self, whitelist):
        with pytest.raises(TypeError):
            whitelist.domains[1] = ("0xabc",)

    def test_load_and_save(self, tmp_path):
        path = tmp_path / "whitelist.json"
        Whitelist.default().save(path)

        loaded = Whitelist.load(path)

        assert dict(loaded.domains) == dict(Whitelist.default().domains)
        assert json.loads(path.read_text())["whitelist"]["domains"]["2340"] == [
            "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
        ]

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ArtifactError, match="failed to read"):
            Whitelist.load(tmp_path / "missing.json")
