"""
Recipient whitelist.

The whitelist file maps Hyperlane domains to the recipients routes may
forward to:

    {
      "whitelist": {
        "domains": {
          "2340": ["0x742d35cc6634c0532925a3b844bc9e7595f0beb0"],
          "polygon": ["0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"]
        }
      }
    }

Domain keys are decimal domain ids or well-known chain names. Addresses are
compared case-insensitively.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .domains import resolve_domain
from .errors import ArtifactError, EmptyWhitelist, NotWhitelisted, UnknownDomain
from .models import RouteInfo
from .utils.artifacts import read_json, write_json

logger = logging.getLogger(__name__)


def normalize_address(address: str) -> str:
    """Trim and lowercase an address; a 0x prefix is kept."""
    return address.strip().lower()


@dataclass(frozen=True, slots=True)
class Whitelist:
    """Approved recipients per destination domain.

    Attributes:
        domains: Domain id -> normalized recipient addresses
    """

    domains: Mapping[int, tuple[str, ...]]

    def __post_init__(self) -> None:
        """Normalize addresses and freeze the mapping."""
        normalized = {
            domain: tuple(normalize_address(address) for address in addresses)
            for domain, addresses in self.domains.items()
        }
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "domains", MappingProxyType(normalized))

    def validate(self, route_info: RouteInfo) -> None:
        """
        Check that a route's recipient is approved for its destination domain.

        Raises:
            UnknownDomain: If the domain has no whitelist entry
            EmptyWhitelist: If the domain's entry lists no addresses
            NotWhitelisted: If the recipient is not listed for the domain
        """
        domain = route_info.destination_domain
        addresses = self.domains.get(domain)
        if addresses is None:
            raise UnknownDomain(f"domain {domain} is not configured in whitelist")
        if not addresses:
            raise EmptyWhitelist(f"domain {domain} has no whitelisted addresses")
        if normalize_address(route_info.recipient) not in addresses:
            raise NotWhitelisted(
                f"recipient {route_info.recipient} is not whitelisted for domain {domain}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "whitelist": {
                "domains": {str(domain): list(addresses) for domain, addresses in self.domains.items()}
            }
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Whitelist":
        """
        Build a whitelist from a decoded configuration document.

        Raises:
            ArtifactError: If the document does not have the expected layout
        """
        if not isinstance(data, Mapping):
            raise ArtifactError("whitelist config must be a JSON object")
        section = data.get("whitelist") or {}
        raw_domains = section.get("domains") if isinstance(section, Mapping) else None
        if not isinstance(raw_domains, Mapping):
            raise ArtifactError("whitelist config must contain a whitelist.domains object")

        domains: dict[int, tuple[str, ...]] = {}
        for key, addresses in raw_domains.items():
            try:
                domain = resolve_domain(key)
            except ValueError as e:
                raise ArtifactError(f"invalid whitelist domain {key!r}: {e}") from None
            if not isinstance(addresses, list) or not all(isinstance(a, str) for a in addresses):
                raise ArtifactError(f"whitelist for domain {key} must be a list of address strings")
            if domain in domains:
                raise ArtifactError(f"domain {domain} is listed more than once in whitelist")
            domains[domain] = tuple(addresses)

        return cls(domains=domains)

    @classmethod
    def load(cls, path: str | Path) -> "Whitelist":
        """Load a whitelist from a JSON file."""
        whitelist = cls.from_dict(read_json(path))
        logger.info(f"Loaded whitelist from {path} with {len(whitelist.domains)} domains configured")
        return whitelist

    def save(self, path: str | Path) -> None:
        write_json(path, self.to_dict())

    @classmethod
    def default(cls) -> "Whitelist":
        """Example whitelist; replace with production addresses before use."""
        return cls(
            domains={
                2340: ("0x742d35cc6634c0532925a3b844bc9e7595f0beb0",),
                1: ("0x1234567890123456789012345678901234567890",),
                137: ("0xabcdefabcdefabcdefabcdefabcdefabcdefabcd",),
            }
        )
