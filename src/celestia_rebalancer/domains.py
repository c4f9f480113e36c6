"""Well-known Hyperlane domain ids."""

from typing import Any

from .models import parse_uint32

# Chain name -> Hyperlane domain id. Whitelist files and CLI output may use
# either form.
DEFAULT_DOMAINS: dict[str, int] = {
    "ethereum": 1,
    "polygon": 137,
    "avalanche": 43114,
    "bsc": 56,
    "arbitrum": 42161,
    "optimism": 10,
    "moonbeam": 1284,
    "gnosis": 100,
    "celo": 42220,
    "scroll": 534352,
    "eden": 2340,
    "celestia": 69420,
}

_NAMES_BY_DOMAIN = {domain: name for name, domain in DEFAULT_DOMAINS.items()}


def resolve_domain(value: Any) -> int:
    """
    Resolve a domain id given as an int, a decimal string or a chain name.

    Raises:
        ValueError: If the value is neither a uint32 nor a known chain name
    """
    if isinstance(value, str):
        name = value.strip().lower()
        if name in DEFAULT_DOMAINS:
            return DEFAULT_DOMAINS[name]
        value = value.strip()
    try:
        return parse_uint32(value, "domain")
    except ValueError:
        raise ValueError(
            f"Unknown domain: {value!r}. Use a numeric domain id or one of: "
            f"{', '.join(sorted(DEFAULT_DOMAINS))}"
        ) from None


def domain_label(domain: int) -> str:
    """Human-readable label, e.g. '137 (polygon)'."""
    name = _NAMES_BY_DOMAIN.get(domain)
    return f"{domain} ({name})" if name else str(domain)
