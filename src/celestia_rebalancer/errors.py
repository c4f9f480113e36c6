"""
Exception types for the rebalancer.

Fatal errors abort the current command. Per-message problems during route
extraction are turned into diagnostics by the extractor instead of being
raised, and verification mismatches are reported in the VerifyResult.
"""


class RebalancerError(Exception):
    """Base class for all rebalancer errors."""


# Address and token id decoding

class AddressCodecError(RebalancerError, ValueError):
    """An address or token id could not be converted to its 32-byte form."""


class InvalidEncoding(AddressCodecError):
    """Input is not valid hexadecimal."""


class InvalidTokenId(AddressCodecError):
    """Token id does not decode to exactly 32 bytes."""


class InvalidBech32(AddressCodecError):
    """Input is not a valid bech32 account address."""


class AddressTooLong(AddressCodecError):
    """Decoded address does not fit into 32 bytes."""


# Routing metadata

class MetadataError(RebalancerError, ValueError):
    """Routing metadata could not be turned into a RouteInfo."""


class MalformedMetadata(MetadataError):
    """Metadata is not a JSON object with correctly typed fields."""


class MissingField(MetadataError):
    """A mandatory routing field is absent or zero-valued."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


# Whitelist policy

class WhitelistError(RebalancerError):
    """A route was rejected by the recipient whitelist."""


class UnknownDomain(WhitelistError):
    pass


class EmptyWhitelist(WhitelistError):
    pass


class NotWhitelisted(WhitelistError):
    pass


# Message generation

class GenerationError(RebalancerError):
    """A route could not be turned into an outbound message."""


class MissingRouteInfo(GenerationError):
    pass


class InvalidAmount(GenerationError, ValueError):
    pass


# Process boundary

class ArtifactError(RebalancerError):
    """A persisted routes, messages or whitelist file is malformed."""


class TransactionSourceError(RebalancerError):
    """Transactions for a height range could not be retrieved."""
