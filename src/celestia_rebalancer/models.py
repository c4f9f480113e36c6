"""Data models for the rebalancer.

This module provides immutable data classes for routes, outbound Hyperlane
messages and verification results, plus the decoded transaction shapes
consumed from the chain. Each persisted model converts to and from the JSON
layout of the routes and transaction files exchanged between commands.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hexbytes import HexBytes

from .errors import AddressCodecError, ArtifactError, MalformedMetadata
from .utils.address_codec import AddressCodec

TYPE_URL_REMOTE_TRANSFER = "/hyperlane.warp.v1.MsgRemoteTransfer"
TYPE_URL_BANK_SEND = "/cosmos.bank.v1beta1.MsgSend"

UINT32_MAX = 2**32 - 1


def parse_uint32(value: Any, name: str) -> int:
    """Coerce a JSON number (or decimal string) to a uint32.

    Raises:
        ValueError: If the value is not an integer in uint32 range
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an unsigned integer, got {value!r}")
    if isinstance(value, str) and value.isascii() and value.isdigit():
        value = int(value)
    if not isinstance(value, int) or not 0 <= value <= UINT32_MAX:
        raise ValueError(f"{name} must be an unsigned 32-bit integer, got {value!r}")
    return value


def parse_amount(value: str) -> int | None:
    """Parse a base-unit amount string; None if it is not a non-negative integer."""
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return None


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """Routing instructions recovered from hook metadata or a memo.

    Attributes:
        destination_domain: Hyperlane domain of the destination chain
        recipient: Final recipient, 0x hex or bech32
        token_id: Hyperlane token id, hex
        amount: Optional override of the transferred amount
    """

    destination_domain: int
    recipient: str
    token_id: str
    amount: str | None = None

    def is_valid(self) -> bool:
        """True when domain, recipient and token id are all set."""
        return self.destination_domain != 0 and bool(self.recipient) and bool(self.token_id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "destination_domain": self.destination_domain,
            "recipient": self.recipient,
            "token_id": self.token_id,
        }
        if self.amount:
            data["amount"] = self.amount
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteInfo":
        """Build a RouteInfo from decoded JSON.

        Absent or null fields take their zero value, the way the metadata
        format has always been read; required-field checks are left to callers.

        Raises:
            MalformedMetadata: If a field has the wrong JSON type
        """
        domain = data.get("destination_domain")
        recipient = data.get("recipient")
        token_id = data.get("token_id")
        amount = data.get("amount")

        try:
            domain = 0 if domain is None else parse_uint32(domain, "destination_domain")
        except ValueError as e:
            raise MalformedMetadata(str(e)) from None

        for name, value in (("recipient", recipient), ("token_id", token_id), ("amount", amount)):
            if value is not None and not isinstance(value, str):
                raise MalformedMetadata(f"{name} must be a string, got {value!r}")

        return cls(
            destination_domain=domain,
            recipient=recipient or "",
            token_id=token_id or "",
            amount=amount or None,
        )


@dataclass(frozen=True, slots=True)
class Route:
    """One forwarding instruction derived from one inbound transfer.

    Attributes:
        source_tx_id: Hash of the transaction the route came from
        source_height: Block height of that transaction
        sender: Sender of the originating transfer
        amount: Amount to forward, base units
        denom: Denomination of the amount
        route_info: Parsed routing instructions
        raw_metadata: Metadata or memo text the route info was parsed from
    """

    source_tx_id: str
    source_height: int
    sender: str
    amount: str
    denom: str
    route_info: RouteInfo | None
    raw_metadata: str = ""

    @property
    def effective_amount(self) -> str:
        """The route info's amount override if present, else the route amount."""
        if self.route_info is not None and self.route_info.amount:
            return self.route_info.amount
        return self.amount

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "tx_hash": self.source_tx_id,
            "block_height": self.source_height,
            "from": self.sender,
            "amount": self.amount,
            "denom": self.denom,
            "custom_hook_metadata": self.raw_metadata,
        }
        if self.route_info is not None:
            data["route_info"] = self.route_info.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Route":
        raw_info = data.get("route_info")
        if raw_info is not None and not isinstance(raw_info, Mapping):
            raise ArtifactError(f"route_info must be an object, got {raw_info!r}")
        try:
            route_info = RouteInfo.from_dict(raw_info) if raw_info is not None else None
        except MalformedMetadata as e:
            raise ArtifactError(f"invalid route_info in route from tx {data.get('tx_hash')}: {e}") from e

        height = data.get("block_height", 0)
        if isinstance(height, bool) or not isinstance(height, int):
            raise ArtifactError(f"block_height must be an integer, got {height!r}")

        return cls(
            source_tx_id=str(data.get("tx_hash", "")),
            source_height=height,
            sender=str(data.get("from", "")),
            amount=str(data.get("amount", "")),
            denom=str(data.get("denom", "")),
            route_info=route_info,
            raw_metadata=str(data.get("custom_hook_metadata") or ""),
        )


@dataclass(frozen=True, slots=True)
class RouteSet:
    """Routes extracted for one multisig over a height range."""

    routes: tuple[Route, ...]
    total_amount: str
    multisig_address: str

    def __len__(self) -> int:
        return len(self.routes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "routes": [route.to_dict() for route in self.routes],
            "total_amount": self.total_amount,
            "multisig_address": self.multisig_address,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "RouteSet":
        """Load a route set from a decoded routes file.

        Raises:
            ArtifactError: If the document is not a valid route set
        """
        if not isinstance(data, Mapping):
            raise ArtifactError("routes file must contain a JSON object")
        raw_routes = data.get("routes") or []
        if not isinstance(raw_routes, list):
            raise ArtifactError("routes must be a list")
        for raw in raw_routes:
            if not isinstance(raw, Mapping):
                raise ArtifactError(f"route entries must be objects, got {raw!r}")
        return cls(
            routes=tuple(Route.from_dict(raw) for raw in raw_routes),
            total_amount=str(data.get("total_amount", "0")),
            multisig_address=str(data.get("multisig_address", "")),
        )


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """A Hyperlane MsgRemoteTransfer sent by the multisig.

    Attributes:
        sender: Multisig address sending the transfer
        token_id: 32-byte Hyperlane token id
        destination_domain: Hyperlane domain of the destination chain
        recipient: 32-byte canonical recipient
        amount: Amount in base units
        hook_metadata: Optional custom hook metadata
    """

    sender: str
    token_id: HexBytes
    destination_domain: int
    recipient: HexBytes
    amount: int
    hook_metadata: str = ""

    def __str__(self) -> str:
        return (
            f"MsgRemoteTransfer(domain={self.destination_domain}, "
            f"recipient={AddressCodec.to_canonical_hex(self.recipient)}, "
            f"amount={self.amount})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "@type": TYPE_URL_REMOTE_TRANSFER,
            "sender": self.sender,
            "token_id": AddressCodec.to_canonical_hex(self.token_id),
            "destination_domain": self.destination_domain,
            "recipient": AddressCodec.to_canonical_hex(self.recipient),
            "amount": str(self.amount),
            "custom_hook_metadata": self.hook_metadata,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutboundMessage":
        """Decode a MsgRemoteTransfer from its JSON form.

        Raises:
            ArtifactError: If any field is missing or malformed
        """
        try:
            amount = parse_amount(str(data["amount"]))
            if amount is None:
                raise ValueError(f"invalid amount {data['amount']!r}")
            return cls(
                sender=str(data.get("sender", "")),
                token_id=AddressCodec.decode_token_id(str(data["token_id"])),
                destination_domain=parse_uint32(data["destination_domain"], "destination_domain"),
                recipient=AddressCodec.decode_and_pad_address(str(data["recipient"])),
                amount=amount,
                hook_metadata=str(data.get("custom_hook_metadata") or ""),
            )
        except KeyError as e:
            raise ArtifactError(f"MsgRemoteTransfer is missing field {e}") from None
        except (AddressCodecError, ValueError) as e:
            raise ArtifactError(f"invalid MsgRemoteTransfer: {e}") from e


@dataclass(slots=True)
class VerifyResult:
    """Outcome of checking candidate messages against a route set.

    Validity is derived rather than stored, so it always agrees with the
    error list and the matched count.
    """

    total_routes: int
    matched_count: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors and self.matched_count == self.total_routes

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "matched_count": self.matched_count,
            "total_routes": self.total_routes,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class Severity(Enum):
    """Severity of an extraction diagnostic."""
    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A non-fatal finding reported by route extraction."""
    severity: Severity
    message: str
    tx_hash: str | None = None

    def __str__(self) -> str:
        return self.message


# Decoded transaction source records


@dataclass(frozen=True, slots=True)
class RemoteTransfer:
    """Decoded /hyperlane.warp.v1.MsgRemoteTransfer payload."""

    sender: str
    recipient: str
    amount: str
    destination_domain: int
    token_id: str
    custom_hook_metadata: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RemoteTransfer":
        """
        Raises:
            ValueError: If a required field is missing or malformed
        """
        try:
            return cls(
                sender=str(payload["sender"]),
                recipient=str(payload.get("recipient") or "").lower(),
                amount=str(payload.get("amount") or "0"),
                destination_domain=parse_uint32(payload.get("destination_domain") or 0, "destination_domain"),
                token_id=str(payload.get("token_id") or "").lower(),
                custom_hook_metadata=str(payload.get("custom_hook_metadata") or ""),
            )
        except KeyError as e:
            raise ValueError(f"MsgRemoteTransfer is missing field {e}") from None


@dataclass(frozen=True, slots=True)
class BankSend:
    """Decoded /cosmos.bank.v1beta1.MsgSend payload, first coin only."""

    from_address: str
    to_address: str
    amount: str
    denom: str

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BankSend":
        """
        Raises:
            ValueError: If an address is missing or the coin list is malformed
        """
        try:
            coins = payload.get("amount") or []
            first = coins[0] if coins else {}
            return cls(
                from_address=str(payload["from_address"]),
                to_address=str(payload["to_address"]),
                amount=str(first.get("amount") or ""),
                denom=str(first.get("denom") or ""),
            )
        except KeyError as e:
            raise ValueError(f"MsgSend is missing field {e}") from None
        except (AttributeError, TypeError) as e:
            raise ValueError(f"MsgSend has a malformed amount: {e}") from None


@dataclass(frozen=True, slots=True)
class TxMessage:
    """A typed sub-message of a transaction."""

    type_url: str
    payload: Mapping[str, Any]

    def decode(self) -> RemoteTransfer | BankSend | None:
        """Decode into a recognised shape; None for other message types.

        Raises:
            ValueError: If a recognised message cannot be decoded
        """
        match self.type_url:
            case "/hyperlane.warp.v1.MsgRemoteTransfer":
                return RemoteTransfer.from_payload(self.payload)
            case "/cosmos.bank.v1beta1.MsgSend":
                return BankSend.from_payload(self.payload)
            case _:
                return None


@dataclass(frozen=True, slots=True)
class Transaction:
    """A transaction as delivered by the transaction source."""

    tx_hash: str
    height: int
    memo: str
    messages: tuple[TxMessage, ...]

    def __str__(self) -> str:
        return f"Transaction(hash={self.tx_hash[:10]}..., height={self.height}, messages={len(self.messages)})"
