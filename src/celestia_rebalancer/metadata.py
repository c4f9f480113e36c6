"""
Routing metadata parsing.

Forwarding instructions reach the multisig in one of two places: the
custom_hook_metadata of a MsgRemoteTransfer, or the memo of a transaction
carrying a plain bank send. Both hold the same JSON document:

    {
      "destination_domain": 1380012617,
      "recipient": "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0",
      "token_id": "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
      "amount": "10000"
    }

`amount` is optional and overrides the transferred amount.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import MalformedMetadata, MissingField
from .models import BankSend, RemoteTransfer, RouteInfo


def _decode_object(metadata: str) -> Mapping[str, Any]:
    try:
        data = json.loads(metadata)
    except json.JSONDecodeError as e:
        raise MalformedMetadata(f"failed to parse routing metadata as JSON: {e}") from None
    if not isinstance(data, dict):
        raise MalformedMetadata(f"routing metadata must be a JSON object, got {type(data).__name__}")
    return data


def parse_route_metadata(metadata: str) -> RouteInfo:
    """
    Parse a routing metadata blob into a RouteInfo.

    Args:
        metadata: JSON text

    Returns:
        RouteInfo with amount set only if the blob carried one

    Raises:
        MalformedMetadata: On invalid JSON or wrongly typed fields
        MissingField: If destination_domain is 0 or recipient/token_id are empty
    """
    route_info = RouteInfo.from_dict(_decode_object(metadata))

    if route_info.destination_domain == 0:
        raise MissingField("destination_domain")
    if not route_info.recipient:
        raise MissingField("recipient")
    if not route_info.token_id:
        raise MissingField("token_id")

    return route_info


@dataclass(frozen=True, slots=True)
class FromMessageMetadata:
    """Route info carried in a message's own custom_hook_metadata."""

    raw: str

    def resolve(self) -> RouteInfo:
        """
        Raises:
            MetadataError: If the metadata is malformed or incomplete
        """
        return parse_route_metadata(self.raw)


@dataclass(frozen=True, slots=True)
class FromTransactionMemo:
    """Route info carried in the transaction memo, parsed once per transaction.

    Memo fields are taken as-is; the amount override is not honoured for
    memo-routed transfers.
    """

    raw: str
    route_info: RouteInfo

    @classmethod
    def parse(cls, memo: str) -> "FromTransactionMemo | None":
        """Parse a memo; None when it is empty or not routing JSON."""
        if not memo:
            return None
        try:
            data = RouteInfo.from_dict(_decode_object(memo))
        except MalformedMetadata:
            return None
        return cls(
            raw=memo,
            route_info=RouteInfo(
                destination_domain=data.destination_domain,
                recipient=data.recipient,
                token_id=data.token_id,
            ),
        )

    def resolve(self) -> RouteInfo:
        return self.route_info


RouteSource = FromMessageMetadata | FromTransactionMemo


def select_route_source(
    payload: RemoteTransfer | BankSend,
    memo_source: FromTransactionMemo | None,
) -> RouteSource | None:
    """
    Pick where a message's routing instructions come from.

    A remote transfer's own hook metadata always wins. Bank sends carry no
    metadata of their own and use the transaction memo. A remote transfer
    without metadata gets no source; callers fall back to the transfer's own
    destination fields.
    """
    match payload:
        case RemoteTransfer(custom_hook_metadata=metadata) if metadata:
            return FromMessageMetadata(metadata)
        case BankSend():
            return memo_source
        case _:
            return None
