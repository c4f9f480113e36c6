"""
Outbound message generation.

Maps every route of a RouteSet to one MsgRemoteTransfer sent by the multisig.
The mapping is one to one and keeps route order, so the generated transaction
can be checked route by route with RouteVerifier.
"""

import logging
from pathlib import Path

from .errors import AddressCodecError, InvalidAmount, MissingRouteInfo
from .models import OutboundMessage, Route, RouteSet, parse_amount
from .utils.address_codec import AddressCodec
from .utils.artifacts import read_json

logger = logging.getLogger(__name__)


class MessageGenerator:
    """Builds the multisig's outbound transfers from extracted routes."""

    def __init__(self, multisig_address: str):
        self.multisig_address = multisig_address

    def generate(self, route_set: RouteSet) -> list[OutboundMessage]:
        """
        Generate one outbound message per route.

        Args:
            route_set: Routes produced by RouteExtractor

        Returns:
            Messages in route order

        Raises:
            MissingRouteInfo: If a route carries no route info
            InvalidAmount: If a route's effective amount is not an integer
            InvalidTokenId: If a token id does not decode to 32 bytes
            InvalidEncoding: If a token id or hex recipient is not valid hex
            InvalidBech32: If a bech32 recipient cannot be decoded
            AddressTooLong: If a recipient exceeds 32 bytes
        """
        messages = [self._build_message(route) for route in route_set.routes]
        logger.info(f"Generated {len(messages)} MsgRemoteTransfer messages for {self.multisig_address}")
        return messages

    def generate_from_file(self, path: str | Path) -> list[OutboundMessage]:
        """Load a routes file written by the parse command and generate messages for it."""
        return self.generate(RouteSet.from_dict(read_json(path)))

    def _build_message(self, route: Route) -> OutboundMessage:
        route_info = route.route_info
        if route_info is None:
            raise MissingRouteInfo(f"route from tx {route.source_tx_id} has no route info")

        amount = parse_amount(route.effective_amount)
        if amount is None:
            raise InvalidAmount(
                f"invalid amount {route.effective_amount!r} in route from tx {route.source_tx_id}"
            )

        try:
            token_id = AddressCodec.decode_token_id(route_info.token_id)
            recipient = AddressCodec.decode_and_pad_address(route_info.recipient)
        except AddressCodecError as e:
            # Same type, with the offending route named
            raise type(e)(f"route from tx {route.source_tx_id}: {e}") from e

        message = OutboundMessage(
            sender=self.multisig_address,
            token_id=token_id,
            destination_domain=route_info.destination_domain,
            recipient=recipient,
            amount=amount,
        )
        logger.debug(f"Route from tx {route.source_tx_id} -> {message}")
        return message
