"""
Transaction verification.

Re-checks an unsigned multisig transaction against the routes it was
generated from, so signers can confirm every route is paid exactly once
before signing.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .errors import AddressCodecError, ArtifactError
from .models import TYPE_URL_REMOTE_TRANSFER, OutboundMessage, Route, RouteSet, VerifyResult
from .utils.address_codec import AddressCodec
from .utils.artifacts import extract_messages, read_json

logger = logging.getLogger(__name__)


class RouteVerifier:
    """Matches outbound messages to routes one by one."""

    def matches(self, message: OutboundMessage, route: Route) -> bool:
        """
        Check whether a message pays out a route.

        Domain, effective amount, token id and canonical recipient must all
        agree. A route recipient that cannot be decoded never matches.
        """
        route_info = route.route_info
        if route_info is None:
            return False

        if message.destination_domain != route_info.destination_domain:
            return False

        if str(message.amount) != route.effective_amount:
            return False

        expected_token = route_info.token_id.lower().removeprefix("0x")
        if bytes(message.token_id).hex() != expected_token:
            return False

        try:
            expected_recipient = AddressCodec.decode_and_pad_address(route_info.recipient)
        except AddressCodecError as e:
            logger.debug(f"Route from tx {route.source_tx_id} has an undecodable recipient: {e}")
            return False

        return bytes(message.recipient) == bytes(expected_recipient)

    def verify(self, route_set: RouteSet, candidates: Any) -> VerifyResult:
        """
        Verify candidate messages against a route set.

        Args:
            route_set: Routes the transaction is supposed to pay
            candidates: Either decoded OutboundMessages or a serialized
                transaction/message container as read from disk

        Returns:
            VerifyResult with every mismatch listed; never raises for mismatches

        Raises:
            ArtifactError: If a serialized container holds no message list
        """
        result = VerifyResult(total_routes=len(route_set))
        messages = self._decode_candidates(candidates, result)

        for message in messages:
            if route_set.multisig_address and not AddressCodec.same_address(
                message.sender, route_set.multisig_address
            ):
                result.warnings.append(
                    f"message {message} is sent by {message.sender}, "
                    f"not the multisig {route_set.multisig_address}"
                )

        if len(messages) != len(route_set):
            result.errors.append(
                f"transaction has {len(messages)} MsgRemoteTransfer messages, "
                f"but routes has {len(route_set)} entries"
            )

        # Each message pays at most one route
        used: set[int] = set()
        for index, route in enumerate(route_set.routes):
            if route.route_info is None:
                result.errors.append(f"route {index} from tx {route.source_tx_id} has no routing info")
                continue

            match_index = next(
                (
                    i for i, message in enumerate(messages)
                    if i not in used and self.matches(message, route)
                ),
                None,
            )
            if match_index is not None:
                used.add(match_index)
                result.matched_count += 1
            else:
                result.errors.append(
                    f"no matching MsgRemoteTransfer found for route {index} "
                    f"(tx: {route.source_tx_id}, domain: {route.route_info.destination_domain}, "
                    f"amount: {route.effective_amount})"
                )

        logger.info(f"Verification matched {result.matched_count}/{result.total_routes} routes")
        return result

    def verify_from_files(self, routes_path: str | Path, tx_path: str | Path) -> VerifyResult:
        """Verify a transaction file against a routes file."""
        route_set = RouteSet.from_dict(read_json(routes_path))
        return self.verify(route_set, read_json(tx_path))

    @staticmethod
    def _decode_candidates(candidates: Any, result: VerifyResult) -> list[OutboundMessage]:
        if isinstance(candidates, Sequence) and all(isinstance(c, OutboundMessage) for c in candidates):
            return list(candidates)

        messages = []
        for index, raw in enumerate(extract_messages(candidates)):
            if raw.get("@type") != TYPE_URL_REMOTE_TRANSFER:
                continue
            try:
                messages.append(OutboundMessage.from_dict(raw))
            except ArtifactError as e:
                result.warnings.append(f"skipping message {index}: {e}")
        return messages


def format_result(result: VerifyResult) -> str:
    """Render a verification result for the terminal."""
    status = "PASSED" if result.valid else "FAILED"
    mark = "✓" if result.valid else "✗"
    lines = [
        f"{mark} Transaction verification {status}",
        f"  Matched {result.matched_count}/{result.total_routes} routes",
    ]

    if result.errors:
        lines.append("")
        lines.append("Errors:")
        lines.extend(f"  - {error}" for error in result.errors)

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"  - {warning}" for warning in result.warnings)

    return "\n".join(lines)
