"""
Celestia rebalancer package.

Operator tooling for Hyperlane multisig rebalancing on Celestia: extract
routes from transfers to the multisig, generate the outbound transfers and
verify them before signing.
"""

from .message_generator import MessageGenerator
from .models import OutboundMessage, Route, RouteInfo, RouteSet, VerifyResult
from .route_extractor import RouteExtractor
from .verifier import RouteVerifier
from .whitelist import Whitelist

__all__ = [
    "MessageGenerator",
    "OutboundMessage",
    "Route",
    "RouteExtractor",
    "RouteInfo",
    "RouteSet",
    "RouteVerifier",
    "VerifyResult",
    "Whitelist",
]
__version__ = "0.1.0"
