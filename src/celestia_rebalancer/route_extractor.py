"""Route extraction.

Turns decoded transactions into a RouteSet: finds transfers involving the
multisig, resolves their routing instructions from hook metadata or the
transaction memo, applies the whitelist and totals the amounts to forward.

Extraction never raises for a single bad message. Every skipped message is
reported as a Diagnostic so one malformed submission cannot abort a whole
height range.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import MetadataError, WhitelistError
from .metadata import FromMessageMetadata, FromTransactionMemo, select_route_source
from .models import (
    BankSend,
    Diagnostic,
    RemoteTransfer,
    Route,
    RouteInfo,
    RouteSet,
    Severity,
    Transaction,
    parse_amount,
)
from .utils.address_codec import AddressCodec
from .whitelist import Whitelist

DEFAULT_DENOM = "utia"


@dataclass(slots=True)
class ExtractionStats:
    """Counters for one extraction run."""
    transactions_scanned: int = 0
    messages_scanned: int = 0
    routes_emitted: int = 0
    messages_skipped: int = 0
    whitelist_rejections: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "transactions_scanned": self.transactions_scanned,
            "messages_scanned": self.messages_scanned,
            "routes_emitted": self.routes_emitted,
            "messages_skipped": self.messages_skipped,
            "whitelist_rejections": self.whitelist_rejections,
        }


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Routes found plus the diagnostics explaining every skipped message."""
    route_set: RouteSet
    diagnostics: tuple[Diagnostic, ...] = ()
    stats: ExtractionStats = field(default_factory=ExtractionStats)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]


class RouteExtractor:
    """Extracts forwarding routes for one multisig.

    Two message shapes are recognised:
    - MsgRemoteTransfer sent by the multisig, routed by its own
      custom_hook_metadata or, without metadata, by its own destination fields
    - MsgSend to the multisig, routed by the transaction memo
    """

    def __init__(
        self,
        multisig_address: str,
        whitelist: Whitelist | None = None,
        denom: str = DEFAULT_DENOM,
    ) -> None:
        """Initialize the extractor.

        Args:
            multisig_address: Address whose transfers are inspected
            whitelist: Optional recipient whitelist; None means no restriction
            denom: Denomination tag recorded on every route
        """
        self.multisig_address = multisig_address
        self.whitelist = whitelist
        self.denom = denom

    def extract(self, transactions: Iterable[Transaction]) -> ExtractionResult:
        """
        Extract routes from transactions, in transaction and message order.

        Args:
            transactions: Decoded transactions, already ordered by height

        Returns:
            ExtractionResult with the route set, diagnostics and counters
        """
        routes: list[Route] = []
        diagnostics: list[Diagnostic] = []
        stats = ExtractionStats()
        total = 0

        for tx in transactions:
            stats.transactions_scanned += 1
            memo_source = FromTransactionMemo.parse(tx.memo)

            for index, message in enumerate(tx.messages):
                stats.messages_scanned += 1
                where = f"tx {tx.tx_hash} message {index}"

                try:
                    payload = message.decode()
                except ValueError as e:
                    self._skip(diagnostics, stats, tx, f"{where}: cannot decode {message.type_url}: {e}")
                    continue

                if payload is None or not self._involves_multisig(payload):
                    continue

                if isinstance(payload, BankSend):
                    # Plain deposits without a routing memo are not routes
                    if memo_source is None:
                        continue
                    if not payload.amount:
                        self._skip(diagnostics, stats, tx, f"{where}: bank send carries no coins")
                        continue

                route_info, raw_metadata, reason = self._resolve(payload, memo_source)
                if route_info is None:
                    self._skip(diagnostics, stats, tx, f"{where}: {reason}")
                    continue

                if self.whitelist is not None:
                    try:
                        self.whitelist.validate(route_info)
                    except WhitelistError as e:
                        stats.whitelist_rejections += 1
                        self._skip(diagnostics, stats, tx, f"{where}: failed whitelist validation: {e}")
                        continue

                amount = route_info.amount or payload.amount
                route = Route(
                    source_tx_id=tx.tx_hash,
                    source_height=tx.height,
                    sender=self._sender_of(payload),
                    amount=amount,
                    denom=self.denom,
                    route_info=route_info,
                    raw_metadata=raw_metadata,
                )
                routes.append(route)
                stats.routes_emitted += 1

                parsed = parse_amount(amount)
                if parsed is None:
                    diagnostics.append(Diagnostic(
                        Severity.INFO,
                        f"{where}: amount {amount!r} is not an integer, excluded from total",
                        tx.tx_hash,
                    ))
                else:
                    total += parsed

        route_set = RouteSet(
            routes=tuple(routes),
            total_amount=str(total),
            multisig_address=self.multisig_address,
        )
        return ExtractionResult(route_set=route_set, diagnostics=tuple(diagnostics), stats=stats)

    @staticmethod
    def _skip(
        diagnostics: list[Diagnostic], stats: ExtractionStats, tx: Transaction, message: str
    ) -> None:
        stats.messages_skipped += 1
        diagnostics.append(Diagnostic(Severity.WARNING, message, tx.tx_hash))

    def _involves_multisig(self, payload: RemoteTransfer | BankSend) -> bool:
        match payload:
            case RemoteTransfer(sender=sender):
                return AddressCodec.same_address(sender, self.multisig_address)
            case BankSend(to_address=to_address):
                return AddressCodec.same_address(to_address, self.multisig_address)
        return False

    @staticmethod
    def _sender_of(payload: RemoteTransfer | BankSend) -> str:
        return payload.sender if isinstance(payload, RemoteTransfer) else payload.from_address

    @staticmethod
    def _resolve(
        payload: RemoteTransfer | BankSend,
        memo_source: FromTransactionMemo | None,
    ) -> tuple[RouteInfo | None, str, str]:
        """Resolve route info for one message.

        Returns:
            (route_info, raw_metadata, skip_reason); route_info is None when
            the message must be skipped
        """
        source = select_route_source(payload, memo_source)

        match source:
            case FromMessageMetadata(raw=raw):
                try:
                    return source.resolve(), raw, ""
                except MetadataError as e:
                    return None, raw, f"invalid custom_hook_metadata: {e}"
            case FromTransactionMemo(raw=raw):
                route_info = source.resolve()
                if not route_info.is_valid():
                    return None, raw, "memo has no routing information"
                return route_info, raw, ""

        if isinstance(payload, RemoteTransfer):
            route_info = RouteInfo(
                destination_domain=payload.destination_domain,
                recipient=payload.recipient,
                token_id=payload.token_id,
            )
            if route_info.is_valid():
                return route_info, "", ""

        return None, "", "no routing information"
