"""
Cosmos SDK REST client for transaction retrieval.

Queries the tx service of a Celestia node one block height at a time and
decodes the JSON responses into Transaction records for route extraction.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..errors import TransactionSourceError
from ..models import Transaction, TxMessage

logger = logging.getLogger(__name__)

TXS_PATH = "/cosmos/tx/v1beta1/txs"


class CosmosTxClient:
    """Fetches transactions for a height range from a Cosmos SDK REST endpoint.

    Every height is queried with `tx.height=N`, paging through the results
    until the reported total is reached. Transient HTTP failures are retried
    with exponential backoff; a height that still fails aborts the whole
    range.
    """

    def __init__(
        self,
        rest_url: str,
        request_timeout: float = 30.0,
        page_limit: int = 100,
        retry_count: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            rest_url: Base URL of the node's REST API, e.g. http://localhost:1317
            request_timeout: Per-request timeout in seconds
            page_limit: Transactions requested per page
            retry_count: Retries per request after the first attempt
            base_delay: Initial backoff delay in seconds
            max_delay: Upper bound for the backoff delay
        """
        self.rest_url = rest_url.rstrip("/")
        self.request_timeout = request_timeout
        self.page_limit = page_limit
        self.retry_count = retry_count
        self.base_delay = base_delay
        self.max_delay = max_delay

    async def get_transactions(self, from_height: int, to_height: int) -> list[Transaction]:
        """
        Retrieve all transactions in an inclusive height range, in height order.

        Args:
            from_height: First block height
            to_height: Last block height

        Returns:
            Decoded transactions, ordered by height then position in block

        Raises:
            ValueError: If the range is empty or negative
            TransactionSourceError: If any height cannot be queried
        """
        if from_height < 0 or to_height < from_height:
            raise ValueError(f"invalid height range {from_height}..{to_height}")

        transactions: list[Transaction] = []
        async with httpx.AsyncClient(base_url=self.rest_url, timeout=self.request_timeout) as client:
            for height in range(from_height, to_height + 1):
                found = await self._get_transactions_at_height(client, height)
                if found:
                    logger.debug(f"Height {height}: {len(found)} transactions")
                transactions.extend(found)

        logger.info(
            f"Fetched {len(transactions)} transactions from heights {from_height}..{to_height}"
        )
        return transactions

    async def _get_transactions_at_height(
        self, client: httpx.AsyncClient, height: int
    ) -> list[Transaction]:
        transactions: list[Transaction] = []
        page = 1
        seen = 0

        while True:
            params = {
                "query": f"tx.height={height}",
                "order_by": "ORDER_BY_ASC",
                "page": page,
                "limit": self.page_limit,
            }
            data = await self._get_with_retry(client, TXS_PATH, params, height)

            tx_responses = data.get("tx_responses") or []
            txs = data.get("txs") or []
            for index, tx_response in enumerate(tx_responses):
                tx = txs[index] if index < len(txs) else None
                transaction = self._parse_transaction(tx_response, tx, height)
                if transaction is not None:
                    transactions.append(transaction)

            seen += len(tx_responses)
            total = self._parse_total(data)
            if not tx_responses or seen >= total:
                return transactions
            page += 1

    async def _get_with_retry(
        self, client: httpx.AsyncClient, path: str, params: dict[str, Any], height: int
    ) -> dict[str, Any]:
        attempt = 0
        while True:
            try:
                response = await client.get(path, params=params)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, dict):
                    raise TransactionSourceError(
                        f"unexpected response for height {height}: {type(data).__name__}"
                    )
                return data
            except (httpx.HTTPError, ValueError) as e:
                attempt += 1
                if attempt > self.retry_count:
                    raise TransactionSourceError(
                        f"failed to query transactions at height {height}: {e}"
                    ) from e
                delay = min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)
                logger.warning(
                    f"Query for height {height} failed (attempt {attempt}/{self.retry_count + 1}): {e}"
                )
                logger.info(f"Retrying in {delay} seconds...")
                await asyncio.sleep(delay)

    @staticmethod
    def _parse_total(data: Mapping[str, Any]) -> int:
        # Newer nodes report "total", older ones only pagination.total
        raw = data.get("total") or (data.get("pagination") or {}).get("total") or 0
        try:
            return int(raw)
        except (TypeError, ValueError):
            return 0

    @staticmethod
    def _parse_transaction(
        tx_response: Any, tx: Any, height: int
    ) -> Transaction | None:
        """Decode one tx_responses entry; None (with a warning) if it is malformed."""
        if not isinstance(tx_response, Mapping):
            logger.warning(f"Skipping malformed tx response at height {height}")
            return None

        tx_hash = str(tx_response.get("txhash") or "")
        decoded = tx_response.get("tx") or tx
        body = decoded.get("body") if isinstance(decoded, Mapping) else None
        if not tx_hash or not isinstance(body, Mapping):
            logger.warning(f"Skipping tx {tx_hash or '<no hash>'} at height {height}: missing hash or body")
            return None

        messages = []
        for raw in body.get("messages") or []:
            if not isinstance(raw, Mapping) or not isinstance(raw.get("@type"), str):
                logger.warning(f"Skipping tx {tx_hash} at height {height}: untyped message")
                return None
            payload = {key: value for key, value in raw.items() if key != "@type"}
            messages.append(TxMessage(type_url=raw["@type"], payload=payload))

        try:
            tx_height = int(tx_response.get("height") or height)
        except (TypeError, ValueError):
            tx_height = height

        return Transaction(
            tx_hash=tx_hash,
            height=tx_height,
            memo=str(body.get("memo") or ""),
            messages=tuple(messages),
        )
