#!/usr/bin/env python3
"""Tests for CosmosTxClient.

The REST API is replaced by a mocked httpx.AsyncClient returning canned
GetTxsEvent responses.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from celestia_rebalancer.errors import TransactionSourceError
from celestia_rebalancer.models import TYPE_URL_BANK_SEND, TYPE_URL_REMOTE_TRANSFER
from celestia_rebalancer.utils.cosmos_client import TXS_PATH, CosmosTxClient

from factories import DEPOSITOR, MULTISIG, route_metadata

CLIENT_PATH = "celestia_rebalancer.utils.cosmos_client.httpx.AsyncClient"
SLEEP_PATH = "celestia_rebalancer.utils.cosmos_client.asyncio.sleep"


def tx_entry(tx_hash: str, height: int, memo: str = "", messages: list | None = None) -> dict:
    body = {"messages": messages or [], "memo": memo}
    return {"txhash": tx_hash, "height": str(height), "tx": {"@type": "/cosmos.tx.v1beta1.Tx", "body": body}}


def txs_response(*entries: dict, total: int | None = None) -> MagicMock:
    response = MagicMock()
    response.raise_for_status = MagicMock()
    response.json = MagicMock(return_value={
        "txs": [entry["tx"] for entry in entries],
        "tx_responses": list(entries),
        "pagination": None,
        "total": str(len(entries) if total is None else total),
    })
    return response


def mock_client_class(mock_class: MagicMock, responses: list) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(side_effect=responses)
    mock_class.return_value.__aenter__.return_value = mock_client
    return mock_client


SEND = {
    "@type": TYPE_URL_BANK_SEND,
    "from_address": DEPOSITOR,
    "to_address": MULTISIG,
    "amount": [{"denom": "utia", "amount": "1000"}],
}

TRANSFER = {
    "@type": TYPE_URL_REMOTE_TRANSFER,
    "sender": MULTISIG,
    "token_id": "0x" + "ab" * 32,
    "destination_domain": 137,
    "recipient": "0x" + "00" * 12 + "cd" * 20,
    "amount": "5",
    "custom_hook_metadata": "",
}


class TestCosmosTxClient:
    """Tests for transaction retrieval."""

    @pytest.mark.asyncio
    @patch(CLIENT_PATH)
    async def test_queries_each_height(self, mock_class):
        mock_client = mock_client_class(mock_class, [
            txs_response(tx_entry("A1", 10, memo=route_metadata(), messages=[SEND])),
            txs_response(),
            txs_response(tx_entry("C1", 12, messages=[TRANSFER]), tx_entry("C2", 12)),
        ])
        client = CosmosTxClient("http://localhost:1317/", request_timeout=5)

        transactions = await client.get_transactions(10, 12)

        mock_class.assert_called_once_with(base_url="http://localhost:1317", timeout=5)
        assert mock_client.get.await_count == 3
        first_call = mock_client.get.await_args_list[0]
        assert first_call.args == (TXS_PATH,)
        assert first_call.kwargs["params"]["query"] == "tx.height=10"

        assert [tx.tx_hash for tx in transactions] == ["A1", "C1", "C2"]
        assert [tx.height for tx in transactions] == [10, 12, 12]
        assert transactions[0].memo == route_metadata()
        send = transactions[0].messages[0]
        assert send.type_url == TYPE_URL_BANK_SEND
        assert "@type" not in send.payload
        assert send.decode().to_address == MULTISIG
        assert transactions[1].messages[0].decode().destination_domain == 137

    @pytest.mark.asyncio
    @patch(CLIENT_PATH)
    async def test_pagination(self, mock_class):
        mock_client = mock_client_class(mock_class, [
            txs_response(tx_entry("P1", 5), tx_entry("P2", 5), total=3),
            txs_response(tx_entry("P3", 5), total=3),
        ])
        client = CosmosTxClient("http://localhost:1317", page_limit=2)

        transactions = await client.get_transactions(5, 5)

        assert [tx.tx_hash for tx in transactions] == ["P1", "P2", "P3"]
        pages = [call.kwargs["params"]["page"] for call in mock_client.get.await_args_list]
        assert pages == [1, 2]

    @pytest.mark.asyncio
    @patch(SLEEP_PATH, new_callable=AsyncMock)
    @patch(CLIENT_PATH)
    async def test_retries_then_succeeds(self, mock_class, mock_sleep):
        mock_client = mock_client_class(mock_class, [
            httpx.ConnectError("connection refused"),
            txs_response(tx_entry("R1", 1)),
        ])
        client = CosmosTxClient("http://localhost:1317", retry_count=2, base_delay=0.5)

        transactions = await client.get_transactions(1, 1)

        assert [tx.tx_hash for tx in transactions] == ["R1"]
        assert mock_client.get.await_count == 2
        mock_sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    @patch(SLEEP_PATH, new_callable=AsyncMock)
    @patch(CLIENT_PATH)
    async def test_gives_up_after_retries(self, mock_class, mock_sleep):
        mock_client_class(mock_class, [httpx.ConnectError("down")] * 3)
        client = CosmosTxClient("http://localhost:1317", retry_count=2, base_delay=1.0)

        with pytest.raises(TransactionSourceError, match="height 7"):
            await client.get_transactions(7, 9)

        assert [call.args[0] for call in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    @patch(SLEEP_PATH, new_callable=AsyncMock)
    @patch(CLIENT_PATH)
    async def test_http_status_error_retried(self, mock_class, mock_sleep):
        failing = MagicMock()
        request = httpx.Request("GET", "http://localhost:1317" + TXS_PATH)
        failing.raise_for_status = MagicMock(side_effect=httpx.HTTPStatusError(
            "500", request=request, response=httpx.Response(500, request=request)
        ))
        mock_client_class(mock_class, [failing])
        client = CosmosTxClient("http://localhost:1317", retry_count=0)

        with pytest.raises(TransactionSourceError):
            await client.get_transactions(1, 1)

        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @patch(CLIENT_PATH)
    async def test_malformed_entries_skipped(self, mock_class):
        response = txs_response(tx_entry("OK", 3, messages=[SEND]))
        payload = response.json.return_value
        payload["tx_responses"] = [
            "garbage",
            {"txhash": "NOBODY", "height": "3"},
            {"txhash": "UNTYPED", "height": "3", "tx": {"body": {"messages": [{"amount": "1"}]}}},
        ] + payload["tx_responses"]
        payload["txs"] = [None, None, None] + payload["txs"]
        payload["total"] = "4"
        mock_client_class(mock_class, [response])
        client = CosmosTxClient("http://localhost:1317")

        transactions = await client.get_transactions(3, 3)

        assert [tx.tx_hash for tx in transactions] == ["OK"]

    @pytest.mark.asyncio
    async def test_invalid_range(self):
        client = CosmosTxClient("http://localhost:1317")

        with pytest.raises(ValueError, match="invalid height range"):
            await client.get_transactions(10, 9)
