"""Builders for transactions and routing metadata used across the tests."""

import json

from celestia_rebalancer.models import Transaction, TxMessage, TYPE_URL_BANK_SEND, TYPE_URL_REMOTE_TRANSFER
from celestia_rebalancer.utils.address_codec import AddressCodec

TOKEN_ID = "0x" + "1234567890abcdef" * 4
EVM_RECIPIENT = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"
POLYGON_RECIPIENT = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
MULTISIG = AddressCodec.encode_bech32(bytes(range(1, 21)), "celestia")
DEPOSITOR = AddressCodec.encode_bech32(bytes(range(21, 41)), "celestia")


def route_metadata(domain=1380012617, recipient=EVM_RECIPIENT, token_id=TOKEN_ID, amount=None) -> str:
    data = {"destination_domain": domain, "recipient": recipient, "token_id": token_id}
    if amount is not None:
        data["amount"] = amount
    return json.dumps(data)


def remote_transfer(
    sender=MULTISIG,
    amount="1000000",
    metadata="",
    domain=0,
    recipient="",
    token_id="",
) -> TxMessage:
    return TxMessage(
        type_url=TYPE_URL_REMOTE_TRANSFER,
        payload={
            "sender": sender,
            "token_id": token_id,
            "destination_domain": domain,
            "recipient": recipient,
            "amount": amount,
            "custom_hook_metadata": metadata,
        },
    )


def bank_send(from_address=DEPOSITOR, to_address=MULTISIG, amount="500000", denom="utia") -> TxMessage:
    return TxMessage(
        type_url=TYPE_URL_BANK_SEND,
        payload={
            "from_address": from_address,
            "to_address": to_address,
            "amount": [{"denom": denom, "amount": amount}],
        },
    )


def make_tx(tx_hash: str, *messages: TxMessage, height: int = 100, memo: str = "") -> Transaction:
    return Transaction(tx_hash=tx_hash, height=height, memo=memo, messages=tuple(messages))
