"""
Address encoding utilities for the rebalancer.

Hyperlane messages carry recipients and token ids as fixed 32-byte values.
This module converts between those canonical values and the forms operators
write by hand: 0x-prefixed hex (EVM style) and bech32 account addresses
(Cosmos style).
"""

import logging
import re
from typing import Union

import bech32
from hexbytes import HexBytes
from web3 import Web3

from ..errors import AddressTooLong, InvalidBech32, InvalidEncoding, InvalidTokenId

logger = logging.getLogger(__name__)

CANONICAL_LENGTH = 32
COSMOS_ADDRESS_LENGTH = 20

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


class AddressCodec:
    """Conversions between human-readable addresses and 32-byte canonical values."""

    @staticmethod
    def _decode_hex(value: str) -> bytes:
        """
        Decode a hex string with an optional 0x prefix.

        Odd-length input is rejected rather than zero-extended.

        Raises:
            InvalidEncoding: If the input is not valid hex
        """
        digits = value[2:] if value.startswith("0x") else value
        if len(digits) % 2 or not _HEX_RE.match(digits):
            raise InvalidEncoding(f"not a valid hex string: {value!r}")
        return Web3.to_bytes(hexstr=digits) if digits else b""

    @staticmethod
    def _pad(raw: bytes) -> HexBytes:
        if len(raw) > CANONICAL_LENGTH:
            raise AddressTooLong(
                f"address is {len(raw)} bytes, at most {CANONICAL_LENGTH} allowed"
            )
        return HexBytes(raw.rjust(CANONICAL_LENGTH, b"\x00"))

    @staticmethod
    def decode_token_id(value: str) -> HexBytes:
        """
        Decode a Hyperlane token id.

        Args:
            value: Hex string, with or without 0x prefix

        Returns:
            The 32-byte token id

        Raises:
            InvalidEncoding: If the value is not hex
            InvalidTokenId: If the value does not decode to exactly 32 bytes
        """
        raw = AddressCodec._decode_hex(value)
        if len(raw) != CANONICAL_LENGTH:
            raise InvalidTokenId(
                f"token ID must be exactly {CANONICAL_LENGTH} bytes, got {len(raw)} bytes"
            )
        return HexBytes(raw)

    @staticmethod
    def decode_bech32(value: str) -> bytes:
        """
        Decode a bech32 account address into its raw bytes.

        Any human-readable prefix is accepted.

        Raises:
            InvalidBech32: If the value is not a valid bech32 string
        """
        hrp, data = bech32.bech32_decode(value)
        if hrp is None or data is None:
            raise InvalidBech32(f"failed to decode bech32 address: {value!r}")
        raw = bech32.convertbits(data, 5, 8, False)
        if raw is None or not raw:
            raise InvalidBech32(f"invalid bech32 payload in address: {value!r}")
        return bytes(raw)

    @staticmethod
    def decode_and_pad_address(value: str) -> HexBytes:
        """
        Decode a recipient address and left-pad it to 32 bytes.

        0x-prefixed values are treated as raw hex address bytes, anything else
        as a bech32 account address. A 20-byte address occupies the low 20
        bytes of the result.

        Raises:
            InvalidEncoding: If a 0x value is not valid hex
            InvalidBech32: If a non-0x value is not a valid bech32 address
            AddressTooLong: If the decoded address exceeds 32 bytes
        """
        if value.startswith("0x"):
            raw = AddressCodec._decode_hex(value)
        else:
            raw = AddressCodec.decode_bech32(value)
        return AddressCodec._pad(raw)

    @staticmethod
    def to_canonical_hex(value: Union[HexBytes, bytes]) -> str:
        """Render a canonical value as lowercase 0x-prefixed hex."""
        return Web3.to_hex(bytes(value)).lower()

    @staticmethod
    def canonical_hex(value: str) -> str:
        """Canonical hex of a hex or bech32 address string."""
        return AddressCodec.to_canonical_hex(AddressCodec.decode_and_pad_address(value))

    @staticmethod
    def encode_bech32(value: Union[HexBytes, bytes], hrp: str) -> str:
        """
        Encode raw or canonical address bytes as a bech32 account address.

        A 32-byte value whose 12 high bytes are zero is treated as a padded
        20-byte account address and unpadded first.
        """
        raw = bytes(value)
        padding = CANONICAL_LENGTH - COSMOS_ADDRESS_LENGTH
        if len(raw) == CANONICAL_LENGTH and raw[:padding] == b"\x00" * padding:
            raw = raw[padding:]
        data = bech32.convertbits(raw, 8, 5)
        if data is None:
            raise InvalidBech32(f"cannot convert {len(raw)} bytes to bech32")
        return bech32.bech32_encode(hrp, data)

    @staticmethod
    def same_address(a: str, b: str) -> bool:
        """
        Compare two addresses regardless of encoding.

        Hex and bech32 forms of the same account compare equal. If either side
        cannot be decoded, falls back to case-insensitive string comparison.
        """
        if a.strip().lower() == b.strip().lower():
            return True
        try:
            return AddressCodec.decode_and_pad_address(a) == AddressCodec.decode_and_pad_address(b)
        except ValueError as e:
            logger.debug(f"Address comparison fell back to string match: {e}")
            return False
