"""
File helpers for the artifacts handed between commands.

`parse` writes a routes file, `generate` writes an unsigned transaction and
`verify` reads both back. The unsigned transaction uses the JSON layout of
`tx --generate-only` so it can be passed straight to the chain binary's
`tx sign`.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..errors import ArtifactError

logger = logging.getLogger(__name__)


def read_json(path: str | Path) -> Any:
    """
    Load a JSON document from disk.

    Raises:
        ArtifactError: If the file cannot be read or is not valid JSON
    """
    file_path = Path(path)
    try:
        with file_path.open() as file:
            return json.load(file)
    except OSError as e:
        raise ArtifactError(f"failed to read {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ArtifactError(f"failed to parse {file_path}: {e}") from e


def write_json(path: str | Path, data: Any) -> None:
    """Write a JSON document with two-space indentation."""
    file_path = Path(path)
    try:
        with file_path.open("w") as file:
            json.dump(data, file, indent=2)
            file.write("\n")
    except OSError as e:
        raise ArtifactError(f"failed to write {file_path}: {e}") from e
    logger.debug(f"Wrote {file_path}")


def build_unsigned_tx(messages: Sequence[Mapping[str, Any]], memo: str = "", gas_limit: int = 200_000) -> dict[str, Any]:
    """
    Wrap encoded messages in an unsigned transaction envelope.

    Args:
        messages: Messages already converted with to_dict()
        memo: Transaction memo
        gas_limit: Gas limit for the fee section

    Returns:
        Transaction JSON with empty signer infos and signatures
    """
    return {
        "body": {
            "messages": list(messages),
            "memo": memo,
            "timeout_height": "0",
            "extension_options": [],
            "non_critical_extension_options": [],
        },
        "auth_info": {
            "signer_infos": [],
            "fee": {
                "amount": [],
                "gas_limit": str(gas_limit),
                "payer": "",
                "granter": "",
            },
        },
        "signatures": [],
    }


def extract_messages(container: Any) -> list[Mapping[str, Any]]:
    """
    Pull the message list out of a serialized transaction or message list.

    Accepted layouts: a bare list of messages, {"messages": [...]},
    {"body": {"messages": [...]}} and {"tx": {"body": {"messages": [...]}}}.

    Raises:
        ArtifactError: If no message list can be found
    """
    match container:
        case list():
            messages = container
        case {"tx": Mapping() as tx}:
            return extract_messages(tx)
        case {"body": {"messages": list() as messages}}:
            pass
        case {"messages": list() as messages}:
            pass
        case _:
            raise ArtifactError("transaction file does not contain a message list")

    for message in messages:
        if not isinstance(message, Mapping):
            raise ArtifactError(f"messages must be JSON objects, got {message!r}")
    return messages
