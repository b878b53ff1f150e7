"""Compact binary form of a result, packed with msgpack.

Records are msgpack maps keyed by proto field numbers. Key 0 of the root map
holds the format version; no record uses field number 0.
"""

import logging
from typing import Any

import msgpack
from msgpack.exceptions import UnpackException

from ..config import BINARY_FORMAT_VERSION
from ..exceptions import DecodeError
from ..models import Result
from .tree import BINARY, decode_record, encode_record

log = logging.getLogger(__name__)

VERSION_KEY = 0


def to_bytes(result: Result) -> bytes:
    """Pack ``result`` into its binary form."""
    tree = encode_record(result, BINARY)
    tree[VERSION_KEY] = BINARY_FORMAT_VERSION
    return msgpack.packb(tree, use_bin_type=True, datetime=True)


def from_bytes(data: bytes, *, strict: bool = False, issues: list | None = None) -> Result:
    """Unpack a result from its binary form.

    Raises:
        DecodeError: The bytes are not a packed result, were written by a newer
            format version, or a required field is missing or malformed.
    """
    try:
        tree: Any = msgpack.unpackb(data, raw=False, strict_map_key=False, timestamp=3)
    except (UnpackException, ValueError, TypeError) as e:
        raise DecodeError("", f"invalid binary record: {e}") from e

    if not isinstance(tree, dict):
        raise DecodeError("", f"expected a packed map, got {type(tree).__name__}")
    version = tree.pop(VERSION_KEY, None)
    if isinstance(version, bool) or not isinstance(version, int):
        raise DecodeError("", "missing binary format version")
    if version > BINARY_FORMAT_VERSION:
        raise DecodeError(
            "", f"binary format version {version} is newer than {BINARY_FORMAT_VERSION}",
            hint="Upgrade lhr-model to read this file",
        )
    log.debug("Unpacking binary result, format version %d", version)
    return decode_record(Result, tree, BINARY, strict=strict, issues=issues)
