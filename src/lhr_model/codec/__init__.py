"""Wire forms of a result: JSON text or trees, and packed binary."""

from .binary_format import from_bytes, to_bytes
from .json_format import dumps, from_dict, loads, to_dict
from .tree import BINARY, JSON, DecodeIssue, WireFormat, decode_record, encode_record

__all__ = [
    "BINARY",
    "JSON",
    "DecodeIssue",
    "WireFormat",
    "decode_record",
    "dumps",
    "encode_record",
    "from_bytes",
    "from_dict",
    "loads",
    "to_bytes",
    "to_dict",
]
