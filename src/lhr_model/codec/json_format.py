"""JSON form of a result, keyed by lowerCamelCase field names."""

import json
import logging
from typing import Any

from ..exceptions import DecodeError
from ..models import Result
from .tree import JSON, ObjectWithDuplicates, decode_record, encode_record

log = logging.getLogger(__name__)


def _keep_first(pairs: list[tuple[str, Any]]) -> dict:
    obj = {}
    duplicates = []
    for key, value in pairs:
        if key in obj:
            duplicates.append(key)
            continue
        obj[key] = value
    if duplicates:
        # the decoder reports these with their full field path
        return ObjectWithDuplicates(obj, duplicates)
    return obj


def to_dict(result: Result) -> dict:
    """JSON-compatible tree for ``result``."""
    return encode_record(result, JSON)


def from_dict(data: Any, *, strict: bool = False, issues: list | None = None) -> Result:
    """Read a result from a JSON-compatible tree.

    Args:
        data: Parsed JSON object.
        strict: Raise on malformed optional fields instead of dropping them.
        issues: List that collects a DecodeIssue for every recovered field.

    Raises:
        DecodeError: A required field is missing or malformed.
    """
    return decode_record(Result, data, JSON, strict=strict, issues=issues)


def dumps(result: Result, *, indent: int | None = None) -> str:
    """Serialize ``result`` to JSON text."""
    return json.dumps(to_dict(result), indent=indent, ensure_ascii=False, allow_nan=False)


def loads(text: str | bytes, *, strict: bool = False, issues: list | None = None) -> Result:
    """Parse JSON text into a result."""
    try:
        data = json.loads(text, object_pairs_hook=_keep_first)
    except json.JSONDecodeError as e:
        raise DecodeError("", f"invalid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise DecodeError("", f"JSON text is not valid UTF-8: {e}") from e
    log.debug("Parsed %d top-level JSON keys", len(data) if isinstance(data, dict) else 0)
    return from_dict(data, strict=strict, issues=issues)
