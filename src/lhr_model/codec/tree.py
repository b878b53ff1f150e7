"""Walks record dataclasses to and from plain wire trees.

The same walk serves both wire forms; ``WireFormat`` holds what differs
between them. Presence is carried through exactly: a field that is None (or
ABSENT, for generic values) is left out of the tree, and a field that is
missing from the tree decodes to its dataclass default.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from ..exceptions import DecodeError, EncodeError
from ..fields import ABSENT, Kind, field_specs

log = logging.getLogger(__name__)

_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


@dataclass(frozen=True)
class WireFormat:
    """What differs between the JSON and the binary form of the same tree."""
    name: str
    numeric_keys: bool       # record keys are field numbers, not names
    native_timestamps: bool  # datetimes stay datetimes
    native_floats: bool      # non-finite floats stay floats


JSON = WireFormat("json", numeric_keys=False, native_timestamps=False, native_floats=False)
BINARY = WireFormat("binary", numeric_keys=True, native_timestamps=True, native_floats=True)


@dataclass(frozen=True)
class DecodeIssue:
    """A field that decoding recovered from instead of failing."""
    path: str
    message: str


class _Malformed(Exception):
    """Raw data for one field cannot be read."""


class ObjectWithDuplicates(dict):
    """A parsed object that held some keys more than once; the first value is kept."""

    def __init__(self, pairs, duplicates):
        super().__init__(pairs)
        self.duplicates = tuple(duplicates)


def child_path(path: str, name: Any) -> str:
    return f"{path}.{name}" if path else str(name)


def item_path(path: str, key: Any) -> str:
    return f"{path}[{key}]"


def _type_name(raw: Any) -> str:
    return "null" if raw is None else type(raw).__name__


def _non_finite_name(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    return "Infinity" if number > 0 else "-Infinity"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix, millisecond precision when exact."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    timespec = "milliseconds" if moment.microsecond % 1000 == 0 else "microseconds"
    return moment.isoformat(timespec=timespec).replace("+00:00", "Z")


_ISO_TIMESTAMP = re.compile(
    r"(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}(?::\d{2})?)"
    r"(?:[.,](?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}(?::?\d{2})?)?"
)


def parse_timestamp(text: str) -> datetime:
    """Read an ISO-8601 date-time with any fraction length and offset spelling."""
    match = _ISO_TIMESTAMP.fullmatch(text.strip())
    if match is None:
        raise _Malformed(f"not an ISO-8601 timestamp: {text!r}")
    normalized = match["base"].replace("t", "T").replace(" ", "T")
    if match["fraction"]:
        normalized += "." + match["fraction"][:6].ljust(6, "0")
    offset = match["offset"]
    if offset in ("Z", "z"):
        normalized += "+00:00"
    elif offset:
        digits = offset[1:].replace(":", "")
        normalized += f"{offset[0]}{digits[:2]}:{digits[2:4] or '00'}"
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        raise _Malformed(f"not an ISO-8601 timestamp: {text!r}") from None


@lru_cache(maxsize=None)
def _key_index(record_cls, numeric_keys: bool) -> dict:
    index = {}
    for spec in field_specs(record_cls):
        if numeric_keys:
            index[spec.number] = spec
        else:
            index[spec.json_name] = spec
            index.setdefault(spec.attr, spec)
    return index


class Encoder:
    """Turns records into wire trees."""

    def __init__(self, fmt: WireFormat):
        self.fmt = fmt

    def message(self, record: Any, path: str = "") -> dict:
        tree = {}
        for spec in field_specs(type(record)):
            value = getattr(record, spec.attr)
            field_path = child_path(path, spec.json_name)
            if value is ABSENT or (value is None and spec.kind.tag != "value"):
                if spec.required:
                    raise EncodeError(field_path, "required field is not set")
                continue
            key = spec.number if self.fmt.numeric_keys else spec.json_name
            tree[key] = self.encode(spec.kind, value, field_path)
        return tree

    def encode(self, kind: Kind, value: Any, path: str) -> Any:
        tag = kind.tag
        if tag == "string":
            if not isinstance(value, str):
                raise EncodeError(path, f"expected a string, got {_type_name(value)}")
            return value
        if tag == "bool":
            if not isinstance(value, bool):
                raise EncodeError(path, f"expected a boolean, got {_type_name(value)}")
            return value
        if tag == "double":
            return self._double(value, path)
        if tag == "timestamp":
            return self._timestamp(value, path)
        if tag == "enum":
            if not isinstance(value, kind.of):
                raise EncodeError(path, f"expected {kind.of.__name__}, got {_type_name(value)}")
            return value.value
        if tag == "value":
            return self._json_value(value, path)
        if tag == "struct":
            if not isinstance(value, dict):
                raise EncodeError(path, f"expected an object, got {_type_name(value)}")
            return self._json_value(value, path)
        if tag == "message":
            if not isinstance(value, kind.of):
                raise EncodeError(path, f"expected {kind.of.__name__}, got {_type_name(value)}")
            return self.message(value, path)
        if tag == "list":
            return [self.encode(kind.of, item, item_path(path, i)) for i, item in enumerate(value)]
        if tag == "map":
            tree = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodeError(path, f"map keys must be strings, got {_type_name(key)}")
                tree[key] = self.encode(kind.of, item, item_path(path, key))
            return tree
        raise EncodeError(path, f"unsupported field kind {tag!r}")

    def _double(self, value: Any, path: str) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise EncodeError(path, f"expected a number, got {_type_name(value)}")
        number = float(value)
        if math.isfinite(number) or self.fmt.native_floats:
            return number
        return _non_finite_name(number)

    def _timestamp(self, value: Any, path: str) -> Any:
        if not isinstance(value, datetime):
            raise EncodeError(path, f"expected a datetime, got {_type_name(value)}")
        if self.fmt.native_timestamps:
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        return format_timestamp(value)

    def _json_value(self, value: Any, path: str) -> Any:
        if value is None or isinstance(value, (bool, str, int)):
            return value
        if isinstance(value, float):
            if math.isfinite(value) or self.fmt.native_floats:
                return value
            # JSON has no spelling for a non-finite number inside a free-form value
            return None
        if isinstance(value, (list, tuple)):
            return [self._json_value(item, item_path(path, i)) for i, item in enumerate(value)]
        if isinstance(value, dict):
            tree = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise EncodeError(path, f"object keys must be strings, got {_type_name(key)}")
                tree[key] = self._json_value(item, child_path(path, key))
            return tree
        raise EncodeError(path, f"{_type_name(value)} is not a JSON value")


class Decoder:
    """Reads wire trees into records.

    A malformed required field raises DecodeError. A malformed optional field
    or container item is dropped and recorded in ``issues`` unless ``strict``
    is set, in which case it raises as well. Unknown enum values never raise.
    """

    def __init__(self, fmt: WireFormat, *, strict: bool = False, issues: list | None = None):
        self.fmt = fmt
        self.strict = strict
        self.issues = issues if issues is not None else []

    def message(self, record_cls, raw: Any, path: str = "") -> Any:
        if not isinstance(raw, dict):
            raise _Malformed(f"expected an object, got {_type_name(raw)}")
        self._duplicates(raw, path, child_path)
        index = _key_index(record_cls, self.fmt.numeric_keys)
        values = {}
        for key, item in raw.items():
            spec = index.get(key)
            if spec is None:
                log.debug("Ignoring unknown field %s", child_path(path, key))
                continue
            field_path = child_path(path, spec.json_name)
            if spec.attr in values:
                self._recover(field_path, "field given more than once, keeping the first")
                continue
            if item is None and spec.kind.tag != "value":
                continue
            try:
                values[spec.attr] = self.decode(spec.kind, item, field_path)
            except _Malformed as exc:
                if spec.required:
                    raise DecodeError(field_path, str(exc)) from None
                self._recover(field_path, str(exc))

        for spec in field_specs(record_cls):
            if spec.required and not spec.has_default and spec.attr not in values:
                raise DecodeError(child_path(path, spec.json_name), "required field is missing")
        return record_cls(**values)

    def decode(self, kind: Kind, raw: Any, path: str) -> Any:
        tag = kind.tag
        if tag == "string":
            if not isinstance(raw, str):
                raise _Malformed(f"expected a string, got {_type_name(raw)}")
            return raw
        if tag == "bool":
            if not isinstance(raw, bool):
                raise _Malformed(f"expected a boolean, got {_type_name(raw)}")
            return raw
        if tag == "double":
            return self._double(raw)
        if tag == "timestamp":
            return self._timestamp(raw)
        if tag == "enum":
            return self._enum(kind.of, raw, path)
        if tag == "value":
            return self._json_value(raw, path)
        if tag == "struct":
            if not isinstance(raw, dict):
                raise _Malformed(f"expected an object, got {_type_name(raw)}")
            return self._json_value(raw, path)
        if tag == "message":
            return self.message(kind.of, raw, path)
        if tag == "list":
            return self._list(kind.of, raw, path)
        if tag == "map":
            return self._map(kind.of, raw, path)
        raise _Malformed(f"unsupported field kind {tag!r}")

    def _list(self, kind: Kind, raw: Any, path: str) -> list:
        if not isinstance(raw, list):
            raise _Malformed(f"expected a list, got {_type_name(raw)}")
        items = []
        for i, item in enumerate(raw):
            try:
                items.append(self.decode(kind, item, item_path(path, i)))
            except _Malformed as exc:
                self._recover(item_path(path, i), str(exc))
        return items

    def _map(self, kind: Kind, raw: Any, path: str) -> dict:
        if not isinstance(raw, dict):
            raise _Malformed(f"expected an object, got {_type_name(raw)}")
        items = {}
        self._duplicates(raw, path, item_path)
        for key, item in raw.items():
            if not isinstance(key, str):
                self._recover(item_path(path, key), f"map keys must be strings, got {_type_name(key)}")
                continue
            try:
                items[key] = self.decode(kind, item, item_path(path, key))
            except _Malformed as exc:
                self._recover(item_path(path, key), str(exc))
        return items

    def _enum(self, enum_cls, raw: Any, path: str):
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise _Malformed(f"expected an enum name, got {_type_name(raw)}")
        member = enum_cls.lookup(raw)
        if member is None:
            member = enum_cls.fallback()
            self._note(path, f"unknown {enum_cls.__name__} value {raw!r}, read as {member.value}")
        return member

    def _double(self, raw: Any) -> float:
        if isinstance(raw, str) and raw in _NON_FINITE:
            return _NON_FINITE[raw]
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise _Malformed(f"expected a number, got {_type_name(raw)}")
        return float(raw)

    def _timestamp(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            moment = raw
        elif isinstance(raw, str):
            moment = parse_timestamp(raw)
        elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
            try:
                return datetime.fromtimestamp(raw, tz=timezone.utc)
            except (OverflowError, OSError, ValueError):
                raise _Malformed(f"epoch timestamp out of range: {raw!r}") from None
        else:
            raise _Malformed(f"expected a timestamp, got {_type_name(raw)}")
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(timezone.utc)

    def _json_value(self, raw: Any, path: str) -> Any:
        if raw is None or isinstance(raw, (bool, str, int, float)):
            return raw
        if isinstance(raw, list):
            return [self._json_value(item, item_path(path, i)) for i, item in enumerate(raw)]
        if isinstance(raw, dict):
            self._duplicates(raw, path, child_path)
            tree = {}
            for key, item in raw.items():
                if not isinstance(key, str):
                    raise _Malformed(f"object keys must be strings, got {_type_name(key)}")
                tree[key] = self._json_value(item, child_path(path, key))
            return tree
        raise _Malformed(f"{_type_name(raw)} is not a JSON value")

    def _duplicates(self, raw: dict, path: str, join) -> None:
        for key in getattr(raw, "duplicates", ()):
            self._recover(join(path, key), "key given more than once, keeping the first")

    def _recover(self, path: str, message: str) -> None:
        if self.strict:
            raise DecodeError(path, message)
        log.warning("Dropping malformed field %s: %s", path, message)
        self.issues.append(DecodeIssue(path, message))

    def _note(self, path: str, message: str) -> None:
        log.warning("%s: %s", path, message)
        self.issues.append(DecodeIssue(path, message))


def encode_record(record: Any, fmt: WireFormat) -> dict:
    """Wire tree for any record dataclass."""
    return Encoder(fmt).message(record)


def decode_record(record_cls, raw: Any, fmt: WireFormat, *, strict: bool = False,
                  issues: list | None = None) -> Any:
    """Record of ``record_cls`` read from a wire tree.

    Raises:
        DecodeError: The tree is not an object, or a required field is missing
            or malformed (any malformed field when ``strict``).
    """
    decoder = Decoder(fmt, strict=strict, issues=issues)
    try:
        return decoder.message(record_cls, raw)
    except _Malformed as exc:
        raise DecodeError("", str(exc)) from None
