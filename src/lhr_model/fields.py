"""Field conventions shared by every record type.

Each wire field of a record dataclass declares its proto field number and its
kind through ``wire()``. The codec reads these declarations back with
``field_specs()``; nothing else about a record is needed to encode it.

Three conventions cover fields whose presence matters:

* nullable numbers are ``float | None``; ``None`` means absent and a present
  float may be non-finite,
* generic values use the ``ABSENT`` sentinel for "not on the wire" so that
  ``None`` can stand for an explicit JSON null,
* optional scalars (strings, booleans, nested records) are ``None`` when absent.
"""

import dataclasses
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any


class _Absent:
    """Marker for a generic value that is not present on the wire."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()

# A JSON-like value: None, bool, int, float, str, list or dict of those.
JsonValue = Any


def is_present(value: Any) -> bool:
    """True unless ``value`` is the ABSENT sentinel."""
    return value is not ABSENT


def finite_or_none(value: Any) -> float | None:
    """Return ``value`` as a float if it is a finite number, else None.

    Absent, null, NaN, infinities, booleans and non-numbers all collapse to
    None. This is the single reading of "has a usable score".
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class Kind:
    """Wire kind of a field. ``of`` holds the enum, record or element kind."""
    tag: str
    of: Any = None


STRING = Kind("string")
BOOL = Kind("bool")
DOUBLE = Kind("double")
TIMESTAMP = Kind("timestamp")
VALUE = Kind("value")
STRUCT = Kind("struct")


def enum_of(enum_cls) -> Kind:
    return Kind("enum", enum_cls)


def message_of(record_cls) -> Kind:
    return Kind("message", record_cls)


def list_of(kind: Kind) -> Kind:
    return Kind("list", kind)


def map_of(kind: Kind) -> Kind:
    return Kind("map", kind)


@dataclass(frozen=True)
class FieldSpec:
    """Everything the codec knows about one record field."""
    attr: str
    number: int
    kind: Kind
    json_name: str
    required: bool = False
    deprecated: bool = False
    superseded_by: str | None = None
    has_default: bool = False  # a missing required field decodes to the default


def lower_camel(name: str) -> str:
    """Proto3 JSON name for a field: ``final_displayed_url`` -> ``finalDisplayedUrl``."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def wire(
    number: int,
    kind: Kind,
    *,
    json: str | None = None,
    required: bool = False,
    deprecated: bool = False,
    superseded_by: str | None = None,
) -> dict[str, Any]:
    """Metadata for ``dataclasses.field(metadata=...)``.

    Args:
        number: Proto field number, also the key in the binary form.
        kind: Wire kind of the value.
        json: JSON name when it is not the lowerCamelCase of the attribute.
        required: Decoding fails when the field is missing.
        deprecated: Kept for old readers and writers; not a source of truth.
        superseded_by: Attribute that replaces this one when both are set.
    """
    return {
        "wire": {
            "number": number,
            "kind": kind,
            "json": json,
            "required": required,
            "deprecated": deprecated or superseded_by is not None,
            "superseded_by": superseded_by,
        }
    }


@lru_cache(maxsize=None)
def field_specs(record_cls) -> tuple[FieldSpec, ...]:
    """Wire fields of a record class, in declaration order."""
    specs = []
    numbers = set()
    for f in dataclasses.fields(record_cls):
        meta = f.metadata.get("wire")
        if meta is None:
            continue
        if meta["number"] in numbers:
            raise TypeError(f"{record_cls.__name__}: duplicate field number {meta['number']}")
        numbers.add(meta["number"])
        specs.append(FieldSpec(
            attr=f.name,
            number=meta["number"],
            kind=meta["kind"],
            json_name=meta["json"] or lower_camel(f.name),
            required=meta["required"],
            deprecated=meta["deprecated"],
            superseded_by=meta["superseded_by"],
            has_default=(f.default is not dataclasses.MISSING
                         or f.default_factory is not dataclasses.MISSING),
        ))
    return tuple(specs)


def field_spec(record_cls, attr: str) -> FieldSpec:
    """Look up one field's spec by attribute name."""
    for spec in field_specs(record_cls):
        if spec.attr == attr:
            return spec
    raise KeyError(f"{record_cls.__name__} has no wire field {attr!r}")
