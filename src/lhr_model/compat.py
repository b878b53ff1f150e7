"""Schema evolution: enum spellings, deprecated fields and record upgrades.

Two rules live here.

Enumerations are append-only. A member may have been spelled differently in
older records (``not_applicable`` became ``notApplicable``); every spelling and
every proto number decodes to one member, and writers only ever emit the
member's canonical value. Unknown input decodes to the enum's fallback member.

Deprecated fields stay on the record and on the wire. When the field that
replaced one is set, readers use the replacement.
"""

import copy
import dataclasses
import logging
from enum import Enum
from typing import Any

from .fields import ABSENT, field_spec, field_specs

log = logging.getLogger(__name__)


class WireEnum(Enum):
    """Enum whose members know their proto number and legacy spellings.

    Declare members as ``NAME = "canonical", number`` followed by any
    ``(legacy_spelling, legacy_number)`` pairs::

        NOT_APPLICABLE = "notApplicable", 7, ("not_applicable", 4)
    """

    def __new__(cls, canonical: str, number: int, *legacy: tuple[str, int]):
        member = object.__new__(cls)
        member._value_ = canonical
        member.number = number
        member.legacy = legacy
        return member

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, bool):
            return None
        for member in cls:
            if isinstance(value, int) and value == member.number:
                return member
            for spelling, number in member.legacy:
                if value == spelling or (isinstance(value, int) and value == number):
                    return member
        return None

    @classmethod
    def lookup(cls, raw: Any):
        """Member for any known spelling or number, or None."""
        try:
            return cls(raw)
        except (ValueError, TypeError):
            return None

    @classmethod
    def fallback(cls):
        """Member that unknown wire values decode to: the one numbered 0."""
        for member in cls:
            if member.number == 0:
                return member
        raise LookupError(f"{cls.__name__} has no member numbered 0")

    @classmethod
    def from_wire(cls, raw: Any):
        """Decode a wire value, never failing."""
        member = cls.lookup(raw)
        if member is None:
            log.warning("Unknown %s value %r, using %s", cls.__name__, raw, cls.fallback().name)
            return cls.fallback()
        return member

    @property
    def spellings(self) -> tuple[str, ...]:
        """Canonical spelling first, then legacy ones."""
        return (self.value, *(spelling for spelling, _ in self.legacy))


def _is_set(value: Any) -> bool:
    if value is None or value is ABSENT:
        return False
    if isinstance(value, WireEnum):
        return value is not value.fallback()
    if isinstance(value, str):
        return value != ""
    return True


def prefer(record: Any, attr: str) -> Any:
    """Read ``attr``, deferring to the field that supersedes it when that is set."""
    spec = field_spec(type(record), attr)
    if spec.superseded_by:
        replacement = getattr(record, spec.superseded_by)
        if _is_set(replacement):
            return replacement
    return getattr(record, attr)


def effective_form_factor(settings):
    """Form factor of the run; ``form_factor`` wins over ``emulated_form_factor``."""
    return prefer(settings, "emulated_form_factor")


def displayed_url(result) -> str:
    """URL shown to the user, falling back to ``final_url`` on older records."""
    return result.final_displayed_url or result.final_url


def main_document_url(result) -> str:
    """URL of the main document request, falling back to ``final_url``."""
    return result.main_document_url or result.final_url


def host_user_agent(result) -> str | None:
    """Host user agent, falling back to the top-level ``user_agent``."""
    return result.environment.host_user_agent or result.user_agent


def formatted_string(strings, attr: str) -> str | None:
    """A renderer string, using its replacement if the row is deprecated."""
    return prefer(strings, attr)


def _walk(record: Any, path: str):
    """Yield (path, record) for ``record`` and every nested record below it."""
    yield path, record
    for spec in field_specs(type(record)):
        value = getattr(record, spec.attr)
        tag = spec.kind.tag
        if tag == "message" and value is not None:
            yield from _walk(value, f"{path}.{spec.json_name}" if path else spec.json_name)
        elif tag == "list" and spec.kind.of.tag == "message" and value:
            for i, item in enumerate(value):
                yield from _walk(item, f"{path}.{spec.json_name}[{i}]" if path else f"{spec.json_name}[{i}]")
        elif tag == "map" and spec.kind.of.tag == "message" and value:
            for key, item in value.items():
                yield from _walk(item, f"{path}.{spec.json_name}[{key}]" if path else f"{spec.json_name}[{key}]")


def deprecated_fields_in_use(result) -> list[str]:
    """Paths of deprecated fields that carry data anywhere in the record."""
    found = []
    for path, record in _walk(result, ""):
        for spec in field_specs(type(record)):
            if spec.deprecated and _is_set(getattr(record, spec.attr)):
                found.append(f"{path}.{spec.json_name}" if path else spec.json_name)
    return found


def upgrade(result):
    """Return a copy with superseding fields filled in from deprecated ones.

    Deprecated values are kept as they are. The input is not modified.
    """
    upgraded = copy.deepcopy(result)

    for _, record in _walk(upgraded, ""):
        for spec in field_specs(type(record)):
            if not spec.superseded_by:
                continue
            old = getattr(record, spec.attr)
            if _is_set(old) and not _is_set(getattr(record, spec.superseded_by)):
                # the deprecated "none" form factor has no successor
                if isinstance(old, WireEnum) and old.value == "none":
                    continue
                setattr(record, spec.superseded_by, old)

    if not upgraded.final_displayed_url:
        upgraded.final_displayed_url = upgraded.final_url
    if not upgraded.main_document_url:
        upgraded.main_document_url = upgraded.final_url

    env = upgraded.environment
    if upgraded.user_agent:
        changes = {}
        if not env.host_user_agent:
            changes["host_user_agent"] = upgraded.user_agent
        if not env.network_user_agent:
            changes["network_user_agent"] = upgraded.user_agent
        if changes:
            upgraded.environment = dataclasses.replace(env, **changes)

    return upgraded
