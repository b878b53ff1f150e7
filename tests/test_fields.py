"""Field metadata and presence conventions."""

from __future__ import annotations

import copy
import math
import pickle
from dataclasses import dataclass, field

import pytest

from lhr_model.fields import (
    ABSENT,
    STRING,
    field_spec,
    field_specs,
    finite_or_none,
    is_present,
    lower_camel,
    wire,
)
from lhr_model.models import AuditResult, MetricSavings, Result, StackPack

pytestmark = pytest.mark.unit


def test_absent_is_a_falsy_singleton() -> None:
    assert not ABSENT
    assert repr(ABSENT) == "ABSENT"
    assert copy.deepcopy(ABSENT) is ABSENT
    assert pickle.loads(pickle.dumps(ABSENT)) is ABSENT
    assert not is_present(ABSENT)
    assert is_present(None)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(0.5, 0.5), (1, 1.0), (None, None), (ABSENT, None), (math.nan, None),
     (-math.inf, None), (True, None), ("1", None)],
)
def test_finite_or_none(value, expected) -> None:
    assert finite_or_none(value) == expected


@pytest.mark.parametrize(
    ("name", "camel"),
    [("final_displayed_url", "finalDisplayedUrl"), ("runtime_slow_4g", "runtimeSlow4g"), ("id", "id")],
)
def test_lower_camel(name, camel) -> None:
    assert lower_camel(name) == camel


def test_specs_follow_declaration_order() -> None:
    names = [s.json_name for s in field_specs(Result)][:4]
    assert names == ["fetchTime", "requestedUrl", "finalUrl", "lighthouseVersion"]


def test_explicit_json_names() -> None:
    assert field_spec(StackPack, "icon_data_url").json_name == "iconDataURL"
    assert [s.json_name for s in field_specs(MetricSavings)] == ["LCP", "FCP", "CLS", "TBT", "INP"]


def test_required_fields() -> None:
    required = {s.attr for s in field_specs(AuditResult) if s.required}
    assert required == {"id", "title"}


def test_unknown_attr() -> None:
    with pytest.raises(KeyError):
        field_spec(AuditResult, "nope")


def test_duplicate_field_numbers_are_rejected() -> None:
    @dataclass
    class Clash:
        a: str | None = field(default=None, metadata=wire(1, STRING))
        b: str | None = field(default=None, metadata=wire(1, STRING))

    with pytest.raises(TypeError, match="duplicate"):
        field_specs(Clash)
