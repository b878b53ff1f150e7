"""Pytest fixtures: record builders and a representative result."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

import pytest

from lhr_model.fields import ABSENT
from lhr_model.models import (
    AuditRef,
    AuditResult,
    Category,
    CategoryGroup,
    ConfigSettings,
    Environment,
    FormFactor,
    MetricSavings,
    Result,
    ScoreDisplayMode,
    Timing,
)

FETCH_TIME = datetime(2024, 5, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)


@pytest.fixture
def make_audit() -> Callable[..., AuditResult]:
    """Factory for audits; defaults to a binary audit with the given score."""

    def _make(audit_id: str, score=1.0, mode=ScoreDisplayMode.BINARY, **kwargs) -> AuditResult:
        return AuditResult(
            id=audit_id,
            title=kwargs.pop("title", audit_id.replace("-", " ").title()),
            score=score,
            score_display_mode=mode,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_category() -> Callable[..., Category]:
    """Factory for categories from ``(audit_id, weight)`` pairs."""

    def _make(category_id: str, refs: list[tuple[str, float | None]], **kwargs) -> Category:
        return Category(
            id=category_id,
            title=kwargs.pop("title", category_id.title()),
            audit_refs=[AuditRef(id=ref_id, weight=weight) for ref_id, weight in refs],
            **kwargs,
        )

    return _make


@pytest.fixture
def make_result() -> Callable[..., Result]:
    """Factory for results keyed by the ids of the given audits and categories."""

    def _make(audits=(), categories=(), **kwargs) -> Result:
        return Result(
            fetch_time=kwargs.pop("fetch_time", FETCH_TIME),
            requested_url=kwargs.pop("requested_url", "https://example.com/"),
            final_url=kwargs.pop("final_url", "https://example.com/"),
            lighthouse_version=kwargs.pop("lighthouse_version", "12.0.0"),
            audits={a.id: a for a in audits},
            categories={c.id: c for c in categories},
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_result(make_audit, make_category, make_result) -> Result:
    """A small clean run touching most of the record."""
    audits = [
        make_audit("first-contentful-paint", 0.5, ScoreDisplayMode.NUMERIC,
                   numeric_value=1830.5, numeric_unit="millisecond", display_value="1.8 s",
                   metric_savings=MetricSavings(fcp=120.0, lcp=340.0)),
        make_audit("largest-contentful-paint", 1.0, ScoreDisplayMode.NUMERIC,
                   details={"type": "table", "items": [{"url": "https://example.com/a.js", "wastedMs": 12}]}),
        make_audit("viewport", 1.0, ScoreDisplayMode.BINARY),
        make_audit("manual-check", None, ScoreDisplayMode.MANUAL),
        make_audit("legacy-na", None, ScoreDisplayMode.NOT_APPLICABLE,
                   warnings=["something looked off"]),
    ]
    performance = make_category("performance", [
        ("first-contentful-paint", 1.0),
        ("largest-contentful-paint", 3.0),
        ("manual-check", 0.0),
    ])
    performance.audit_refs[0].group = "metrics"
    performance.audit_refs[0].acronym = "FCP"
    best_practices = make_category("best-practices", [("viewport", 1.0), ("legacy-na", 1.0)])
    return make_result(
        audits=audits,
        categories=[performance, best_practices],
        category_groups={"metrics": CategoryGroup(title="Metrics")},
        environment=Environment(network_user_agent="Mozilla/5.0 (Linux)", benchmark_index=1500.0,
                                credits={"axe-core": "4.9.0"}),
        config_settings=ConfigSettings(form_factor=FormFactor.MOBILE, locale="en-US",
                                       only_categories=ABSENT),
        timing=Timing(total=4321.0),
        run_warnings=[],
        gather_mode="navigation",
        final_displayed_url="https://example.com/",
    )
