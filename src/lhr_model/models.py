"""Data models for audit run results.

Records are declared bottom-up: nested records first, the ``Result`` root last.
Field numbers match the published proto schema and never change.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .compat import WireEnum
from .errors import ErrorCode, RunError
from .fields import (
    ABSENT,
    BOOL,
    DOUBLE,
    STRING,
    STRUCT,
    TIMESTAMP,
    VALUE,
    JsonValue,
    enum_of,
    list_of,
    map_of,
    message_of,
    wire,
)
from .i18n import I18n


GATHER_MODES = ("navigation", "timespan", "snapshot")


class ScoreDisplayMode(WireEnum):
    """How an audit's score should be interpreted."""
    UNSPECIFIED = "SCORE_DISPLAY_MODE_UNSPECIFIED", 0
    BINARY = "binary", 1
    NUMERIC = "numeric", 2
    METRIC_SAVINGS = "metricSavings", 8
    INFORMATIVE = "informative", 3
    NOT_APPLICABLE = "notApplicable", 7, ("not_applicable", 4)
    MANUAL = "manual", 5
    ERROR = "error", 6

    @property
    def is_scored(self) -> bool:
        """True for modes whose score takes part in category scoring."""
        return self in SCORED_MODES


SCORED_MODES = frozenset({
    ScoreDisplayMode.BINARY,
    ScoreDisplayMode.NUMERIC,
    ScoreDisplayMode.METRIC_SAVINGS,
})

UNSCORED_MODES = frozenset({
    ScoreDisplayMode.INFORMATIVE,
    ScoreDisplayMode.NOT_APPLICABLE,
    ScoreDisplayMode.MANUAL,
    ScoreDisplayMode.ERROR,
})


class FormFactor(WireEnum):
    """Device class a run was scored as."""
    UNKNOWN = "UNKNOWN_FORM_FACTOR", 0
    MOBILE = "mobile", 1
    DESKTOP = "desktop", 2
    NONE = "none", 3  # deprecated, only valid for emulated_form_factor


# ── Environment ────────────────────────────────────────────────────────────────

@dataclass
class Environment:
    """Environment configuration a run executed in."""
    network_user_agent: str | None = field(default=None, metadata=wire(1, STRING))
    host_user_agent: str | None = field(default=None, metadata=wire(2, STRING))
    benchmark_index: float | None = field(default=None, metadata=wire(3, DOUBLE))
    credits: dict[str, str] | None = field(default=None, metadata=wire(4, map_of(STRING)))


# ── Config settings ────────────────────────────────────────────────────────────

@dataclass
class ThrottlingSettings:
    rtt_ms: float | None = field(default=None, metadata=wire(1, DOUBLE))
    throughput_kbps: float | None = field(default=None, metadata=wire(2, DOUBLE))
    request_latency_ms: float | None = field(default=None, metadata=wire(3, DOUBLE))
    download_throughput_kbps: float | None = field(default=None, metadata=wire(4, DOUBLE))
    upload_throughput_kbps: float | None = field(default=None, metadata=wire(5, DOUBLE))
    cpu_slowdown_multiplier: float | None = field(default=None, metadata=wire(6, DOUBLE))


@dataclass
class ScreenEmulation:
    width: float | None = field(default=None, metadata=wire(1, DOUBLE))
    height: float | None = field(default=None, metadata=wire(2, DOUBLE))
    device_scale_factor: float | None = field(default=None, metadata=wire(3, DOUBLE))
    mobile: bool | None = field(default=None, metadata=wire(4, BOOL))
    disabled: bool | None = field(default=None, metadata=wire(5, BOOL))


@dataclass
class ConfigSettings:
    """Settings the run used."""
    emulated_form_factor: FormFactor | None = field(
        default=None,
        metadata=wire(1, enum_of(FormFactor), superseded_by="form_factor"),
    )
    form_factor: FormFactor | None = field(default=None, metadata=wire(5, enum_of(FormFactor)))
    locale: str | None = field(default=None, metadata=wire(2, STRING))
    # null, or the list of category ids that were run
    only_categories: JsonValue = field(default=ABSENT, metadata=wire(3, VALUE))
    channel: str | None = field(default=None, metadata=wire(4, STRING))
    throttling: ThrottlingSettings | None = field(
        default=None, metadata=wire(7, message_of(ThrottlingSettings)))
    throttling_method: str | None = field(default=None, metadata=wire(8, STRING))
    screen_emulation: ScreenEmulation | None = field(
        default=None, metadata=wire(9, message_of(ScreenEmulation)))
    ignore_status_code: bool | None = field(default=None, metadata=wire(10, BOOL))


# ── Timing ─────────────────────────────────────────────────────────────────────

@dataclass
class PerformanceEntry:
    name: str = field(metadata=wire(1, STRING, required=True))
    entry_type: str | None = field(default=None, metadata=wire(2, STRING))
    start_time: float | None = field(default=None, metadata=wire(3, DOUBLE))
    duration: float | None = field(default=None, metadata=wire(4, DOUBLE))
    gather: bool | None = field(default=None, metadata=wire(5, BOOL))


@dataclass
class Timing:
    total: float | None = field(default=None, metadata=wire(1, DOUBLE))
    entries: list[PerformanceEntry] = field(
        default_factory=list, metadata=wire(2, list_of(message_of(PerformanceEntry))))


# ── Audits ─────────────────────────────────────────────────────────────────────

@dataclass
class MetricSavings:
    """Estimated savings per metric; each metric is independently present."""
    lcp: float | None = field(default=None, metadata=wire(1, DOUBLE, json="LCP"))
    fcp: float | None = field(default=None, metadata=wire(2, DOUBLE, json="FCP"))
    cls: float | None = field(default=None, metadata=wire(3, DOUBLE, json="CLS"))
    tbt: float | None = field(default=None, metadata=wire(4, DOUBLE, json="TBT"))
    inp: float | None = field(default=None, metadata=wire(5, DOUBLE, json="INP"))

    def present(self) -> dict[str, float]:
        """Metrics that carry a value, keyed by their wire name."""
        names = {"lcp": "LCP", "fcp": "FCP", "cls": "CLS", "tbt": "TBT", "inp": "INP"}
        return {
            wire_name: getattr(self, attr)
            for attr, wire_name in names.items()
            if getattr(self, attr) is not None
        }


@dataclass
class ScoringOptions:
    p10: float | None = field(default=None, metadata=wire(1, DOUBLE))
    median: float | None = field(default=None, metadata=wire(2, DOUBLE))


@dataclass
class AuditResult:
    """Outcome of a single audit.

    ``score`` is ABSENT, None (explicit null) or a number in [0, 1]. Only the
    scored display modes carry a meaningful score.
    """
    id: str = field(metadata=wire(1, STRING, required=True))
    title: str = field(metadata=wire(2, STRING, required=True))
    description: str | None = field(default=None, metadata=wire(3, STRING))
    score: JsonValue = field(default=ABSENT, metadata=wire(4, VALUE))
    score_display_mode: ScoreDisplayMode | None = field(
        default=None, metadata=wire(5, enum_of(ScoreDisplayMode)))
    display_value: str | None = field(default=None, metadata=wire(6, STRING))
    explanation: str | None = field(default=None, metadata=wire(7, STRING))
    error_message: str | None = field(default=None, metadata=wire(8, STRING))
    details: dict[str, Any] | None = field(default=None, metadata=wire(9, STRUCT))
    warnings: JsonValue = field(default=ABSENT, metadata=wire(10, VALUE))
    numeric_value: float | None = field(default=None, metadata=wire(11, DOUBLE))
    numeric_unit: str | None = field(default=None, metadata=wire(12, STRING))
    error_stack: str | None = field(default=None, metadata=wire(13, STRING))
    metric_savings: MetricSavings | None = field(
        default=None, metadata=wire(14, message_of(MetricSavings)))
    scoring_options: ScoringOptions | None = field(
        default=None, metadata=wire(15, message_of(ScoringOptions)))
    guidance_level: float | None = field(default=None, metadata=wire(16, DOUBLE))
    replaces_audits: JsonValue = field(default=ABSENT, metadata=wire(17, VALUE))

    @property
    def mode(self) -> ScoreDisplayMode:
        return self.score_display_mode or ScoreDisplayMode.UNSPECIFIED


# ── Categories ─────────────────────────────────────────────────────────────────

@dataclass
class AuditRef:
    """A category's pointer to an audit and its scoring weight."""
    id: str = field(metadata=wire(1, STRING, required=True))
    weight: float | None = field(default=None, metadata=wire(2, DOUBLE))
    group: str | None = field(default=None, metadata=wire(3, STRING))
    acronym: str | None = field(default=None, metadata=wire(4, STRING))
    relevant_audits: list[str] | None = field(default=None, metadata=wire(5, list_of(STRING)))


@dataclass
class Category:
    """A weighted grouping of audits with one combined score."""
    id: str = field(metadata=wire(1, STRING, required=True))
    title: str = field(metadata=wire(2, STRING, required=True))
    description: str | None = field(default=None, metadata=wire(3, STRING))
    # ABSENT until scored, then None or a number in [0, 1]
    score: JsonValue = field(default=ABSENT, metadata=wire(4, VALUE))
    manual_description: str | None = field(default=None, metadata=wire(5, STRING))
    audit_refs: list[AuditRef] = field(
        default_factory=list, metadata=wire(6, list_of(message_of(AuditRef))))
    supported_modes: list[str] | None = field(default=None, metadata=wire(7, list_of(STRING)))

    @property
    def audit_ids(self) -> list[str]:
        return [ref.id for ref in self.audit_refs]


@dataclass
class CategoryGroup:
    """Label bucket for audit refs; its id is its key in ``category_groups``."""
    title: str = field(metadata=wire(1, STRING, required=True))
    description: str | None = field(default=None, metadata=wire(2, STRING))


# ── Stack packs and entities ───────────────────────────────────────────────────

@dataclass
class StackPack:
    id: str = field(metadata=wire(1, STRING, required=True))
    title: str | None = field(default=None, metadata=wire(2, STRING))
    icon_data_url: str | None = field(default=None, metadata=wire(3, STRING, json="iconDataURL"))
    # audit id -> stack specific advice
    descriptions: dict[str, str] = field(default_factory=dict, metadata=wire(4, map_of(STRING)))


@dataclass
class Entity:
    """A first or third party origin group seen during the run."""
    name: str = field(metadata=wire(1, STRING, required=True))
    homepage: str | None = field(default=None, metadata=wire(2, STRING))
    category: str | None = field(default=None, metadata=wire(3, STRING))
    is_first_party: bool | None = field(default=None, metadata=wire(4, BOOL))
    is_unrecognized: bool | None = field(default=None, metadata=wire(5, BOOL))
    origins: list[str] = field(default_factory=list, metadata=wire(6, list_of(STRING)))


# ── Result ─────────────────────────────────────────────────────────────────────

@dataclass
class Result:
    """Complete record of one audit run."""
    fetch_time: datetime = field(metadata=wire(1, TIMESTAMP, required=True))
    requested_url: str = field(metadata=wire(2, STRING, required=True))
    final_url: str = field(metadata=wire(3, STRING, required=True))
    lighthouse_version: str = field(metadata=wire(4, STRING, required=True))
    environment: Environment = field(
        default_factory=Environment, metadata=wire(5, message_of(Environment), required=True))
    user_agent: str | None = field(default=None, metadata=wire(6, STRING))
    run_warnings: list[str] | None = field(default=None, metadata=wire(7, list_of(STRING)))
    runtime_error: RunError | None = field(default=None, metadata=wire(8, message_of(RunError)))
    audits: dict[str, AuditResult] = field(
        default_factory=dict, metadata=wire(9, map_of(message_of(AuditResult)), required=True))
    categories: dict[str, Category] = field(
        default_factory=dict, metadata=wire(10, map_of(message_of(Category)), required=True))
    category_groups: dict[str, CategoryGroup] = field(
        default_factory=dict, metadata=wire(11, map_of(message_of(CategoryGroup)), required=True))
    config_settings: ConfigSettings = field(
        default_factory=ConfigSettings, metadata=wire(12, message_of(ConfigSettings), required=True))
    i18n: I18n = field(default_factory=I18n, metadata=wire(13, message_of(I18n), required=True))
    timing: Timing = field(default_factory=Timing, metadata=wire(14, message_of(Timing), required=True))
    stack_packs: list[StackPack] | None = field(
        default=None, metadata=wire(15, list_of(message_of(StackPack))))
    gather_mode: str | None = field(default=None, metadata=wire(16, STRING))
    main_document_url: str | None = field(default=None, metadata=wire(17, STRING))
    final_displayed_url: str | None = field(default=None, metadata=wire(18, STRING))
    full_page_screenshot: JsonValue = field(default=ABSENT, metadata=wire(19, VALUE))
    entities: list[Entity] = field(
        default_factory=list, metadata=wire(20, list_of(message_of(Entity)), required=True))

    @property
    def has_runtime_error(self) -> bool:
        return self.runtime_error is not None and self.runtime_error.code is not ErrorCode.NO_ERROR

    def audit_for(self, audit_id: str) -> AuditResult | None:
        """Audit by id, or None for a dangling reference."""
        return self.audits.get(audit_id)
