"""JSON and binary wire forms."""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone

import msgpack
import pytest

from lhr_model.codec import (
    DecodeIssue,
    dumps,
    from_bytes,
    from_dict,
    loads,
    to_bytes,
    to_dict,
)
from lhr_model.config import BINARY_FORMAT_VERSION
from lhr_model.errors import ErrorCode, RunError
from lhr_model.exceptions import DecodeError, EncodeError
from lhr_model.fields import ABSENT
from lhr_model.models import FormFactor, MetricSavings, ScoreDisplayMode

pytestmark = pytest.mark.unit


def _minimal_tree() -> dict:
    return {
        "fetchTime": "2024-05-01T12:30:15.250Z",
        "requestedUrl": "https://example.com/",
        "finalUrl": "https://example.com/",
        "lighthouseVersion": "12.0.0",
    }


class TestRoundTrip:
    """decode(encode(R)) == R in both forms."""

    def test_json_round_trip(self, sample_result) -> None:
        assert loads(dumps(sample_result)) == sample_result

    def test_binary_round_trip(self, sample_result) -> None:
        assert from_bytes(to_bytes(sample_result)) == sample_result

    def test_absent_null_and_value_survive(self, make_audit, make_result) -> None:
        """The three states of a generic value are kept apart."""
        result = make_result(audits=[
            make_audit("absent", ABSENT),
            make_audit("null", None),
            make_audit("value", 0.25),
        ])

        tree = to_dict(result)
        assert "score" not in tree["audits"]["absent"]
        assert tree["audits"]["null"]["score"] is None
        assert tree["audits"]["value"]["score"] == 0.25

        for decoded in (loads(dumps(result)), from_bytes(to_bytes(result))):
            assert decoded.audits["absent"].score is ABSENT
            assert decoded.audits["null"].score is None
            assert decoded.audits["value"].score == 0.25

    def test_metric_savings_with_only_cls(self, make_audit, make_result) -> None:
        """One present metric and four absent ones come back exactly."""
        result = make_result(audits=[
            make_audit("layout-shifts", 0.9, metric_savings=MetricSavings(cls=0.12)),
        ])

        assert to_dict(result)["audits"]["layout-shifts"]["metricSavings"] == {"CLS": 0.12}
        for decoded in (loads(dumps(result)), from_bytes(to_bytes(result))):
            savings = decoded.audits["layout-shifts"].metric_savings
            assert savings == MetricSavings(cls=0.12)
            assert savings.present() == {"CLS": 0.12}

    def test_runtime_error_round_trip(self, make_result) -> None:
        result = make_result(runtime_error=RunError(ErrorCode.DNS_FAILURE, "no such host"))

        tree = to_dict(result)
        assert tree["runtimeError"] == {"code": "DNS_FAILURE", "message": "no such host"}
        assert from_bytes(to_bytes(result)).runtime_error == result.runtime_error

    def test_empty_containers_are_emitted(self, make_result) -> None:
        tree = to_dict(make_result())

        assert tree["audits"] == {}
        assert tree["categories"] == {}
        assert tree["entities"] == []
        assert tree["timing"] == {"entries": []}
        assert "runWarnings" not in tree


class TestJsonNames:

    def test_keys_are_lower_camel(self, sample_result) -> None:
        tree = to_dict(sample_result)

        assert "finalDisplayedUrl" in tree
        assert "categoryGroups" in tree
        assert tree["configSettings"]["formFactor"] == "mobile"
        assert tree["categories"]["performance"]["auditRefs"][0]["acronym"] == "FCP"

    def test_snake_case_names_are_accepted(self) -> None:
        tree = {
            "fetch_time": "2024-05-01T12:30:15Z",
            "requested_url": "https://a.test/",
            "final_url": "https://a.test/",
            "lighthouse_version": "9.6.8",
            "final_displayed_url": "https://a.test/home",
        }

        result = from_dict(tree)

        assert result.final_displayed_url == "https://a.test/home"

    def test_overridden_names(self, make_audit, make_result) -> None:
        result = make_result(audits=[make_audit("x", 1.0, error_stack="Error: at line 1")])

        assert to_dict(result)["audits"]["x"]["errorStack"] == "Error: at line 1"


class TestEnums:

    @pytest.mark.parametrize("spelling", ["notApplicable", "not_applicable", 7, 4])
    def test_not_applicable_spellings(self, spelling) -> None:
        """Every spelling decodes to one member and re-encodes canonically."""
        tree = _minimal_tree()
        tree["audits"] = {"a": {"id": "a", "title": "A", "scoreDisplayMode": spelling}}

        result = from_dict(tree)

        assert result.audits["a"].score_display_mode is ScoreDisplayMode.NOT_APPLICABLE
        assert to_dict(result)["audits"]["a"]["scoreDisplayMode"] == "notApplicable"

    def test_unknown_symbol_maps_to_unspecified(self) -> None:
        """Unknown enum symbols never fail; they are recorded as an issue."""
        tree = _minimal_tree()
        tree["audits"] = {"a": {"id": "a", "title": "A", "scoreDisplayMode": "sparkly"}}
        issues: list[DecodeIssue] = []

        result = from_dict(tree, strict=True, issues=issues)

        assert result.audits["a"].score_display_mode is ScoreDisplayMode.UNSPECIFIED
        assert [i.path for i in issues] == ["audits[a].scoreDisplayMode"]

    def test_unknown_error_code_is_not_a_clean_run(self) -> None:
        tree = _minimal_tree()
        tree["runtimeError"] = {"code": "SOMETHING_NEW", "message": "?"}

        result = from_dict(tree)

        assert result.runtime_error.code is ErrorCode.UNKNOWN_ERROR

    def test_deprecated_form_factor_is_kept(self) -> None:
        tree = _minimal_tree()
        tree["configSettings"] = {"emulatedFormFactor": "none"}

        result = from_dict(tree)

        assert result.config_settings.emulated_form_factor is FormFactor.NONE
        assert to_dict(result)["configSettings"]["emulatedFormFactor"] == "none"


class TestRequiredFields:

    def test_missing_required_root_field(self) -> None:
        tree = _minimal_tree()
        del tree["finalUrl"]

        with pytest.raises(DecodeError) as exc_info:
            from_dict(tree)

        assert exc_info.value.path == "finalUrl"

    def test_missing_audit_id_names_its_path(self) -> None:
        tree = _minimal_tree()
        tree["audits"] = {"first-contentful-paint": {"title": "FCP"}}

        with pytest.raises(DecodeError) as exc_info:
            from_dict(tree)

        assert exc_info.value.path == "audits[first-contentful-paint].id"
        assert "audits[first-contentful-paint].id" in str(exc_info.value)

    def test_malformed_required_field(self) -> None:
        tree = _minimal_tree()
        tree["requestedUrl"] = 42

        with pytest.raises(DecodeError, match="requestedUrl"):
            from_dict(tree)

    def test_root_must_be_an_object(self) -> None:
        with pytest.raises(DecodeError):
            from_dict(["not", "a", "result"])

    def test_encoding_unset_required_field_fails(self, make_result) -> None:
        result = make_result()
        result.final_url = None

        with pytest.raises(EncodeError) as exc_info:
            to_dict(result)

        assert exc_info.value.path == "finalUrl"


class TestRecovery:

    def test_malformed_optional_field_is_dropped(self) -> None:
        tree = _minimal_tree()
        tree["userAgent"] = ["not", "a", "string"]
        issues: list[DecodeIssue] = []

        result = from_dict(tree, issues=issues)

        assert result.user_agent is None
        assert len(issues) == 1
        assert issues[0].path == "userAgent"

    def test_malformed_list_item_is_dropped(self) -> None:
        tree = _minimal_tree()
        tree["runWarnings"] = ["ok", 3, "also ok"]
        issues: list[DecodeIssue] = []

        result = from_dict(tree, issues=issues)

        assert result.run_warnings == ["ok", "also ok"]
        assert issues == [DecodeIssue("runWarnings[1]", "expected a string, got int")]

    def test_strict_mode_raises(self) -> None:
        tree = _minimal_tree()
        tree["userAgent"] = 12

        with pytest.raises(DecodeError) as exc_info:
            from_dict(tree, strict=True)

        assert exc_info.value.path == "userAgent"

    def test_null_counts_as_absent(self) -> None:
        tree = _minimal_tree()
        tree["userAgent"] = None
        tree["runtimeError"] = None

        result = from_dict(tree)

        assert result.user_agent is None
        assert result.runtime_error is None

    def test_unknown_fields_are_ignored(self) -> None:
        tree = _minimal_tree()
        tree["somethingFromTheFuture"] = {"a": 1}

        assert from_dict(tree).requested_url == "https://example.com/"

    def test_missing_container_decodes_empty(self) -> None:
        result = from_dict(_minimal_tree())

        assert result.audits == {}
        assert result.entities == []
        assert result.timing.entries == []


class TestJsonText:

    def test_non_finite_doubles_use_strings(self, make_audit, make_result) -> None:
        result = make_result(audits=[make_audit("a", 1.0, numeric_value=math.inf,
                                                guidance_level=-math.inf)])
        result.environment.benchmark_index = math.nan

        text = dumps(result)
        tree = json.loads(text)

        assert tree["audits"]["a"]["numericValue"] == "Infinity"
        assert tree["audits"]["a"]["guidanceLevel"] == "-Infinity"
        assert tree["environment"]["benchmarkIndex"] == "NaN"

        decoded = loads(text)
        assert decoded.audits["a"].numeric_value == math.inf
        assert decoded.audits["a"].guidance_level == -math.inf
        assert math.isnan(decoded.environment.benchmark_index)

    def test_non_finite_generic_value_becomes_null(self, make_audit, make_result) -> None:
        result = make_result(audits=[make_audit("a", math.nan)])

        assert to_dict(result)["audits"]["a"]["score"] is None

    def test_duplicate_keys_keep_the_first(self) -> None:
        """A repeated key is recorded with its path and the first value wins."""
        text = ('{"fetchTime": "2024-05-01T12:30:15Z", "requestedUrl": "a", "finalUrl": "b",'
                ' "finalUrl": "c", "lighthouseVersion": "1"}')
        issues: list[DecodeIssue] = []

        result = loads(text, issues=issues)

        assert result.final_url == "b"
        assert [i.path for i in issues] == ["finalUrl"]

    def test_duplicate_key_inside_details(self) -> None:
        """A repeated key deep inside an opaque payload does not lose the record."""
        text = ('{"fetchTime": "2024-05-01T12:30:15Z", "requestedUrl": "a", "finalUrl": "b",'
                ' "lighthouseVersion": "1", "audits": {"x": {"id": "x", "title": "X",'
                ' "details": {"type": "table", "type": "list", "items": []}}}}')
        issues: list[DecodeIssue] = []

        result = loads(text, issues=issues)

        assert result.audits["x"].details == {"type": "table", "items": []}
        assert issues == [DecodeIssue("audits[x].details.type",
                                      "key given more than once, keeping the first")]

    def test_duplicate_keys_fail_in_strict_mode(self) -> None:
        text = ('{"fetchTime": "2024-05-01T12:30:15Z", "requestedUrl": "a", "finalUrl": "b",'
                ' "lighthouseVersion": "1", "audits": {"x": {"id": "x", "title": "X",'
                ' "details": {"type": "table", "type": "list"}}}}')

        with pytest.raises(DecodeError) as exc_info:
            loads(text, strict=True)

        assert exc_info.value.path == "audits[x].details.type"

    def test_invalid_json(self) -> None:
        with pytest.raises(DecodeError, match="invalid JSON"):
            loads("{not json")

    def test_output_is_strict_json(self, sample_result) -> None:
        """No NaN or Infinity literals ever reach the text."""
        sample_result.audits["viewport"].numeric_value = math.nan
        text = dumps(sample_result)

        json.loads(text, parse_constant=lambda name: pytest.fail(f"found {name}"))


class TestTimestamps:

    def test_millisecond_precision_with_z(self, make_result) -> None:
        tree = to_dict(make_result())
        assert tree["fetchTime"] == "2024-05-01T12:30:15.250Z"

    def test_microsecond_precision_when_needed(self, make_result) -> None:
        moment = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        tree = to_dict(make_result(fetch_time=moment))

        assert tree["fetchTime"] == "2024-05-01T12:00:00.123456Z"
        assert from_dict(tree).fetch_time == moment

    def test_offsets_are_normalized_to_utc(self, make_result) -> None:
        moment = datetime(2024, 5, 1, 14, 30, 15, tzinfo=timezone(timedelta(hours=2)))
        tree = to_dict(make_result(fetch_time=moment))

        assert tree["fetchTime"] == "2024-05-01T12:30:15.000Z"

    def test_epoch_seconds_are_accepted(self) -> None:
        tree = _minimal_tree()
        tree["fetchTime"] = 0

        assert from_dict(tree).fetch_time == datetime(1970, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("2024-05-01T12:30:15.5Z", datetime(2024, 5, 1, 12, 30, 15, 500000, tzinfo=timezone.utc)),
            ("2024-05-01T12:30:15.12+0000", datetime(2024, 5, 1, 12, 30, 15, 120000, tzinfo=timezone.utc)),
            ("2024-05-01T14:30:15+02", datetime(2024, 5, 1, 12, 30, 15, tzinfo=timezone.utc)),
            ("2024-05-01T12:30:15.123456789Z", datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)),
            ("2024-05-01T12:30:15", datetime(2024, 5, 1, 12, 30, 15, tzinfo=timezone.utc)),
        ],
    )
    def test_timestamp_spellings(self, text, expected) -> None:
        """Short fractions and compact offsets read the same on every supported Python."""
        tree = _minimal_tree()
        tree["fetchTime"] = text

        assert from_dict(tree).fetch_time == expected

    def test_bad_timestamp_fails_required_field(self) -> None:
        tree = _minimal_tree()
        tree["fetchTime"] = "yesterday"

        with pytest.raises(DecodeError) as exc_info:
            from_dict(tree)

        assert exc_info.value.path == "fetchTime"


class TestBinary:

    def test_keys_are_field_numbers(self, sample_result) -> None:
        tree = msgpack.unpackb(to_bytes(sample_result), strict_map_key=False, timestamp=3)

        assert tree[0] == BINARY_FORMAT_VERSION
        assert tree[2] == "https://example.com/"
        assert tree[1] == sample_result.fetch_time

    def test_non_finite_floats_stay_native(self, make_audit, make_result) -> None:
        result = make_result(audits=[make_audit("a", math.inf, numeric_value=-math.inf)])

        decoded = from_bytes(to_bytes(result))

        assert decoded.audits["a"].score == math.inf
        assert decoded.audits["a"].numeric_value == -math.inf

    def test_newer_version_is_rejected(self, sample_result) -> None:
        tree = msgpack.unpackb(to_bytes(sample_result), strict_map_key=False, timestamp=3)
        tree[0] = BINARY_FORMAT_VERSION + 1
        data = msgpack.packb(tree, datetime=True)

        with pytest.raises(DecodeError, match="newer"):
            from_bytes(data)

    def test_missing_version_is_rejected(self) -> None:
        with pytest.raises(DecodeError, match="version"):
            from_bytes(msgpack.packb({2: "https://example.com/"}))

    def test_garbage_is_rejected(self) -> None:
        with pytest.raises(DecodeError):
            from_bytes(b"\xc1\xc1\xc1")

    def test_binary_is_smaller_than_json(self, sample_result) -> None:
        assert len(to_bytes(sample_result)) < len(dumps(sample_result).encode())
