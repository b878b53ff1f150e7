"""Score checks for audits and categories."""

from ..fields import finite_or_none, is_present
from ..findings import CheckResult, Finding, Severity
from ..models import Result, ScoreDisplayMode


def check_scores(result: Result) -> CheckResult:
    findings: list[Finding] = []

    for key, audit in result.audits.items():
        path = f"audits[{key}]"
        score = finite_or_none(audit.score)
        mode = audit.mode

        if mode is ScoreDisplayMode.UNSPECIFIED:
            findings.append(Finding(
                check="scores",
                message=f"Audit {key!r} has no score display mode",
                severity=Severity.WARNING,
                path=f"{path}.scoreDisplayMode",
                details="The audit still counts towards its categories as if it were scored",
                fix_hint="Set scoreDisplayMode",
                impact=4,
            ))
        elif mode.is_scored:
            if score is None or not 0 <= score <= 1:
                findings.append(Finding(
                    check="scores",
                    message=f"Scored audit {key!r} has score {audit.score!r}",
                    severity=Severity.ERROR,
                    path=f"{path}.score",
                    fix_hint="Give scored audits a number between 0 and 1",
                    impact=8,
                ))
        elif score is not None:
            findings.append(Finding(
                check="scores",
                message=f"Audit {key!r} is {mode.value} but carries score {score}",
                severity=Severity.WARNING,
                path=f"{path}.score",
                details="The score is ignored when categories are scored",
                impact=2,
            ))

    for key, category in result.categories.items():
        if not is_present(category.score) or category.score is None:
            continue
        score = finite_or_none(category.score)
        if score is None or not 0 <= score <= 1:
            findings.append(Finding(
                check="scores",
                message=f"Category {key!r} has score {category.score!r}",
                severity=Severity.ERROR,
                path=f"categories[{key}].score",
                fix_hint="Recompute category scores with finalize_result",
                impact=8,
            ))

    if not findings:
        findings.append(Finding(
            check="scores",
            message="All scores are in range",
            severity=Severity.PASS,
        ))
    return CheckResult(name="Scores", findings=findings)
