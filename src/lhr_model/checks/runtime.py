"""Runtime error and schema-age checks."""

from ..compat import deprecated_fields_in_use
from ..errors import ErrorCode
from ..findings import CheckResult, Finding, Severity
from ..models import Result


def check_runtime(result: Result) -> CheckResult:
    """Check the runtime error envelope and deprecated field usage."""
    findings: list[Finding] = []
    error = result.runtime_error

    if error is not None and error.code is ErrorCode.NO_ERROR:
        findings.append(Finding(
            check="runtime",
            message="runtimeError is set to NO_ERROR",
            severity=Severity.WARNING,
            path="runtimeError",
            fix_hint="Leave runtimeError off for clean runs",
            impact=3,
        ))
    elif error is not None:
        findings.append(Finding(
            check="runtime",
            message=f"Run failed with {error.code.name}",
            severity=Severity.INFO,
            path="runtimeError",
            details=error.message,
        ))
        if result.audits or result.categories:
            findings.append(Finding(
                check="runtime",
                message="Audits and categories are best-effort because the run failed",
                severity=Severity.INFO,
            ))

    for path in deprecated_fields_in_use(result):
        findings.append(Finding(
            check="runtime",
            message=f"Deprecated field {path} is in use",
            severity=Severity.INFO,
            path=path,
            fix_hint="Run `lhr convert --upgrade` to fill in the replacement",
        ))

    if not findings:
        findings.append(Finding(
            check="runtime",
            message="Clean run, no deprecated fields",
            severity=Severity.PASS,
        ))
    return CheckResult(name="Runtime", findings=findings)
