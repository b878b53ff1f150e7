"""Findings produced by the structural checks."""

from dataclasses import dataclass, field
from enum import Enum


class Severity(Enum):
    """Severity level for check findings."""
    PASS = "pass"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Finding:
    """A single observation about a record."""
    check: str
    message: str
    severity: Severity
    path: str | None = None  # field path, e.g. categories[performance].auditRefs[2]
    details: str | None = None
    fix_hint: str | None = None
    impact: int = 1  # 1-10 scale for prioritization


@dataclass
class CheckResult:
    """Findings of one check."""
    name: str
    findings: list[Finding] = field(default_factory=list)

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    @property
    def passed(self) -> bool:
        return not self.errors


@dataclass
class Validation:
    """Outcome of running every check against one result."""
    checks: list[CheckResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def findings(self) -> list[Finding]:
        return [f for c in self.checks for f in c.findings]

    def count(self, severity: Severity) -> int:
        return sum(1 for f in self.findings if f.severity is severity)

    @property
    def top_problems(self) -> list[Finding]:
        """Errors and warnings that come with a fix hint, most impactful first."""
        problems = [
            f for f in self.findings
            if f.severity in (Severity.ERROR, Severity.WARNING) and f.fix_hint
        ]
        return sorted(problems, key=lambda f: f.impact, reverse=True)[:5]
