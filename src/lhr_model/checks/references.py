"""Reference checks: ids, audit refs and groups."""

import math

from ..findings import CheckResult, Finding, Severity
from ..models import Result


def check_references(result: Result) -> CheckResult:
    """Check that every id and reference in the result lines up.

    Looks at:
    - audit and category map keys against their ``id``
    - audit refs pointing at audits that do not exist
    - audit refs naming an unknown group
    - audit ref weights
    """
    findings: list[Finding] = []

    for key, audit in result.audits.items():
        if key != audit.id:
            findings.append(Finding(
                check="references",
                message=f"Audit keyed {key!r} has id {audit.id!r}",
                severity=Severity.ERROR,
                path=f"audits[{key}].id",
                fix_hint="Key every audit by its own id",
                impact=7,
            ))

    for key, category in result.categories.items():
        if key != category.id:
            findings.append(Finding(
                check="references",
                message=f"Category keyed {key!r} has id {category.id!r}",
                severity=Severity.ERROR,
                path=f"categories[{key}].id",
                fix_hint="Key every category by its own id",
                impact=7,
            ))

        for i, ref in enumerate(category.audit_refs):
            path = f"categories[{key}].auditRefs[{i}]"
            if ref.id not in result.audits:
                findings.append(Finding(
                    check="references",
                    message=f"Category {key!r} refers to missing audit {ref.id!r}",
                    severity=Severity.ERROR,
                    path=path,
                    details="The ref is skipped when the category is scored",
                    fix_hint="Remove the ref or add the audit",
                    impact=6,
                ))
            if ref.group is not None and ref.group not in result.category_groups:
                findings.append(Finding(
                    check="references",
                    message=f"Audit ref {ref.id!r} names unknown group {ref.group!r}",
                    severity=Severity.WARNING,
                    path=f"{path}.group",
                    fix_hint="Add the group to categoryGroups",
                    impact=2,
                ))
            if ref.weight is not None and (not math.isfinite(ref.weight) or ref.weight < 0):
                findings.append(Finding(
                    check="references",
                    message=f"Audit ref {ref.id!r} has unusable weight {ref.weight!r}",
                    severity=Severity.ERROR,
                    path=f"{path}.weight",
                    details="The ref is excluded from scoring",
                    fix_hint="Use a finite weight of zero or more",
                    impact=5,
                ))

    if not findings:
        findings.append(Finding(
            check="references",
            message="All ids and references resolve",
            severity=Severity.PASS,
        ))
    return CheckResult(name="References", findings=findings)
