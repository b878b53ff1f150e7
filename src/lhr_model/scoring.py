"""Category score aggregation.

A category's score is the weighted mean of the scores of its audit refs. Only
refs that point at an existing audit outside the unscored display modes, with a
finite score and a positive finite weight take part. The sum is taken in the
order the refs are listed so the result is reproducible to the last bit.
"""

import logging
import math

from .config import AVERAGE_THRESHOLD, PASS_THRESHOLD
from .fields import finite_or_none
from .models import UNSCORED_MODES, AuditResult, Category, Result

log = logging.getLogger(__name__)


def countable_score(audit: AuditResult) -> float | None:
    """The audit's score if it takes part in aggregation, else None.

    Only the informative, not-applicable, manual and error modes are left out.
    A missing or unrecognised mode still counts, so a scored mode added by a
    newer producer keeps contributing.
    """
    if audit.mode in UNSCORED_MODES:
        return None
    return finite_or_none(audit.score)


def _usable_weight(weight: float | None) -> float | None:
    if weight is None or not math.isfinite(weight) or weight <= 0:
        return None
    return weight


def compute_category_score(category: Category, audits: dict[str, AuditResult]) -> float | None:
    """Weighted mean of the category's countable audit scores.

    Args:
        category: Category whose ``audit_refs`` are aggregated, in list order.
        audits: Audits of the run, keyed by id.

    Returns:
        The score clamped to [0, 1], or None when no ref carries weight or
        the weighted sum overflows.
    """
    numerator = 0.0
    denominator = 0.0
    for ref in category.audit_refs:
        audit = audits.get(ref.id)
        if audit is None:
            log.debug("Category %s refers to missing audit %s", category.id, ref.id)
            continue
        weight = _usable_weight(ref.weight)
        if weight is None:
            continue
        score = countable_score(audit)
        if score is None:
            continue
        numerator += weight * score
        denominator += weight

    if denominator == 0:
        return None
    quotient = numerator / denominator
    if not math.isfinite(quotient):
        log.warning("Category %s score overflowed, leaving it unscored", category.id)
        return None
    return min(1.0, max(0.0, quotient))


def category_scores(result: Result) -> dict[str, float | None]:
    """Computed score of every category in ``result``, keyed by category id."""
    return {
        category_id: compute_category_score(category, result.audits)
        for category_id, category in result.categories.items()
    }


def score_rating(score) -> str:
    """Rating band for a score: ``pass``, ``average``, ``fail`` or ``unscored``."""
    value = finite_or_none(score)
    if value is None:
        return "unscored"
    if value >= PASS_THRESHOLD:
        return "pass"
    if value >= AVERAGE_THRESHOLD:
        return "average"
    return "fail"
