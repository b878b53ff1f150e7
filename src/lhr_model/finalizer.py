"""Closing out a run: runtime error and category scores."""

import logging
from datetime import datetime, timezone

from .errors import classify
from .models import Result
from .scoring import compute_category_score

log = logging.getLogger(__name__)


def finalize_result(result: Result, failure=None) -> Result:
    """Attach the run's outcome to ``result`` and score its categories.

    Call this once, after every audit is in place. When ``failure`` classifies
    to a runtime error, or one is already attached, the categories keep
    whatever scores they have: aggregating over a broken run would present
    its audits as authoritative.

    Args:
        result: The result to finalize; it is updated in place.
        failure: Anything ``errors.classify`` accepts, or None for a clean run.

    Returns:
        The same result, for chaining.
    """
    error = classify(failure)
    if error is not None:
        result.runtime_error = error
    if result.has_runtime_error:
        log.info("Run ended with %s, category scores left as they are",
                 result.runtime_error.code.name)
        return result

    for category_id, category in result.categories.items():
        category.score = compute_category_score(category, result.audits)
        log.debug("Category %s scored %r", category_id, category.score)
    return result


def failed_result(
    requested_url: str,
    failure,
    *,
    lighthouse_version: str,
    fetch_time: datetime | None = None,
    **fields,
) -> Result:
    """A result for a run that failed before any audit could run.

    Args:
        requested_url: URL the run was asked to load; also used as the final URL.
        failure: Anything ``errors.classify`` accepts except None.
        lighthouse_version: Version string of the producer.
        fetch_time: Start of the run. Defaults to now, in UTC.
        **fields: Any other ``Result`` fields to set.

    Raises:
        ValueError: ``failure`` classifies to a clean run.
    """
    error = classify(failure)
    if error is None:
        raise ValueError("failed_result needs a failure, not a clean run")
    fields.setdefault("final_url", requested_url)
    return Result(
        fetch_time=fetch_time or datetime.now(timezone.utc),
        requested_url=requested_url,
        lighthouse_version=lighthouse_version,
        runtime_error=error,
        **fields,
    )
