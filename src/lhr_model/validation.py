"""Run every structural check against a result."""

import logging

from .checks import check_references, check_runtime, check_scores
from .findings import Validation
from .models import Result

log = logging.getLogger(__name__)


def validate_result(result: Result) -> Validation:
    """Run all checks; ``ok`` is false when any finding is an error."""
    validation = Validation(checks=[
        check_references(result),
        check_scores(result),
        check_runtime(result),
    ])
    log.debug("Validated %s: %d findings", result.requested_url, len(validation.findings))
    return validation
