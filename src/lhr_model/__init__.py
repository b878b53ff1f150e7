"""lhr-model - the audit run result record, its scoring and its wire forms."""

import logging

from .codec import DecodeIssue, dumps, from_bytes, from_dict, loads, to_bytes, to_dict
from .errors import ErrorCode, ErrorFamily, RunError, RunFailure, classify, runtime_error_for
from .exceptions import DecodeError, EncodeError, LhrError
from .fields import ABSENT
from .finalizer import failed_result, finalize_result
from .models import (
    AuditRef,
    AuditResult,
    Category,
    CategoryGroup,
    ConfigSettings,
    Entity,
    Environment,
    FormFactor,
    MetricSavings,
    Result,
    ScoreDisplayMode,
    StackPack,
    Timing,
)
from .scoring import category_scores, compute_category_score, score_rating
from .validation import validate_result

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ABSENT",
    "AuditRef",
    "AuditResult",
    "Category",
    "CategoryGroup",
    "ConfigSettings",
    "DecodeError",
    "DecodeIssue",
    "EncodeError",
    "Entity",
    "Environment",
    "ErrorCode",
    "ErrorFamily",
    "FormFactor",
    "LhrError",
    "MetricSavings",
    "Result",
    "RunError",
    "RunFailure",
    "ScoreDisplayMode",
    "StackPack",
    "Timing",
    "category_scores",
    "classify",
    "compute_category_score",
    "dumps",
    "failed_result",
    "finalize_result",
    "from_bytes",
    "from_dict",
    "loads",
    "runtime_error_for",
    "score_rating",
    "to_bytes",
    "to_dict",
    "validate_result",
]
