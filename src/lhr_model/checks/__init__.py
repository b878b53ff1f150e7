"""Structural checks for audit run results."""

from .references import check_references
from .runtime import check_runtime
from .scores import check_scores

__all__ = [
    "check_references",
    "check_scores",
    "check_runtime",
]
