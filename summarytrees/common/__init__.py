"""
Shared building blocks: validation errors and parameter schemas.
"""

from .errors import (
    BudgetOutOfRangeError,
    DanglingReferenceError,
    DuplicateNodeError,
    InvalidEpsilonError,
    InvalidWeightError,
    MalformedTreeError,
    SummaryTreeError,
)
from .params import METHODS, PlannerParams
from .schema_utils import SchemaClass, content_id

__all__ = [
    "BudgetOutOfRangeError",
    "DanglingReferenceError",
    "DuplicateNodeError",
    "InvalidEpsilonError",
    "InvalidWeightError",
    "MalformedTreeError",
    "METHODS",
    "PlannerParams",
    "SchemaClass",
    "SummaryTreeError",
    "content_id",
]
