"""
Validation errors.

All of these are raised before any planning work starts. They subclass
ValueError so callers that only care about "bad input" can catch that.
"""

from __future__ import annotations


class SummaryTreeError(ValueError):
    """Base class for invalid trees, budgets and tolerances."""


class MalformedTreeError(SummaryTreeError):
    """Tree does not have exactly one root, or is otherwise not a tree."""


class DuplicateNodeError(SummaryTreeError):
    """The same node id appears more than once."""


class DanglingReferenceError(SummaryTreeError):
    """A parent id does not match any node."""


class InvalidWeightError(SummaryTreeError):
    """A weight is negative or not finite."""


class BudgetOutOfRangeError(SummaryTreeError):
    """K is below 1 or above the number of nodes."""


class InvalidEpsilonError(SummaryTreeError):
    """Error tolerance is negative or not finite."""
