"""
Summarytrees: maximum-entropy summaries of weighted trees.

Given a rooted tree with non-negative node weights, a k-node summary tree
shows some nodes individually, collapses whole subtrees into single nodes and
groups leftover siblings into "other" clusters, keeping total weight intact.
This package finds, for every k up to a budget K, the summary whose
displayed weights have the largest Shannon entropy.
"""

__version__ = "0.1.0"

from .api import SummaryResult, greedy, optimal, summarize
from .common import (
    BudgetOutOfRangeError,
    DanglingReferenceError,
    DuplicateNodeError,
    InvalidEpsilonError,
    InvalidWeightError,
    MalformedTreeError,
    PlannerParams,
    SummaryTreeError,
)
from .planners import (
    ApproximatePlanner,
    ExactPlanner,
    GreedyPlanner,
    PlanResult,
)
from .trees import (
    FrontierNode,
    FrontierState,
    PieceType,
    SummaryTree,
    SummaryTreeBuilder,
    TreeModel,
)

__all__ = [
    # Entry points
    "SummaryResult",
    "greedy",
    "optimal",
    "summarize",
    # Errors and params
    "BudgetOutOfRangeError",
    "DanglingReferenceError",
    "DuplicateNodeError",
    "InvalidEpsilonError",
    "InvalidWeightError",
    "MalformedTreeError",
    "PlannerParams",
    "SummaryTreeError",
    # Planners
    "ApproximatePlanner",
    "ExactPlanner",
    "GreedyPlanner",
    "PlanResult",
    # Trees
    "FrontierNode",
    "FrontierState",
    "PieceType",
    "SummaryTree",
    "SummaryTreeBuilder",
    "TreeModel",
]
