"""
Entry points.

    result = optimal(ids, parents, weights, labels, K=10)
    result.entropy            # K x 2 array of (k, entropy)
    result.records(4)         # rows of the 4-piece summary tree

greedy() runs the best-first heuristic; optimal() runs the exact dynamic
program when epsilon is 0 and the approximation scheme otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from summarytrees.common.params import PlannerParams
from summarytrees.planners import (
    AbstractPlanner,
    ApproximatePlanner,
    ExactPlanner,
    GreedyPlanner,
)
from summarytrees.trees.model import TreeData, TreeModel
from summarytrees.trees.summary import SummaryTree

logger = logging.getLogger(__name__)


@dataclass
class SummaryResult:
    """
    Everything a caller needs to draw or tabulate the summaries.

    Attributes:
        data: Input columns reordered by (depth, parent id, id)
        order: data row i came from input row order[i]
        tree: n x 3 compact tree (parent id, first child, last child position)
        summary_trees: summary_trees[k - 1] has exactly k pieces
        entropy: K x 2 array of (k, entropy)
        params: Parameters of the run
    """

    data: TreeData
    order: np.ndarray
    tree: np.ndarray
    summary_trees: List[SummaryTree]
    entropy: np.ndarray
    params: PlannerParams

    def records(self, k: int) -> list:
        return self.summary_trees[k - 1].to_records()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view (labels are stringified)."""
        return {
            "params": self.params.to_dict(),
            "run_id": self.params.get_id(),
            "order": self.order.tolist(),
            "tree": self.tree.tolist(),
            "entropy": self.entropy.tolist(),
            "summary_trees": [
                [
                    [node_id, parent_id, weight, piece_type, str(label)]
                    for node_id, parent_id, weight, piece_type, label in tree.to_records()
                ]
                for tree in self.summary_trees
            ],
        }


def make_planner(params: PlannerParams) -> AbstractPlanner:
    if params.method == "greedy":
        return GreedyPlanner()
    if params.is_exact:
        return ExactPlanner()
    return ApproximatePlanner(params.epsilon)


def summarize(
    ids: Sequence[int],
    parents: Sequence[int],
    weights: Sequence[float],
    labels: Optional[Sequence[Any]],
    params: PlannerParams,
) -> SummaryResult:
    """
    Validate, plan and build summary trees for k = 1..params.max_k.

    Raises:
        SummaryTreeError subclasses on invalid trees, budgets or tolerances,
        always before any planning work
    """
    model = TreeModel(ids, parents, weights, labels)
    params.validate(model.n_nodes)

    planner = make_planner(params)
    logger.info(
        f"Summarizing {model.n_nodes} nodes with {planner.method} planner, "
        f"K={params.max_k}, epsilon={params.epsilon}"
    )
    plan = planner.plan(model, params.max_k)

    return SummaryResult(
        data=model.reordered(),
        order=np.array(model.order),
        tree=model.compact(),
        summary_trees=plan.summary_trees(model),
        entropy=plan.entropy_table(),
        params=params,
    )


def greedy(
    ids: Sequence[int],
    parents: Sequence[int],
    weights: Sequence[float],
    labels: Optional[Sequence[Any]],
    K: int,
) -> SummaryResult:
    """Greedy summary trees for k = 1..K."""
    return summarize(ids, parents, weights, labels, PlannerParams(max_k=K, method="greedy"))


def optimal(
    ids: Sequence[int],
    parents: Sequence[int],
    weights: Sequence[float],
    labels: Optional[Sequence[Any]],
    K: int,
    epsilon: float = 0.0,
) -> SummaryResult:
    """
    Maximum-entropy summary trees for k = 1..K.

    Args:
        epsilon: 0 for the exact optimum; > 0 for trees within epsilon of it
    """
    params = PlannerParams(max_k=K, epsilon=epsilon, method="optimal")
    return summarize(ids, parents, weights, labels, params)
