"""
Planner interface and results.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import numpy as np

from summarytrees.trees.frontier import Expansion, FrontierState
from summarytrees.trees.model import TreeModel
from summarytrees.trees.summary import SummaryTree, SummaryTreeBuilder


@dataclass
class PlanResult:
    """
    Allocations and entropies for every k in [1, K].

    Attributes:
        method: Name of the planner that produced the result
        states: states[k - 1] is the allocation of the k-piece tree
        entropies: entropies[k - 1] is the entropy reached at k
        expansions: Greedy step sequence (empty for the dynamic programs)
        table: Dynamic programming table, when the planner builds one
    """

    method: str
    states: Tuple[FrontierState, ...]
    entropies: np.ndarray
    expansions: Tuple[Expansion, ...] = field(default=())
    table: Optional[Any] = None

    @property
    def max_k(self) -> int:
        return len(self.states)

    def entropy_table(self) -> np.ndarray:
        """K x 2 array of (k, entropy)."""
        ks = np.arange(1, self.max_k + 1, dtype=np.float64)
        return np.column_stack([ks, self.entropies])

    def summary_trees(self, model: TreeModel) -> List[SummaryTree]:
        builder = SummaryTreeBuilder(model)
        return [
            builder.build(state, entropy=float(entropy))
            for state, entropy in zip(self.states, self.entropies)
        ]


class AbstractPlanner(ABC):
    """
    Computes summary tree allocations for k = 1..K.

    Planners trust the TreeModel and the budget; validation happens before
    they are called.
    """

    method: str = ""

    @abstractmethod
    def plan(self, model: TreeModel, max_k: int) -> PlanResult:
        """
        Plan allocations for every k in [1, max_k].

        Args:
            model: Validated tree
            max_k: Budget K, 1 <= K <= model.n_nodes

        Returns:
            PlanResult with K states and K entropies
        """
        pass
