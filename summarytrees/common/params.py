"""
Planner parameters.

PlannerParams is the single value object handed to planners; validate()
performs the budget and tolerance checks that must happen before any table
is allocated.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from .errors import BudgetOutOfRangeError, InvalidEpsilonError
from .schema_utils import SchemaClass

METHODS = ("greedy", "optimal")


@dataclass
class PlannerParams(SchemaClass):
    """
    Attributes:
        max_k: Largest summary tree size K; trees for every k in [1, K] are built
        epsilon: Additive entropy tolerance; 0 selects the exact planner
        method: "greedy" or "optimal"
    """

    max_k: int = 1
    epsilon: float = 0.0
    method: str = "optimal"

    @property
    def is_exact(self) -> bool:
        return self.method == "optimal" and self.epsilon == 0

    def validate(self, n_nodes: int) -> None:
        """
        Check K and epsilon against a tree of n_nodes nodes.

        Raises:
            BudgetOutOfRangeError: K is not an integer in [1, n_nodes]
            InvalidEpsilonError: epsilon is negative, NaN or infinite
            ValueError: unknown method
        """
        if self.method not in METHODS:
            raise ValueError(f"Unknown method {self.method!r}, expected one of {METHODS}")

        if isinstance(self.max_k, bool) or not isinstance(self.max_k, numbers.Integral):
            raise BudgetOutOfRangeError(f"K must be an integer, got {self.max_k!r}")
        if self.max_k < 1 or self.max_k > n_nodes:
            raise BudgetOutOfRangeError(
                f"K={self.max_k} outside [1, {n_nodes}] for a tree of {n_nodes} nodes"
            )

        if not isinstance(self.epsilon, numbers.Real) or not math.isfinite(self.epsilon):
            raise InvalidEpsilonError(f"epsilon must be a finite number, got {self.epsilon!r}")
        if self.epsilon < 0:
            raise InvalidEpsilonError(f"epsilon must be >= 0, got {self.epsilon}")
