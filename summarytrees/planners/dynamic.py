"""
Dynamic programs for maximum-entropy summary trees.

f(v, b) is the largest entropy contribution obtainable inside the subtree of
v when exactly b pieces are spent there. f(v, 1) = 0: v is shown collapsed.
For b >= 2, v is expanded: it shows its own weight, some children are
exposed with budgets b_c >= 1, and the rest are folded into one "other"
piece. By the chain rule

    f(v, b) = sum over exposed c of [f(c, b_c) + term(S(c))]
              + term(w(v)) + term(other mass)

where term(x) = -(x / W) * log(x / S(v)). The "other" term is not additive
over the folded children, so children are merged into a running table one
at a time, knapsack style, lightest first. While children may still be
folded the table is keyed by (pieces used so far, folded mass); once a child
is shown collapsed no heavier child is folded, the pool is scored and the
key drops to the piece count. A wide node of leaves therefore costs
O(children * K) states whatever the weights are.

With the model's own weights this is exact. Folded masses that differ only
by which children took budgets of 2 or more are what drives the running
time, which stays pseudo-polynomial for integer weights.

ApproximatePlanner runs the same program on weights rounded up to integer
multiples of a unit derived from epsilon. For small epsilon that unit can be
fine enough that the approximate run is slower than the exact one on the
same tree; this is expected and never causes a switch to
the exact planner.

Nodes are processed in reverse arena order. The arena is depth-sorted, so
every child is solved before its parent without recursion, however deep the
tree is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from summarytrees.operators.entropy import allocation_entropy, piece_term
from summarytrees.operators.rounding import (
    WeightTransform,
    identity_transform,
    rounding_transform,
)
from summarytrees.trees.frontier import FrontierState
from summarytrees.trees.model import TreeModel

from .base import AbstractPlanner, PlanResult

logger = logging.getLogger(__name__)

# Persistent list of (child position, child budget) decisions, newest first
Chain = Optional[Tuple[int, int, "Chain"]]


@dataclass(frozen=True)
class DPCell:
    """
    Best choice for one (node, budget) pair.

    Attributes:
        value: Entropy contribution of the node's subtree
        has_other: Whether some children are folded into an "other" piece
        chain: Exposed children and their budgets
    """

    value: float
    has_other: bool
    chain: Chain = None

    def choices(self) -> List[Tuple[int, int]]:
        """(child position, budget) for every exposed child, in child order."""
        out = []
        link = self.chain
        while link is not None:
            child, budget, link = link
            out.append((child, budget))
        return sorted(out)


def _offer(table: Dict, key, value: float, chain: Chain) -> None:
    # first offer wins ties, which keeps results independent of dict internals
    current = table.get(key)
    if current is None or value > current[0]:
        table[key] = (value, chain)


class SubtreeProgram:
    """
    The DP table over one weight vector.

    Example:
        program = SubtreeProgram(model, model.weights, max_k=5).run()
        program.value(3)        # best entropy with 3 pieces
        program.allocation(3)   # the FrontierState achieving it
    """

    def __init__(self, model: TreeModel, weights: np.ndarray, max_k: int):
        self.model = model
        self.max_k = max_k
        w = np.asarray(weights)
        self._weights = w.tolist()
        self._subtree = model.subtree_sums(w).tolist()
        self._total = self._subtree[model.root]
        self.cells: List[Optional[List[Optional[DPCell]]]] = [None] * model.n_nodes
        self.n_states = 0

    def run(self) -> SubtreeProgram:
        for position in range(self.model.n_nodes - 1, -1, -1):
            self.cells[position] = self._solve(position)
        logger.debug(f"DP merged {self.n_states} states over {self.model.n_nodes} nodes")
        return self

    def _solve(self, v: int) -> List[Optional[DPCell]]:
        model = self.model
        cap = min(self.max_k, int(model.subtree_size[v]))
        row: List[Optional[DPCell]] = [None] * (cap + 1)
        row[1] = DPCell(0.0, False)
        children = model.children(v)
        if not children or cap == 1:
            return row

        total = self._total
        mass = self._subtree[v]
        child_cap = cap - 1

        # Lightest children first. Trading a folded child for a lighter child
        # shown collapsed never lowers entropy, so some optimum folds nothing
        # after the first child shown with budget 1. From that child
        # on the pool is closed and scored, and only the piece count matters.
        order = sorted(children, key=lambda c: (self._subtree[c], c))

        # (used, folded mass or None, more than one folded) -> (value, chain);
        # the "other" piece is charged when the first child is folded
        folding: Dict[Tuple[int, Optional[float], bool], Tuple[float, Chain]] = {
            (0, None, False): (0.0, None)
        }
        # (used, has other) -> (value, chain)
        closed: Dict[Tuple[int, bool], Tuple[float, Chain]] = {}
        for c in order:
            c_mass = self._subtree[c]
            c_term = piece_term(c_mass, mass, total)
            c_row = self.cells[c]
            next_folding: Dict[Tuple[int, Optional[float], bool], Tuple[float, Chain]] = {}
            next_closed: Dict[Tuple[int, bool], Tuple[float, Chain]] = {}

            for (used, folded, several), (value, chain) in folding.items():
                if folded is None:
                    if used + 1 <= child_cap:
                        _offer(next_folding, (used + 1, c_mass, False), value, chain)
                else:
                    _offer(next_folding, (used, folded + c_mass, True), value, chain)

                for b_c in range(2, min(len(c_row) - 1, child_cap - used) + 1):
                    cell = c_row[b_c]
                    if cell is None:
                        continue
                    _offer(
                        next_folding,
                        (used + b_c, folded, several),
                        value + c_term + cell.value,
                        (c, b_c, chain),
                    )

                # a single folded child is the same piece as that child shown
                # collapsed, which the closed states already cover
                if used + 1 <= child_cap and (folded is None or several):
                    _offer(
                        next_closed,
                        (used + 1, folded is not None),
                        value + self._pool_term(folded, mass) + c_term,
                        (c, 1, chain),
                    )

            for (used, has_other), (value, chain) in closed.items():
                for b_c in range(1, min(len(c_row) - 1, child_cap - used) + 1):
                    cell = c_row[b_c]
                    if cell is None:
                        continue
                    _offer(
                        next_closed,
                        (used + b_c, has_other),
                        value + c_term + cell.value,
                        (c, b_c, chain),
                    )

            self.n_states += len(next_folding) + len(next_closed)
            folding, closed = next_folding, next_closed

        finals: List[Tuple[int, float, bool, Chain]] = [
            (used, value, has_other, chain) for (used, has_other), (value, chain) in closed.items()
        ]
        for (used, folded, several), (value, chain) in folding.items():
            if folded is None or several:
                finals.append(
                    (used, value + self._pool_term(folded, mass), folded is not None, chain)
                )

        own_term = piece_term(self._weights[v], mass, total)
        for used, value, has_other, chain in finals:
            b = used + 1
            value = value + own_term
            current = row[b]
            if current is None or value > current.value:
                row[b] = DPCell(value, has_other, chain)
        return row

    def _pool_term(self, folded: Optional[float], mass: float) -> float:
        if folded is None:
            return 0.0
        return piece_term(folded, mass, self._total)

    def value(self, k: int) -> float:
        return self._root_cell(k).value

    def _root_cell(self, k: int) -> DPCell:
        row = self.cells[self.model.root]
        if row is None:
            raise RuntimeError("Program has not been run")
        if k >= len(row) or row[k] is None:
            raise ValueError(f"No {k}-piece summary tree exists for this budget")
        return row[k]

    def allocation(self, k: int) -> FrontierState:
        """Unwind stored decisions top-down into the k-piece allocation."""
        self._root_cell(k)
        model = self.model
        pools = {}
        stack = [(model.root, k)]
        while stack:
            v, b = stack.pop()
            if b == 1:
                continue
            cell = self.cells[v][b]
            exposed = dict(cell.choices())
            pools[v] = frozenset(c for c in model.children(v) if c not in exposed)
            stack.extend(exposed.items())
        return FrontierState(model, pools)


class ExactPlanner(AbstractPlanner):
    """Maximum-entropy summary trees for every k, on the exact weights."""

    method = "exact"

    def program_weights(self, model: TreeModel, max_k: int) -> np.ndarray:
        return identity_transform(model)

    def run_program(self, model: TreeModel, max_k: int) -> SubtreeProgram:
        program = SubtreeProgram(model, self.program_weights(model, max_k), max_k).run()
        logger.info(
            f"{self.method} DP: K={max_k}, n={model.n_nodes}, "
            f"{program.n_states} merge states"
        )
        return program

    def plan(self, model: TreeModel, max_k: int) -> PlanResult:
        program = self.run_program(model, max_k)
        ks = range(1, max_k + 1)
        states = tuple(program.allocation(k) for k in ks)
        entropies = np.array([program.value(k) for k in ks], dtype=np.float64)
        return PlanResult(
            method=self.method, states=states, entropies=entropies, table=program
        )


class ApproximatePlanner(ExactPlanner):
    """
    Additive-error approximation: entropy within epsilon of the optimum.

    The program is solved on rounded weights; each chosen tree is then scored
    on the true weights, so the reported entropy never exceeds the exact
    optimum.
    """

    method = "approximate"

    def __init__(self, epsilon: float):
        self.epsilon = epsilon

    def program_weights(self, model: TreeModel, max_k: int) -> np.ndarray:
        transform: WeightTransform = rounding_transform(self.epsilon, max_k)
        return transform(model)

    def plan(self, model: TreeModel, max_k: int) -> PlanResult:
        program = self.run_program(model, max_k)
        states = tuple(program.allocation(k) for k in range(1, max_k + 1))
        entropies = np.array([allocation_entropy(s) for s in states], dtype=np.float64)
        return PlanResult(
            method=self.method, states=states, entropies=entropies, table=program
        )
