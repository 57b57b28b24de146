"""
Greedy best-first planner.

Every frontier node offers at most one candidate step: a collapsed internal
node offers its own expansion, an expanded node with a non-empty "other"
pool offers the child whose exposure gains the most. A max-heap holds the
candidates; a node's entry is re-pushed only when its own options changed,
and superseded entries are skipped when popped.

The planner is myopic: a cheap step that would unlock a large later gain
can lose to a better-looking step now, so results can fall short of the
exact planner.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from summarytrees.operators.entropy import expansion_gain, exposure_gain
from summarytrees.trees.frontier import Expansion, FrontierState
from summarytrees.trees.model import TreeModel

from .base import AbstractPlanner, PlanResult

logger = logging.getLogger(__name__)


def replay(model: TreeModel, expansions: Iterable[Expansion]) -> List[FrontierState]:
    """States after 0, 1, 2, ... expansions, starting from the root alone."""
    state = FrontierState.initial(model)
    states = [state]
    for expansion in expansions:
        state = state.apply(expansion)
        states.append(state)
    return states


class GreedyPlanner(AbstractPlanner):
    """
    Best-first planner.

    Ties between equal gains go to the lower node id (the node being
    expanded, or the child being exposed).
    """

    method = "greedy"

    def plan(self, model: TreeModel, max_k: int) -> PlanResult:
        expansions = self.expansions(model, max_k - 1)
        states = replay(model, expansions)
        gains = np.array([e.gain for e in expansions], dtype=np.float64)
        entropies = np.concatenate([[0.0], np.cumsum(gains)])

        logger.info(
            f"Greedy plan: K={max_k}, n={model.n_nodes}, "
            f"final entropy {entropies[-1]:.6f}"
        )
        return PlanResult(
            method=self.method,
            states=tuple(states),
            entropies=entropies,
            expansions=tuple(expansions),
        )

    def expansions(self, model: TreeModel, n_steps: int) -> List[Expansion]:
        """The first n_steps greedy expansions."""
        total = model.total_weight
        state = FrontierState.initial(model)

        # (-gain, tie-break id, sequence, owner, step); sequence -> owner version
        heap: List[Tuple[float, int, int, int, Expansion]] = []
        entries: Dict[int, int] = {}
        version: Dict[int, int] = {}
        sequence = itertools.count()

        def push_entry(owner: int) -> None:
            version[owner] = version.get(owner, 0) + 1
            candidate = self._candidate(model, state, owner, total)
            if candidate is None:
                return
            target_id, expansion = candidate
            seq = next(sequence)
            entries[seq] = version[owner]
            heapq.heappush(heap, (-expansion.gain, target_id, seq, owner, expansion))

        push_entry(model.root)
        steps: List[Expansion] = []
        while len(steps) < n_steps:
            if not heap:
                raise RuntimeError(
                    f"No expansion available after {len(steps)} steps; K exceeds tree size"
                )
            _, _, seq, owner, expansion = heapq.heappop(heap)
            if entries.pop(seq) != version[owner]:
                continue

            before = state.pool(owner) if expansion.kind == Expansion.EXPOSE else frozenset()
            state = state.apply(expansion)
            steps.append(expansion)
            logger.debug(
                f"step {len(steps)}: {expansion.kind} node "
                f"{int(model.ids[expansion.position])} gain={expansion.gain:.6g}"
            )

            if expansion.kind == Expansion.EXPAND:
                push_entry(owner)
                for child in state.exposed_children(owner):
                    push_entry(child)
            else:
                push_entry(owner)
                for child in sorted(before - state.pool(owner)):
                    push_entry(child)

        return steps

    @staticmethod
    def _candidate(
        model: TreeModel, state: FrontierState, owner: int, total: float
    ) -> Optional[Tuple[int, Expansion]]:
        """Best step offered by one frontier node, with its tie-break id."""
        sw = model.subtree_weight
        if not state.is_expanded(owner):
            if model.is_leaf(owner):
                return None
            gain = expansion_gain(model, owner)
            return int(model.ids[owner]), Expansion(Expansion.EXPAND, owner, gain)

        pool = sorted(state.pool(owner))
        if not pool:
            return None
        pool_mass = float(sum(sw[c] for c in pool))
        # siblings are contiguous and id-ordered, so strict > keeps the lower id
        best: Optional[Tuple[float, int]] = None
        for child in pool:
            gain = exposure_gain(pool_mass, float(sw[child]), total)
            if best is None or gain > best[0]:
                best = (gain, child)
        gain, child = best
        return int(model.ids[child]), Expansion(Expansion.EXPOSE, child, gain)
