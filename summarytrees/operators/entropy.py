"""
Entropy accounting for summary trees.

Refining one cell of a partition into sub-cells raises the Shannon entropy
of the whole partition by (cell mass / total mass) times the entropy of the
refinement. A summary tree is the result of a sequence of such refinements
(expanding a node, pulling children out of an "other" cluster), so its
entropy is a sum of independent non-negative split gains. Everything here
works in that additive form; nothing rescans a whole frontier.

All logarithms are natural.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np
from scipy.stats import entropy as _scipy_entropy

if TYPE_CHECKING:
    from summarytrees.trees.frontier import FrontierState
    from summarytrees.trees.model import TreeModel


def shannon_entropy(weights: Sequence[float]) -> float:
    """
    Shannon entropy of a non-negative weight vector after normalization.

    Zero entries contribute 0 (0 * log 0 := 0). An empty or all-zero vector
    has entropy 0.
    """
    w = np.asarray(weights, dtype=np.float64)
    if w.size == 0 or not np.any(w > 0):
        return 0.0
    return float(_scipy_entropy(w))


def local_split_entropy(pieces: Sequence[float]) -> float:
    """Entropy of splitting a cell into the given pieces."""
    return shannon_entropy(pieces)


def split_gain(mass: float, pieces: Sequence[float], total: float) -> float:
    """
    Global entropy gain of splitting a cell of `mass` into `pieces`.

    Args:
        mass: Mass of the cell being refined (sum of pieces)
        pieces: Masses of the sub-cells
        total: Total mass W of the tree

    Returns:
        (mass / total) * local_split_entropy(pieces)
    """
    if total <= 0 or mass <= 0:
        return 0.0
    return (mass / total) * local_split_entropy(pieces)


def expansion_gain(
    model: TreeModel,
    position: int,
    weights: Optional[np.ndarray] = None,
    subtree_weights: Optional[np.ndarray] = None,
) -> float:
    """
    Gain of expanding a collapsed node into its own weight plus its children.

    Right after expansion the children are either one "other" cluster or, for
    a single child, that child collapsed; both carry the same mass.
    """
    w = model.weights if weights is None else weights
    sw = model.subtree_weight if subtree_weights is None else subtree_weights
    mass = float(sw[position])
    own = float(w[position])
    return split_gain(mass, [own, max(mass - own, 0.0)], float(sw[model.root]))


def exposure_gain(pool_mass: float, child_mass: float, total: float) -> float:
    """Gain of pulling one child of mass `child_mass` out of an "other" pool."""
    return split_gain(pool_mass, [child_mass, max(pool_mass - child_mass, 0.0)], total)


def piece_term(mass: float, parent_mass: float, total: float) -> float:
    """
    One additive summand of a split gain.

    split_gain(M, [x_1..x_m], W) == sum(piece_term(x_i, M, W)); the dynamic
    programs add these one piece at a time.
    """
    if mass <= 0 or total <= 0:
        return 0.0
    return -(mass / total) * math.log(mass / parent_mass)


def allocation_entropy(
    state: FrontierState, weights: Optional[np.ndarray] = None
) -> float:
    """
    Entropy of the summary tree described by an allocation.

    Sums the split gain of every expanded node. With `weights` given (arena
    order), the same allocation is scored under those weights instead of the
    model's own.
    """
    model = state.model
    w = model.weights if weights is None else np.asarray(weights, dtype=np.float64)
    sw = model.subtree_weight if weights is None else model.subtree_sums(w)
    total = float(sw[model.root])

    result = 0.0
    for position in state.expanded_positions():
        pieces = [float(w[position])]
        pieces.extend(float(sw[c]) for c in state.exposed_children(position))
        pool = state.pool(position)
        if pool:
            pieces.append(float(sum(sw[c] for c in pool)))
        result += split_gain(float(sw[position]), pieces, total)
    return result
