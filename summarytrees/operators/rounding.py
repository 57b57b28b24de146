"""
Weight transforms for the shared dynamic program.

The exact planner runs the program on the model's own weights; the
approximate planner runs it on weights rounded up to multiples of a unit
delta, expressed as integer unit counts. Both are plain functions of the
model, so the program itself never knows which one it got.

Choice of delta: rounding every weight up by less than one unit moves the
total mass by R < n * delta = t * W. For any k-piece summary tree the true
and rounded piece distributions are then within total variation
R / (W + R) < t, and by the Fannes-Audenaert inequality their entropies
differ by at most t * ln(k - 1) + h(t), h the binary entropy. The tree that is optimal for the
rounded weights therefore loses at most twice that against the true optimum,
so t is chosen with 2 * (t * ln(max(K - 1, 1)) + h(t)) <= epsilon.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable

import numpy as np

if TYPE_CHECKING:
    from summarytrees.trees.model import TreeModel

logger = logging.getLogger(__name__)

WeightTransform = Callable[["TreeModel"], np.ndarray]


def binary_entropy(t: float) -> float:
    if t <= 0 or t >= 1:
        return 0.0
    return -t * math.log(t) - (1 - t) * math.log(1 - t)


def perturbation_bound(t: float, max_k: int) -> float:
    """Largest entropy change of a max_k-piece tree at total variation t."""
    return t * math.log(max(max_k - 1, 1)) + binary_entropy(t)


def rounding_fraction(epsilon: float, max_k: int) -> float:
    """Largest t = epsilon / 2**j (capped at 1/2) with 2 * bound(t) <= epsilon."""
    if epsilon <= 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")
    t = min(epsilon, 0.5)
    while 2 * perturbation_bound(t, max_k) > epsilon:
        t /= 2
    return t


def rounding_unit(epsilon: float, total_weight: float, n_nodes: int, max_k: int) -> float:
    """Rounding unit delta for the given tolerance, total mass, size and budget."""
    if total_weight <= 0:
        return 1.0
    return rounding_fraction(epsilon, max_k) * total_weight / n_nodes


def round_up_weights(weights: np.ndarray, delta: float) -> np.ndarray:
    """Integer unit counts ceil(w / delta); zero stays zero."""
    if delta <= 0:
        raise ValueError(f"delta must be positive, got {delta}")
    return np.ceil(np.asarray(weights, dtype=np.float64) / delta).astype(np.int64)


def identity_transform(model: TreeModel) -> np.ndarray:
    return model.weights


def rounding_transform(epsilon: float, max_k: int) -> WeightTransform:
    """Build the transform used by the approximate planner."""

    def transform(model: TreeModel) -> np.ndarray:
        delta = rounding_unit(epsilon, model.total_weight, model.n_nodes, max_k)
        units = round_up_weights(model.weights, delta)
        logger.info(
            f"Rounding weights: epsilon={epsilon}, delta={delta:.6g}, "
            f"{int(units.sum())} units of total mass"
        )
        return units

    return transform
