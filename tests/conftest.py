"""
Pytest configuration and shared fixtures for summarytrees tests.

Provides small hand-checked trees and a seeded random tree factory.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional

import numpy as np
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from summarytrees.trees.model import TreeModel


@dataclass
class TreeColumns:
    """Input columns for one test tree."""

    ids: List[int]
    parents: List[int]
    weights: List[float]
    labels: Optional[List[Any]] = None

    def model(self) -> TreeModel:
        return TreeModel(self.ids, self.parents, self.weights, self.labels)

    @property
    def total(self) -> float:
        return float(sum(self.weights))


# =============================================================================
# Hand-built trees
# =============================================================================


@pytest.fixture
def star_tree() -> TreeColumns:
    """Root of weight 0 with five leaves of weight 1."""
    return TreeColumns(
        ids=[1, 2, 3, 4, 5, 6],
        parents=[0, 1, 1, 1, 1, 1],
        weights=[0, 1, 1, 1, 1, 1],
        labels=["root", "a", "b", "c", "d", "e"],
    )


@pytest.fixture
def chain_tree() -> TreeColumns:
    """root -> A -> B -> C with weights 0, 1, 1, 1."""
    return TreeColumns(
        ids=[1, 2, 3, 4],
        parents=[0, 1, 2, 3],
        weights=[0, 1, 1, 1],
        labels=["root", "A", "B", "C"],
    )


@pytest.fixture
def non_nested_tree() -> TreeColumns:
    """
    Tree whose optimal 3- and 4-piece summaries are not nested.

    root(0) has children L(12, leaf), G(5) and N(2, leaf); G has leaves
    g1(2) and g2(3). Best with 3 pieces: {root, L, other(G, N)} = (0, 12, 12).
    Best with 4 pieces: {root, G, other(g1, g2), other(L, N)} = (0, 5, 5, 14).
    """
    return TreeColumns(
        ids=[1, 2, 3, 4, 5, 6],
        parents=[0, 1, 1, 1, 3, 3],
        weights=[0, 12, 5, 2, 2, 3],
        labels=["root", "L", "G", "N", "g1", "g2"],
    )


@pytest.fixture
def shuffled_tree() -> TreeColumns:
    """Small two-level tree given in scrambled input order."""
    return TreeColumns(
        ids=[7, 3, 10, 1, 4, 12],
        parents=[3, 1, 3, 0, 1, 4],
        weights=[1.5, 2.0, 0.5, 1.0, 3.0, 2.0],
        labels=["g", "c", "j", "a", "d", "l"],
    )


# =============================================================================
# Random trees
# =============================================================================


def random_tree(n: int, seed: int, max_weight: int = 9, shuffle: bool = True) -> TreeColumns:
    """Random recursive tree with integer weights, ids 1..n."""
    rng = np.random.default_rng(seed)
    parents = [0] + [int(rng.integers(1, i + 1)) for i in range(1, n)]
    weights = [float(w) for w in rng.integers(0, max_weight + 1, size=n)]
    ids = list(range(1, n + 1))
    if shuffle:
        perm = rng.permutation(n)
        ids = [ids[i] for i in perm]
        parents = [parents[i] for i in perm]
        weights = [weights[i] for i in perm]
    return TreeColumns(ids=ids, parents=parents, weights=weights)


@pytest.fixture
def make_random_tree() -> Callable[..., TreeColumns]:
    """Factory for seeded random trees."""
    return random_tree
