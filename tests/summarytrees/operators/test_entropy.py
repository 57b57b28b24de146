"""
Tests for entropy accounting.

Tests for summarytrees/operators/entropy.py
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from summarytrees.operators.entropy import (
    allocation_entropy,
    expansion_gain,
    exposure_gain,
    local_split_entropy,
    piece_term,
    shannon_entropy,
    split_gain,
)
from summarytrees.trees.frontier import FrontierState
from summarytrees.trees.summary import SummaryTreeBuilder


class TestShannonEntropy:
    """Test the base entropy function."""

    def test_uniform(self):
        assert shannon_entropy([1, 1, 1, 1]) == pytest.approx(math.log(4))

    def test_unnormalized_input(self):
        """Weights are normalized before use."""
        assert shannon_entropy([2, 6]) == pytest.approx(shannon_entropy([0.25, 0.75]))

    def test_zero_terms_contribute_nothing(self):
        """0 * log 0 is taken as 0, never NaN."""
        assert shannon_entropy([0, 3, 0, 3]) == pytest.approx(math.log(2))

    def test_degenerate_inputs(self):
        assert shannon_entropy([]) == 0.0
        assert shannon_entropy([0, 0]) == 0.0
        assert shannon_entropy([5]) == 0.0

    def test_local_split_entropy_is_shannon(self):
        assert local_split_entropy([1, 2, 3]) == shannon_entropy([1, 2, 3])


class TestSplitGain:
    """Test the chain-rule gain of refining one cell."""

    def test_scaled_by_cell_mass(self):
        gain = split_gain(4.0, [2.0, 2.0], 16.0)
        assert gain == pytest.approx(0.25 * math.log(2))

    def test_empty_cell_gains_nothing(self):
        assert split_gain(0.0, [0.0, 0.0], 10.0) == 0.0
        assert split_gain(3.0, [1.0, 2.0], 0.0) == 0.0

    def test_piece_terms_sum_to_split_gain(self):
        pieces = [0.5, 2.0, 1.5, 0.0, 4.0]
        mass = sum(pieces)
        total = 20.0
        summed = sum(piece_term(x, mass, total) for x in pieces)
        assert summed == pytest.approx(split_gain(mass, pieces, total))

    def test_refinement_adds_up(self):
        """Splitting in two stages equals splitting at once."""
        direct = shannon_entropy([1, 2, 3, 4])
        staged = split_gain(10, [3, 7], 10) + split_gain(3, [1, 2], 10) + split_gain(7, [3, 4], 10)
        assert staged == pytest.approx(direct)

    def test_exposure_gain(self):
        """Pulling 1 of 4 units out of a pool of mass 4 in a tree of mass 8."""
        expected = 0.5 * shannon_entropy([1, 3])
        assert exposure_gain(4.0, 1.0, 8.0) == pytest.approx(expected)

    def test_expansion_gain(self, chain_tree):
        """Expanding A in root -> A -> B -> C splits 3 into 1 and 2."""
        model = chain_tree.model()
        assert expansion_gain(model, 1) == pytest.approx(shannon_entropy([1, 2]))
        assert expansion_gain(model, 0) == 0.0


class TestAllocationEntropy:
    """Test entropy of whole allocations."""

    def test_matches_rescan_of_summary(self, make_random_tree):
        model = make_random_tree(20, seed=11).model()
        pools = {model.root: frozenset()}
        for position in model.children(model.root):
            if not model.is_leaf(position):
                pools[position] = frozenset(model.children(position)[::2])
        state = FrontierState(model, pools)
        tree = SummaryTreeBuilder(model).build(state)
        assert allocation_entropy(state) == pytest.approx(shannon_entropy(tree.weights()))

    def test_custom_weights(self, star_tree):
        """The same allocation can be scored under different weights."""
        model = star_tree.model()
        state = FrontierState(model, {0: frozenset()})
        assert allocation_entropy(state) == pytest.approx(math.log(5))
        skewed = np.array([0, 4, 1, 1, 1, 1], dtype=np.float64)
        assert allocation_entropy(state, skewed) == pytest.approx(shannon_entropy(skewed))

    def test_root_alone(self, star_tree):
        model = star_tree.model()
        assert allocation_entropy(FrontierState.initial(model)) == 0.0
