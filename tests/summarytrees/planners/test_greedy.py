"""
Tests for GreedyPlanner.

Tests for summarytrees/planners/greedy.py
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from summarytrees.operators.entropy import allocation_entropy, shannon_entropy
from summarytrees.planners.greedy import GreedyPlanner, replay
from summarytrees.trees.frontier import Expansion
from summarytrees.trees.model import TreeModel


class TestGreedyPlanner:
    """Test greedy steps and per-k results."""

    def test_one_state_per_k(self, make_random_tree):
        model = make_random_tree(25, seed=1).model()
        result = GreedyPlanner().plan(model, 10)
        assert result.method == "greedy"
        assert len(result.states) == 10
        assert len(result.expansions) == 9
        assert [s.size for s in result.states] == list(range(1, 11))

    def test_entropy_is_cumulative_gain(self, make_random_tree):
        """Reported entropy equals the entropy of each replayed state."""
        model = make_random_tree(25, seed=2).model()
        result = GreedyPlanner().plan(model, 12)
        for state, entropy in zip(result.states, result.entropies):
            assert entropy == pytest.approx(allocation_entropy(state), abs=1e-12)

    def test_first_step_expands_root(self, star_tree):
        model = star_tree.model()
        result = GreedyPlanner().plan(model, 2)
        assert result.expansions[0].kind == Expansion.EXPAND
        assert result.expansions[0].position == model.root
        assert result.entropies.tolist() == [0.0, 0.0]

    def test_star_reaches_maximum(self, star_tree):
        """All leaves exposed gives ln(n)."""
        model = star_tree.model()
        result = GreedyPlanner().plan(model, 6)
        assert result.entropies[0] == 0.0
        assert result.entropies[-1] == pytest.approx(math.log(5))

    def test_equal_gains_prefer_lower_id(self, star_tree):
        """Equal leaves come out of the pool in id order."""
        model = star_tree.model()
        result = GreedyPlanner().plan(model, 5)
        exposed_ids = [int(model.ids[e.position]) for e in result.expansions[1:]]
        assert exposed_ids == [2, 3, 4]

    def test_tie_break_independent_of_input_order(self, star_tree):
        """Shuffling input rows does not change the chosen steps."""
        model = star_tree.model()
        reversed_model = TreeModel(
            star_tree.ids[::-1], star_tree.parents[::-1], star_tree.weights[::-1]
        )
        a = [int(model.ids[e.position]) for e in GreedyPlanner().plan(model, 6).expansions]
        b = [
            int(reversed_model.ids[e.position])
            for e in GreedyPlanner().plan(reversed_model, 6).expansions
        ]
        assert a == b

    def test_picks_most_balanced_exposure(self, non_nested_tree):
        """From a pool of 12, 10 and 2 the 12 splits the pool evenly."""
        model = non_nested_tree.model()
        result = GreedyPlanner().plan(model, 4)
        assert int(model.ids[result.expansions[1].position]) == 2
        assert result.entropies[2] == pytest.approx(math.log(2))
        assert result.entropies[3] == pytest.approx(shannon_entropy([12, 10, 2]))

    def test_chain(self, chain_tree):
        model = chain_tree.model()
        result = GreedyPlanner().plan(model, 4)
        expected = [0.0, 0.0, shannon_entropy([1, 2]), shannon_entropy([1, 1, 1])]
        np.testing.assert_allclose(result.entropies, expected, atol=1e-12)

    def test_can_use_every_node(self, make_random_tree):
        model = make_random_tree(15, seed=4).model()
        result = GreedyPlanner().plan(model, model.n_nodes)
        assert result.states[-1].size == model.n_nodes
        assert result.entropies[-1] == pytest.approx(shannon_entropy(model.weights))

    def test_k_of_one(self, chain_tree):
        result = GreedyPlanner().plan(chain_tree.model(), 1)
        assert result.expansions == ()
        assert result.entropies.tolist() == [0.0]

    def test_deep_chain(self):
        n = 20000
        ids = list(range(1, n + 1))
        model = TreeModel(ids, [0] + ids[:-1], [1.0] * n)
        result = GreedyPlanner().plan(model, 3)
        assert result.entropies[-1] == pytest.approx(shannon_entropy([1.0, 1.0, n - 2.0]))


class TestReplay:
    def test_replay_matches_plan(self, make_random_tree):
        model = make_random_tree(18, seed=6).model()
        result = GreedyPlanner().plan(model, 8)
        states = replay(model, result.expansions[:4])
        assert states[-1] == result.states[4]
        assert len(states) == 5
