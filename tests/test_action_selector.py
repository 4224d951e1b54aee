"""Tests for legal-action masking and epsilon-greedy selection."""

import random
from collections import Counter

import numpy as np

from agents.action_selector import ActionSelector
from utils.state_space import NONE, StateEncoder, decrement, increment


def make_selector(ranges=(4, 4), seed=0):
    return ActionSelector(StateEncoder(ranges), random.Random(seed))


class TestLegalActions:
    def test_mask_matches_definition_for_every_state(self):
        sel = make_selector((3, 4, 2))
        for levels in sel.encoder.all_levels():
            expected = {NONE}
            for i, level in enumerate(levels):
                if level + 1 < sel.encoder.ranges[i]:
                    expected.add(increment(i))
                if level > 0:
                    expected.add(decrement(i))
            assert set(sel.legal_actions(levels)) == expected
            mask = sel.legal_mask(levels)
            assert set(np.flatnonzero(mask)) == expected

    def test_enumeration_order(self):
        sel = make_selector((4, 4))
        assert sel.legal_actions((1, 2)) == [0, 1, 2, 3, 4]
        assert sel.legal_actions((0, 3)) == [NONE, increment(0), decrement(1)]

    def test_single_level_parameter_only_allows_none(self):
        sel = make_selector((1,))
        assert sel.legal_actions((0,)) == [NONE]


class TestGreedy:
    def test_picks_best_legal_action(self):
        sel = make_selector((4, 4))
        q_row = np.array([1.0, 2.0, 9.0, 3.0, 0.0])
        # decrement(0) is illegal at level 0
        assert sel.greedy(q_row, (0, 1)) == increment(1)
        assert sel.greedy(q_row, (1, 1)) == decrement(0)

    def test_tie_goes_to_first_in_enumeration_order(self):
        sel = make_selector((4, 4))
        q_row = np.full(5, 10.0)
        assert sel.greedy(q_row, (1, 1)) == NONE
        q_row = np.array([0.0, 5.0, 5.0, 5.0, 5.0])
        assert sel.greedy(q_row, (1, 1)) == increment(0)
        assert sel.greedy(q_row, (3, 1)) == decrement(0)

    def test_greedy_is_deterministic(self):
        sel = make_selector((4, 4), seed=123)
        q_row = np.array([1.0, 4.0, 4.0, 4.0, 2.0])
        picks = {sel.select(q_row, (2, 2), epsilon=0.0)[0] for _ in range(200)}
        assert picks == {increment(0)}

    def test_max_value_ignores_illegal_actions(self):
        sel = make_selector((4,))
        q_row = np.array([1.0, 0.5, 100.0])
        assert sel.max_value(q_row, (0,)) == 1.0
        assert sel.max_value(q_row, (2,)) == 100.0


class TestEpsilonGreedy:
    def test_mostly_exploit_regime(self):
        sel = make_selector((4, 4), seed=1)
        q_row = np.array([0.0, 0.0, 0.0, 7.0, 0.0])
        results = [sel.select(q_row, (1, 1), epsilon=0.05) for _ in range(2000)]
        explored = sum(1 for _, e in results if e)
        assert all(a == increment(1) for a, e in results if not e)
        assert 40 <= explored <= 170

    def test_mostly_explore_regime(self):
        sel = make_selector((4, 4), seed=2)
        q_row = np.array([0.0, 0.0, 0.0, 7.0, 0.0])
        results = [sel.select(q_row, (1, 1), epsilon=0.95) for _ in range(2000)]
        explored = sum(1 for _, e in results if e)
        assert explored >= 1800

    def test_epsilon_one_always_explores_epsilon_zero_never(self):
        sel = make_selector((4, 4), seed=3)
        q_row = np.zeros(5)
        assert all(sel.select(q_row, (0, 0), epsilon=1.0)[1] for _ in range(100))
        assert not any(sel.select(q_row, (0, 0), epsilon=0.0)[1] for _ in range(100))

    def test_exploration_is_uniform_over_legal_actions(self):
        sel = make_selector((4, 4), seed=4)
        q_row = np.zeros(5)
        counts = Counter(sel.select(q_row, (0, 3), epsilon=1.0)[0] for _ in range(3000))
        assert set(counts) == {NONE, increment(0), decrement(1)}
        for action in counts:
            assert 850 <= counts[action] <= 1150
