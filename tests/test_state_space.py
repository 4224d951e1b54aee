"""Tests for the mixed-radix state encoding and action numbering."""

import itertools

import pytest

from utils.state_space import (
    NONE,
    StateEncoder,
    action_label,
    action_target,
    decrement,
    increment,
)


class TestStateEncoder:
    def test_uniform_sizes(self):
        enc = StateEncoder([4, 4])
        assert enc.num_states == 16
        assert enc.num_actions == 5
        assert enc.strides == (1, 4)

    def test_uniform_encoding_matches_powers_of_range(self):
        enc = StateEncoder([4, 4, 4])
        assert enc.encode((1, 2, 3)) == 1 + 2 * 4 + 3 * 16

    def test_bijection_uniform(self):
        enc = StateEncoder([3, 3, 3])
        for levels in itertools.product(range(3), repeat=3):
            assert enc.decode(enc.encode(levels)) == levels
        for index in range(enc.num_states):
            assert enc.encode(enc.decode(index)) == index

    def test_bijection_per_parameter_ranges(self):
        enc = StateEncoder([2, 5, 3])
        assert enc.num_states == 30
        seen = set()
        for levels in itertools.product(range(2), range(5), range(3)):
            index = enc.encode(levels)
            assert 0 <= index < enc.num_states
            assert enc.decode(index) == levels
            seen.add(index)
        assert len(seen) == 30

    def test_all_levels_in_index_order(self):
        enc = StateEncoder([2, 3])
        assert [enc.encode(levels) for levels in enc.all_levels()] == list(range(6))

    @pytest.mark.parametrize("levels", [(4, 0), (0, -1), (0,), (0, 0, 0)])
    def test_encode_rejects_invalid_levels(self, levels):
        with pytest.raises(ValueError):
            StateEncoder([4, 4]).encode(levels)

    @pytest.mark.parametrize("index", [-1, 16])
    def test_decode_rejects_out_of_range_index(self, index):
        with pytest.raises(ValueError):
            StateEncoder([4, 4]).decode(index)


class TestActions:
    def test_numbering(self):
        assert NONE == 0
        assert increment(0) == 1
        assert decrement(0) == 2
        assert increment(2) == 5
        assert decrement(2) == 6

    def test_action_target(self):
        assert action_target(NONE) == (-1, 0)
        assert action_target(increment(1)) == (1, 1)
        assert action_target(decrement(1)) == (1, -1)

    def test_labels(self):
        assert action_label(NONE) == "NONE"
        assert action_label(increment(0)) == "inc[0]"
        assert action_label(decrement(3)) == "dec[3]"

    def test_apply_action_and_delta_agree(self):
        enc = StateEncoder([4, 3])
        for levels in enc.all_levels():
            for action in range(enc.num_actions):
                try:
                    new_levels = enc.apply_action(levels, action)
                except ValueError:
                    continue
                assert enc.encode(new_levels) == enc.encode(levels) + enc.action_delta(action)

    def test_apply_action_refuses_to_leave_grid(self):
        enc = StateEncoder([4, 4])
        with pytest.raises(ValueError):
            enc.apply_action((3, 0), increment(0))
        with pytest.raises(ValueError):
            enc.apply_action((3, 0), decrement(1))

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            StateEncoder([4]).apply_action((0,), 3)
