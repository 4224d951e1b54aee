# agents/action_selector.py
import random
from typing import List, Sequence, Tuple

import numpy as np

from utils.state_space import NONE, StateEncoder, decrement, increment


class ActionSelector:
    """
    Epsilon-greedy selection restricted to actions that keep every level inside the grid.

    Convention: draw u in [0, 1); explore when u < epsilon, exploit otherwise.
    So epsilon is the probability of a random legal action and 1 - epsilon the
    probability of the greedy one.
    """

    def __init__(self, encoder: StateEncoder, rng: random.Random = None):
        self.encoder = encoder
        self.rng = rng or random.Random()

    def legal_actions(self, levels: Sequence[int]) -> List[int]:
        # enumeration order: NONE, inc0, dec0, inc1, dec1, ...
        actions = [NONE]
        for i, level in enumerate(levels):
            if level + 1 < self.encoder.ranges[i]:
                actions.append(increment(i))
            if level > 0:
                actions.append(decrement(i))
        return actions

    def legal_mask(self, levels: Sequence[int]) -> np.ndarray:
        mask = np.zeros(self.encoder.num_actions, dtype=bool)
        mask[self.legal_actions(levels)] = True
        return mask

    def greedy(self, q_row: np.ndarray, levels: Sequence[int]) -> int:
        # first legal action holding the maximum wins ties
        best_action = NONE
        best_value = q_row[NONE]
        for a in self.legal_actions(levels):
            if q_row[a] > best_value:
                best_value = q_row[a]
                best_action = a
        return best_action

    def max_value(self, q_row: np.ndarray, levels: Sequence[int]) -> float:
        return float(max(q_row[a] for a in self.legal_actions(levels)))

    def select(self, q_row: np.ndarray, levels: Sequence[int], epsilon: float) -> Tuple[int, bool]:
        """Return (action, explored)."""
        if self.rng.random() < epsilon:
            return self.rng.choice(self.legal_actions(levels)), True
        return self.greedy(q_row, levels), False
