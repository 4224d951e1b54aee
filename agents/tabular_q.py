# agents/tabular_q.py
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from agents.config import CURRENT_ACTION, Q_LEARNING
from utils.state_space import NONE


@dataclass
class Transition:
    """
    Last (state, action, reward) the agent went through; `valid` is False until the first cycle.

    `reward` is always the delta observed in the cycle the pair was chosen. With
    current_action attribution that is the pair's own reward; with previous_action
    it was already credited to the pair before, and the pair's own reward only
    arrives with the next reading.
    """
    state: int = 0
    action: int = NONE
    reward: float = 0.0
    valid: bool = False


class ValueUpdater:
    """
    Bellman-style update Q[s, a] += alpha * (target - Q[s, a]).

    Subclasses decide the target, which pair gets updated and when,
    by implementing run_cycle(agent, reward) -> (action, explored, td_error).
    """
    name = None

    def __init__(self, alpha=0.9, gamma=0.4, attribution=CURRENT_ACTION):
        self.alpha = alpha
        self.gamma = gamma
        self.attribution = attribution

    def apply(self, q: np.ndarray, state: int, action: int, target: float) -> float:
        td = target - q[state, action]
        q[state, action] += self.alpha * td
        return float(td)

    def run_cycle(self, agent, reward: float) -> Tuple[int, bool, Optional[float]]:
        raise NotImplementedError


class QLearningUpdater(ValueUpdater):
    """Off-policy: bootstrap from the best legal action of the state reached."""
    name = Q_LEARNING

    def run_cycle(self, agent, reward):
        td = None
        if self.attribution == CURRENT_ACTION:
            # credit the delta to the action picked now and update straight away
            s = agent.state
            a, explored = agent.choose_action()
            agent.move(a)
            target = reward + self.gamma * agent.max_value()
            td = self.apply(agent.q, s, a, target)
        else:
            # opt-in: the delta is the outcome of the previous action, so update that pair first
            prev = agent.transition
            if prev.valid:
                target = reward + self.gamma * agent.max_value()
                td = self.apply(agent.q, prev.state, prev.action, target)
            s = agent.state
            a, explored = agent.choose_action()
            agent.move(a)
        agent.transition = Transition(s, a, reward, True)
        return a, explored, td
