# agents/priority_agent.py
"""
Tabular RL controller for integer priority knobs.

Each call to step() takes one performance reading (higher is better), turns the
change since the previous reading into a reward, updates the value table and
returns the next action together with the resulting levels. Applying the levels
to the real subsystem is left to the caller.
"""
import logging
import math
import random
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from agents.action_selector import ActionSelector
from agents.config import AgentConfig
from agents.sarsa import SarsaUpdater
from agents.tabular_q import QLearningUpdater, Transition
from utils.state_space import StateEncoder, action_label

logger = logging.getLogger(__name__)

UPDATERS = {
    QLearningUpdater.name: QLearningUpdater,
    SarsaUpdater.name: SarsaUpdater,
}


class ReadingError(ValueError):
    pass


@dataclass
class StepResult:
    cycle: int
    reading: float
    reward: float
    epsilon: float
    action: int
    action_label: str
    explored: bool
    levels: Tuple[int, ...]
    state: int
    td_error: Optional[float] = None


class PriorityAgent:
    def __init__(self, config: AgentConfig = None, rng: random.Random = None, **kwargs):
        if config is None:
            config = AgentConfig.from_dict(kwargs)
        elif kwargs:
            config = AgentConfig.from_dict({**config.to_dict(), **kwargs})
        self.config = config
        self.rng = rng or random.Random(config.seed)
        self.encoder = StateEncoder(config.ranges)
        self.selector = ActionSelector(self.encoder, self.rng)
        self.updater = UPDATERS[config.strategy](
            alpha=config.alpha, gamma=config.gamma, attribution=config.reward_attribution
        )
        self.exploration_constant = config.exploration_constant
        self.q = np.empty((self.encoder.num_states, self.encoder.num_actions), dtype=np.float64)
        logger.info(
            "agent initialized: strategy=%s params=%d ranges=%s states=%d actions=%d",
            config.strategy, self.encoder.num_params, list(self.encoder.ranges),
            self.encoder.num_states, self.encoder.num_actions,
        )
        self.reset()

    def reset(self):
        self._levels = [0] * self.encoder.num_params
        self.state = 0
        self.init_table()
        self.transition = Transition()
        self.epsilon = 1.0
        self.cycle = 0
        self.last_reading = 0.0

    def init_table(self):
        self.q.fill(self.config.optimistic_init)

    @property
    def levels(self) -> Tuple[int, ...]:
        return tuple(self._levels)

    @property
    def num_params(self):
        return self.encoder.num_params

    @property
    def num_states(self):
        return self.encoder.num_states

    @property
    def num_actions(self):
        return self.encoder.num_actions

    @property
    def strategy(self):
        return self.updater.name

    def epsilon_at(self, cycle: int) -> float:
        return math.exp(-cycle / self.exploration_constant)

    # used by the updaters

    def choose_action(self) -> Tuple[int, bool]:
        return self.selector.select(self.q[self.state], self._levels, self.epsilon)

    def move(self, action: int):
        self._levels = list(self.encoder.apply_action(self._levels, action))
        self.state += self.encoder.action_delta(action)

    def max_value(self) -> float:
        return self.selector.max_value(self.q[self.state], self._levels)

    # control cycle

    def _check_reading(self, reading) -> float:
        try:
            value = float(reading)
        except (TypeError, ValueError) as e:
            raise ReadingError(f"performance reading must be a number, got {reading!r}") from e
        if not math.isfinite(value):
            raise ReadingError(f"performance reading must be finite, got {value}")
        return value

    def step(self, reading) -> StepResult:
        value = self._check_reading(reading)
        self.cycle += 1
        self.epsilon = self.epsilon_at(self.cycle)
        reward = value - self.last_reading
        self.last_reading = value

        action, explored, td = self.updater.run_cycle(self, reward)

        if self.config.warmup_reset_cycle is not None and self.cycle == self.config.warmup_reset_cycle:
            self.init_table()
            logger.info("warm-up finished at cycle %d, value table re-initialized", self.cycle)

        logger.debug(
            "cycle=%d epsilon=%.5f reading=%.4f reward=%.4f action=%s levels=%s",
            self.cycle, self.epsilon, value, reward, action_label(action), self.levels,
        )
        return StepResult(
            cycle=self.cycle,
            reading=value,
            reward=reward,
            epsilon=self.epsilon,
            action=action,
            action_label=action_label(action),
            explored=explored,
            levels=self.levels,
            state=self.state,
            td_error=td,
        )

    # inspection

    def greedy_action(self, levels=None) -> int:
        if levels is None:
            return self.selector.greedy(self.q[self.state], self._levels)
        return self.selector.greedy(self.q[self.encoder.encode(levels)], levels)

    def greedy_policy(self) -> np.ndarray:
        policy = np.empty(self.num_states, dtype=np.int64)
        for s, levels in enumerate(self.encoder.all_levels()):
            policy[s] = self.selector.greedy(self.q[s], levels)
        return policy

    @property
    def q_table(self) -> np.ndarray:
        return self.q.copy()
