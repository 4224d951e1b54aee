# utils/state_space.py
"""
Discrete state space for the priority knobs.

A state is a vector of per-parameter levels, level i in 0..ranges[i]-1.
It is stored in the value table as one mixed-radix index:
    index = sum(levels[i] * stride[i]),  stride[0] = 1, stride[i] = stride[i-1] * ranges[i-1]

Actions are numbered 0 = NONE, 2i+1 = increment parameter i, 2i+2 = decrement parameter i.
"""
from typing import List, Sequence, Tuple

NONE = 0


def increment(param: int) -> int:
    return 2 * param + 1


def decrement(param: int) -> int:
    return 2 * param + 2


def action_target(action: int) -> Tuple[int, int]:
    """Return (parameter, step) for an action; NONE gives (-1, 0)."""
    if action == NONE:
        return -1, 0
    param = (action - 1) // 2
    step = 1 if action % 2 == 1 else -1
    return param, step


def action_label(action: int) -> str:
    if action == NONE:
        return "NONE"
    param, step = action_target(action)
    return f"{'inc' if step > 0 else 'dec'}[{param}]"


class StateEncoder:
    def __init__(self, ranges: Sequence[int]):
        self.ranges = tuple(int(r) for r in ranges)
        self.num_params = len(self.ranges)
        strides = []
        stride = 1
        for r in self.ranges:
            strides.append(stride)
            stride *= r
        self.strides = tuple(strides)
        self.num_states = stride
        self.num_actions = 2 * self.num_params + 1

    def encode(self, levels: Sequence[int]) -> int:
        if len(levels) != self.num_params:
            raise ValueError(f"expected {self.num_params} levels, got {len(levels)}")
        index = 0
        for i, level in enumerate(levels):
            if not 0 <= level < self.ranges[i]:
                raise ValueError(f"level {level} of parameter {i} outside [0, {self.ranges[i]})")
            index += int(level) * self.strides[i]
        return index

    def decode(self, index: int) -> Tuple[int, ...]:
        if not 0 <= index < self.num_states:
            raise ValueError(f"state index {index} outside [0, {self.num_states})")
        levels = []
        for r in self.ranges:
            index, level = divmod(index, r)
            levels.append(level)
        return tuple(levels)

    def check_action(self, action: int) -> None:
        if not 0 <= action < self.num_actions:
            raise ValueError(f"action {action} outside [0, {self.num_actions})")

    def action_delta(self, action: int) -> int:
        # change of the table index when the action is applied
        self.check_action(action)
        param, step = action_target(action)
        if param < 0:
            return 0
        return step * self.strides[param]

    def apply_action(self, levels: Sequence[int], action: int) -> Tuple[int, ...]:
        self.check_action(action)
        new_levels: List[int] = list(levels)
        param, step = action_target(action)
        if param < 0:
            return tuple(new_levels)
        new_levels[param] += step
        if not 0 <= new_levels[param] < self.ranges[param]:
            raise ValueError(f"{action_label(action)} leaves the grid from levels {tuple(levels)}")
        return tuple(new_levels)

    def all_levels(self):
        for index in range(self.num_states):
            yield self.decode(index)
