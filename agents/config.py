# agents/config.py
import json
import math
import numbers
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import List, Optional, Union

Q_LEARNING = "q_learning"
SARSA = "sarsa"
STRATEGIES = (Q_LEARNING, SARSA)

# which action a reading's delta is credited to
CURRENT_ACTION = "current_action"
PREVIOUS_ACTION = "previous_action"
ATTRIBUTIONS = (CURRENT_ACTION, PREVIOUS_ACTION)


class ConfigError(ValueError):
    pass


def _require_number(name, value, integral=False):
    kind = numbers.Integral if integral else numbers.Real
    if isinstance(value, bool) or not isinstance(value, kind):
        expected = "an integer" if integral else "a number"
        raise ConfigError(f"{name} must be {expected}, got {value!r}")


def horizon_from_timing(exploration_minutes: float, read_delay_ms: float) -> int:
    """Number of control cycles that fit in `exploration_minutes` at one reading per `read_delay_ms`."""
    if exploration_minutes <= 0 or read_delay_ms <= 0:
        raise ConfigError("exploration_minutes and read_delay_ms must be positive")
    return max(1, int(round(exploration_minutes * 60.0 / (read_delay_ms / 1000.0))))


@dataclass
class AgentConfig:
    num_params: int = 2
    ranges: Union[int, List[int]] = 4
    alpha: float = 0.9
    gamma: float = 0.4
    exploration_horizon: float = 3000.0   # cycles until epsilon reaches exploration_residual
    exploration_residual: float = 0.01
    optimistic_init: float = 10.0
    strategy: str = Q_LEARNING
    reward_attribution: str = CURRENT_ACTION
    warmup_reset_cycle: Optional[int] = None
    max_states: int = 1_000_000
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.num_params, bool) or not isinstance(self.num_params, int) or self.num_params <= 0:
            raise ConfigError(f"num_params must be a positive integer, got {self.num_params!r}")
        if isinstance(self.ranges, numbers.Integral) and not isinstance(self.ranges, bool):
            self.ranges = [int(self.ranges)] * self.num_params
        elif isinstance(self.ranges, (list, tuple)):
            for r in self.ranges:
                _require_number("ranges", r, integral=True)
            self.ranges = [int(r) for r in self.ranges]
        else:
            raise ConfigError(f"ranges must be an integer or a list of integers, got {self.ranges!r}")
        if len(self.ranges) != self.num_params:
            raise ConfigError(f"expected {self.num_params} ranges, got {len(self.ranges)}")
        if any(r <= 0 for r in self.ranges):
            raise ConfigError(f"ranges must be positive, got {self.ranges}")
        for name in ("alpha", "gamma", "exploration_horizon", "exploration_residual", "optimistic_init"):
            _require_number(name, getattr(self, name))
        _require_number("max_states", self.max_states, integral=True)
        for name in ("warmup_reset_cycle", "seed"):
            if getattr(self, name) is not None:
                _require_number(name, getattr(self, name), integral=True)
        if not 0 < self.alpha <= 1:
            raise ConfigError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0 <= self.gamma <= 1:
            raise ConfigError(f"gamma must be in [0, 1], got {self.gamma}")
        if not self.exploration_horizon > 0:
            raise ConfigError(f"exploration_horizon must be positive, got {self.exploration_horizon}")
        if not 0 < self.exploration_residual < 1:
            raise ConfigError(f"exploration_residual must be in (0, 1), got {self.exploration_residual}")
        if not math.isfinite(self.optimistic_init):
            raise ConfigError(f"optimistic_init must be finite, got {self.optimistic_init}")
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"strategy must be one of {STRATEGIES}, got {self.strategy!r}")
        if self.reward_attribution not in ATTRIBUTIONS:
            raise ConfigError(f"reward_attribution must be one of {ATTRIBUTIONS}, got {self.reward_attribution!r}")
        if self.warmup_reset_cycle is not None and self.warmup_reset_cycle <= 0:
            raise ConfigError(f"warmup_reset_cycle must be positive, got {self.warmup_reset_cycle}")
        if self.num_states > self.max_states:
            raise ConfigError(
                f"{self.num_states} states exceed max_states={self.max_states}; "
                "the table grows as the product of the ranges"
            )

    @property
    def num_states(self) -> int:
        return math.prod(self.ranges)

    @property
    def num_actions(self) -> int:
        return 2 * self.num_params + 1

    @property
    def exploration_constant(self) -> float:
        # epsilon = exp(-t / c) reaches exploration_residual at t = exploration_horizon
        return self.exploration_horizon / math.log(1.0 / self.exploration_residual)

    @classmethod
    def from_dict(cls, data: dict, **overrides) -> "AgentConfig":
        data = {**data, **{k: v for k, v in overrides.items() if v is not None}}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown config keys: {unknown}")
        if "ranges" in data and "num_params" not in data and not isinstance(data["ranges"], int):
            data["num_params"] = len(data["ranges"])
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: Union[str, Path], **overrides) -> AgentConfig:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must hold a JSON object")
    return AgentConfig.from_dict(data, **overrides)
