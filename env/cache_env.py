# env/cache_env.py
from utils.sim_workload import SimWorkload


# A small simulated cache-bandwidth subsystem standing in for the real performance counter
class CacheBandwidthEnv:
    def __init__(self, ranges=(4, 4), optimum=None, base=100.0, power=4, workload=None):
        self.ranges = tuple(int(r) for r in ranges)
        if optimum is None:
            # the legacy two-group harness peaks at priorities (1, 3)
            optimum = (1, 3) if self.ranges == (4, 4) else tuple(r // 2 for r in self.ranges)
        if len(optimum) != len(self.ranges):
            raise ValueError(f"optimum {tuple(optimum)} does not match {len(self.ranges)} parameters")
        self.optimum = tuple(int(o) for o in optimum)
        self.base = base
        self.power = power
        self.workload = workload or SimWorkload("steady")
        self.levels = None

    def reset(self):
        self.workload.reset()
        self.levels = (0,) * len(self.ranges)
        return self.levels

    def current_optimum(self):
        shift = self.workload.optimum_shift()
        return tuple(min(o + shift, r - 1) for o, r in zip(self.optimum, self.ranges))

    def apply(self, levels):
        levels = tuple(int(x) for x in levels)
        for i, (level, r) in enumerate(zip(levels, self.ranges)):
            if not 0 <= level < r:
                raise ValueError(f"level {level} of group {i} outside [0, {r})")
        self.levels = levels
        self.workload.tick()

    def performance(self, levels):
        return self.base - sum(abs(l - o) ** self.power for l, o in zip(levels, self.current_optimum()))

    def read(self):
        # e.g. instructions-per-cycle over the last period
        return self.performance(self.levels) + self.workload.jitter()
