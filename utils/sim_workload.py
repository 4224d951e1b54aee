# utils/sim_workload.py
import random

PROFILES = ("steady", "noisy", "phased")


class SimWorkload:
    """
    Simulated workload behaviour on top of the performance surface.
    Profiles: 'steady' (exact readings), 'noisy' (gaussian measurement noise),
    'phased' (noisy, and the best priority setting moves every phase_length cycles).
    """
    def __init__(self, profile="steady", seed=None, noise=None, phase_length=2000):
        if profile not in PROFILES:
            raise ValueError(f"unknown workload profile {profile!r}, expected one of {PROFILES}")
        self.profile = profile
        self.rng = random.Random(seed)
        self.phase_length = phase_length
        if noise is None:
            noise = 0.0 if profile == "steady" else 0.5
        self.noise = noise
        self.cycle = 0

    def reset(self):
        self.cycle = 0

    def tick(self):
        self.cycle += 1

    def jitter(self):
        if self.noise <= 0:
            return 0.0
        return self.rng.gauss(0.0, self.noise)

    def optimum_shift(self):
        # phased workloads alternate between the nominal optimum and one level above it
        if self.profile != "phased":
            return 0
        return (self.cycle // self.phase_length) % 2
