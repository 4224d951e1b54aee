# experiments/eval_policy.py
from agents.config import AgentConfig
from agents.priority_agent import PriorityAgent
from env.cache_env import CacheBandwidthEnv
from experiments.run_controller import run
from utils.sim_workload import SimWorkload
from utils.state_space import NONE
import numpy as np
import pandas as pd


def policy_accuracy(agent, env):
    """Fraction of states whose greedy action moves toward (or holds at) the optimum."""
    optimum = env.current_optimum()
    policy = agent.greedy_policy()
    good = 0
    for s, levels in enumerate(agent.encoder.all_levels()):
        before = sum(abs(l - o) for l, o in zip(levels, optimum))
        after_levels = agent.encoder.apply_action(levels, int(policy[s]))
        after = sum(abs(l - o) for l, o in zip(after_levels, optimum))
        if after < before or (before == 0 and policy[s] == NONE):
            good += 1
    return good / float(agent.num_states)


def evaluate(strategy="q_learning", seeds=(0, 1, 2, 3, 4), cycles=6000, tail=500, profile="steady", **config):
    rows = []
    for seed in seeds:
        cfg = AgentConfig.from_dict(config, strategy=strategy, seed=seed)
        agent = PriorityAgent(cfg)
        env = CacheBandwidthEnv(ranges=cfg.ranges, workload=SimWorkload(profile, seed=seed))
        env.reset()
        results = run(agent, env, cycles=cycles, progress=False)
        tail_results = results[-tail:]
        final = results[-1].levels
        rows.append({
            "strategy": strategy,
            "seed": seed,
            "final_levels": final,
            "distance": sum(abs(l - o) for l, o in zip(final, env.current_optimum())),
            "tail_reading": float(np.mean([r.reading for r in tail_results])),
            "tail_explored": float(np.mean([r.explored for r in tail_results])),
            "policy_accuracy": policy_accuracy(agent, env),
        })
    return pd.DataFrame(rows)


if __name__ == '__main__':
    frames = [evaluate(strategy=s) for s in ("q_learning", "sarsa")]
    df = pd.concat(frames, ignore_index=True)
    print(df.to_string(index=False))
    print()
    print(df.groupby("strategy")[["distance", "tail_reading", "policy_accuracy"]].mean())
