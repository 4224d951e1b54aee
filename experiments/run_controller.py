# experiments/run_controller.py
"""
Drive a priority agent against the simulated cache-bandwidth subsystem.

Every cycle: read performance -> agent.step(reading) -> apply the returned levels.
Runs for --cycles, or until epsilon drops below --until-epsilon when no cycle count is given.
"""
import argparse
import logging

from tqdm import tqdm

from agents.config import AgentConfig, horizon_from_timing, load_config
from agents.priority_agent import PriorityAgent
from app.reporting import save_trace_plot, load_trace, summarize_trace
from app.utils_logging import finish_run, log_cycle, start_run
from env.cache_env import CacheBandwidthEnv
from utils.sim_workload import PROFILES, SimWorkload

MAX_CYCLES = 1_000_000


def run(agent, env, cycles=None, until_epsilon=0.0003, run_meta=None, progress=True):
    """Run the control loop; returns the list of StepResults."""
    env.apply(agent.levels)
    results = []
    limit = cycles if cycles is not None else MAX_CYCLES
    bar = tqdm(total=cycles, disable=not progress, desc=agent.strategy)
    for _ in range(limit):
        reading = env.read()
        res = agent.step(reading)
        env.apply(res.levels)
        results.append(res)
        if run_meta is not None:
            log_cycle(run_meta, res)
        bar.update(1)
        if cycles is None and agent.epsilon < until_epsilon:
            break
    bar.close()
    return results


def build_config(args):
    overrides = {
        "strategy": args.strategy,
        "num_params": args.num_params,
        "ranges": args.ranges,
        "alpha": args.alpha,
        "gamma": args.gamma,
        "exploration_horizon": args.horizon,
        "optimistic_init": args.optimistic_init,
        "reward_attribution": args.attribution,
        "warmup_reset_cycle": args.warmup_reset_cycle,
        "seed": args.seed,
    }
    if args.exploration_minutes is not None:
        overrides["exploration_horizon"] = horizon_from_timing(args.exploration_minutes, args.read_delay_ms)
    if args.ranges is not None and args.num_params is None:
        overrides["num_params"] = len(args.ranges)
    if args.ranges is not None and len(args.ranges) == 1 and args.num_params:
        overrides["ranges"] = args.ranges[0]
    if args.config:
        return load_config(args.config, **overrides)
    return AgentConfig.from_dict({}, **overrides)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument("--config", type=str, default=None, help="JSON file with AgentConfig fields")
    p.add_argument("--strategy", choices=["q_learning", "sarsa"], default=None)
    p.add_argument("--num-params", type=int, default=None)
    p.add_argument("--ranges", type=int, nargs="+", default=None)
    p.add_argument("--alpha", type=float, default=None)
    p.add_argument("--gamma", type=float, default=None)
    p.add_argument("--horizon", type=float, default=None, help="exploration horizon in cycles")
    p.add_argument("--exploration-minutes", type=float, default=None)
    p.add_argument("--read-delay-ms", type=float, default=10.0)
    p.add_argument("--optimistic-init", type=float, default=None)
    p.add_argument("--attribution", choices=["current_action", "previous_action"], default=None)
    p.add_argument("--warmup-reset-cycle", type=int, default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--optimum", type=int, nargs="+", default=None)
    p.add_argument("--profile", choices=PROFILES, default="steady")
    p.add_argument("--cycles", type=int, default=None)
    p.add_argument("--until-epsilon", type=float, default=0.0003)
    p.add_argument("--data-dir", type=str, default=None)
    p.add_argument("--no-trace", action="store_true")
    p.add_argument("--plot", action="store_true")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    cfg = build_config(args)
    agent = PriorityAgent(cfg)
    env = CacheBandwidthEnv(ranges=cfg.ranges, optimum=args.optimum,
                            workload=SimWorkload(args.profile, seed=args.seed))
    env.reset()

    run_meta = None
    if not args.no_trace:
        run_meta = start_run(cfg, data_dir=args.data_dir, profile=args.profile, optimum=list(env.optimum))
        print("Tracing run", run_meta["run_id"], "to", run_meta["csv_path"])

    results = run(agent, env, cycles=args.cycles, until_epsilon=args.until_epsilon, run_meta=run_meta)
    last = results[-1]
    print(f"Cycles: {last.cycle}  epsilon: {last.epsilon:.5f}  final levels: {last.levels}  "
          f"reading: {last.reading:.3f}  optimum: {env.current_optimum()}")

    if run_meta is not None:
        df = load_trace(run_meta["csv_path"], run_id=run_meta["run_id"])
        summary = summarize_trace(df)
        finish_run(run_meta, summary)
        print(f"Total reward: {summary['total_reward']:.3f}  explored: {summary['explore_fraction']:.2%}")
        if args.plot:
            out = save_trace_plot(df, run_meta["json_path"].replace(".json", ".png"))
            print("Saved plot to", out)
    return results


if __name__ == "__main__":
    main()
