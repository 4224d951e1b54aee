# app/reporting.py
"""
Run reports built from the cycle trace written by app/utils_logging.py:
pandas summaries of a run, the learned value table as a DataFrame, and a
matplotlib plot of performance and exploration over time.
"""

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd

from utils.state_space import action_label

# -----------------------------
# Trace loading
# -----------------------------
def load_trace(csv_path, run_id=None):
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError("Trace CSV not found: " + str(csv_path))
    df = pd.read_csv(csv_path, keep_default_na=False, na_values={"td_error": [""]})
    if run_id is not None:
        df = df[df["run_id"] == run_id]
    if df.empty:
        raise ValueError("No cycles recorded" + (f" for run {run_id}." if run_id else "."))
    df = df.sort_values("cycle").reset_index(drop=True)
    df["levels"] = df["levels"].astype(str).map(lambda s: tuple(int(x) for x in s.split()))
    return df

def summarize_trace(df):
    counts = df["action_label"].value_counts()
    return {
        "cycles": int(df["cycle"].max()),
        "total_reward": float(df["reward"].sum()),
        "final_reading": float(df["reading"].iloc[-1]),
        "best_reading": float(df["reading"].max()),
        "final_epsilon": float(df["epsilon"].iloc[-1]),
        "explore_fraction": float(df["explored"].mean()),
        "action_counts": {str(k): int(v) for k, v in counts.items()},
        "final_levels": list(df["levels"].iloc[-1]),
    }

# -----------------------------
# Value table
# -----------------------------
def q_table_frame(agent):
    """Value table with one row per level tuple and one column per action label."""
    index = pd.Index(list(agent.encoder.all_levels()), name="levels", tupleize_cols=False)
    columns = [action_label(a) for a in range(agent.num_actions)]
    return pd.DataFrame(agent.q_table, index=index, columns=columns)

# -----------------------------
# Plot
# -----------------------------
def save_trace_plot(df, out_path, window=50):
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(7, 5), sharex=True)
    ax1.plot(df["cycle"], df["reading"], linewidth=0.5, alpha=0.4, label="reading")
    ax1.plot(df["cycle"], df["reading"].rolling(window, min_periods=1).mean(), label=f"mean ({window})")
    ax1.set_ylabel("Performance")
    ax1.legend(loc="lower right")
    ax2.plot(df["cycle"], df["epsilon"], color="tab:orange")
    ax2.set_xlabel("Cycle")
    ax2.set_ylabel("Epsilon")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return str(out_path)
