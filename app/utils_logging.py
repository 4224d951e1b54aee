# app/utils_logging.py
import csv, json, uuid
from datetime import datetime, timezone
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"

TRACE_HEADER = ["run_id","ts","cycle","reading","reward","epsilon","action","action_label","explored","state","levels","td_error"]


def _now():
    return datetime.now(timezone.utc).isoformat()


def _paths(data_dir):
    data_dir = Path(data_dir or DATA_DIR)
    runs_dir = data_dir / "runs"
    runs_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "cycles.csv", runs_dir


def start_run(config, run_id=None, data_dir=None, **extra):
    rid = run_id or str(uuid.uuid4())
    csv_path, runs_dir = _paths(data_dir)
    meta = {
        "run_id": rid,
        "start_time": _now(),
        "config": config.to_dict() if hasattr(config, "to_dict") else dict(config),
        "cycles": 0,
        "csv_path": str(csv_path),
        "json_path": str(runs_dir / f"{rid}.json"),
    }
    meta.update(extra)
    with open(meta["json_path"], "w", encoding="utf-8") as f:
        json.dump(meta, f, indent=2)
    return meta


def _update_json(run_meta, **fields):
    jpath = Path(run_meta["json_path"])
    if jpath.exists():
        with open(jpath, "r", encoding="utf-8") as jf:
            existing = json.load(jf)
    else:
        existing = dict(run_meta)
    existing.update(fields)
    with open(jpath, "w", encoding="utf-8") as jf:
        json.dump(existing, jf, indent=2, default=str)
    return existing


def log_cycle(run_meta, result):
    row = [
        run_meta["run_id"],
        _now(),
        result.cycle,
        float(result.reading),
        float(result.reward),
        float(result.epsilon),
        int(result.action),
        result.action_label,
        int(bool(result.explored)),
        int(result.state),
        " ".join(str(l) for l in result.levels),
        "" if result.td_error is None else float(result.td_error),
    ]
    csv_path = Path(run_meta["csv_path"])
    write_header = not csv_path.exists()
    with open(csv_path, "a", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        if write_header:
            w.writerow(TRACE_HEADER)
        w.writerow(row)
    run_meta["cycles"] = result.cycle
    run_meta["last_levels"] = list(result.levels)
    # update json
    _update_json(run_meta, cycles=run_meta["cycles"], last_levels=run_meta["last_levels"])


def finish_run(run_meta, summary=None):
    return _update_json(
        run_meta,
        cycles=run_meta.get("cycles", 0),
        last_levels=run_meta.get("last_levels"),
        end_time=_now(),
        summary=summary or {},
    )
