"""
Scan artifacts/evals/* and collect headline metrics + run info into one CSV.
"""

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from clfmetrics.paths import ARTIFACTS_DIR, EVALS_DIR, ensure_dir


def _safe_load_json(path: Path) -> Dict[str, Any]:
    # half-written or missing eval folders still get a row
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}


def collect_rows(evals_dir: str | Path = EVALS_DIR) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for d in sorted(Path(evals_dir).glob("*")):
        if not d.is_dir():
            continue
        cfg = _safe_load_json(d / "config_resolved.json")
        info = _safe_load_json(d / "run_info.json")
        met = _safe_load_json(d / "metrics.json")
        f_scores = met.get("f_beta", {}) or {}

        rows.append({
            "eval_dir": str(d),
            "experiment_name": info.get("experiment_name"),
            "csv": (cfg.get("data", {}) or {}).get("csv"),
            "beta": met.get("beta"),
            "n_observations": met.get("n_observations"),
            "n_classes": len(met.get("classes", []) or []),
            "eval_time_sec": info.get("eval_time_sec"),
            "accuracy": met.get("accuracy"),
            "cohen_kappa": met.get("cohen_kappa"),
            "f_binary": f_scores.get("binary"),
            "f_micro": f_scores.get("micro"),
            "f_macro": f_scores.get("macro"),
        })

    columns = [
        "eval_dir", "experiment_name", "csv", "beta", "n_observations", "n_classes",
        "eval_time_sec", "accuracy", "cohen_kappa", "f_binary", "f_micro", "f_macro",
    ]
    df = pd.DataFrame(rows, columns=columns)
    if not df.empty:
        df = df.sort_values(["experiment_name", "eval_dir"], na_position="last").reset_index(drop=True)
    return df


def collect(
    output_path: str | Path = ARTIFACTS_DIR / "summary" / "all_evals.csv",
    evals_dir: str | Path = EVALS_DIR,
) -> Path:
    df = collect_rows(evals_dir)
    out = Path(output_path)
    ensure_dir(out.parent)
    df.to_csv(out, index=False, encoding="utf-8")
    print(f"Wrote: {out}  ({len(df)} rows)")
    return out


if __name__ == "__main__":
    collect()
