"""
Evaluate a predictions CSV against its ground truth.

Flow:
  1) Load YAML config.
  2) Read the predictions CSV (one row per observation, true + predicted column).
  3) Build the confusion matrix and compute accuracy, kappa, F-beta (all modes).
  4) Save artifacts.

Artifacts layout (under logging.out_dir or artifacts/evals / eval_id):
  - config_resolved.json
  - metrics.json
  - per_class.csv
  - confusion_matrix.csv
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import yaml

from clfmetrics.errors import MetricsError
from clfmetrics.labels import resolve_classes
from clfmetrics.metrics import confusion_matrix
from clfmetrics.paths import config_path, ensure_dir, eval_dir, resolve_data_file
from clfmetrics.report import per_class_table, summarize


def _save_json(obj: Dict[str, Any], path: Path) -> None:
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


def load_config(cfg_path: Optional[str | Path] = None) -> Dict[str, Any]:
    cfg_path = config_path("eval_base.yaml") if cfg_path is None else Path(cfg_path)
    with open(cfg_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def read_predictions(csv_path: str | Path, y_true_col: str = "y_true", y_pred_col: str = "y_pred") -> pd.DataFrame:
    """
    Load the two label columns.

    Missing columns raise KeyError; empty label cells raise MetricsError, since a
    NaN label would otherwise become a class of its own.
    """
    df = pd.read_csv(resolve_data_file(csv_path))
    for col in (y_true_col, y_pred_col):
        if col not in df.columns:
            raise KeyError(f"column {col!r} not found in {csv_path} (have: {list(df.columns)})")
        n_missing = int(df[col].isna().sum())
        if n_missing:
            raise MetricsError(f"column {col!r} in {csv_path} has {n_missing} missing label(s)")
    return df[[y_true_col, y_pred_col]]


def evaluate_frame(
    df: pd.DataFrame,
    y_true_col: str = "y_true",
    y_pred_col: str = "y_pred",
    classes=None,
    beta: float = 1,
    strict: bool = False,
) -> Dict[str, Any]:
    """Metrics dict for a DataFrame holding true and predicted label columns."""
    y_true = df[y_true_col].tolist()
    y_pred = df[y_pred_col].tolist()
    return summarize(y_true, y_pred, classes, beta=beta, strict=strict)


def _fmt(x: Optional[float]) -> str:
    return "nan" if x is None else f"{x:.4f}"


def main(cfg_path: str | None = None) -> Path:
    cfg = load_config(cfg_path)
    data_cfg = cfg["data"]; met_cfg = cfg.get("metrics") or {}; log_cfg = cfg.get("logging") or {}

    y_true_col = data_cfg.get("y_true_col", "y_true")
    y_pred_col = data_cfg.get("y_pred_col", "y_pred")
    beta = float(met_cfg.get("beta", 1.0))
    strict = bool(met_cfg.get("strict", False))

    # Prepare eval directory
    eval_id = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
    if log_cfg.get("tag"):
        eval_id = f"{eval_id}_{log_cfg['tag']}"
    out_root = Path(log_cfg["out_dir"]) / eval_id if log_cfg.get("out_dir") else eval_dir(eval_id)
    ensure_dir(out_root)

    # Save resolved config for reproducibility
    _save_json(cfg, out_root / "config_resolved.json")

    df = read_predictions(data_cfg["csv"], y_true_col, y_pred_col)
    y_true = df[y_true_col].tolist()
    y_pred = df[y_pred_col].tolist()
    classes = resolve_classes(y_true, y_pred, met_cfg.get("classes"))
    cm = confusion_matrix(y_true, y_pred, classes)

    metrics = summarize(cm, None, classes, beta=beta, strict=strict)
    _save_json(metrics, out_root / "metrics.json")

    if log_cfg.get("write_table", True):
        per_class_table(cm, classes, beta=beta).to_csv(out_root / "per_class.csv", encoding="utf-8")
        labels = [str(c) for c in classes]
        pd.DataFrame(cm, index=pd.Index(labels, name="true"), columns=labels).to_csv(
            out_root / "confusion_matrix.csv", encoding="utf-8"
        )

    print(
        f"n={metrics['n_observations']}: acc={_fmt(metrics['accuracy'])}, "
        f"kappa={_fmt(metrics['cohen_kappa'])}, macroF={_fmt(metrics['f_beta'].get('macro'))}"
    )
    print(f"Eval artifacts saved to: {out_root}")
    return out_root


if __name__ == "__main__":
    import sys
    main(sys.argv[1] if len(sys.argv) > 1 else None)
