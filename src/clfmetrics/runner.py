"""
Evaluate one predictions file under several metric settings.

configs/experiments.yaml lists named variants of a base eval config:

    experiments:
      - name: f2
        base: configs/eval_base.yaml
        overrides: {metrics.beta: 2.0}

Each variant gets its own eval folder (see clfmetrics.evaluate) plus a
run_info.json with the variant name and the evaluation time.
"""

from __future__ import annotations
import copy
import json
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List

import yaml

from clfmetrics.paths import CONFIGS_DIR, ARTIFACTS_DIR, ensure_dir
from clfmetrics.evaluate import load_config, main as evaluate_main


def apply_overrides(cfg: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `cfg` with overrides applied; 'metrics.beta' style keys address nested sections."""
    out = copy.deepcopy(cfg)
    for key, value in overrides.items():
        *parents, leaf = key.split(".")
        node = out
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = apply_overrides(node[leaf], value)
        else:
            node[leaf] = copy.deepcopy(value)
    return out


def run_experiments(matrix_path: str | Path = CONFIGS_DIR / "experiments.yaml") -> List[Path]:
    matrix = load_config(matrix_path)
    variants = matrix.get("experiments") or []
    if not variants:
        print(f"No experiments found in {matrix_path}")
        return []

    cfg_dir = ensure_dir(Path(matrix.get("tmp_dir") or ARTIFACTS_DIR / "tmp_configs"))

    out_dirs: List[Path] = []
    for variant in variants:
        name = variant["name"]
        cfg = apply_overrides(load_config(variant["base"]), variant.get("overrides") or {})
        cfg.setdefault("logging", {}).setdefault("tag", name)

        cfg_path = cfg_dir / f"{name}.yaml"
        cfg_path.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")

        print(f"\n=== {name} ===")
        t0 = perf_counter()
        out_dir = evaluate_main(str(cfg_path))
        info = {"experiment_name": name, "merged_config_path": str(cfg_path), "eval_time_sec": perf_counter() - t0}
        (out_dir / "run_info.json").write_text(json.dumps(info, indent=2), encoding="utf-8")
        out_dirs.append(out_dir)
    return out_dirs


if __name__ == "__main__":
    run_experiments()
