"""
Repository layout used by the evaluation scripts.

The metric functions themselves never touch the filesystem.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Union

def _default_repo_root() -> Path:
    # .../src/clfmetrics/paths.py -> parents[0]=clfmetrics, [1]=src, [2]=REPO
    return Path(__file__).resolve().parents[2]

def get_repo_root() -> Path:
    """Repo root can be overridden with env var CLFMETRICS_ROOT; else inferred."""
    env = os.getenv("CLFMETRICS_ROOT")
    if env:
        p = Path(env).expanduser().resolve()
        if p.exists():
            return p
    return _default_repo_root()

REPO_ROOT     = get_repo_root()
CONFIGS_DIR   = REPO_ROOT / "configs"
DATA_DIR      = REPO_ROOT / "data"
ARTIFACTS_DIR = REPO_ROOT / "artifacts"
EVALS_DIR     = ARTIFACTS_DIR / "evals"

def ensure_dir(p: Path) -> Path:
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p

def config_path(name: str) -> Path:
    return CONFIGS_DIR / name

def resolve_data_file(name: Union[str, Path]) -> Path:
    """Absolute paths and paths that exist as given win; otherwise look under data/."""
    p = Path(name).expanduser()
    if p.is_absolute() or p.exists():
        return p
    return DATA_DIR / p

def eval_dir(stamp: str) -> Path:
    """Compute eval dir under artifacts/evals/<stamp> (does not create)."""
    return EVALS_DIR / stamp
