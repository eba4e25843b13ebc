"""
Tabular and JSON-ready summaries built on top of clfmetrics.metrics.
"""

from __future__ import annotations
import math
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from clfmetrics.errors import MetricsError
from clfmetrics.labels import resolve_classes
from clfmetrics.metrics import (
    Average,
    accuracy,
    accuracy_per_class,
    class_counts,
    cohen_kappa,
    confusion_matrix,
    f_beta,
    f_beta_per_class,
    precision_per_class,
    recall_per_class,
)


def _nan_to_none(x: float) -> Optional[float]:
    x = float(x)
    return None if math.isnan(x) else x


def per_class_table(cm, classes: Optional[Sequence[Any]] = None, *, beta: float = 1) -> pd.DataFrame:
    """
    One row per class with tp/fp/fn/support and precision, recall, accuracy, f_beta.

    `classes` only labels the index; it must match the matrix size. Defaults to 0..k-1.
    """
    counts = class_counts(cm)
    k = len(counts["tp"])
    if classes is None:
        classes = list(range(k))
    elif len(classes) != k:
        raise ValueError(f"got {len(classes)} class names for a {k}x{k} confusion matrix")

    df = pd.DataFrame(
        {
            "tp": counts["tp"],
            "fp": counts["fp"],
            "fn": counts["fn"],
            "support": counts["support"],
            "precision": precision_per_class(cm),
            "recall": recall_per_class(cm),
            "accuracy": accuracy_per_class(cm),
            "f_beta": f_beta_per_class(cm, beta=beta),
        },
        index=pd.Index(list(classes), name="class"),
    )
    return df


def summarize(
    y_true,
    y_pred=None,
    classes: Optional[Sequence[Any]] = None,
    *,
    beta: float = 1,
    strict: bool = False,
) -> Dict[str, Any]:
    """
    All headline metrics in one JSON-serialisable dict (NaN -> None).

    Binary F-beta is only reported for 2x2 matrices. With strict=True an
    undefined accuracy, kappa or aggregated F-beta raises DegenerateInputError.
    """
    if y_pred is None:
        cm = np.asarray(y_true)
        class_list: List[Any] = list(classes) if classes is not None else list(range(len(cm)))
    else:
        class_list = resolve_classes(y_true, y_pred, classes)
        cm = confusion_matrix(y_true, y_pred, class_list)

    scores: Dict[str, Optional[float]] = {}
    for mode in Average:
        if mode is Average.BINARY and np.shape(cm) != (2, 2):
            continue
        scores[mode.value] = _nan_to_none(f_beta(cm, beta=beta, mode=mode, strict=strict))

    table = per_class_table(cm, class_list, beta=beta)
    names = [str(c) for c in class_list]
    if len(set(names)) != len(names):
        raise MetricsError(f"class labels are not distinct as strings: {names}")

    per_class = {}
    for name, (_, row) in zip(names, table.iterrows()):
        per_class[name] = {
            col: (int(row[col]) if col in ("tp", "fp", "fn", "support") else _nan_to_none(row[col]))
            for col in table.columns
        }

    return {
        "n_observations": int(np.sum(cm)),
        "classes": names,
        "beta": float(beta),
        "accuracy": _nan_to_none(accuracy(cm, strict=strict)),
        "cohen_kappa": _nan_to_none(cohen_kappa(cm, strict=strict)),
        "f_beta": scores,
        "per_class": per_class,
        "confusion_matrix": np.asarray(cm).tolist(),
    }
