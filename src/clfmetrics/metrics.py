"""
Classification metrics computed from a confusion matrix.

Convention used everywhere in this module: rows = true class, columns =
predicted class. Row i sums to the number of true instances of classes[i],
column j to the number of predictions of classes[j].

Every metric accepts either label sequences or a precomputed matrix:

    accuracy(y_true, y_pred, classes)   # builds the matrix first
    accuracy(cm)                        # y_pred omitted -> cm is the matrix

Undefined values (0/0) come back as NaN. Pass strict=True to raise
DegenerateInputError instead.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Union

import numpy as np

from clfmetrics.errors import (
    DegenerateInputError,
    DimensionMismatch,
    DomainError,
    MetricsError,
    ShapeError,
)
from clfmetrics.labels import build_label_map, normalize_label, resolve_classes

logger = logging.getLogger(__name__)


class Average(str, Enum):
    """Aggregation mode for F-scores."""
    BINARY = "binary"
    MICRO = "micro"
    MACRO = "macro"


# ---------------------------
# Helpers
# ---------------------------
def _safe_div(num, den):
    """IEEE division: x/0 -> inf, 0/0 -> NaN, without numpy warnings."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.true_divide(num, den)


def _check_matrix(cm: Any) -> np.ndarray:
    mat = np.asarray(cm)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ShapeError(f"confusion matrix must be square and 2-D, got shape {mat.shape}", shape=mat.shape)
    if not np.issubdtype(mat.dtype, np.integer):
        raise MetricsError(f"confusion matrix must hold integer counts, got dtype {mat.dtype}")
    if (mat < 0).any():
        raise MetricsError("confusion matrix counts must be non-negative")
    return mat


def _as_confusion_matrix(y_true, y_pred=None, classes=None) -> np.ndarray:
    if y_pred is None:
        if classes is not None:
            raise MetricsError("classes can only be given together with label sequences")
        return _check_matrix(y_true)
    return confusion_matrix(y_true, y_pred, classes)


def _check_beta(beta: float) -> None:
    # `not >=` also rejects NaN
    if not beta >= 0:
        raise DomainError(beta, "beta must be non-negative for F-beta score")


def _finish(value, metric: str, strict: bool):
    if strict and np.isnan(value).any():
        raise DegenerateInputError(metric)
    if np.ndim(value) == 0:
        return float(value)
    return np.asarray(value, dtype=np.float64)


def _fbeta(tp, fp, fn, beta: float):
    b2 = beta ** 2
    num = (1 + b2) * tp
    return _safe_div(num, num + b2 * fn + fp)


# ---------------------------
# Confusion matrix
# ---------------------------
def confusion_matrix(
    y_true: Sequence[Any],
    y_pred: Sequence[Any],
    classes: Optional[Sequence[Any]] = None,
) -> np.ndarray:
    """
    Confusion matrix [k, k] with counts (row=true, col=pred).

    `classes` defaults to the distinct labels of y_true followed by y_pred, in
    first-occurrence order. Observations with a label outside `classes` are
    not counted, so the grand total equals len(y_true) only when `classes`
    covers every label. The result is read-only.
    """
    n_true, n_pred = len(y_true), len(y_pred)
    if n_true != n_pred:
        raise DimensionMismatch(
            f"targets and predictions should have same number of elements ({n_true} != {n_pred})",
            sizes=(n_true, n_pred),
        )
    classes = resolve_classes(y_true, y_pred, classes)
    label_map = build_label_map(classes)

    k = len(classes)
    cm = np.zeros((k, k), dtype=np.int64)
    for t, p in zip(y_true, y_pred):
        i = label_map.get(normalize_label(t))
        j = label_map.get(normalize_label(p))
        if i is not None and j is not None:
            cm[i, j] += 1
    cm.setflags(write=False)
    return cm


def class_counts(y_true, y_pred=None, classes=None) -> Dict[str, np.ndarray]:
    """
    Per-class contingency counts.

    tp = diagonal, fp = column sum - tp (predicted i, truly something else),
    fn = row sum - tp (truly i, predicted something else), support = row sum.
    """
    cm = _as_confusion_matrix(y_true, y_pred, classes)
    tp = np.diag(cm).astype(np.int64)
    support = cm.sum(axis=1).astype(np.int64)
    predicted = cm.sum(axis=0).astype(np.int64)
    return {"tp": tp, "fp": predicted - tp, "fn": support - tp, "support": support}


# ---------------------------
# Accuracy & agreement
# ---------------------------
def accuracy(y_true, y_pred=None, classes=None, *, strict: bool = False) -> float:
    """Trace over total. NaN when the matrix holds no observations."""
    cm = _as_confusion_matrix(y_true, y_pred, classes)
    return _finish(_safe_div(int(np.trace(cm)), int(cm.sum())), "accuracy", strict)


def accuracy_per_class(y_true, y_pred=None, classes=None, *, strict: bool = False) -> np.ndarray:
    """Diagonal over row sums; NaN for classes with no true instances."""
    counts = class_counts(y_true, y_pred, classes)
    return _finish(_safe_div(counts["tp"], counts["support"]), "accuracy_per_class", strict)


def cohen_kappa(y_true, y_pred=None, classes=None, *, strict: bool = False) -> float:
    """
    Cohen's kappa: (p_o - p_e) / (1 - p_e).

    p_o is the observed agreement (accuracy) and p_e = (row_sums . col_sums) / N^2
    the agreement expected by chance. The dot product is symmetric, so swapping
    true and predicted labels gives the same value. NaN when p_e == 1 (e.g. a
    single class) or the matrix is empty.
    """
    cm = _as_confusion_matrix(y_true, y_pred, classes)
    n = int(cm.sum())
    expected = int(np.dot(cm.sum(axis=1), cm.sum(axis=0)))
    if expected == n * n:
        return _finish(np.float64(np.nan), "cohen_kappa", strict)
    p_o = _safe_div(int(np.trace(cm)), n)
    p_e = _safe_div(expected, n * n)
    return _finish((p_o - p_e) / (1 - p_e), "cohen_kappa", strict)


# ---------------------------
# Precision / recall
# ---------------------------
def precision_per_class(y_true, y_pred=None, classes=None, *, strict: bool = False) -> np.ndarray:
    """tp / (tp + fp); NaN for classes never predicted."""
    counts = class_counts(y_true, y_pred, classes)
    return _finish(_safe_div(counts["tp"], counts["tp"] + counts["fp"]), "precision_per_class", strict)


def recall_per_class(y_true, y_pred=None, classes=None, *, strict: bool = False) -> np.ndarray:
    """tp / (tp + fn); NaN for classes with no true instances."""
    counts = class_counts(y_true, y_pred, classes)
    return _finish(_safe_div(counts["tp"], counts["tp"] + counts["fn"]), "recall_per_class", strict)


# ---------------------------
# F-beta family
# ---------------------------
def f_beta_per_class(
    y_true, y_pred=None, classes=None, *, beta: float = 1, strict: bool = False
) -> np.ndarray:
    """
    Per-class F-beta:

        F_i = (1 + beta^2) tp_i / ((1 + beta^2) tp_i + beta^2 fn_i + fp_i)

    NaN for a class that never occurs as either true or predicted label.
    """
    _check_beta(beta)
    counts = class_counts(y_true, y_pred, classes)
    return _finish(_fbeta(counts["tp"], counts["fp"], counts["fn"], beta), "f_beta_per_class", strict)


def f_beta(
    y_true,
    y_pred=None,
    classes=None,
    *,
    beta: float = 1,
    mode: Optional[Union[Average, str]] = None,
    strict: bool = False,
) -> float:
    """
    F-beta score aggregated according to `mode`.

    mode=None picks binary for a 2x2 matrix and micro for any other size.

    - binary: 2x2 matrix only, classes[0] is the positive class
      (tp = cm[0, 0], fn = cm[0, 1], fp = cm[1, 0]).
    - micro:  tp = trace, fp = fn = total - trace.
    - macro:  mean of f_beta_per_class; a NaN class makes the mean NaN.

    beta < 0 raises DomainError.
    """
    _check_beta(beta)
    if mode is not None:
        mode = Average(mode)
    cm = _as_confusion_matrix(y_true, y_pred, classes)
    if mode is None:
        mode = Average.BINARY if cm.shape == (2, 2) else Average.MICRO
    logger.debug("f_beta: mode=%s beta=%s shape=%s", mode.value, beta, cm.shape)

    if mode is Average.BINARY:
        if cm.shape != (2, 2):
            raise ShapeError(f"binary mode needs a 2x2 confusion matrix, got shape {cm.shape}", shape=cm.shape)
        counts = class_counts(cm)
        score = _fbeta(counts["tp"][0], counts["fp"][0], counts["fn"][0], beta)
    elif mode is Average.MICRO:
        tp = int(np.trace(cm))
        missed = int(cm.sum()) - tp
        score = _fbeta(tp, missed, missed, beta)
    elif mode is Average.MACRO:
        per_class = f_beta_per_class(cm, beta=beta)
        score = np.mean(per_class) if per_class.size else np.float64(np.nan)
    else:
        raise ValueError(f"unsupported mode: {mode!r}")
    return _finish(score, "f_beta", strict)


def f1_score(
    y_true,
    y_pred=None,
    classes=None,
    *,
    mode: Optional[Union[Average, str]] = None,
    strict: bool = False,
) -> float:
    """F-beta with beta = 1."""
    return f_beta(y_true, y_pred, classes, beta=1, mode=mode, strict=strict)


def f1_per_class(y_true, y_pred=None, classes=None, *, strict: bool = False) -> np.ndarray:
    """Per-class F-beta with beta = 1."""
    return f_beta_per_class(y_true, y_pred, classes, beta=1, strict=strict)
