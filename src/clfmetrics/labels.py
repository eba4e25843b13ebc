"""
Class-list helpers.

The class list fixes the order of both confusion-matrix axes. When the caller
does not supply one, labels are taken from the concatenation of true and
predicted labels in first-occurrence order. Passing an explicit list is the
recommended path: it makes the axis order reproducible and lets you restrict
or reorder the scored classes.
"""

from __future__ import annotations
from typing import Any, Dict, Hashable, Iterable, List, Optional, Sequence

from clfmetrics.errors import MetricsError


def normalize_label(x: Any) -> Hashable:
    """Unwrap numpy scalars so that 1 and np.int64(1) are the same key."""
    return x.item() if hasattr(x, "item") and getattr(x, "ndim", None) == 0 else x


def unique_labels(*sequences: Iterable[Any]) -> List[Hashable]:
    """
    Distinct labels across all sequences, in first-occurrence order.

    Labels are compared as dict keys, so float NaN values are not merged into
    one class; drop or fill missing labels before scoring.
    """
    seen: Dict[Hashable, None] = {}
    for seq in sequences:
        for x in seq:
            seen.setdefault(normalize_label(x), None)
    return list(seen)


def build_label_map(classes: Sequence[Any]) -> Dict[Hashable, int]:
    """Map each class label to its axis index; duplicates are rejected."""
    label_map: Dict[Hashable, int] = {}
    for i, lab in enumerate(classes):
        lab = normalize_label(lab)
        if lab in label_map:
            raise MetricsError(f"duplicate class label {lab!r} in classes")
        label_map[lab] = i
    return label_map


def resolve_classes(
    y_true: Sequence[Any],
    y_pred: Sequence[Any],
    classes: Optional[Sequence[Any]] = None,
) -> List[Hashable]:
    """Return the explicit class list (validated) or the default ordering."""
    if classes is None:
        return unique_labels(y_true, y_pred)
    out = [normalize_label(c) for c in classes]
    build_label_map(out)
    return out
