"""
Exceptions raised by the metrics functions.

All of them derive from ValueError, so existing `except ValueError` handlers
keep catching bad inputs.
"""

from __future__ import annotations
from typing import Optional, Tuple


class MetricsError(ValueError):
    """Base exception for invalid metric inputs."""
    pass


class DimensionMismatch(MetricsError):
    """True and predicted label sequences differ in length."""
    def __init__(self, message: str, sizes: Optional[Tuple[int, int]] = None):
        self.sizes = sizes
        super().__init__(message)


class DomainError(MetricsError):
    """A parameter lies outside its valid domain (e.g. beta < 0)."""
    def __init__(self, value, message: str):
        self.value = value
        super().__init__(f"{message} (got {value!r})")


class ShapeError(MetricsError):
    """Confusion matrix has the wrong shape for the requested computation."""
    def __init__(self, message: str, shape: Optional[Tuple[int, ...]] = None):
        self.shape = shape
        super().__init__(message)


class DegenerateInputError(MetricsError):
    """Raised in strict mode when a metric is undefined (NaN) for the input."""
    def __init__(self, metric: str, message: str = ""):
        self.metric = metric
        super().__init__(message or f"{metric} is undefined for this input")
