"""Shared internal validation helpers and the evaluation counter."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any


def _require_positive(name: str, value: float) -> float:
    # `not value > 0` also rejects NaN
    if not value > 0:
        raise ValueError(f"{name} must be strictly positive, got {value}")
    return float(value)


def _require_finite(name: str, value: float) -> float:
    fvalue = float(value)
    if not math.isfinite(fvalue):
        raise ValueError(f"{name} must be finite, got {value}")
    return fvalue


def _require_non_negative_int(name: str, value: int) -> int:
    ivalue = int(value)
    if ivalue != value or ivalue < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value}")
    return ivalue


def _require_positive_int(name: str, value: int) -> int:
    ivalue = _require_non_negative_int(name, value)
    if ivalue == 0:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return ivalue


class CallCounter:
    """Wraps a callable and counts how many times it has been invoked."""

    def __init__(self, func: Callable[..., Any]):
        self._func = func
        self.calls = 0

    def __call__(self, *args: Any) -> Any:
        self.calls += 1
        return self._func(*args)
