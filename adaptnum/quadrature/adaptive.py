"""Adaptive quadrature by binary subdivision.

On each subinterval a coarse and a refined estimate are formed from the same
rule family (the refined one on a grid with every panel halved). Their
difference is the local error estimate. A subinterval whose error is within
its tolerance budget, or which sits at ``max_depth``, becomes a leaf and
contributes its refined estimate; otherwise it is split at the midpoint and
each half receives half of the parent's budget. Budgets therefore sum to the
top-level ``tol`` across all leaves.

Function values are shared: the refined grid of a parent is exactly the
coarse grid of its two children, so every node is evaluated once.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from adaptnum._checks import (
    CallCounter,
    _require_finite,
    _require_non_negative_int,
    _require_positive,
)
from adaptnum.quadrature.rules import Integrand, simpson_samples, trapezoid_samples
from adaptnum.results import IntegrationResult, Leaf

logger = logging.getLogger(__name__)


class QuadratureRule(Enum):
    """Base rule pair used by :func:`adaptive_integrate`."""

    TRAPEZOID = "trapezoid"
    SIMPSON = "simpson"

    @classmethod
    def coerce(cls, value: QuadratureRule | str) -> QuadratureRule:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(repr(rule.value) for rule in cls)
            raise ValueError(f"Unknown quadrature rule {value!r}; expected one of {choices}") from None


@dataclass(frozen=True)
class _RulePair:
    coarse: Callable[[Sequence[float], float], float]
    refined: Callable[[Sequence[float], float], float]
    panels: int  # panels in the coarse grid


_RULES: dict[QuadratureRule, _RulePair] = {
    QuadratureRule.TRAPEZOID: _RulePair(trapezoid_samples, trapezoid_samples, panels=1),
    QuadratureRule.SIMPSON: _RulePair(simpson_samples, simpson_samples, panels=2),
}


def _refine(f: Integrand, a: float, b: float, coarse: Sequence[float]) -> list[float]:
    """Interleave the panel midpoints of ``coarse`` with its samples."""
    panels = len(coarse) - 1
    h = (b - a) / panels
    fine = [coarse[0]]
    for i in range(panels):
        fine.append(f(a + (i + 0.5) * h))
        fine.append(coarse[i + 1])
    return fine


def _subdivide(
    f: Integrand,
    pair: _RulePair,
    a: float,
    b: float,
    coarse: Sequence[float],
    depth: int,
    tol: float,
    max_depth: int,
    leaves: list[Leaf],
) -> tuple[float, float, bool]:
    """Recursive step. Returns (value, error, converged) for [a, b]."""
    width = b - a
    fine = _refine(f, a, b, coarse)
    i_low = pair.coarse(coarse, width)
    i_high = pair.refined(fine, width)
    error = abs(i_high - i_low)

    # NaN compares False here, so a NaN leaf is never reported as converged;
    # a NaN or Inf error estimate also ends the recursion
    within = error <= tol
    if within or depth >= max_depth or not math.isfinite(error):
        leaves.append(Leaf(a, b, i_high, error, tol, depth, within))
        return i_high, error, within

    mid = (a + b) / 2.0
    half = len(coarse) - 1
    left_value, left_error, left_ok = _subdivide(
        f, pair, a, mid, fine[: half + 1], depth + 1, tol / 2.0, max_depth, leaves
    )
    right_value, right_error, right_ok = _subdivide(
        f, pair, mid, b, fine[half:], depth + 1, tol / 2.0, max_depth, leaves
    )
    return left_value + right_value, left_error + right_error, left_ok and right_ok


def adaptive_integrate(
    f: Integrand,
    a: float,
    b: float,
    tol: float = 1e-8,
    max_depth: int = 20,
    rule: QuadratureRule | str = QuadratureRule.SIMPSON,
) -> IntegrationResult:
    """Integrate ``f`` over [a, b] to an absolute tolerance by bisection.

    Args:
        f: Integrand, assumed finite on [a, b]. NaN/Inf values propagate
            into the result instead of raising; a subinterval whose error
            estimate is not finite is not bisected further.
        a: Lower bound.
        b: Upper bound. ``a > b`` returns the negated integral over [b, a].
        tol: Absolute error tolerance (> 0).
        max_depth: Maximum bisection depth (>= 0). Leaves at this depth are
            accepted even when their error exceeds their budget.
        rule: ``"simpson"`` (default) or ``"trapezoid"``.

    Returns:
        IntegrationResult whose ``details["leaves"]`` lists the accepted
        subintervals in left-to-right order.

    Raises:
        ValueError: On non-positive ``tol``, negative ``max_depth``,
            non-finite bounds or an unknown rule.
    """
    tol = _require_positive("tol", tol)
    max_depth = _require_non_negative_int("max_depth", max_depth)
    rule = QuadratureRule.coerce(rule)
    a = _require_finite("a", a)
    b = _require_finite("b", b)
    method = f"adaptive_{rule.value}"

    if a == b:
        return IntegrationResult(value=0.0, error_estimate=0.0, method=method)

    if a > b:
        return adaptive_integrate(f, b, a, tol, max_depth, rule).negated()

    pair = _RULES[rule]
    counted = CallCounter(f)
    h = (b - a) / pair.panels
    coarse = [counted(a + i * h) for i in range(pair.panels)] + [counted(b)]

    leaves: list[Leaf] = []
    value, error, converged = _subdivide(counted, pair, a, b, coarse, 0, tol, max_depth, leaves)

    diagnostics: list[str] = []
    if not converged:
        stuck = [leaf for leaf in leaves if not leaf.converged]
        broken = [leaf for leaf in stuck if not math.isfinite(leaf.error)]
        deep = [leaf for leaf in stuck if math.isfinite(leaf.error)]
        if broken:
            diagnostics.append(
                f"{len(broken)} of {len(leaves)} subintervals have a non-finite error estimate "
                f"(NaN or Inf samples), first on [{broken[0].a:.6g}, {broken[0].b:.6g}]"
            )
        if deep:
            worst = max(deep, key=lambda leaf: leaf.error)
            diagnostics.append(
                f"{len(deep)} of {len(leaves)} subintervals reached max_depth={max_depth} "
                f"without meeting their tolerance; worst error {worst.error:.3e} "
                f"on [{worst.a:.6g}, {worst.b:.6g}]"
            )
        logger.warning("adaptive_integrate did not converge: %s", "; ".join(diagnostics))

    logger.debug(
        "adaptive_integrate(%s) on [%g, %g]: value=%.12g error=%.3e calls=%d leaves=%d",
        rule.value,
        a,
        b,
        value,
        error,
        counted.calls,
        len(leaves),
    )

    return IntegrationResult(
        value=value,
        error_estimate=error,
        n_function_calls=counted.calls,
        n_subdivisions=len(leaves),
        converged=converged,
        method=method,
        diagnostics=diagnostics,
        details={
            "rule": rule.value,
            "tol": tol,
            "max_depth": max_depth,
            "leaves": tuple(leaves),
        },
    )
