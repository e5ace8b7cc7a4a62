"""Closed Newton-Cotes rules, single-panel and composite.

The single-panel rules evaluate ``f`` at equally spaced nodes of [a, b]:

    rectangle    (b - a) * f(a), or f(b) for the right rectangle  O(h^2)
    midpoint     (b - a) * f(m)                                   O(h^3)
    trapezoid    (b - a) / 2 * (f(a) + f(b))                      O(h^3)
    simpson      (b - a) / 6 * (f(a) + 4 f(m) + f(b))             O(h^5)
    simpson 3/8  (b - a) / 8 * (f0 + 3 f1 + 3 f2 + f3)            O(h^5)
    boole        (b - a) / 90 * (7 f0 + 32 f1 + 12 f2 + 32 f3 + 7 f4)  O(h^7)

The composite rules repeat a rule over ``n`` equal panels.
Reversed bounds (a > b) return the negated integral over [b, a].

The ``*_samples`` helpers apply the composite rule to values already sampled
on an equally spaced grid; the adaptive and Romberg integrators use them so
that no function value is computed twice.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from adaptnum._checks import _require_finite, _require_positive_int

Integrand = Callable[[float], float]


def trapezoid_samples(values: Sequence[float], width: float) -> float:
    """Composite trapezoid rule over equally spaced samples spanning ``width``."""
    panels = len(values) - 1
    if panels < 1:
        raise ValueError(f"need at least 2 samples, got {len(values)}")
    h = width / panels
    interior = sum(values[1:-1])
    return h * (0.5 * (values[0] + values[-1]) + interior)


def simpson_samples(values: Sequence[float], width: float) -> float:
    """Composite Simpson rule over an odd number of equally spaced samples."""
    panels = len(values) - 1
    if panels < 2 or panels % 2:
        raise ValueError(f"Simpson's rule needs an odd number >= 3 of samples, got {len(values)}")
    h = width / panels
    odd = sum(values[1:-1:2])
    even = sum(values[2:-1:2])
    return h / 3.0 * (values[0] + 4.0 * odd + 2.0 * even + values[-1])


def _bounds(a: float, b: float) -> tuple[float, float, float]:
    """Validate bounds and return (lo, hi, sign)."""
    a = _require_finite("a", a)
    b = _require_finite("b", b)
    if a > b:
        return b, a, -1.0
    return a, b, 1.0


_RECTANGLE_OFFSETS = {"left": 0.0, "midpoint": 0.5, "right": 1.0}


def _rectangle_offset(position: str) -> float:
    try:
        return _RECTANGLE_OFFSETS[position.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown rectangle position {position!r}; expected 'left', 'midpoint' or 'right'"
        ) from None


def simpson_panel_count(n: int) -> int:
    """Panels composite Simpson actually uses for a requested ``n`` (rounded up to even)."""
    return n + n % 2


def rectangle_rule(f: Integrand, a: float, b: float, position: str = "left") -> float:
    """Single-panel rectangle rule sampling ``f`` at the left end, midpoint or right end.

    For monotone ``f`` the left and right rectangles bracket the integral.
    """
    lo, hi, sign = _bounds(a, b)
    offset = _rectangle_offset(position)
    x = hi if offset == 1.0 else lo + offset * (hi - lo)
    return sign * (hi - lo) * f(x)


def midpoint_rule(f: Integrand, a: float, b: float) -> float:
    """Single-panel midpoint (rectangle) rule."""
    lo, hi, sign = _bounds(a, b)
    return sign * (hi - lo) * f((lo + hi) / 2.0)


def trapezoid_rule(f: Integrand, a: float, b: float) -> float:
    """Single-panel trapezoid rule. Exact for linear functions."""
    lo, hi, sign = _bounds(a, b)
    return sign * (hi - lo) / 2.0 * (f(lo) + f(hi))


def simpson_rule(f: Integrand, a: float, b: float) -> float:
    """Single-panel Simpson rule. Exact for cubics."""
    lo, hi, sign = _bounds(a, b)
    return sign * (hi - lo) / 6.0 * (f(lo) + 4.0 * f((lo + hi) / 2.0) + f(hi))


def simpson38_rule(f: Integrand, a: float, b: float) -> float:
    """Simpson's 3/8 rule on four equally spaced nodes."""
    lo, hi, sign = _bounds(a, b)
    h = (hi - lo) / 3.0
    total = f(lo) + 3.0 * f(lo + h) + 3.0 * f(lo + 2.0 * h) + f(hi)
    return sign * (hi - lo) / 8.0 * total


def boole_rule(f: Integrand, a: float, b: float) -> float:
    """Boole's rule on five equally spaced nodes. Exact for quintics."""
    lo, hi, sign = _bounds(a, b)
    h = (hi - lo) / 4.0
    total = (
        7.0 * f(lo)
        + 32.0 * f(lo + h)
        + 12.0 * f(lo + 2.0 * h)
        + 32.0 * f(lo + 3.0 * h)
        + 7.0 * f(hi)
    )
    return sign * (hi - lo) / 90.0 * total


def composite_midpoint(f: Integrand, a: float, b: float, n: int = 100) -> float:
    """Composite midpoint rule with ``n`` panels."""
    lo, hi, sign = _bounds(a, b)
    n = _require_positive_int("n", n)
    h = (hi - lo) / n
    return sign * h * sum(f(lo + (i + 0.5) * h) for i in range(n))


def composite_rectangle(
    f: Integrand, a: float, b: float, n: int = 100, position: str = "left"
) -> float:
    """Composite rectangle rule with ``n`` panels.

    ``position`` picks the sampled point of each panel: its left end, its
    midpoint (same as :func:`composite_midpoint`) or its right end.
    """
    lo, hi, sign = _bounds(a, b)
    n = _require_positive_int("n", n)
    offset = _rectangle_offset(position)
    h = (hi - lo) / n
    nodes = [lo + (i + offset) * h for i in range(n)]
    if offset == 1.0:
        nodes[-1] = hi
    return sign * h * sum(f(x) for x in nodes)


def composite_trapezoid(f: Integrand, a: float, b: float, n: int = 100) -> float:
    """Composite trapezoid rule with ``n`` panels."""
    lo, hi, sign = _bounds(a, b)
    n = _require_positive_int("n", n)
    h = (hi - lo) / n
    values = [f(lo + i * h) for i in range(n)] + [f(hi)]
    return sign * trapezoid_samples(values, hi - lo)


def composite_simpson(f: Integrand, a: float, b: float, n: int = 100) -> float:
    """Composite Simpson rule with ``n`` panels (odd ``n`` is rounded up)."""
    lo, hi, sign = _bounds(a, b)
    n = _require_positive_int("n", n)
    n = simpson_panel_count(n)
    h = (hi - lo) / n
    values = [f(lo + i * h) for i in range(n)] + [f(hi)]
    return sign * simpson_samples(values, hi - lo)
