"""Single entry point selecting a quadrature method by name."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Any

from adaptnum._checks import CallCounter
from adaptnum.quadrature import rules
from adaptnum.quadrature.adaptive import QuadratureRule, adaptive_integrate
from adaptnum.quadrature.romberg import romberg_integrate
from adaptnum.results import IntegrationResult

# Rules returning a bare float; wrapped into an IntegrationResult below.
_FIXED_RULES: dict[str, Callable[..., float]] = {
    "rectangle": rules.rectangle_rule,
    "left_rectangle": rules.rectangle_rule,
    "right_rectangle": partial(rules.rectangle_rule, position="right"),
    "midpoint": rules.midpoint_rule,
    "trapezoid": rules.trapezoid_rule,
    "simpson": rules.simpson_rule,
    "simpson38": rules.simpson38_rule,
    "boole": rules.boole_rule,
    "composite_rectangle": rules.composite_rectangle,
    "composite_left_rectangle": rules.composite_rectangle,
    "composite_right_rectangle": partial(rules.composite_rectangle, position="right"),
    "composite_midpoint": rules.composite_midpoint,
    "composite_trapezoid": rules.composite_trapezoid,
    "composite_simpson": rules.composite_simpson,
}

_ADAPTIVE: dict[str, Callable[..., IntegrationResult]] = {
    "adaptive": adaptive_integrate,
    "adaptive_simpson": partial(adaptive_integrate, rule=QuadratureRule.SIMPSON),
    "adaptive_trapezoid": partial(adaptive_integrate, rule=QuadratureRule.TRAPEZOID),
    "romberg": romberg_integrate,
}

METHODS = tuple(sorted({*_FIXED_RULES, *_ADAPTIVE}))


def _panels(name: str, kwargs: dict[str, Any]) -> int:
    if not name.startswith("composite"):
        return 1
    n = kwargs.get("n", 100)
    return rules.simpson_panel_count(n) if name == "composite_simpson" else n


def integrate(
    f: Callable[[float], float],
    a: float,
    b: float,
    method: str = "adaptive",
    **kwargs: Any,
) -> IntegrationResult:
    """Integrate ``f`` over [a, b] with the named method.

    Fixed rules report ``error_estimate=nan`` since they carry no error
    control; ``n`` is forwarded to the composite rules and ``position``
    to the rectangle rules. ``n_subdivisions`` is the number of panels
    actually used.

    Example:
        >>> round(integrate(math.sin, 0, math.pi, "romberg").value, 12)
        2.0
    """
    name = method.lower()
    if name in _ADAPTIVE:
        return _ADAPTIVE[name](f, a, b, **kwargs)
    if name not in _FIXED_RULES:
        raise ValueError(f"Unknown integration method {method!r}; expected one of {', '.join(METHODS)}")

    counted = CallCounter(f)
    value = _FIXED_RULES[name](counted, a, b, **kwargs)
    return IntegrationResult(
        value=value,
        n_function_calls=counted.calls,
        n_subdivisions=_panels(name, kwargs),
        method=name,
    )
