"""Structured results returned by the quadrature routines.

Results are frozen snapshots: they are built once at the end of a top-level
call and never mutated afterwards. Non-convergence is reported through the
``converged`` flag and the ``diagnostics`` tuple instead of being raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class Leaf:
    """One accepted subinterval of an adaptive quadrature run.

    Attributes:
        a: Left end of the subinterval.
        b: Right end of the subinterval.
        value: Accepted (refined) estimate on [a, b].
        error: Local error estimate ``|I_high - I_low|``.
        tol: Tolerance budget allotted to this subinterval.
        depth: Recursion depth at which the leaf was accepted.
        converged: False when the leaf was accepted only because the
            depth limit was reached or its error estimate is not finite.
    """

    a: float
    b: float
    value: float
    error: float
    tol: float
    depth: int
    converged: bool


@dataclass(frozen=True)
class IntegrationResult:
    """Result of a definite-integral computation.

    Attributes:
        value: Approximation of the integral.
        error_estimate: Estimated absolute error. An estimate, not a bound.
        n_function_calls: Number of integrand evaluations.
        n_subdivisions: Number of subintervals/panels used by the final
            approximation.
        converged: Whether the requested tolerance was met.
        method: Name of the method that produced the value.
        diagnostics: Human-readable notes (budget exhaustion etc.).
        details: Method-specific extras, read-only.
    """

    value: float
    error_estimate: float = math.nan
    n_function_calls: int = 0
    n_subdivisions: int = 0
    converged: bool = True
    method: str = ""
    diagnostics: tuple[str, ...] = ()
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def __float__(self) -> float:
        return float(self.value)

    def negated(self) -> IntegrationResult:
        """Return a copy with the sign of ``value`` flipped (reversed bounds).

        Leaves in ``details["leaves"]`` keep their ascending ``[a, b]`` but
        get negated values, so they still sum to ``value``.
        """
        details = dict(self.details)
        if "leaves" in details:
            details["leaves"] = tuple(replace(leaf, value=-leaf.value) for leaf in details["leaves"])
        return IntegrationResult(
            value=-self.value,
            error_estimate=self.error_estimate,
            n_function_calls=self.n_function_calls,
            n_subdivisions=self.n_subdivisions,
            converged=self.converged,
            method=self.method,
            diagnostics=self.diagnostics,
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "error_estimate": self.error_estimate,
            "n_function_calls": self.n_function_calls,
            "n_subdivisions": self.n_subdivisions,
            "converged": self.converged,
            "method": self.method,
            "diagnostics": list(self.diagnostics),
        }
