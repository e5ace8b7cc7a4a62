"""Romberg integration: Richardson extrapolation of trapezoid refinements.

Row ``i`` of the table starts with the trapezoid estimate on ``2**i`` panels.
Only the new midpoints are evaluated when moving to the next row; the rest of
the sum is the previous row's estimate halved. Column ``j`` removes the
``O(h**(2j))`` error term:

    R[i, j] = R[i, j-1] + (R[i, j-1] - R[i-1, j-1]) / (4**j - 1)

Each diagonal entry is of higher order than the previous one provided the
integrand is smooth enough; on non-smooth integrands convergence stalls.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator

import numpy as np
import pandas as pd

from adaptnum._checks import CallCounter, _require_finite, _require_positive, _require_positive_int
from adaptnum.quadrature.rules import Integrand
from adaptnum.results import IntegrationResult

logger = logging.getLogger(__name__)


class RombergTable:
    """Lower-triangular Romberg table built row by row.

    ``table[i, j]`` is defined for ``0 <= j <= i < table.levels``; entries
    above the diagonal are NaN.
    """

    def __init__(self, a: float, b: float, max_levels: int):
        self.a = a
        self.b = b
        self._data = np.full((max_levels, max_levels), np.nan)
        self.levels = 0

    def _append_row(self, trapezoid: float) -> None:
        i = self.levels
        row = self._data[i]
        row[0] = trapezoid
        for j in range(1, i + 1):
            row[j] = _richardson(row[j - 1], self._data[i - 1, j - 1], j)
        self.levels += 1

    def _freeze(self) -> RombergTable:
        self._data = self._data[: self.levels, : self.levels].copy()
        self._data.setflags(write=False)
        return self

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the filled table."""
        view = self._data[: self.levels, : self.levels]
        view.setflags(write=False)
        return view

    @property
    def diagonal(self) -> np.ndarray:
        return np.diagonal(self.data).copy()

    @property
    def best(self) -> float:
        """Last diagonal entry, the highest-order estimate available."""
        return float(self._data[self.levels - 1, self.levels - 1])

    def rows(self) -> Iterator[list[float]]:
        for i in range(self.levels):
            yield [float(v) for v in self._data[i, : i + 1]]

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = index
        if not (0 <= j <= i < self.levels):
            raise IndexError(f"Romberg entry ({i}, {j}) outside the filled triangle")
        return float(self._data[i, j])

    def __len__(self) -> int:
        return self.levels

    def to_dataframe(self) -> pd.DataFrame:
        """Table as a DataFrame indexed by panel count, one column per order."""
        index = pd.Index([2**i for i in range(self.levels)], name="panels")
        columns = [f"R{j}" for j in range(self.levels)]
        return pd.DataFrame(self.data.copy(), index=index, columns=columns)


def _richardson(fine: float, coarse: float, j: int) -> float:
    denominator = 4.0**j - 1.0
    if denominator == 0.0:
        return math.nan
    return fine + (fine - coarse) / denominator


def _build(f: Integrand, a: float, b: float, max_levels: int, tol: float | None) -> tuple[RombergTable, bool]:
    """Fill rows until ``max_levels`` or the diagonal settles within ``tol``."""
    table = RombergTable(a, b, max_levels)
    h = b - a
    table._append_row(0.5 * h * (f(a) + f(b)))

    panels = 1
    stopped_early = False
    for _ in range(1, max_levels):
        h /= 2.0
        new_points = sum(f(a + (2 * k - 1) * h) for k in range(1, panels + 1))
        panels *= 2
        previous = table._data[table.levels - 1, 0]
        table._append_row(0.5 * previous + h * new_points)

        i = table.levels - 1
        if tol is not None and abs(table._data[i, i] - table._data[i - 1, i - 1]) < tol:
            stopped_early = True
            break

    return table._freeze(), stopped_early


def romberg_table(f: Integrand, a: float, b: float, max_levels: int = 10) -> RombergTable:
    """Build the full Romberg table over [a, b] without early stopping."""
    a = _require_finite("a", a)
    b = _require_finite("b", b)
    max_levels = _require_positive_int("max_levels", max_levels)
    table, _ = _build(f, a, b, max_levels, None)
    return table


def romberg_integrate(
    f: Integrand,
    a: float,
    b: float,
    max_levels: int = 10,
    tol: float | None = 1e-10,
) -> IntegrationResult:
    """Integrate ``f`` over [a, b] with Romberg's method.

    Args:
        f: Integrand.
        a: Lower bound.
        b: Upper bound. ``a > b`` returns the negated integral over [b, a].
        max_levels: Number of table rows to build at most (>= 1).
        tol: Stop as soon as two consecutive diagonal entries differ by less
            than this. ``None`` builds every level.

    Returns:
        IntegrationResult with ``error_estimate`` equal to the difference of
        the last two diagonal entries and the table in ``details["table"]``.
        When ``tol`` is never met, ``converged`` is False and the value is
        the last diagonal entry.
    """
    a = _require_finite("a", a)
    b = _require_finite("b", b)
    max_levels = _require_positive_int("max_levels", max_levels)
    if tol is not None:
        tol = _require_positive("tol", tol)

    if a == b:
        return IntegrationResult(value=0.0, error_estimate=0.0, method="romberg")
    if a > b:
        return romberg_integrate(f, b, a, max_levels, tol).negated()

    counted = CallCounter(f)
    table, stopped_early = _build(counted, a, b, max_levels, tol)

    levels = table.levels
    value = table.best
    if levels > 1:
        error = abs(value - table[levels - 2, levels - 2])
    else:
        error = math.inf

    converged = tol is None or stopped_early
    diagnostics: list[str] = []
    if not converged:
        diagnostics.append(
            f"max_levels={max_levels} exhausted; last diagonal difference {error:.3e} >= tol {tol:.3e}"
        )
        logger.warning("romberg_integrate did not converge: %s", diagnostics[-1])

    logger.debug(
        "romberg_integrate on [%g, %g]: value=%.15g levels=%d calls=%d",
        a,
        b,
        value,
        levels,
        counted.calls,
    )

    return IntegrationResult(
        value=value,
        error_estimate=error,
        n_function_calls=counted.calls,
        n_subdivisions=2 ** (levels - 1),
        converged=converged,
        method="romberg",
        diagnostics=diagnostics,
        details={"table": table, "levels": levels},
    )
