"""Fixed-step explicit Runge-Kutta integration.

Scalar and vector problems share one code path: states are carried
internally as 1-D float arrays and converted back to the caller's shape only
when stored or passed to ``f``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

import numpy as np

from adaptnum._checks import _require_finite, _require_positive
from adaptnum.ode.solution import ODESolution, State
from adaptnum.ode.tableau import RK4, ButcherTableau, get_tableau

logger = logging.getLogger(__name__)

RightHandSide = Callable[[float, Any], Any]


class _System:
    """Counts evaluations of ``f`` and converts between caller and internal state."""

    def __init__(self, f: RightHandSide, y0: State):
        state = np.asarray(y0, dtype=float)
        if state.ndim > 1:
            raise ValueError(f"y0 must be a scalar or 1-D, got shape {state.shape}")
        self._f = f
        self.scalar = state.ndim == 0
        self.y0 = state.reshape(-1).copy()
        self.calls = 0

    def __call__(self, t: float, y: np.ndarray) -> np.ndarray:
        self.calls += 1
        dy = np.asarray(self._f(t, self.export(y)), dtype=float)
        expected = () if self.scalar else self.y0.shape
        if dy.shape != expected and not (self.scalar and dy.shape == (1,)):
            raise ValueError(
                f"f(t, y) returned shape {dy.shape}, expected {expected} to match y0"
            )
        return dy.reshape(-1)

    def export(self, y: np.ndarray) -> State:
        return float(y[0]) if self.scalar else y.copy()


def _span(t_span: tuple[float, float]) -> tuple[float, float]:
    t0, tf = t_span
    t0 = _require_finite("t0", t0)
    tf = _require_finite("tf", tf)
    if tf < t0:
        raise ValueError(f"t_span must satisfy tf >= t0, got ({t0}, {tf})")
    return t0, tf


def _grid(t0: float, tf: float, h: float) -> tuple[list[float], bool]:
    """Uniform times from ``t0`` in steps of ``h``, ending exactly at ``tf``.

    A last grid point within rounding distance of ``tf`` is snapped onto it.
    The flag is True when ``tf`` had to be appended after the last full
    step, i.e. the final interval is shorter than ``h``.
    """
    # a ratio such as 0.3 / 0.1 = 2.9999999999999996 still counts as 3 steps
    n_full = int(math.floor((tf - t0) / h + 1e-9))
    times = [t0 + i * h for i in range(n_full + 1)]
    if n_full and abs(tf - times[-1]) <= max(1e-9 * h, 1e-12 * max(1.0, abs(tf))):
        times[-1] = tf
    elif times[-1] < tf:
        times.append(tf)
        return times, True
    return times, False


def _stages(
    system: _System,
    tableau: ButcherTableau,
    t: float,
    y: np.ndarray,
    h: float,
    k1: np.ndarray | None = None,
) -> np.ndarray:
    """Evaluate all stage derivatives; row ``i`` of the result is ``k_i``."""
    k = np.empty((tableau.stages, y.size))
    k[0] = system(t, y) if k1 is None else k1
    for i in range(1, tableau.stages):
        y_stage = y + h * (tableau.A[i, :i] @ k[:i])
        k[i] = system(t + tableau.c[i] * h, y_stage)
    return k


def _rk4(
    system: _System, t: float, y: np.ndarray, h: float, k1: np.ndarray | None = None
) -> np.ndarray:
    k = _stages(system, RK4, t, y, h, k1)
    return y + h * (RK4.b @ k)


def rk4_step(f: RightHandSide, t: float, y: State, h: float) -> State:
    """Advance ``y`` from ``t`` to ``t + h`` with one classical RK4 step."""
    system = _System(f, y)
    return system.export(_rk4(system, t, system.y0, h))


def runge_kutta_solve(
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    step_size: float = 0.01,
    method: str = "rk4",
) -> ODESolution:
    """Integrate ``dy/dt = f(t, y)`` on a uniform grid.

    The grid is ``t0, t0 + h, t0 + 2h, ...``; when ``tf`` is not a grid
    point a shorter final step lands on it exactly.

    Args:
        f: Right-hand side, ``f(t, y) -> dy`` with ``dy`` shaped like ``y0``.
        t_span: ``(t0, tf)`` with ``tf >= t0``.
        y0: Initial state, scalar or 1-D.
        step_size: Grid spacing ``h`` (> 0).
        method: Tableau name: ``euler``, ``midpoint``, ``heun``, ``rk3``,
            ``rk4`` (or ``dopri5``, stepped without error control).

    Raises:
        ValueError: On bad arguments or a shape mismatch between ``f`` and
            ``y0``.
    """
    t0, tf = _span(t_span)
    h = _require_positive("step_size", step_size)
    tableau = get_tableau(method)
    system = _System(f, y0)

    times, _ = _grid(t0, tf, h)

    y = system.y0
    states = [system.export(y)]
    for t_left, t_right in zip(times[:-1], times[1:]):
        k = _stages(system, tableau, t_left, y, t_right - t_left)
        y = y + (t_right - t_left) * (tableau.b @ k)
        states.append(system.export(y))

    steps = len(times) - 1
    logger.debug("runge_kutta_solve(%s): %d steps, %d calls", tableau.name, steps, system.calls)

    return ODESolution(
        t=tuple(times),
        y=tuple(states),
        method=tableau.name,
        n_attempts=steps,
        n_accepted=steps,
        n_function_calls=system.calls,
        reached_end=True,
    )
