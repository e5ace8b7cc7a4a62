"""Fixed-step Adams multistep integration.

Adams methods build the next state from derivatives already computed at
earlier grid points, so after start-up a step costs one evaluation of ``f``
(Bashforth) or one plus the corrector evaluations (Moulton):

    Bashforth (explicit)  y[n+1] = y[n] + h * sum(b[j] * f[n-j],   j = 0..p-1)
    Moulton   (implicit)  y[n+1] = y[n] + h * sum(m[j] * f[n+1-j], j = 0..p-1)

The first points, until enough derivatives are stored, come from classical
RK4 steps on the same grid. A final interval shorter than ``step_size``
breaks the uniform spacing the weights assume and is closed with one RK4
step.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

import numpy as np

from adaptnum._checks import _require_positive, _require_positive_int
from adaptnum.ode.runge_kutta import RightHandSide, _grid, _rk4, _span, _System
from adaptnum.ode.solution import ODESolution, State

logger = logging.getLogger(__name__)

MAX_ORDER = 5

# Weights of f[n], f[n-1], ... (newest first).
BASHFORTH_COEFFICIENTS: dict[int, np.ndarray] = {
    1: np.array([1.0]),
    2: np.array([3.0, -1.0]) / 2,
    3: np.array([23.0, -16.0, 5.0]) / 12,
    4: np.array([55.0, -59.0, 37.0, -9.0]) / 24,
    5: np.array([1901.0, -2774.0, 2616.0, -1274.0, 251.0]) / 720,
}

# Weights of f[n+1], f[n], f[n-1], ... (newest first).
MOULTON_COEFFICIENTS: dict[int, np.ndarray] = {
    1: np.array([1.0]),
    2: np.array([1.0, 1.0]) / 2,
    3: np.array([5.0, 8.0, -1.0]) / 12,
    4: np.array([9.0, 19.0, -5.0, 1.0]) / 24,
    5: np.array([251.0, 646.0, -264.0, 106.0, -19.0]) / 720,
}

# step(system, t_next, y, h, past) -> (y_next, settled)
_Step = Callable[[_System, float, np.ndarray, float, np.ndarray], tuple[np.ndarray, bool]]


def _check_order(order: int) -> int:
    order = _require_positive_int("order", order)
    if order > MAX_ORDER:
        raise ValueError(f"order must be between 1 and {MAX_ORDER}, got {order}")
    return order


def _multistep(
    name: str,
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    step_size: float,
    n_history: int,
    step: _Step,
) -> ODESolution:
    """Run ``step`` over the uniform grid once ``n_history`` derivatives exist."""
    t0, tf = _span(t_span)
    h = _require_positive("step_size", step_size)
    system = _System(f, y0)
    times, short_last = _grid(t0, tf, h)
    n_uniform = len(times) - 1 - int(short_last)

    y = system.y0
    states = [system.export(y)]
    history: deque[np.ndarray] = deque(maxlen=n_history)
    diagnostics: list[str] = []
    start_up = unsettled = 0

    for i in range(n_uniform):
        history.appendleft(system(times[i], y))
        if len(history) < n_history:
            y = _rk4(system, times[i], y, h, k1=history[0])
            start_up += 1
        else:
            y, settled = step(system, times[i + 1], y, h, np.array(history))
            if not settled:
                unsettled += 1
                if unsettled == 1:
                    diagnostics.append(
                        f"corrector did not settle on the step to t={times[i + 1]:.6g}"
                    )
                logger.warning("%s: corrector did not settle at t=%g", name, times[i + 1])
        states.append(system.export(y))

    if short_last:
        y = _rk4(system, times[-2], y, times[-1] - times[-2])
        states.append(system.export(y))
    if unsettled > 1:
        diagnostics.append(f"{unsettled} corrector solves stopped at max_iter")

    steps = len(times) - 1
    logger.debug(
        "%s: %d steps (%d RK4 start-up), %d calls", name, steps, start_up, system.calls
    )

    return ODESolution(
        t=tuple(times),
        y=tuple(states),
        method=name,
        n_attempts=steps,
        n_accepted=steps,
        n_forced=unsettled,
        n_function_calls=system.calls,
        reached_end=True,
        final_rk4_step=short_last,
        diagnostics=diagnostics,
    )


def adams_bashforth_solve(
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    step_size: float = 0.01,
    order: int = 4,
) -> ODESolution:
    """Integrate ``dy/dt = f(t, y)`` with the explicit ``order``-step Adams-Bashforth method.

    Args:
        f: Right-hand side, ``f(t, y) -> dy`` with ``dy`` shaped like ``y0``.
        t_span: ``(t0, tf)`` with ``tf >= t0``.
        y0: Initial state, scalar or 1-D.
        step_size: Grid spacing ``h`` (> 0).
        order: 1 (explicit Euler) to 5. The first ``order - 1`` steps are
            RK4 steps.

    Raises:
        ValueError: On bad arguments or a shape mismatch between ``f`` and
            ``y0``.
    """
    order = _check_order(order)
    weights = BASHFORTH_COEFFICIENTS[order]

    def step(system, t_next, y, h, past):
        return y + h * (weights @ past), True

    return _multistep(f"adams_bashforth{order}", f, t_span, y0, step_size, order, step)


def adams_moulton_solve(
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    step_size: float = 0.01,
    order: int = 4,
    tol: float = 1e-10,
    max_iter: int = 10,
) -> ODESolution:
    """Integrate ``dy/dt = f(t, y)`` with the implicit Adams-Moulton method.

    Each step solves ``y[n+1] = y[n] + h * (m[0] * f(t[n+1], y[n+1]) + ...)``
    by fixed-point iteration, starting from the Adams-Bashforth prediction
    built from the same history. Iteration stops once successive iterates
    differ by at most ``tol`` in every component.

    The iteration only contracts when ``h * m[0] * L < 1`` for the Lipschitz
    constant ``L`` of ``f``. A step that has not settled after ``max_iter``
    iterations keeps its last iterate and is counted in ``n_forced``, so
    ``converged`` is False for that run.

    Args:
        f: Right-hand side, ``f(t, y) -> dy`` with ``dy`` shaped like ``y0``.
        t_span: ``(t0, tf)`` with ``tf >= t0``.
        y0: Initial state, scalar or 1-D.
        step_size: Grid spacing ``h`` (> 0).
        order: 1 (backward Euler) to 5 (2 is the trapezoidal rule).
        tol: Absolute tolerance of the fixed-point iteration (> 0).
        max_iter: Iterations allowed per step (>= 1).

    Raises:
        ValueError: On bad arguments or a shape mismatch between ``f`` and
            ``y0``.
    """
    order = _check_order(order)
    tol = _require_positive("tol", tol)
    max_iter = _require_positive_int("max_iter", max_iter)
    weights = MOULTON_COEFFICIENTS[order]
    n_history = max(order - 1, 1)
    predictor = BASHFORTH_COEFFICIENTS[n_history]

    def step(system, t_next, y, h, past):
        known = y + h * (weights[1:] @ past[: order - 1])
        guess = y + h * (predictor @ past)
        for _ in range(max_iter):
            update = known + h * weights[0] * system(t_next, guess)
            if np.max(np.abs(update - guess)) <= tol:
                return update, True
            guess = update
        return guess, False

    return _multistep(f"adams_moulton{order}", f, t_span, y0, step_size, n_history, step)


def adams_bashforth_moulton_solve(
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    step_size: float = 0.01,
    order: int = 4,
    max_iter: int = 1,
) -> ODESolution:
    """Integrate ``dy/dt = f(t, y)`` with an Adams predictor-corrector pair.

    Adams-Bashforth predicts, then Adams-Moulton of the same order corrects
    ``max_iter`` times (``max_iter=1`` is the classic PECE scheme). No
    tolerance is checked, so every step counts as settled.

    Raises:
        ValueError: On bad arguments or a shape mismatch between ``f`` and
            ``y0``.
    """
    order = _check_order(order)
    max_iter = _require_positive_int("max_iter", max_iter)
    predictor = BASHFORTH_COEFFICIENTS[order]
    corrector = MOULTON_COEFFICIENTS[order]

    def step(system, t_next, y, h, past):
        known = y + h * (corrector[1:] @ past[: order - 1])
        y_next = y + h * (predictor @ past)
        for _ in range(max_iter):
            y_next = known + h * corrector[0] * system(t_next, y_next)
        return y_next, True

    return _multistep(
        f"adams_bashforth_moulton{order}", f, t_span, y0, step_size, order, step
    )
