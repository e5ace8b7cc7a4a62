"""Adaptive Dormand-Prince 5(4) integration.

Each attempt evaluates the seven stages of the DOPRI5 tableau once and forms
both the 5th-order solution ``y5`` (propagated) and the embedded 4th-order
``y4``. Their difference, scaled componentwise by
``atol + rtol * max(|y|, |y5|)`` and combined as a root-mean-square, is the
error ratio ``err``:

    err <= 1   accept: t += h, y = y5, store (t, y)
    err >  1   reject: retry from the same (t, y) with a smaller h

In both cases the next step size is ``safety * h * err ** -error_exponent``
(doubled when ``err == 0``), clamped into ``[min_step, max_step]``. A step
that still fails at ``min_step`` is accepted and counted as forced. The last
step is clipped to land on ``tf``; a sliver shorter than ``min_step`` left
by floating-point drift is closed with one RK4 step.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from adaptnum.ode.params import StepControlParams
from adaptnum.ode.runge_kutta import RightHandSide, _rk4, _span, _stages, _System
from adaptnum.ode.solution import ODESolution, State
from adaptnum.ode.tableau import DOPRI5

logger = logging.getLogger(__name__)


def _error_ratio(y: np.ndarray, y5: np.ndarray, y4: np.ndarray, params: StepControlParams) -> float:
    scale = params.atol + params.rtol * np.maximum(np.abs(y), np.abs(y5))
    return float(np.sqrt(np.mean(((y5 - y4) / scale) ** 2)))


def _propose_step(h: float, err: float, params: StepControlParams) -> float:
    if err == 0.0:
        return 2.0 * h
    if not math.isfinite(err):
        return params.safety * h * 0.2
    return params.safety * h * err ** (-params.error_exponent)


def dopri_solve(
    f: RightHandSide,
    t_span: tuple[float, float],
    y0: State,
    atol: float = 1e-6,
    rtol: float = 1e-3,
    initial_step: float = 0.01,
    min_step: float = 1e-10,
    max_step: float = 1.0,
    max_steps: int = 10000,
    *,
    params: StepControlParams | None = None,
) -> ODESolution:
    """Integrate ``dy/dt = f(t, y)`` from ``t0`` to ``tf`` with step control.

    Args:
        f: Right-hand side, ``f(t, y) -> dy`` with ``dy`` shaped like ``y0``.
        t_span: ``(t0, tf)`` with ``tf >= t0``.
        y0: Initial state, scalar or 1-D.
        atol, rtol, initial_step, min_step, max_step, max_steps: Step
            control settings, see :class:`StepControlParams`.
        params: A ready-made :class:`StepControlParams`; when given it is
            used instead of the individual keyword arguments.

    Returns:
        ODESolution holding ``(t0, y0)`` and one point per accepted step.
        When ``max_steps`` runs out first the trajectory is partial:
        ``reached_end`` is False and ``t_final < tf``.

    Raises:
        ValueError: On invalid settings, a reversed span or a shape mismatch
            between ``f(t0, y0)`` and ``y0``.
    """
    if params is None:
        params = StepControlParams(
            atol=atol,
            rtol=rtol,
            initial_step=initial_step,
            min_step=min_step,
            max_step=max_step,
            max_steps=max_steps,
        )
    t0, tf = _span(t_span)
    system = _System(f, y0)

    t = t0
    y = system.y0
    times = [t]
    states = [system.export(y)]
    errors: list[float] = []
    diagnostics: list[str] = []
    attempts = accepted = rejected = forced = 0

    h = params.initial_step
    k1 = system(t, y) if tf > t0 else None

    while tf - t > params.min_step and attempts < params.max_steps:
        h = min(h, tf - t)
        landing = h == tf - t
        attempts += 1

        k = _stages(system, DOPRI5, t, y, h, k1)
        y5 = y + h * (DOPRI5.b @ k)
        y4 = y + h * (DOPRI5.b_low @ k)
        err = _error_ratio(y, y5, y4, params)
        h_next = params.clamp(_propose_step(h, err, params))

        passed = err <= 1.0
        if passed or h <= params.min_step:
            if not passed:
                forced += 1
                if forced == 1:
                    diagnostics.append(
                        f"step at t={t:.6g} accepted at min_step={params.min_step:g} "
                        f"with error ratio {err:.3e} > 1"
                    )
                logger.warning("dopri_solve: forced acceptance at t=%g (err=%.3e)", t, err)
            t = tf if landing else t + h
            y = y5
            # first-same-as-last: the 7th stage is f(t + h, y5)
            k1 = k[-1]
            accepted += 1
            errors.append(err)
            times.append(t)
            states.append(system.export(y))
        else:
            rejected += 1
        h = h_next

    final_rk4 = False
    gap = tf - t
    if 0.0 < gap <= params.min_step:
        y = _rk4(system, t, y, gap)
        t = tf
        times.append(t)
        states.append(system.export(y))
        final_rk4 = True

    reached_end = t == tf
    if not reached_end:
        diagnostics.append(
            f"max_steps={params.max_steps} exhausted at t={t:.6g} before tf={tf:.6g}"
        )
        logger.warning("dopri_solve stopped early: %s", diagnostics[-1])
    if forced > 1:
        diagnostics.append(f"{forced} steps were accepted at min_step without meeting the tolerance")

    logger.debug(
        "dopri_solve on [%g, %g]: accepted=%d rejected=%d calls=%d",
        t0,
        tf,
        accepted,
        rejected,
        system.calls,
    )

    return ODESolution(
        t=tuple(times),
        y=tuple(states),
        method=DOPRI5.name,
        n_attempts=attempts,
        n_accepted=accepted,
        n_rejected=rejected,
        n_forced=forced,
        n_function_calls=system.calls,
        reached_end=reached_end,
        final_rk4_step=final_rk4,
        step_errors=tuple(errors),
        diagnostics=diagnostics,
    )
