"""Initial value problems: fixed-step Runge-Kutta and Adams, adaptive Dormand-Prince."""

from adaptnum.ode.adams import (
    adams_bashforth_moulton_solve,
    adams_bashforth_solve,
    adams_moulton_solve,
)
from adaptnum.ode.dopri import dopri_solve
from adaptnum.ode.params import StepControlParams
from adaptnum.ode.runge_kutta import rk4_step, runge_kutta_solve
from adaptnum.ode.solution import ODESolution
from adaptnum.ode.tableau import TABLEAUS, ButcherTableau, get_tableau

__all__ = [
    "TABLEAUS",
    "ButcherTableau",
    "ODESolution",
    "StepControlParams",
    "adams_bashforth_moulton_solve",
    "adams_bashforth_solve",
    "adams_moulton_solve",
    "dopri_solve",
    "get_tableau",
    "rk4_step",
    "runge_kutta_solve",
]
