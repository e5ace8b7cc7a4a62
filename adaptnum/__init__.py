"""adaptnum: adaptive quadrature, Romberg extrapolation and adaptive ODE stepping.

Example:
    import math
    from adaptnum import adaptive_integrate, dopri_solve, romberg_integrate

    adaptive_integrate(math.sin, 0.0, math.pi, tol=1e-10).value  # 2.0
    romberg_integrate(math.exp, 0.0, 1.0).value                  # e - 1
    dopri_solve(lambda t, y: -2.0 * y, (0.0, 2.0), 1.0).y_final  # exp(-4)
"""

import logging

from adaptnum.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)
from adaptnum.ode import (
    ButcherTableau,
    ODESolution,
    StepControlParams,
    adams_bashforth_moulton_solve,
    adams_bashforth_solve,
    adams_moulton_solve,
    dopri_solve,
    get_tableau,
    rk4_step,
    runge_kutta_solve,
)
from adaptnum.quadrature import (
    QuadratureRule,
    RombergTable,
    adaptive_integrate,
    boole_rule,
    composite_midpoint,
    composite_rectangle,
    composite_simpson,
    composite_trapezoid,
    integrate,
    midpoint_rule,
    rectangle_rule,
    romberg_integrate,
    romberg_table,
    simpson38_rule,
    simpson_rule,
    trapezoid_rule,
)
from adaptnum.results import IntegrationResult, Leaf

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Results
    "IntegrationResult",
    "Leaf",
    "ODESolution",
    # Quadrature
    "QuadratureRule",
    "RombergTable",
    "adaptive_integrate",
    "boole_rule",
    "composite_midpoint",
    "composite_rectangle",
    "composite_simpson",
    "composite_trapezoid",
    "integrate",
    "midpoint_rule",
    "rectangle_rule",
    "romberg_integrate",
    "romberg_table",
    "simpson38_rule",
    "simpson_rule",
    "trapezoid_rule",
    # ODE
    "ButcherTableau",
    "StepControlParams",
    "adams_bashforth_moulton_solve",
    "adams_bashforth_solve",
    "adams_moulton_solve",
    "dopri_solve",
    "get_tableau",
    "rk4_step",
    "runge_kutta_solve",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
