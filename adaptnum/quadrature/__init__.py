"""Definite integrals: Newton-Cotes rules, adaptive bisection, Romberg."""

from adaptnum.quadrature.adaptive import QuadratureRule, adaptive_integrate
from adaptnum.quadrature.dispatch import METHODS, integrate
from adaptnum.quadrature.romberg import RombergTable, romberg_integrate, romberg_table
from adaptnum.quadrature.rules import (
    boole_rule,
    composite_midpoint,
    composite_rectangle,
    composite_simpson,
    composite_trapezoid,
    midpoint_rule,
    rectangle_rule,
    simpson38_rule,
    simpson_rule,
    trapezoid_rule,
)

__all__ = [
    "METHODS",
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
]
