"""Butcher tableaux of the explicit Runge-Kutta methods."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class ButcherTableau:
    """Coefficients of an explicit Runge-Kutta method.

    Attributes:
        name: Registry key.
        A: Strictly lower-triangular stage matrix, shape (s, s).
        b: Weights of the propagated solution, shape (s,).
        c: Nodes, shape (s,).
        order: Order of the ``b`` solution.
        b_low: Weights of the embedded lower-order solution, if any.
    """

    name: str
    A: np.ndarray
    b: np.ndarray
    c: np.ndarray
    order: int
    b_low: np.ndarray | None = None

    def __post_init__(self) -> None:
        for attr in ("A", "b", "c", "b_low"):
            value = getattr(self, attr)
            if value is None:
                continue
            array = np.array(value, dtype=float)
            array.setflags(write=False)
            object.__setattr__(self, attr, array)
        s = self.stages
        if self.A.shape != (s, s) or self.c.shape != (s,):
            raise ValueError(f"inconsistent tableau shapes for {self.name!r}")
        if np.any(np.triu(self.A) != 0.0):
            raise ValueError(f"tableau {self.name!r} is not explicit")

    @property
    def stages(self) -> int:
        return len(self.b)

    @property
    def is_embedded(self) -> bool:
        return self.b_low is not None


EULER = ButcherTableau("euler", A=[[0.0]], b=[1.0], c=[0.0], order=1)

MIDPOINT = ButcherTableau(
    "midpoint",
    A=[[0.0, 0.0], [0.5, 0.0]],
    b=[0.0, 1.0],
    c=[0.0, 0.5],
    order=2,
)

HEUN = ButcherTableau(
    "heun",
    A=[[0.0, 0.0], [1.0, 0.0]],
    b=[0.5, 0.5],
    c=[0.0, 1.0],
    order=2,
)

RK3 = ButcherTableau(
    "rk3",
    A=[[0.0, 0.0, 0.0], [0.5, 0.0, 0.0], [-1.0, 2.0, 0.0]],
    b=[1 / 6, 2 / 3, 1 / 6],
    c=[0.0, 0.5, 1.0],
    order=3,
)

RK4 = ButcherTableau(
    "rk4",
    A=[
        [0.0, 0.0, 0.0, 0.0],
        [0.5, 0.0, 0.0, 0.0],
        [0.0, 0.5, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
    ],
    b=[1 / 6, 1 / 3, 1 / 3, 1 / 6],
    c=[0.0, 0.5, 0.5, 1.0],
    order=4,
)

# Dormand-Prince 5(4). The last row of A equals b, so the seventh stage of
# an accepted step is f(t + h, y_next) (first-same-as-last).
DOPRI5 = ButcherTableau(
    "dopri5",
    A=[
        [0, 0, 0, 0, 0, 0, 0],
        [1 / 5, 0, 0, 0, 0, 0, 0],
        [3 / 40, 9 / 40, 0, 0, 0, 0, 0],
        [44 / 45, -56 / 15, 32 / 9, 0, 0, 0, 0],
        [19372 / 6561, -25360 / 2187, 64448 / 6561, -212 / 729, 0, 0, 0],
        [9017 / 3168, -355 / 33, 46732 / 5247, 49 / 176, -5103 / 18656, 0, 0],
        [35 / 384, 0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84, 0],
    ],
    b=[35 / 384, 0, 500 / 1113, 125 / 192, -2187 / 6784, 11 / 84, 0],
    c=[0, 1 / 5, 3 / 10, 4 / 5, 8 / 9, 1, 1],
    order=5,
    b_low=[5179 / 57600, 0, 7571 / 16695, 393 / 640, -92097 / 339200, 187 / 2100, 1 / 40],
)

TABLEAUS: dict[str, ButcherTableau] = {
    tableau.name: tableau for tableau in (EULER, MIDPOINT, HEUN, RK3, RK4, DOPRI5)
}


def get_tableau(name: str) -> ButcherTableau:
    """Look up a tableau by (case-insensitive) name."""
    try:
        return TABLEAUS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown Runge-Kutta method {name!r}; expected one of {', '.join(TABLEAUS)}"
        ) from None
