"""Trajectory returned by the ODE solvers."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Union

import numpy as np
import pandas as pd

State = Union[float, np.ndarray]


@dataclass(frozen=True, eq=False)
class ODESolution:
    """Ordered ``(t, y)`` pairs plus the bookkeeping of the run.

    Iterating yields ``(t_i, y_i)`` tuples. Scalar problems store ``y_i`` as
    floats, vector problems as read-only 1-D arrays.

    Attributes:
        t: Times of the stored points, starting with ``t0``.
        y: States at those times.
        method: Name of the integrator.
        n_attempts: Steps tried (accepted + rejected).
        n_accepted: Steps accepted by the error controller, forced ones
            included.
        n_rejected: Steps discarded and retried with a smaller size.
        n_forced: Steps accepted despite failing their test: at ``min_step``
            for the adaptive solver, after ``max_iter`` corrector iterations
            for Adams-Moulton.
        n_function_calls: Right-hand-side evaluations.
        reached_end: Whether the last stored time equals ``tf``.
        final_rk4_step: Whether the last point came from an RK4 landing
            step rather than the solver's own scheme.
        step_errors: Scaled error norm of every accepted adaptive step.
        diagnostics: Human-readable notes on budget exhaustion etc.
    """

    t: tuple[float, ...]
    y: tuple[State, ...]
    method: str
    n_attempts: int = 0
    n_accepted: int = 0
    n_rejected: int = 0
    n_forced: int = 0
    n_function_calls: int = 0
    reached_end: bool = True
    final_rk4_step: bool = False
    step_errors: tuple[float, ...] = ()
    diagnostics: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.t) != len(self.y):
            raise ValueError(f"t and y lengths differ: {len(self.t)} != {len(self.y)}")
        object.__setattr__(self, "t", tuple(float(t) for t in self.t))
        object.__setattr__(self, "y", tuple(_freeze_state(y) for y in self.y))
        object.__setattr__(self, "step_errors", tuple(self.step_errors))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    def __len__(self) -> int:
        return len(self.t)

    def __iter__(self) -> Iterator[tuple[float, State]]:
        return iter(zip(self.t, self.y))

    def __getitem__(self, index: int) -> tuple[float, State]:
        return self.t[index], self.y[index]

    @property
    def converged(self) -> bool:
        """Reached ``tf`` with every step passing the error test."""
        return self.reached_end and self.n_forced == 0

    @property
    def t_final(self) -> float:
        return self.t[-1]

    @property
    def y_final(self) -> State:
        return self.y[-1]

    @property
    def is_scalar(self) -> bool:
        return not isinstance(self.y[0], np.ndarray)

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(t, y)`` as arrays of shape (n,) and (n,) or (n, d)."""
        return np.asarray(self.t), np.asarray(self.y, dtype=float)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per stored point; vector components become y0, y1, ..."""
        t, y = self.as_arrays()
        if self.is_scalar:
            return pd.DataFrame({"t": t, "y": y})
        frame = pd.DataFrame(y, columns=[f"y{i}" for i in range(y.shape[1])])
        frame.insert(0, "t", t)
        return frame


def _freeze_state(y: State) -> State:
    if isinstance(y, np.ndarray) and y.ndim > 0:
        frozen = np.array(y, dtype=float)
        frozen.setflags(write=False)
        return frozen
    return float(y)
