"""Step-size control configuration for the adaptive ODE solver."""

from __future__ import annotations

from dataclasses import dataclass

from adaptnum._checks import _require_positive, _require_positive_int


@dataclass(frozen=True)
class StepControlParams:
    """Immutable step-size control settings.

    Attributes:
        atol: Absolute error tolerance per component.
        rtol: Relative error tolerance per component.
        initial_step: First trial step size.
        min_step: Smallest step the controller may take. A step that fails
            at this size is accepted anyway and flagged.
        max_step: Largest step the controller may take.
        max_steps: Cap on step attempts (accepted + rejected).
        safety: Safety factor of the step-size update.
        error_exponent: Exponent of the step-size update,
            ``h_new = safety * h * err ** -error_exponent``.
    """

    atol: float = 1e-6
    rtol: float = 1e-3
    initial_step: float = 0.01
    min_step: float = 1e-10
    max_step: float = 1.0
    max_steps: int = 10000
    safety: float = 0.9
    error_exponent: float = 0.2

    def __post_init__(self) -> None:
        _require_positive("atol", self.atol)
        _require_positive("rtol", self.rtol)
        _require_positive("initial_step", self.initial_step)
        _require_positive("min_step", self.min_step)
        _require_positive("max_step", self.max_step)
        _require_positive_int("max_steps", self.max_steps)
        _require_positive("safety", self.safety)
        _require_positive("error_exponent", self.error_exponent)
        if self.min_step > self.max_step:
            raise ValueError(f"min_step ({self.min_step}) must not exceed max_step ({self.max_step})")
        if not self.min_step <= self.initial_step <= self.max_step:
            raise ValueError(
                f"initial_step ({self.initial_step}) must lie in "
                f"[min_step, max_step] = [{self.min_step}, {self.max_step}]"
            )
        if self.safety >= 1.0:
            raise ValueError(f"safety must be below 1, got {self.safety}")

    def clamp(self, h: float) -> float:
        """Clamp a proposed step size into [min_step, max_step]."""
        return min(max(h, self.min_step), self.max_step)
