"""National convergence rule for entitlement unit values.

Values at or above the target move down by a share of their excess over the target,
never losing more than a maximum fraction of their original value. Values below the
target start from a floor (a share of the target, or the value itself when higher)
and close an accelerated share of the remaining gap. Both branches meet at the target.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from pacsim.helpers.pac.constants import (
    CONVERGENCE_DOWNWARD_RATE,
    CONVERGENCE_FLOOR_COEFFICIENT,
    CONVERGENCE_MAX_DOWNWARD_FRACTION,
    CONVERGENCE_TARGET_VALUE,
    CONVERGENCE_UPWARD_COEFFICIENT,
    CONVERGENCE_VALUE_CEILING,
)


@dataclass(frozen=True)
class ConvergenceRule:
    value_ceiling: float = CONVERGENCE_VALUE_CEILING
    target_value: float = CONVERGENCE_TARGET_VALUE
    floor_coefficient: float = CONVERGENCE_FLOOR_COEFFICIENT
    downward_rate: float = CONVERGENCE_DOWNWARD_RATE
    max_downward_fraction: float = CONVERGENCE_MAX_DOWNWARD_FRACTION
    upward_coefficient: float = CONVERGENCE_UPWARD_COEFFICIENT

    def __post_init__(self) -> None:
        if self.target_value < 0.0 or self.value_ceiling < self.target_value:
            raise ValueError("Convergence requires 0 <= target_value <= value_ceiling.")
        for name in (
            "floor_coefficient",
            "downward_rate",
            "max_downward_fraction",
            "upward_coefficient",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}.")

    def with_upward_coefficient(self, coefficient: float) -> "ConvergenceRule":
        return replace(self, upward_coefficient=coefficient)


DEFAULT_RULE = ConvergenceRule()


def converge_unit_values(values, rule: ConvergenceRule = DEFAULT_RULE):
    """Apply the convergence rule to a scalar or an array of historical unit values."""
    original = np.asarray(values, dtype=float)
    capped = np.minimum(original, rule.value_ceiling)
    downward = np.maximum(
        np.minimum(rule.value_ceiling, (1.0 - rule.max_downward_fraction) * original),
        capped - rule.downward_rate * (capped - rule.target_value),
    )
    floor = np.maximum(rule.floor_coefficient * rule.target_value, original)
    upward = floor + rule.upward_coefficient * (rule.target_value - floor)
    converged = np.where(original >= rule.target_value, downward, upward)
    if converged.ndim == 0:
        return float(converged)
    return converged
