"""Progressive degressivity schedule followed by an absolute payment cap."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pacsim.helpers.pac.constants import DEGRESSIVITY_TRANCHES, PAYMENT_CAP


@dataclass(frozen=True)
class DegressivityTranche:
    lower: float
    upper: float
    retained_share: float

    @property
    def width(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class DegressivitySchedule:
    """Contiguous tranches starting at zero, each retaining a share of its own span."""

    tranches: tuple[DegressivityTranche, ...]
    cap: float = PAYMENT_CAP

    def __post_init__(self) -> None:
        if not self.tranches:
            raise ValueError("A degressivity schedule needs at least one tranche.")
        if self.tranches[0].lower != 0.0:
            raise ValueError("The first tranche must start at 0.")
        for previous, current in zip(self.tranches, self.tranches[1:]):
            if current.lower != previous.upper:
                raise ValueError(
                    f"Tranches must be contiguous: {previous.upper} != {current.lower}."
                )
        for tranche in self.tranches:
            if tranche.upper <= tranche.lower:
                raise ValueError(f"Empty or inverted tranche: {tranche}.")
            if not 0.0 <= tranche.retained_share <= 1.0:
                raise ValueError(f"Retained share must be in [0, 1]: {tranche}.")
        if self.cap < 0.0:
            raise ValueError(f"Payment cap must be non-negative, got {self.cap}.")

    @classmethod
    def from_bounds(
        cls,
        bounds: tuple[tuple[float, float, float], ...] = DEGRESSIVITY_TRANCHES,
        cap: float = PAYMENT_CAP,
    ) -> "DegressivitySchedule":
        return cls(
            tranches=tuple(
                DegressivityTranche(float(lower), float(upper), float(share))
                for lower, upper, share in bounds
            ),
            cap=float(cap),
        )


DEFAULT_SCHEDULE = DegressivitySchedule.from_bounds()


def apply_degressivity(amount, schedule: DegressivitySchedule = DEFAULT_SCHEDULE):
    """Reduce raw amounts tranche by tranche, then cap the total.

    Accepts a scalar or an array-like; returns a float or a numpy array accordingly.
    """
    values = np.asarray(amount, dtype=float)
    total = np.zeros_like(values)
    for tranche in schedule.tranches:
        span = np.clip(values - tranche.lower, 0.0, tranche.width)
        total = total + span * tranche.retained_share
    capped = np.minimum(total, schedule.cap)
    if capped.ndim == 0:
        return float(capped)
    return capped


def no_degressivity(amount):
    """Identity transform used when degressivity and capping are switched off."""
    values = np.asarray(amount, dtype=float)
    if values.ndim == 0:
        return float(values)
    return values.copy()
