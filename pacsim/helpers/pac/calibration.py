"""Generic bracketing root-finder used by every calibration in the engine.

A calibration finds the scalar parameter for which an aggregate reproduces a target.
The objective is injected; the bracket must contain a sign change of
``objective(parameter) - target``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from scipy.optimize import brentq

from pacsim.helpers.pac import config


class CalibrationError(ValueError):
    """Raised when a calibration cannot produce a parameter."""


class NoRootFoundError(CalibrationError):
    """The objective does not change sign over the search interval."""


class ConvergenceFailureError(CalibrationError):
    """The solver exhausted its iteration budget or met a non-finite objective."""


@dataclass(frozen=True)
class CalibrationProblem:
    objective: Callable[[float], float]
    target: float
    lower: float
    upper: float
    tolerance: float | None = None
    max_iterations: int | None = None
    name: str = "calibration"


@dataclass(frozen=True)
class CalibrationResult:
    name: str
    parameter: float
    target: float
    achieved: float
    iterations: int
    function_calls: int

    @property
    def residual(self) -> float:
        return self.achieved - self.target


def _evaluate(problem: CalibrationProblem, parameter: float) -> float:
    value = float(problem.objective(parameter))
    if not math.isfinite(value):
        raise ConvergenceFailureError(
            f"{problem.name}: objective is not finite at parameter={parameter!r}."
        )
    return value - problem.target


def solve_calibration(problem: CalibrationProblem) -> CalibrationResult:
    """Solve ``objective(parameter) == target`` inside [lower, upper]."""
    if not problem.lower < problem.upper:
        raise ValueError(
            f"{problem.name}: search interval must satisfy lower < upper, "
            f"got [{problem.lower}, {problem.upper}]."
        )
    tolerance = config.PAC_SOLVER_XTOL if problem.tolerance is None else problem.tolerance
    max_iterations = (
        config.PAC_SOLVER_MAX_ITERATIONS
        if problem.max_iterations is None
        else problem.max_iterations
    )
    if tolerance <= 0.0 or max_iterations <= 0:
        raise ValueError(f"{problem.name}: tolerance and max_iterations must be positive.")

    lower_gap = _evaluate(problem, problem.lower)
    upper_gap = _evaluate(problem, problem.upper)
    if lower_gap == 0.0:
        return CalibrationResult(problem.name, problem.lower, problem.target, problem.target, 0, 2)
    if upper_gap == 0.0:
        return CalibrationResult(problem.name, problem.upper, problem.target, problem.target, 0, 2)
    if (lower_gap > 0.0) == (upper_gap > 0.0):
        raise NoRootFoundError(
            f"{problem.name}: no sign change over [{problem.lower}, {problem.upper}] "
            f"(gap {lower_gap:.6g} at lower, {upper_gap:.6g} at upper)."
        )

    root, outcome = brentq(
        lambda parameter: _evaluate(problem, parameter),
        problem.lower,
        problem.upper,
        xtol=tolerance,
        maxiter=max_iterations,
        full_output=True,
        disp=False,
    )
    if not outcome.converged:
        raise ConvergenceFailureError(
            f"{problem.name}: did not converge within {max_iterations} iterations "
            f"({outcome.flag})."
        )
    achieved = float(problem.objective(root))
    return CalibrationResult(
        name=problem.name,
        parameter=float(root),
        target=problem.target,
        achieved=achieved,
        iterations=int(outcome.iterations),
        function_calls=int(outcome.function_calls) + 3,
    )


def calibrate(
    objective: Callable[[float], float],
    target: float,
    lower: float,
    upper: float,
    *,
    tolerance: float | None = None,
    max_iterations: int | None = None,
    name: str = "calibration",
) -> CalibrationResult:
    """Convenience wrapper building and solving a CalibrationProblem."""
    return solve_calibration(
        CalibrationProblem(
            objective=objective,
            target=target,
            lower=lower,
            upper=upper,
            tolerance=tolerance,
            max_iterations=max_iterations,
            name=name,
        )
    )
