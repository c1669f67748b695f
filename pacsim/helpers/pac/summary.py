"""
Formatting and console summaries for calibrations and scenario budgets.

@author: pacsim maintainers
"""

from __future__ import annotations

import math

import pandas as pd

from pacsim.helpers.pac.calibration import CalibrationResult
from pacsim.helpers.pac.scenario import ScenarioResult


def _is_missing(value: float | None) -> bool:
    return value is None or value is pd.NA or (isinstance(value, float) and math.isnan(value))


def format_value(value: float | None, decimals: int = 3) -> str:
    """Format a float, with ``--`` for not-applicable values."""
    if _is_missing(value):
        return "--"
    return f"{value:.{decimals}f}"


def format_currency(value: float | None, decimals: int = 0, symbol: str = "€") -> str:
    """Format a float as currency with thousands separators."""
    if _is_missing(value):
        return "--"
    return f"{value:,.{decimals}f} {symbol}"


def format_percent(value: float | None, decimals: int = 2) -> str:
    if _is_missing(value):
        return "--"
    return f"{value:.{decimals}f}%"


def budget_gap(result: ScenarioResult) -> tuple[float, float]:
    """Return the absolute and percent gap between simulated total and target budget."""
    gap = result.simulated_total - result.target_budget
    if result.target_budget:
        return gap, gap / result.target_budget * 100.0
    return gap, float("nan")


def print_calibration_summary(result: CalibrationResult, decimals: int = 6) -> None:
    """Print a summary line for a solved calibration."""
    print(
        "{}: parameter={}, target={}, achieved={}, iterations={}".format(
            result.name,
            format_value(result.parameter, decimals),
            format_currency(result.target, 2),
            format_currency(result.achieved, 2),
            result.iterations,
        )
    )


def print_budget_check(result: ScenarioResult) -> None:
    """Print the target budget, the simulated total and their gap."""
    gap, gap_pct = budget_gap(result)
    print(
        "rate per ha={}, reference={}, target={}, simulated={}, gap={} ({})".format(
            format_value(result.rate_per_area, 4),
            format_currency(result.reference_total),
            format_currency(result.target_budget),
            format_currency(result.simulated_total),
            format_currency(gap, 2),
            format_percent(gap_pct, 4),
        )
    )
