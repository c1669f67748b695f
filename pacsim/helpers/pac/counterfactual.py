"""Counterfactual base payments computed from entitlement portfolios.

Three valuations of the same activated entitlements are produced per holding:
historical unit values, converged unit values (with the upward coefficient calibrated
so the national total is unchanged), and one uniform unit value (calibrated the same way).
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from pacsim.helpers.pac.allocation import compute_base_payments, total_base_payment
from pacsim.helpers.pac.calibration import CalibrationResult, calibrate
from pacsim.helpers.pac.constants import (
    BASE_PAYMENT,
    BASE_PAYMENT_CONVERGED,
    BASE_PAYMENT_HISTORICAL,
    BASE_PAYMENT_UNIFORM,
    BASELINE_AMOUNT,
    HOLDING_ID,
    PORTFOLIO_ACTIVE,
    PORTFOLIO_CONVERGED_VALUE,
    PORTFOLIO_COUNT,
    PORTFOLIO_ELIGIBLE_AREA,
    PORTFOLIO_HOLDING_ID,
    PORTFOLIO_UNIT_VALUE,
    REDISTRIBUTIVE_PAYMENT,
    YOUNG_FARMER_PAYMENT,
)
from pacsim.helpers.pac.convergence import DEFAULT_RULE, ConvergenceRule, converge_unit_values


@dataclass(frozen=True)
class CounterfactualResult:
    payments: pd.DataFrame  # One row per holding, one column per valuation.
    reference_total: float
    convergence: CalibrationResult
    uniform_value: CalibrationResult


def active_blocks(portfolio: pd.DataFrame) -> pd.DataFrame:
    """Keep activated blocks with a known unit value."""
    if PORTFOLIO_ACTIVE not in portfolio.columns:
        raise ValueError(f"Portfolio is missing required column: {PORTFOLIO_ACTIVE}")
    kept = portfolio[portfolio[PORTFOLIO_ACTIVE].fillna(False).astype(bool)]
    kept = kept.dropna(subset=[PORTFOLIO_UNIT_VALUE])
    if (kept[PORTFOLIO_COUNT] < 0).any():
        raise ValueError(f"Negative values found in {PORTFOLIO_COUNT}.")
    return kept.reset_index(drop=True)


def _with_uniform_value(portfolio: pd.DataFrame, value: float) -> pd.DataFrame:
    return portfolio.assign(**{PORTFOLIO_UNIT_VALUE: float(value)})


def calibrate_convergence_coefficient(
    portfolio: pd.DataFrame,
    reference_total: float,
    *,
    rule: ConvergenceRule = DEFAULT_RULE,
    lower: float = 0.0,
    upper: float = 1.0,
    tolerance: float | None = None,
) -> CalibrationResult:
    """Find the upward coefficient keeping the total base payment at reference_total."""
    historical = portfolio[PORTFOLIO_UNIT_VALUE].to_numpy(dtype=float)

    def aggregate(coefficient: float) -> float:
        converged = converge_unit_values(historical, rule.with_upward_coefficient(coefficient))
        return total_base_payment(portfolio.assign(**{PORTFOLIO_UNIT_VALUE: converged}))

    return calibrate(
        aggregate,
        reference_total,
        lower,
        upper,
        tolerance=tolerance,
        name="convergence upward coefficient",
    )


def calibrate_uniform_unit_value(
    portfolio: pd.DataFrame,
    reference_total: float,
    *,
    lower: float = 0.0,
    upper: float | None = None,
    tolerance: float | None = None,
) -> CalibrationResult:
    """Find the single unit value reproducing reference_total.

    Paying every entitlement at the highest observed value can never fall short of
    the reference, which makes that value a valid default upper bound.
    """
    if upper is None:
        upper = float(portfolio[PORTFOLIO_UNIT_VALUE].max())

    def aggregate(value: float) -> float:
        return total_base_payment(_with_uniform_value(portfolio, value))

    return calibrate(
        aggregate,
        reference_total,
        lower,
        upper,
        tolerance=tolerance,
        name="uniform unit value",
    )


def merge_equal_blocks(portfolio: pd.DataFrame) -> pd.DataFrame:
    """Sum entitlement counts of blocks sharing holding and unit values."""
    keys = [PORTFOLIO_HOLDING_ID, PORTFOLIO_UNIT_VALUE, PORTFOLIO_CONVERGED_VALUE]
    return portfolio.groupby(keys, sort=False, as_index=False).agg(
        **{
            PORTFOLIO_COUNT: (PORTFOLIO_COUNT, "sum"),
            PORTFOLIO_ELIGIBLE_AREA: (PORTFOLIO_ELIGIBLE_AREA, "first"),
        }
    )


def build_counterfactual(
    portfolio: pd.DataFrame,
    *,
    rule: ConvergenceRule = DEFAULT_RULE,
    convergence_bracket: tuple[float, float] = (0.0, 1.0),
    uniform_bracket: tuple[float, float] | None = None,
    tolerance: float | None = None,
) -> CounterfactualResult:
    """Compute historical, converged and uniform base payments per holding."""
    activated = active_blocks(portfolio)
    if activated.empty:
        raise ValueError("Portfolio has no activated entitlement blocks.")
    reference_total = total_base_payment(activated)

    convergence = calibrate_convergence_coefficient(
        activated,
        reference_total,
        rule=rule,
        lower=convergence_bracket[0],
        upper=convergence_bracket[1],
        tolerance=tolerance,
    )
    uniform_lower, uniform_upper = uniform_bracket or (0.0, None)
    uniform_value = calibrate_uniform_unit_value(
        activated,
        reference_total,
        lower=uniform_lower,
        upper=uniform_upper,
        tolerance=tolerance,
    )

    calibrated_rule = rule.with_upward_coefficient(convergence.parameter)
    activated = activated.assign(
        **{
            PORTFOLIO_CONVERGED_VALUE: converge_unit_values(
                activated[PORTFOLIO_UNIT_VALUE].to_numpy(dtype=float), calibrated_rule
            )
        }
    )
    merged = merge_equal_blocks(activated)
    payments = pd.DataFrame(
        {
            BASE_PAYMENT_HISTORICAL: compute_base_payments(merged, PORTFOLIO_UNIT_VALUE),
            BASE_PAYMENT_CONVERGED: compute_base_payments(merged, PORTFOLIO_CONVERGED_VALUE),
            BASE_PAYMENT_UNIFORM: compute_base_payments(
                _with_uniform_value(merged, uniform_value.parameter)
            ),
        }
    )
    return CounterfactualResult(
        payments=payments,
        reference_total=reference_total,
        convergence=convergence,
        uniform_value=uniform_value,
    )


def attach_baseline_amount(
    holdings: pd.DataFrame,
    payments: pd.DataFrame,
    base_column: str = BASE_PAYMENT_UNIFORM,
) -> pd.DataFrame:
    """Return a copy of holdings with base payment and baseline amount columns.

    Baseline = base payment + redistributive payment + young-farmer payment; any
    missing component counts as zero.
    """
    if base_column not in payments.columns:
        raise ValueError(f"Unknown base payment column: {base_column}")
    result = holdings.copy()
    result[BASE_PAYMENT] = (
        result[HOLDING_ID].map(payments[base_column]).astype(float).fillna(0.0)
    )
    baseline = result[BASE_PAYMENT].copy()
    for column in (REDISTRIBUTIVE_PAYMENT, YOUNG_FARMER_PAYMENT):
        if column in result.columns:
            baseline = baseline + result[column].astype(float).fillna(0.0)
    result[BASELINE_AMOUNT] = baseline
    return result
