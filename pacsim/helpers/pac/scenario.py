"""Scenario simulation: a uniform payment per eligible hectare, degressive and capped.

Two mutually exclusive scenario families exist:

- ``BudgetConstantScenario``: the rate per hectare comes from a supplied rate, a
  supplied total budget, or the counterfactual total; optionally the rate is
  recalibrated so the degressive total matches the target budget exactly.
- ``FlexibleScenario``: a supplied rate is used as-is and flat top-ups may be added
  to targeted holdings after degressivity.

@author: pacsim maintainers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union

import numpy as np
import pandas as pd

from pacsim.helpers.pac import config
from pacsim.helpers.pac.calibration import CalibrationResult, calibrate
from pacsim.helpers.pac.constants import (
    BASELINE_AMOUNT,
    DISADVANTAGED_ZONE,
    ELIGIBLE_AREA,
    FEMALE_OPERATORS,
    SCENARIO_RAW_AMOUNT,
    SIMULATED_AMOUNT,
    SMALL_HOLDING,
    TYPE_CLASS_DETAILED,
    WEIGHT,
    YOUNG_FARMERS,
)
from pacsim.helpers.pac.degressivity import apply_degressivity, no_degressivity

# Upper end of the rate bracket, as a multiple of the initial rate.
CALIBRATION_BRACKET_FACTOR = 10.0


class ScenarioConfigError(ValueError):
    """Raised when scenario options are contradictory or out of range."""


def _require_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ScenarioConfigError(
            f"All numeric options must be greater than or equal to 0; {name}={value}."
        )


@dataclass(frozen=True)
class TypeClassTopUp:
    categories: frozenset[str] = frozenset()
    amount: float = 0.0


@dataclass(frozen=True)
class TopUps:
    """Flat amounts added after degressivity to targeted holdings."""

    per_female_operator: float = 0.0
    small_holding: float = 0.0
    disadvantaged_zone: float = 0.0
    per_young_farmer: float = 0.0
    type_class: TypeClassTopUp = field(default_factory=TypeClassTopUp)

    def amounts(self) -> dict[str, float]:
        return {
            "per_female_operator": self.per_female_operator,
            "small_holding": self.small_holding,
            "disadvantaged_zone": self.disadvantaged_zone,
            "per_young_farmer": self.per_young_farmer,
            "type_class": self.type_class.amount,
        }

    @property
    def any_nonzero(self) -> bool:
        return any(value != 0 for value in self.amounts().values())


@dataclass(frozen=True)
class BudgetConstantScenario:
    total_budget: float | None = None
    rate_per_area: float | None = None
    calibrate: bool = True
    degressivity: bool = config.PAC_APPLY_DEGRESSIVITY

    def __post_init__(self) -> None:
        if self.total_budget is not None and self.rate_per_area is not None:
            raise ScenarioConfigError(
                "total_budget and rate_per_area cannot both be set: choose a constant "
                "budget or a custom rate per hectare."
            )
        if self.calibrate and self.rate_per_area is not None:
            raise ScenarioConfigError(
                "Calibration requires no custom rate per hectare (rate_per_area must be unset)."
            )
        for name in ("total_budget", "rate_per_area"):
            value = getattr(self, name)
            if value is not None:
                _require_non_negative(name, value)


@dataclass(frozen=True)
class FlexibleScenario:
    rate_per_area: float
    top_ups: TopUps = field(default_factory=TopUps)
    degressivity: bool = config.PAC_APPLY_DEGRESSIVITY

    def __post_init__(self) -> None:
        _require_non_negative("rate_per_area", self.rate_per_area)
        for name, value in self.top_ups.amounts().items():
            _require_non_negative(name, value)
        if self.top_ups.any_nonzero and self.rate_per_area == 0:
            raise ScenarioConfigError(
                "Any non-zero top-up requires a non-zero rate_per_area."
            )


Scenario = Union[BudgetConstantScenario, FlexibleScenario]


def scenario_from_options(
    *,
    total_budget: float = 0.0,
    calibration: bool = True,
    rate_per_area: float = 0.0,
    top_ups: TopUps | None = None,
    degressivity: bool | None = None,
) -> Scenario:
    """Build a scenario from the flat option set, zero meaning "not supplied".

    Checks, in order: budget and rate exclusive; top-ups need a rate; calibration
    needs no rate; no negative option.
    """
    top_ups = top_ups or TopUps()
    if degressivity is None:
        degressivity = config.PAC_APPLY_DEGRESSIVITY
    if total_budget != 0 and rate_per_area != 0:
        raise ScenarioConfigError(
            "total_budget and rate_per_area cannot both be non-zero: choose a constant "
            "budget or a custom rate per hectare."
        )
    if top_ups.any_nonzero and rate_per_area == 0:
        raise ScenarioConfigError(
            "If any top-up is non-zero, rate_per_area must be non-zero."
        )
    if calibration and rate_per_area != 0:
        raise ScenarioConfigError(
            "If calibration is requested, rate_per_area must be 0."
        )
    _require_non_negative("total_budget", total_budget)
    _require_non_negative("rate_per_area", rate_per_area)
    for name, value in top_ups.amounts().items():
        _require_non_negative(name, value)

    if top_ups.any_nonzero:
        return FlexibleScenario(
            rate_per_area=rate_per_area, top_ups=top_ups, degressivity=degressivity
        )
    return BudgetConstantScenario(
        total_budget=total_budget or None,
        rate_per_area=rate_per_area or None,
        calibrate=calibration,
        degressivity=degressivity,
    )


@dataclass(frozen=True)
class ScenarioResult:
    table: pd.DataFrame
    rate_per_area: float
    reference_total: float
    target_budget: float
    calibration: CalibrationResult | None

    @property
    def simulated_total(self) -> float:
        return float((self.table[WEIGHT] * self.table[SIMULATED_AMOUNT]).sum())


def _prepare_holdings(holdings: pd.DataFrame, missing_area: str) -> pd.DataFrame:
    missing = [
        column for column in (WEIGHT, ELIGIBLE_AREA, BASELINE_AMOUNT)
        if column not in holdings.columns
    ]
    if missing:
        raise ValueError("Holdings are missing required column(s): " + ", ".join(missing))
    if missing_area not in config.MISSING_AREA_POLICIES:
        raise ValueError(f"Unsupported missing-area policy: {missing_area!r}")

    table = holdings.copy()
    undefined = table[ELIGIBLE_AREA].isna()
    if missing_area == config.MISSING_AREA_EXCLUDE:
        table = table[~undefined].copy()
    if (table[WEIGHT] < 0).any():
        raise ValueError(f"Negative values found in {WEIGHT}.")
    if (table[ELIGIBLE_AREA] < 0).any():
        raise ValueError(f"Negative values found in {ELIGIBLE_AREA}.")
    table[BASELINE_AMOUNT] = table[BASELINE_AMOUNT].astype(float).fillna(0.0)
    return table


def _require_top_up_columns(table: pd.DataFrame, top_ups: TopUps) -> None:
    required = [
        column
        for column, amount in (
            (FEMALE_OPERATORS, top_ups.per_female_operator),
            (SMALL_HOLDING, top_ups.small_holding),
            (DISADVANTAGED_ZONE, top_ups.disadvantaged_zone),
            (YOUNG_FARMERS, top_ups.per_young_farmer),
            (TYPE_CLASS_DETAILED, top_ups.type_class.amount),
        )
        if amount > 0
    ]
    missing = [column for column in required if column not in table.columns]
    if missing:
        raise ValueError("Holdings are missing required column(s): " + ", ".join(missing))


def _transform_for(scenario: Scenario) -> Callable:
    return apply_degressivity if scenario.degressivity else no_degressivity


def _apply_top_ups(table: pd.DataFrame, top_ups: TopUps) -> pd.Series:
    amounts = table[SIMULATED_AMOUNT].copy()
    if top_ups.per_female_operator > 0:
        amounts += table[FEMALE_OPERATORS].fillna(0).astype(float) * top_ups.per_female_operator
    if top_ups.small_holding > 0:
        amounts += np.where(table[SMALL_HOLDING].fillna(False).astype(bool), top_ups.small_holding, 0.0)
    if top_ups.disadvantaged_zone > 0:
        amounts += np.where(table[DISADVANTAGED_ZONE] == 1, top_ups.disadvantaged_zone, 0.0)
    if top_ups.per_young_farmer > 0:
        amounts += table[YOUNG_FARMERS].fillna(0).astype(float) * top_ups.per_young_farmer
    if top_ups.type_class.amount > 0:
        targeted = table[TYPE_CLASS_DETAILED].isin(top_ups.type_class.categories)
        amounts += np.where(targeted, top_ups.type_class.amount, 0.0)
    return amounts


def simulate_scenario(
    holdings: pd.DataFrame,
    scenario: Scenario,
    *,
    missing_area: str | None = None,
    tolerance: float | None = None,
) -> ScenarioResult:
    """Compute the scenario raw and simulated amounts for every holding.

    The input table is not modified; a copy with ``scenario_raw_amount`` and
    ``simulated_amount`` columns is returned inside the result.
    """
    table = _prepare_holdings(
        holdings, config.PAC_MISSING_AREA_POLICY if missing_area is None else missing_area
    )
    weights = table[WEIGHT].to_numpy(dtype=float)
    areas = table[ELIGIBLE_AREA].astype(float).fillna(0.0).to_numpy()
    if isinstance(scenario, FlexibleScenario):
        _require_top_up_columns(table, scenario.top_ups)
    transform = _transform_for(scenario)

    total_area = float(np.dot(weights, areas))
    reference_total = float(np.dot(weights, table[BASELINE_AMOUNT].to_numpy(dtype=float)))

    calibration = None
    if isinstance(scenario, FlexibleScenario):
        rate = scenario.rate_per_area
        target_budget = reference_total
    else:
        target_budget = (
            reference_total if scenario.total_budget is None else scenario.total_budget
        )
        if scenario.rate_per_area is not None:
            rate = scenario.rate_per_area
        else:
            if total_area <= 0.0:
                raise ValueError("Total weighted eligible area is zero; no rate can be derived.")
            rate = target_budget / total_area

        # A zero target is met at rate 0.
        if scenario.calibrate and target_budget == 0.0:
            rate = 0.0
        elif scenario.calibrate:

            def aggregate(candidate_rate: float) -> float:
                return float(np.dot(weights, transform(areas * candidate_rate)))

            calibration = calibrate(
                aggregate,
                target_budget,
                0.0,
                CALIBRATION_BRACKET_FACTOR * rate,
                tolerance=tolerance,
                name="rate per eligible hectare",
            )
            rate = calibration.parameter

    table[SCENARIO_RAW_AMOUNT] = areas * rate
    table[SIMULATED_AMOUNT] = transform(table[SCENARIO_RAW_AMOUNT].to_numpy())
    if isinstance(scenario, FlexibleScenario):
        table[SIMULATED_AMOUNT] = _apply_top_ups(table, scenario.top_ups)

    return ScenarioResult(
        table=table,
        rate_per_area=float(rate),
        reference_total=reference_total,
        target_budget=float(target_budget),
        calibration=calibration,
    )
