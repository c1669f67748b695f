"""Subsidy computation and calibration engine for degressive area-based payments."""

from pacsim.helpers.pac.allocation import (
    EntitlementBlock,
    blocks_from_frame,
    compute_base_payment,
    compute_base_payments,
    total_base_payment,
)
from pacsim.helpers.pac.calibration import (
    CalibrationError,
    CalibrationProblem,
    CalibrationResult,
    ConvergenceFailureError,
    NoRootFoundError,
    calibrate,
    solve_calibration,
)
from pacsim.helpers.pac.categories import (
    CategoryLabel,
    area_band_labels,
    derive_area_band_column,
    derive_small_holding_column,
    derive_young_farmers_column,
    parse_category_label,
)
from pacsim.helpers.pac.comparison import (
    COMPARISON_COLUMNS,
    NOT_APPLICABLE,
    compare_scenario,
    group_statistics,
)
from pacsim.helpers.pac.convergence import ConvergenceRule, converge_unit_values
from pacsim.helpers.pac.counterfactual import (
    CounterfactualResult,
    attach_baseline_amount,
    build_counterfactual,
    calibrate_convergence_coefficient,
    calibrate_uniform_unit_value,
)
from pacsim.helpers.pac.degressivity import (
    DEFAULT_SCHEDULE,
    DegressivitySchedule,
    DegressivityTranche,
    apply_degressivity,
)
from pacsim.helpers.pac.scenario import (
    BudgetConstantScenario,
    FlexibleScenario,
    ScenarioConfigError,
    ScenarioResult,
    TopUps,
    TypeClassTopUp,
    scenario_from_options,
    simulate_scenario,
)

__all__ = [
    "BudgetConstantScenario",
    "COMPARISON_COLUMNS",
    "CalibrationError",
    "CalibrationProblem",
    "CalibrationResult",
    "CategoryLabel",
    "ConvergenceFailureError",
    "ConvergenceRule",
    "CounterfactualResult",
    "DEFAULT_SCHEDULE",
    "DegressivitySchedule",
    "DegressivityTranche",
    "EntitlementBlock",
    "FlexibleScenario",
    "NOT_APPLICABLE",
    "NoRootFoundError",
    "ScenarioConfigError",
    "ScenarioResult",
    "TopUps",
    "TypeClassTopUp",
    "apply_degressivity",
    "area_band_labels",
    "attach_baseline_amount",
    "blocks_from_frame",
    "build_counterfactual",
    "calibrate",
    "calibrate_convergence_coefficient",
    "calibrate_uniform_unit_value",
    "compare_scenario",
    "compute_base_payment",
    "compute_base_payments",
    "converge_unit_values",
    "derive_area_band_column",
    "derive_small_holding_column",
    "derive_young_farmers_column",
    "group_statistics",
    "parse_category_label",
    "scenario_from_options",
    "simulate_scenario",
    "solve_calibration",
    "total_base_payment",
]
