"""
Column names and policy constants for holdings and entitlement portfolios.

@author: pacsim maintainers
"""

### Holdings table columns: ###

HOLDING_ID = "holding_id"
WEIGHT = "weight"  # Sampling/expansion coefficient
ELIGIBLE_AREA = "eligible_area"  # Eligible area (ha)

# Amounts
BASELINE_AMOUNT = "baseline_amount"  # Counterfactual income support
SCENARIO_RAW_AMOUNT = "scenario_raw_amount"  # Rate per ha times eligible area
SIMULATED_AMOUNT = "simulated_amount"  # After degressivity, cap and top-ups

# Baseline components
BASE_PAYMENT = "base_payment"  # Entitlement-based payment
REDISTRIBUTIVE_PAYMENT = "redistributive_payment"
YOUNG_FARMER_PAYMENT = "young_farmer_payment"

# Top-up targeting attributes
FEMALE_OPERATORS = "female_operators"  # Number of female operators/co-operators
SMALL_HOLDING = "small_holding"  # True when the size class is below the threshold
DISADVANTAGED_ZONE = "disadvantaged_zone"  # 1 in mountain/natural-constraint zones
YOUNG_FARMERS = "young_farmers"  # Number of young farmers
TYPE_CLASS_DETAILED = "type_class_detailed"  # Detailed farm-type class

# Grouping dimensions
OVERALL_DIMENSION = "Total"
REGION = "region"
DEPARTMENT = "department"
SIZE_CLASS = "size_class"
TYPE_CLASS = "type_class"
AREA_BAND = "area_band"
DEFAULT_DIMENSIONS = (
    OVERALL_DIMENSION,
    TYPE_CLASS,
    SIZE_CLASS,
    REGION,
    DEPARTMENT,
    AREA_BAND,
)

### Entitlement portfolio columns: ###

PORTFOLIO_HOLDING_ID = HOLDING_ID
PORTFOLIO_COUNT = "entitlement_count"  # Number of entitlements in the block
PORTFOLIO_UNIT_VALUE = "unit_value"  # Historical unit value of the block
PORTFOLIO_CONVERGED_VALUE = "converged_unit_value"
PORTFOLIO_ACTIVE = "active"  # Block activated in the reference year
PORTFOLIO_ELIGIBLE_AREA = ELIGIBLE_AREA

# Per-holding base payments under the three counterfactual valuations
BASE_PAYMENT_HISTORICAL = "base_payment_historical"
BASE_PAYMENT_CONVERGED = "base_payment_converged"
BASE_PAYMENT_UNIFORM = "base_payment_uniform"
BASE_PAYMENT_COLUMNS = (
    BASE_PAYMENT_HISTORICAL,
    BASE_PAYMENT_CONVERGED,
    BASE_PAYMENT_UNIFORM,
)

### Degressivity and cap: ###

# (lower bound, upper bound, share retained) per tranche, in euros.
DEGRESSIVITY_TRANCHES = (
    (0.0, 20_000.0, 1.00),
    (20_000.0, 50_000.0, 0.75),
    (50_000.0, 75_000.0, 0.50),
    (75_000.0, float("inf"), 0.25),
)
PAYMENT_CAP = 100_000.0

### National convergence rule: ###

CONVERGENCE_VALUE_CEILING = 1_000.0
CONVERGENCE_TARGET_VALUE = 129.59
CONVERGENCE_FLOOR_COEFFICIENT = 0.85
CONVERGENCE_DOWNWARD_RATE = 0.50
CONVERGENCE_MAX_DOWNWARD_FRACTION = 0.30
CONVERGENCE_UPWARD_COEFFICIENT = 0.20

### Derived attributes: ###

YOUNG_FARMER_UNIT_PAYMENT = 4_469.0  # Young-farmer top-up paid per young farmer

# Size classes (standard output bands) counted as small holdings: < 25k EUR.
SMALL_SIZE_CLASS_ORDINALS = (1, 2, 3, 4, 5)

# Eligible-area bands, [lower, upper) in hectares.
AREA_BAND_EDGES = (
    0, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100,
    110, 120, 130, 140, 150, 160, 170, 180, 190, 200,
    250, 300, 350, 400, 700, 1000,
)

MISSING_CATEGORY_TEXT = "Not specified"
