"""
Runtime configuration for the payment simulation engine.

Values are read from the environment once, at import time.

@author: pacsim maintainers
"""

from __future__ import annotations

import os


def _parse_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(
        f"{name} must be one of 1/0, true/false, yes/no, on/off; got {value!r}"
    )


def _parse_float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number; got {value!r}") from exc
    if parsed <= 0.0:
        raise ValueError(f"{name} must be strictly positive; got {value!r}")
    return parsed


def _parse_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; got {value!r}") from exc
    if parsed <= 0:
        raise ValueError(f"{name} must be strictly positive; got {value!r}")
    return parsed


# Policies for holdings whose eligible area is unknown.
MISSING_AREA_ZERO = "zero"  # Kept, paid nothing, counted in every aggregate.
MISSING_AREA_EXCLUDE = "exclude"  # Dropped from the simulated table.
MISSING_AREA_POLICIES = (MISSING_AREA_ZERO, MISSING_AREA_EXCLUDE)

PAC_MISSING_AREA_POLICY = os.getenv("PAC_MISSING_AREA_POLICY", MISSING_AREA_ZERO)
if PAC_MISSING_AREA_POLICY not in MISSING_AREA_POLICIES:
    raise ValueError(
        "PAC_MISSING_AREA_POLICY must be one of {}, got {!r}".format(
            ", ".join(MISSING_AREA_POLICIES), PAC_MISSING_AREA_POLICY
        )
    )

# Root-finding controls shared by every calibration.
PAC_SOLVER_XTOL = _parse_float_env("PAC_SOLVER_XTOL", 1e-10)
PAC_SOLVER_MAX_ITERATIONS = _parse_int_env("PAC_SOLVER_MAX_ITERATIONS", 200)

# Default of the common degressivity/cap switch.
PAC_APPLY_DEGRESSIVITY = _parse_bool_env("PAC_APPLY_DEGRESSIVITY", True)

# Round comparison statistics the way the published tables are rounded.
PAC_ROUND_COMPARISON = _parse_bool_env("PAC_ROUND_COMPARISON", True)
