"""Entitlement allocation: turn a portfolio of entitlement blocks into a base payment.

Entitlements are paid in decreasing order of unit value until the eligible area is
exhausted; the block that crosses the ceiling is paid pro rata and every lower-valued
block gets nothing. Blocks with equal unit values keep their input order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import pandas as pd

from pacsim.helpers.pac.constants import (
    PORTFOLIO_COUNT,
    PORTFOLIO_ELIGIBLE_AREA,
    PORTFOLIO_HOLDING_ID,
    PORTFOLIO_UNIT_VALUE,
)


@dataclass(frozen=True)
class EntitlementBlock:
    """A number of entitlements sharing one unit value."""

    count: float
    unit_value: float

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Entitlement count must be non-negative, got {self.count}.")
        if self.unit_value < 0:
            raise ValueError(
                f"Entitlement unit value must be non-negative, got {self.unit_value}."
            )


def _is_undefined(value: float | None) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def compute_base_payment(
    blocks: Iterable[EntitlementBlock],
    eligible_area: float | None,
) -> float | None:
    """Pay the highest-valued entitlements first, up to the eligible area.

    Returns None when the eligible area is undefined: the holding is not
    applicable, which callers must not confuse with a zero payment.
    """
    if _is_undefined(eligible_area):
        return None
    area = float(eligible_area)
    if area < 0.0:
        raise ValueError(f"Eligible area must be non-negative, got {area}.")

    ordered = sorted(blocks, key=lambda block: block.unit_value, reverse=True)
    total_units = sum(block.count for block in ordered)
    if total_units <= area:
        return float(sum(block.unit_value * block.count for block in ordered))

    consumed = 0.0
    payment = 0.0
    for block in ordered:
        if consumed + block.count <= area:
            payment += block.unit_value * block.count
            consumed += block.count
        else:
            payment += block.unit_value * (area - consumed)
            break
    return payment


def blocks_from_frame(
    portfolio: pd.DataFrame,
    value_column: str = PORTFOLIO_UNIT_VALUE,
    count_column: str = PORTFOLIO_COUNT,
) -> list[EntitlementBlock]:
    """Build entitlement blocks from portfolio rows, preserving row order."""
    return [
        EntitlementBlock(count=float(count), unit_value=float(value))
        for count, value in zip(portfolio[count_column], portfolio[value_column])
    ]


def compute_base_payments(
    portfolio: pd.DataFrame,
    value_column: str = PORTFOLIO_UNIT_VALUE,
    *,
    holding_column: str = PORTFOLIO_HOLDING_ID,
    count_column: str = PORTFOLIO_COUNT,
    area_column: str = PORTFOLIO_ELIGIBLE_AREA,
) -> pd.Series:
    """Compute one base payment per holding of a long-format portfolio table.

    The eligible area is read from the first row of each holding. Holdings with an
    undefined area get NaN.
    """
    missing = [
        column
        for column in (holding_column, count_column, value_column, area_column)
        if column not in portfolio.columns
    ]
    if missing:
        raise ValueError("Portfolio is missing required column(s): " + ", ".join(missing))

    payments: dict[object, float] = {}
    for holding, group in portfolio.groupby(holding_column, sort=True):
        area = group[area_column].iloc[0]
        payment = compute_base_payment(
            blocks_from_frame(group, value_column, count_column),
            None if pd.isna(area) else float(area),
        )
        payments[holding] = float("nan") if payment is None else payment
    series = pd.Series(payments, dtype=float)
    series.index.name = holding_column
    return series


def total_base_payment(
    portfolio: pd.DataFrame,
    value_column: str = PORTFOLIO_UNIT_VALUE,
    **columns: str,
) -> float:
    """Aggregate base payment over all holdings, ignoring non-applicable ones."""
    return float(compute_base_payments(portfolio, value_column, **columns).sum(skipna=True))
