"""
Weighted comparison of counterfactual and simulated amounts by category.

One output row is produced per (dimension, category). Changes are simulated minus
baseline amounts; holdings are split into losers, unchanged holdings, gainers that
already received a baseline amount and gainers that are new beneficiaries. Empty
subgroups and non-finite statistics are reported as ``pd.NA``.

@author: pacsim maintainers
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

import numpy as np
import pandas as pd

from pacsim.helpers.common.math_stats import (
    safe_max,
    safe_min,
    safe_percent,
    weighted_mean,
    weighted_quantile,
    weighted_sum,
)
from pacsim.helpers.pac import config
from pacsim.helpers.pac.categories import CategoryLabel, parse_category_label
from pacsim.helpers.pac.constants import (
    BASELINE_AMOUNT,
    DEFAULT_DIMENSIONS,
    ELIGIBLE_AREA,
    OVERALL_DIMENSION,
    SIMULATED_AMOUNT,
    WEIGHT,
)

NOT_APPLICABLE = pd.NA

DIMENSION = "dimension"
CATEGORY = "category"

# Statistic columns and the number of decimals they are published with.
STATISTIC_DECIMALS = {
    "holdings": 0,
    "holdings_with_baseline": 0,
    "holdings_with_simulated": 0,
    "losers": 0,
    "unchanged": 0,
    "gainers_with_baseline": 0,
    "gainers_new": 0,
    "loser_share_pct": 1,
    "gainer_with_baseline_share_pct": 1,
    "gainer_new_share_pct": 1,
    "baseline_total": 0,
    "simulated_total": 0,
    "total_change": 0,
    "total_change_pct": 2,
    "mean_change": 0,
    "median_change": 0,
    "loser_mean_change": 0,
    "loser_median_change": 0,
    "largest_loss": 0,
    "loser_p01_change": 0,
    "gainer_with_baseline_mean_change": 0,
    "gainer_with_baseline_median_change": 0,
    "gainer_with_baseline_largest_gain": 0,
    "gainer_with_baseline_p99_change": 0,
    "gainer_new_mean_change": 0,
    "gainer_new_median_change": 0,
    "gainer_new_largest_gain": 0,
    "gainer_new_p99_change": 0,
    "mean_area": 0,
    "median_area": 0,
}
STATISTIC_COLUMNS = tuple(STATISTIC_DECIMALS)
COMPARISON_COLUMNS = (DIMENSION, CATEGORY) + STATISTIC_COLUMNS


def group_statistics(
    baseline: np.ndarray,
    simulated: np.ndarray,
    weights: np.ndarray,
    areas: np.ndarray,
) -> dict[str, float]:
    """Compute the unrounded comparison statistics of one group of holdings."""
    change = simulated - baseline
    losers = change < 0
    unchanged = change == 0
    gainers_with = (change > 0) & (baseline > 0)
    gainers_new = (change > 0) & (baseline == 0)

    with_simulated = weighted_sum(simulated > 0, weights)
    stats = {
        "holdings": float(weights.sum()),
        "holdings_with_baseline": weighted_sum(baseline > 0, weights),
        "holdings_with_simulated": with_simulated,
        "losers": weighted_sum(losers, weights),
        "unchanged": weighted_sum(unchanged, weights),
        "gainers_with_baseline": weighted_sum(gainers_with, weights),
        "gainers_new": weighted_sum(gainers_new, weights),
        "loser_share_pct": safe_percent(
            weighted_sum(losers & (baseline > 0), weights), with_simulated
        ),
        "gainer_with_baseline_share_pct": safe_percent(
            weighted_sum(gainers_with, weights), with_simulated
        ),
        "gainer_new_share_pct": safe_percent(weighted_sum(gainers_new, weights), with_simulated),
        "baseline_total": weighted_sum(baseline, weights),
        "simulated_total": weighted_sum(simulated, weights),
        "total_change": weighted_sum(change, weights),
        "total_change_pct": safe_percent(
            weighted_sum(change, weights), weighted_sum(baseline, weights)
        ),
        "mean_change": weighted_mean(change, weights),
        "median_change": weighted_quantile(change, weights, 0.5),
    }

    loss, loss_weights = change[losers], weights[losers]
    stats.update(
        {
            "loser_mean_change": weighted_mean(loss, loss_weights),
            "loser_median_change": weighted_quantile(loss, loss_weights, 0.5),
            "largest_loss": safe_min(loss),
            "loser_p01_change": weighted_quantile(loss, loss_weights, 0.01),
        }
    )
    for prefix, mask in (("gainer_with_baseline", gainers_with), ("gainer_new", gainers_new)):
        gain, gain_weights = change[mask], weights[mask]
        stats.update(
            {
                f"{prefix}_mean_change": weighted_mean(gain, gain_weights),
                f"{prefix}_median_change": weighted_quantile(gain, gain_weights, 0.5),
                f"{prefix}_largest_gain": safe_max(gain),
                f"{prefix}_p99_change": weighted_quantile(gain, gain_weights, 0.99),
            }
        )

    known_area = ~np.isnan(areas)
    stats["mean_area"] = weighted_mean(areas[known_area], weights[known_area])
    stats["median_area"] = weighted_quantile(areas[known_area], weights[known_area], 0.5)
    return stats


def split_by_category(
    table: pd.DataFrame,
    dimension: str,
) -> list[tuple[CategoryLabel, pd.DataFrame]]:
    """Split rows by the typed labels of one dimension, ordered by label sort key."""
    if dimension not in table.columns:
        if dimension == OVERALL_DIMENSION:
            return [(CategoryLabel(OVERALL_DIMENSION), table)]
        raise ValueError(f"Unknown grouping dimension: {dimension}")
    positions: dict[CategoryLabel, list[int]] = {}
    for position, value in enumerate(table[dimension].tolist()):
        positions.setdefault(parse_category_label(value), []).append(position)
    ordered = sorted(positions, key=lambda label: label.sort_key)
    return [(label, table.iloc[positions[label]]) for label in ordered]


def _sanitize(frame: pd.DataFrame, rounded: bool) -> pd.DataFrame:
    for column, decimals in STATISTIC_DECIMALS.items():
        values = frame[column].astype(float).replace([np.inf, -np.inf], np.nan)
        if rounded:
            values = values.round(decimals)
        frame[column] = values.astype("Float64")
    return frame


def compare_scenario(
    table: pd.DataFrame,
    dimensions: Sequence[str] = DEFAULT_DIMENSIONS,
    *,
    baseline_column: str = BASELINE_AMOUNT,
    simulated_column: str = SIMULATED_AMOUNT,
    weight_column: str = WEIGHT,
    area_column: str = ELIGIBLE_AREA,
    rounded: bool | None = None,
    max_workers: int = 1,
    progress_callback: Callable[[int, int, str], None] | None = None,
) -> pd.DataFrame:
    """Aggregate baseline vs simulated amounts for every dimension and category."""
    if max_workers <= 0:
        raise ValueError("max_workers must be positive.")
    missing = [
        column
        for column in (baseline_column, simulated_column, weight_column, area_column)
        if column not in table.columns
    ]
    if missing:
        raise ValueError("Comparison table is missing required column(s): " + ", ".join(missing))
    if rounded is None:
        rounded = config.PAC_ROUND_COMPARISON

    tasks: list[tuple[str, CategoryLabel, pd.DataFrame]] = []
    for dimension in dimensions:
        for label, group in split_by_category(table, dimension):
            tasks.append((dimension, label, group))

    def run_task(task: tuple[str, CategoryLabel, pd.DataFrame]) -> dict[str, object]:
        dimension, label, group = task
        row: dict[str, object] = {DIMENSION: dimension, CATEGORY: label.text}
        row.update(
            group_statistics(
                baseline=group[baseline_column].to_numpy(dtype=float),
                simulated=group[simulated_column].to_numpy(dtype=float),
                weights=group[weight_column].to_numpy(dtype=float),
                areas=group[area_column].to_numpy(dtype=float),
            )
        )
        return row

    total = len(tasks)
    rows: list[dict[str, object] | None] = [None] * total
    if max_workers == 1 or total <= 1:
        for processed, task in enumerate(tasks, start=1):
            rows[processed - 1] = run_task(task)
            if progress_callback is not None:
                progress_callback(processed, total, f"{task[0]}={task[1].text}")
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, total)) as executor:
            future_map = {executor.submit(run_task, task): index for index, task in enumerate(tasks)}
            processed = 0
            for future in as_completed(future_map):
                index = future_map[future]
                rows[index] = future.result()
                processed += 1
                if progress_callback is not None:
                    dimension, label, _ = tasks[index]
                    progress_callback(processed, total, f"{dimension}={label.text}")

    result = pd.DataFrame(rows, columns=list(COMPARISON_COLUMNS))
    return _sanitize(result, rounded)
