"""Common weighted statistical helper functions.

Every helper returns NaN instead of raising on empty input or zero total weight;
callers sanitize NaN into their own not-applicable marker.
"""

from __future__ import annotations

import numpy as np


def _as_arrays(values, weights) -> tuple[np.ndarray, np.ndarray]:
    value_array = np.asarray(values, dtype=float)
    weight_array = np.asarray(weights, dtype=float)
    if value_array.shape != weight_array.shape:
        raise ValueError("values and weights must have the same shape.")
    return value_array, weight_array


def weighted_sum(values, weights) -> float:
    """Sum of values scaled by weights (0 for empty input)."""
    value_array, weight_array = _as_arrays(values, weights)
    return float(np.dot(value_array, weight_array))


def weighted_mean(values, weights) -> float:
    """Weighted arithmetic mean."""
    value_array, weight_array = _as_arrays(values, weights)
    total_weight = float(weight_array.sum())
    if value_array.size == 0 or total_weight == 0.0:
        return float("nan")
    return float(np.dot(value_array, weight_array) / total_weight)


def weighted_quantile(values, weights, probability: float) -> float:
    """Return the first sorted value whose cumulative weight share reaches probability.

    No interpolation between adjacent values. Ties in value keep their input order
    (stable sort), so the result only depends on the multiset of (value, weight) pairs.
    """
    if not 0.0 <= probability <= 1.0:
        raise ValueError("probability must be in [0, 1].")
    value_array, weight_array = _as_arrays(values, weights)
    if value_array.size == 0:
        return float("nan")
    order = np.argsort(value_array, kind="stable")
    ordered_values = value_array[order]
    cumulative = np.cumsum(weight_array[order])
    total_weight = float(cumulative[-1])
    if total_weight <= 0.0:
        return float("nan")
    reached = np.nonzero(cumulative >= probability * total_weight)[0]
    if reached.size == 0:
        # Numerical fallback for probability == 1.0.
        return float(ordered_values[-1])
    return float(ordered_values[reached[0]])


def safe_min(values) -> float:
    value_array = np.asarray(values, dtype=float)
    if value_array.size == 0:
        return float("nan")
    return float(value_array.min())


def safe_max(values) -> float:
    value_array = np.asarray(values, dtype=float)
    if value_array.size == 0:
        return float("nan")
    return float(value_array.max())


def safe_percent(numerator: float, denominator: float) -> float:
    """Return 100 * numerator / denominator, NaN when the denominator is zero."""
    if denominator:
        return numerator / denominator * 100.0
    return float("nan")
