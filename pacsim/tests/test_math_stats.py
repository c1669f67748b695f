from __future__ import annotations

import math
import unittest

from pacsim.helpers.common.math_stats import (
    safe_max,
    safe_min,
    safe_percent,
    weighted_mean,
    weighted_quantile,
    weighted_sum,
)


class TestWeightedStatistics(unittest.TestCase):
    def test_weighted_quantile_has_no_interpolation(self) -> None:
        values = [10.0, 20.0, 30.0, 40.0]
        weights = [1.0, 1.0, 1.0, 1.0]
        self.assertEqual(weighted_quantile(values, weights, 0.5), 20.0)
        self.assertEqual(weighted_quantile(values, weights, 0.51), 30.0)
        self.assertEqual(weighted_quantile(values, weights, 0.0), 10.0)
        self.assertEqual(weighted_quantile(values, weights, 1.0), 40.0)

    def test_weighted_quantile_respects_weights_and_unsorted_input(self) -> None:
        values = [5.0, 1.0, 3.0]
        weights = [1.0, 1.0, 8.0]
        self.assertEqual(weighted_quantile(values, weights, 0.5), 3.0)
        self.assertEqual(weighted_quantile(values, weights, 0.05), 1.0)
        self.assertEqual(weighted_quantile(values, weights, 0.95), 5.0)

    def test_weighted_quantile_degenerate_inputs(self) -> None:
        self.assertTrue(math.isnan(weighted_quantile([], [], 0.5)))
        self.assertTrue(math.isnan(weighted_quantile([1.0, 2.0], [0.0, 0.0], 0.5)))
        with self.assertRaises(ValueError):
            weighted_quantile([1.0], [1.0], 1.5)

    def test_weighted_mean_and_sum(self) -> None:
        self.assertAlmostEqual(weighted_mean([1.0, 3.0], [3.0, 1.0]), 1.5)
        self.assertAlmostEqual(weighted_sum([1.0, 3.0], [3.0, 1.0]), 6.0)
        self.assertTrue(math.isnan(weighted_mean([], [])))
        self.assertEqual(weighted_sum([], []), 0.0)
        with self.assertRaises(ValueError):
            weighted_sum([1.0, 2.0], [1.0])

    def test_safe_helpers(self) -> None:
        self.assertTrue(math.isnan(safe_min([])))
        self.assertTrue(math.isnan(safe_max([])))
        self.assertEqual(safe_min([3.0, -2.0]), -2.0)
        self.assertEqual(safe_max([3.0, -2.0]), 3.0)
        self.assertEqual(safe_percent(1.0, 4.0), 25.0)
        self.assertTrue(math.isnan(safe_percent(1.0, 0.0)))


if __name__ == "__main__":
    unittest.main()
