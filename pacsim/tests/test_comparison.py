from __future__ import annotations

import unittest

import pandas as pd

from pacsim.helpers.pac.comparison import (
    CATEGORY,
    COMPARISON_COLUMNS,
    DIMENSION,
    compare_scenario,
)
from pacsim.helpers.pac.constants import (
    BASELINE_AMOUNT,
    DEPARTMENT,
    ELIGIBLE_AREA,
    HOLDING_ID,
    REGION,
    SIMULATED_AMOUNT,
    SIZE_CLASS,
    WEIGHT,
)

DIMENSIONS = ("Total", REGION, SIZE_CLASS)


def _simulated_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            HOLDING_ID: ["h1", "h2", "h3", "h4", "h5", "h6"],
            BASELINE_AMOUNT: [100.0, 200.0, 100.0, 0.0, 400.0, 0.0],
            SIMULATED_AMOUNT: [50.0, 200.0, 300.0, 150.0, 100.0, 0.0],
            WEIGHT: [1.0, 2.0, 1.0, 3.0, 1.0, 1.0],
            ELIGIBLE_AREA: [10.0, 20.0, 30.0, 40.0, 50.0, 5.0],
            REGION: [
                "02 - South",
                "01 - North",
                "01 - North",
                "02 - South",
                "Overseas",
                "01 - North",
            ],
            SIZE_CLASS: [
                "01 - Small",
                "01 - Small",
                "02 - Medium",
                "03 - Large",
                "02 - Medium",
                "01 - Small",
            ],
        }
    )


def _row(result: pd.DataFrame, dimension: str, category: str) -> pd.Series:
    rows = result[(result[DIMENSION] == dimension) & (result[CATEGORY] == category)]
    return rows.iloc[0]


class TestCompareScenario(unittest.TestCase):
    def test_schema_and_order(self) -> None:
        result = compare_scenario(_simulated_table(), DIMENSIONS)
        self.assertEqual(tuple(result.columns), COMPARISON_COLUMNS)
        self.assertEqual(
            list(zip(result[DIMENSION], result[CATEGORY])),
            [
                ("Total", "Total"),
                (REGION, "North"),
                (REGION, "South"),
                (REGION, "Overseas"),
                (SIZE_CLASS, "Small"),
                (SIZE_CLASS, "Medium"),
                (SIZE_CLASS, "Large"),
            ],
        )

    def test_integer_codes_sort_numerically(self) -> None:
        table = _simulated_table().iloc[:3].copy()
        table[DEPARTMENT] = [10, 2, 1]
        table[SIZE_CLASS] = ["10 - Large", "2 - Small", "1 - Micro"]
        result = compare_scenario(table, (DEPARTMENT, SIZE_CLASS))
        self.assertEqual(list(result.loc[result[DIMENSION] == DEPARTMENT, CATEGORY]), ["1", "2", "10"])
        self.assertEqual(
            list(result.loc[result[DIMENSION] == SIZE_CLASS, CATEGORY]),
            ["1 - Micro", "2 - Small", "Large"],
        )

    def test_overall_statistics(self) -> None:
        row = _row(compare_scenario(_simulated_table(), DIMENSIONS), "Total", "Total")
        self.assertEqual(row["holdings"], 9)
        self.assertEqual(row["holdings_with_baseline"], 5)
        self.assertEqual(row["holdings_with_simulated"], 8)
        self.assertEqual(row["losers"], 2)
        self.assertEqual(row["unchanged"], 3)
        self.assertEqual(row["gainers_with_baseline"], 1)
        self.assertEqual(row["gainers_new"], 3)
        self.assertEqual(row["loser_share_pct"], 25.0)
        self.assertEqual(row["gainer_with_baseline_share_pct"], 12.5)
        self.assertEqual(row["gainer_new_share_pct"], 37.5)
        self.assertEqual(row["baseline_total"], 1000)
        self.assertEqual(row["simulated_total"], 1300)
        self.assertEqual(row["total_change"], 300)
        self.assertEqual(row["total_change_pct"], 30.0)
        self.assertEqual(row["mean_change"], 33)
        self.assertEqual(row["median_change"], 0)
        self.assertEqual(row["loser_mean_change"], -175)
        self.assertEqual(row["loser_median_change"], -300)
        self.assertEqual(row["largest_loss"], -300)
        self.assertEqual(row["loser_p01_change"], -300)
        self.assertEqual(row["gainer_with_baseline_largest_gain"], 200)
        self.assertEqual(row["gainer_new_mean_change"], 150)
        self.assertEqual(row["gainer_new_p99_change"], 150)
        self.assertEqual(row["mean_area"], 28)
        self.assertEqual(row["median_area"], 30)

    def test_unrounded_statistics(self) -> None:
        result = compare_scenario(_simulated_table(), ("Total",), rounded=False)
        self.assertAlmostEqual(result.loc[0, "mean_change"], 300.0 / 9.0)
        self.assertAlmostEqual(result.loc[0, "mean_area"], 255.0 / 9.0)

    def test_partition_of_weighted_holdings(self) -> None:
        result = compare_scenario(_simulated_table(), DIMENSIONS)
        for _, row in result.iterrows():
            parts = (
                row["losers"]
                + row["unchanged"]
                + row["gainers_with_baseline"]
                + row["gainers_new"]
            )
            self.assertEqual(parts, row["holdings"])

    def test_empty_subgroups_are_not_applicable(self) -> None:
        result = compare_scenario(_simulated_table(), DIMENSIONS)
        north = _row(result, REGION, "North")
        self.assertTrue(pd.isna(north["loser_mean_change"]))
        self.assertTrue(pd.isna(north["largest_loss"]))
        self.assertTrue(pd.isna(north["gainer_new_median_change"]))
        self.assertEqual(north["gainer_with_baseline_mean_change"], 200)

    def test_division_by_zero_is_not_applicable(self) -> None:
        large = _row(compare_scenario(_simulated_table(), DIMENSIONS), SIZE_CLASS, "Large")
        self.assertEqual(large["baseline_total"], 0)
        self.assertTrue(pd.isna(large["total_change_pct"]))
        self.assertEqual(large["gainer_new_share_pct"], 100.0)

    def test_statistics_use_nullable_floats(self) -> None:
        result = compare_scenario(_simulated_table(), DIMENSIONS)
        self.assertEqual(str(result["losers"].dtype), "Float64")

    def test_parallel_evaluation_matches_sequential(self) -> None:
        table = _simulated_table()
        sequential = compare_scenario(table, DIMENSIONS)
        parallel = compare_scenario(table, DIMENSIONS, max_workers=4)
        pd.testing.assert_frame_equal(sequential, parallel)

    def test_progress_callback(self) -> None:
        calls: list[tuple[int, int, str]] = []
        compare_scenario(
            _simulated_table(),
            DIMENSIONS,
            progress_callback=lambda done, total, label: calls.append((done, total, label)),
        )
        self.assertEqual(len(calls), 7)
        self.assertEqual(calls[-1][:2], (7, 7))
        self.assertEqual(calls[0][2], "Total=Total")

    def test_unknown_dimension_raises(self) -> None:
        with self.assertRaises(ValueError):
            compare_scenario(_simulated_table(), ("department",))

    def test_missing_required_column_raises(self) -> None:
        with self.assertRaises(ValueError):
            compare_scenario(_simulated_table().drop(columns=[WEIGHT]), ("Total",))


if __name__ == "__main__":
    unittest.main()
